from __future__ import annotations

from functools import lru_cache

from fastapi import HTTPException, Request, status

from .config import settings
from .security import decode_token
from .services.storage_ops import StorageOperations


def _extract_token(request: Request) -> str:
    auth = request.headers.get('Authorization', '')
    if auth.startswith('Bearer '):
        return auth.split(' ', 1)[1]
    token = request.cookies.get('access_token')
    if token:
        return token
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Missing token')


def get_current_user_id(request: Request) -> str:
    token = _extract_token(request)
    try:
        payload = decode_token(token)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid token')

    user_id = payload.get('sub')
    if not user_id or not isinstance(user_id, str):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid token payload')
    return user_id


@lru_cache
def get_storage() -> StorageOperations:
    return StorageOperations(settings.storage_root, chunk_size=settings.upload_chunk_size)
