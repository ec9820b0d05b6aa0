from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException
from jose import jwt
from starlette.requests import Request

from dropfile import deps
from dropfile.config import settings
from dropfile.security import create_access_token, decode_token


def _request(headers: list[tuple[bytes, bytes]]) -> Request:
    scope = {
        'type': 'http',
        'http_version': '1.1',
        'method': 'GET',
        'scheme': 'http',
        'path': '/api/dropfile/list',
        'raw_path': b'/api/dropfile/list',
        'query_string': b'',
        'headers': headers,
        'client': ('127.0.0.1', 12345),
        'server': ('testserver', 80),
    }
    return Request(scope)


def test_bearer_token_yields_user_id():
    token = create_access_token('alice')

    request = _request([(b'authorization', f'Bearer {token}'.encode())])

    assert deps.get_current_user_id(request) == 'alice'


def test_cookie_token_yields_user_id():
    token = create_access_token('bob')

    request = _request([(b'cookie', f'access_token={token}'.encode())])

    assert deps.get_current_user_id(request) == 'bob'


def test_missing_token_is_401():
    with pytest.raises(HTTPException) as exc:
        deps.get_current_user_id(_request([]))

    assert exc.value.status_code == 401
    assert exc.value.detail == 'Missing token'


def test_tampered_token_is_401():
    token = create_access_token('alice') + 'x'

    with pytest.raises(HTTPException) as exc:
        deps.get_current_user_id(_request([(b'authorization', f'Bearer {token}'.encode())]))

    assert exc.value.status_code == 401


def test_token_without_subject_is_401():
    expire = datetime.now(timezone.utc) + timedelta(minutes=5)
    token = jwt.encode({'exp': expire}, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    with pytest.raises(HTTPException) as exc:
        deps.get_current_user_id(_request([(b'authorization', f'Bearer {token}'.encode())]))

    assert exc.value.detail == 'Invalid token payload'


def test_decode_token_wraps_jwt_errors():
    with pytest.raises(ValueError):
        decode_token('not-a-jwt')


def test_get_storage_uses_configured_root(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, 'storage_root', str(tmp_path / 'storage'))
    deps.get_storage.cache_clear()
    try:
        storage = deps.get_storage()
        assert storage.storage_root == tmp_path.resolve() / 'storage'
        assert storage.chunk_size == settings.upload_chunk_size
        assert deps.get_storage() is storage
    finally:
        deps.get_storage.cache_clear()
