from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from ..deps import get_current_user_id, get_storage
from ..schemas import ApiResponse, CreateDirectoryRequest, DeleteRequest, MoveRequest, RenameRequest
from ..services.errors import ErrorKind, OperationResult
from ..services.storage_ops import StorageOperations

router = APIRouter(prefix='/api/dropfile', tags=['dropfile'])

ERROR_STATUS = {
    ErrorKind.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_PATH: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.STORAGE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _respond(result: OperationResult) -> ApiResponse:
    if not result.ok:
        raise HTTPException(status_code=ERROR_STATUS[result.error], detail=result.message)
    return ApiResponse(ok=True, message=result.message, data=result.data)


@router.post('/upload')
def upload(
    file: UploadFile = File(...),
    user_id: str = Depends(get_current_user_id),
    storage: StorageOperations = Depends(get_storage),
):
    return _respond(storage.store(user_id, file.filename, file.file))


@router.get('/list')
def list_files(
    folder_path: str = Query(default='', alias='folderPath'),
    show_structure: bool = Query(default=False, alias='showStructure'),
    user_id: str = Depends(get_current_user_id),
    storage: StorageOperations = Depends(get_storage),
):
    if show_structure:
        result = storage.list_tree(user_id, folder_path)
    else:
        result = storage.list_flat(user_id, folder_path)
    response = _respond(result)
    response.data = {'structure': response.data}
    return response


@router.post('/create-directory', status_code=status.HTTP_201_CREATED)
def create_directory(
    payload: CreateDirectoryRequest,
    user_id: str = Depends(get_current_user_id),
    storage: StorageOperations = Depends(get_storage),
):
    return _respond(storage.create_directory(user_id, payload.folder_path, payload.directory_name))


@router.delete('/delete')
def delete(
    payload: DeleteRequest,
    user_id: str = Depends(get_current_user_id),
    storage: StorageOperations = Depends(get_storage),
):
    return _respond(storage.delete(user_id, payload.folder_path, payload.item_name))


@router.put('/rename')
def rename(
    payload: RenameRequest,
    user_id: str = Depends(get_current_user_id),
    storage: StorageOperations = Depends(get_storage),
):
    result = storage.rename(user_id, payload.folder_path, payload.old_name, payload.new_name, payload.item_type)
    return _respond(result)


@router.put('/move')
def move(
    payload: MoveRequest,
    user_id: str = Depends(get_current_user_id),
    storage: StorageOperations = Depends(get_storage),
):
    return _respond(storage.move(user_id, payload.current_path, payload.destination_path))
