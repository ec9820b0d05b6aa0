from __future__ import annotations

import functools
import logging
import os
import shutil
from pathlib import Path
from typing import BinaryIO, Callable, Union

from .errors import (
    ConflictError,
    ErrorKind,
    InvalidArgumentError,
    InvalidPathError,
    NotFoundError,
    OperationResult,
    StorageError,
)
from .listing import build_tree, list_names
from .path_resolver import PathResolver, check_segment, is_contained

logger = logging.getLogger(__name__)

ITEM_TYPES = ('file', 'directory')
DEFAULT_CHUNK_SIZE = 1024 * 1024

Content = Union[bytes, bytearray, memoryview, BinaryIO]


def _operation(func: Callable[..., OperationResult]) -> Callable[..., OperationResult]:
    """Turn raised storage errors into a failed OperationResult.

    OS level failures are logged with their traceback and reported with a
    generic message so host paths never reach the caller.
    """

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> OperationResult:
        try:
            return func(self, *args, **kwargs)
        except StorageError as exc:
            logger.info('%s rejected: %s (%s)', func.__name__, exc.message, exc.kind.value)
            return OperationResult.failure(exc.kind, exc.message)
        except (OSError, ValueError, RecursionError):
            logger.exception('%s failed', func.__name__)
            return OperationResult.failure(ErrorKind.STORAGE_FAILURE, 'Storage operation failed')

    return wrapper


class StorageOperations:
    def __init__(self, storage_root: str | Path, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.resolver = PathResolver(storage_root)
        self.chunk_size = chunk_size

    @property
    def storage_root(self) -> Path:
        return self.resolver.storage_root

    @_operation
    def store(self, user_id: str, filename: str, content: Content) -> OperationResult:
        name = check_segment(filename, 'filename')
        target = self.resolver.user_root(user_id) / name
        if target.is_symlink():
            raise InvalidPathError('Invalid filename')
        if target.is_dir():
            raise ConflictError('A directory with that name already exists')

        size = 0
        with target.open('wb') as f:
            if isinstance(content, (bytes, bytearray, memoryview)):
                size = f.write(content)
            else:
                while chunk := content.read(self.chunk_size):
                    size += f.write(chunk)
            f.flush()
            os.fsync(f.fileno())

        logger.info('Stored %s (%d bytes) for user %s', name, size, user_id)
        return OperationResult.success('File uploaded successfully', {'name': name, 'size': size})

    @_operation
    def list_flat(self, user_id: str, relative_path: str | None = '') -> OperationResult:
        target = self.resolver.resolve(user_id, relative_path)
        if not target.is_dir():
            raise NotFoundError('Folder not found')
        return OperationResult.success('Folder content listed', list_names(target))

    @_operation
    def list_tree(self, user_id: str, relative_path: str | None = '') -> OperationResult:
        target = self.resolver.resolve(user_id, relative_path)
        if not target.is_dir():
            raise NotFoundError('Folder not found')
        return OperationResult.success('Folder structure listed', build_tree(target).to_dict())

    @_operation
    def create_directory(self, user_id: str, relative_path: str | None, name: str) -> OperationResult:
        dirname = check_segment(name, 'directory name')
        parent = self.resolver.resolve(user_id, relative_path)
        if not parent.is_dir():
            raise NotFoundError('Folder not found')

        target = parent / dirname
        if os.path.lexists(target):
            raise ConflictError('Directory already exists')
        try:
            target.mkdir()
        except FileExistsError as exc:
            raise ConflictError('Directory already exists') from exc

        logger.info('Created directory %s for user %s', target, user_id)
        return OperationResult.success('Directory created successfully')

    @_operation
    def delete(self, user_id: str, relative_path: str | None, item_name: str | None) -> OperationResult:
        name = check_segment(item_name, 'item name')
        target = self.resolver.resolve(user_id, relative_path) / name
        if not os.path.lexists(target):
            raise NotFoundError('Item not found')

        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        else:
            target.unlink()

        logger.info('Deleted %s for user %s', target, user_id)
        return OperationResult.success('Item deleted successfully')

    @_operation
    def rename(
        self,
        user_id: str,
        relative_path: str | None,
        old_name: str | None,
        new_name: str | None,
        item_type: str | None,
    ) -> OperationResult:
        if item_type not in ITEM_TYPES:
            raise InvalidArgumentError("Invalid item type, expected 'file' or 'directory'")
        old = check_segment(old_name, 'old name')
        new = check_segment(new_name, 'new name')

        parent = self.resolver.resolve(user_id, relative_path)
        source = parent / old
        destination = parent / new
        label = item_type.capitalize()
        if not os.path.lexists(source):
            raise NotFoundError(f'{label} not found')
        if os.path.lexists(destination):
            raise ConflictError(f'An item named {new} already exists')

        os.rename(source, destination)
        logger.info('Renamed %s to %s for user %s', source, destination, user_id)
        return OperationResult.success(f'{label} renamed successfully')

    @_operation
    def move(self, user_id: str, current_path: str | None, destination_path: str | None) -> OperationResult:
        if not current_path:
            raise InvalidArgumentError('currentPath is required')
        if not destination_path:
            raise InvalidArgumentError('destinationPath is required')

        source, destination = self.resolver.resolve_pair(user_id, current_path, destination_path)
        root = self.resolver.user_root(user_id)
        if source == root or destination == root:
            raise InvalidPathError('The user directory itself cannot be moved or replaced')
        if not os.path.lexists(source):
            raise NotFoundError('File not found')
        if source.is_dir() and not source.is_symlink() and is_contained(source, destination):
            raise InvalidArgumentError('A directory cannot be moved into itself')
        if not destination.parent.is_dir():
            raise NotFoundError('Destination directory not found')

        # Existing destinations follow os.rename semantics of the host.
        os.rename(source, destination)
        logger.info('Moved %s to %s for user %s', source, destination, user_id)
        return OperationResult.success('File moved successfully')
