from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    INVALID_PATH = 'invalid_path'
    INVALID_ARGUMENT = 'invalid_argument'
    NOT_FOUND = 'not_found'
    CONFLICT = 'conflict'
    STORAGE_FAILURE = 'storage_failure'


class StorageError(Exception):
    kind: ErrorKind = ErrorKind.STORAGE_FAILURE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidPathError(StorageError):
    kind = ErrorKind.INVALID_PATH


class InvalidArgumentError(StorageError):
    kind = ErrorKind.INVALID_ARGUMENT


class NotFoundError(StorageError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(StorageError):
    kind = ErrorKind.CONFLICT


class StorageFailureError(StorageError):
    kind = ErrorKind.STORAGE_FAILURE


@dataclass(frozen=True)
class OperationResult:
    ok: bool
    message: str
    data: Optional[Any] = None
    error: Optional[ErrorKind] = None

    @classmethod
    def success(cls, message: str, data: Any = None) -> OperationResult:
        return cls(ok=True, message=message, data=data)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> OperationResult:
        return cls(ok=False, message=message, error=kind)
