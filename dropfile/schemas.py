from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateDirectoryRequest(_CamelModel):
    folder_path: str = ''
    directory_name: Optional[str] = None


class DeleteRequest(_CamelModel):
    folder_path: str = ''
    item_name: Optional[str] = None


class RenameRequest(_CamelModel):
    folder_path: str = ''
    old_name: Optional[str] = None
    new_name: Optional[str] = None
    item_type: Optional[str] = None


class MoveRequest(_CamelModel):
    current_path: Optional[str] = None
    destination_path: Optional[str] = None


class ApiResponse(BaseModel):
    ok: bool
    message: str
    data: Optional[Any] = None
