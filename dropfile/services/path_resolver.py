from __future__ import annotations

import logging
import os
from pathlib import Path

from .errors import InvalidArgumentError, InvalidPathError

logger = logging.getLogger(__name__)

USERS_DIRNAME = 'users'
_FORBIDDEN_SEGMENT_CHARS = ('/', '\\', '\x00')


def is_contained(root: str | Path, candidate: str | Path) -> bool:
    """Return True when ``candidate`` is ``root`` or lies below it.

    Both arguments must already be normalised; this is a plain string
    comparison so ``/base-evil`` is never treated as inside ``/base``.
    """
    root_s = str(root)
    candidate_s = str(candidate)
    if candidate_s == root_s:
        return True
    return candidate_s.startswith(root_s.rstrip(os.sep) + os.sep)


def check_segment(value: str | None, field: str) -> str:
    if value is None or value == '':
        raise InvalidArgumentError(f'{field} is required')
    if not isinstance(value, str):
        raise InvalidArgumentError(f'{field} must be a string')
    if value in {'.', '..'} or any(ch in value for ch in _FORBIDDEN_SEGMENT_CHARS):
        raise InvalidPathError(f'Invalid {field}')
    return value


class PathResolver:
    """Maps untrusted relative paths onto a per-user directory.

    Every user owns ``<storage_root>/users/<user_id>``. Paths are normalised
    first, then checked for containment, then canonicalised with symlinks
    resolved and checked again.
    """

    def __init__(self, storage_root: str | Path):
        self.storage_root = Path(os.path.realpath(storage_root))
        self.users_dir = self.storage_root / USERS_DIRNAME

    def check_user_id(self, user_id: str) -> str:
        return check_segment(user_id, 'user id')

    def user_root(self, user_id: str) -> Path:
        self.check_user_id(user_id)
        root = self.users_dir / user_id
        root.mkdir(parents=True, exist_ok=True)

        canonical = os.path.realpath(root)
        users_dir = os.path.realpath(self.users_dir)
        if canonical == users_dir or not is_contained(users_dir, canonical):
            logger.warning('User root for %r resolves outside the users directory', user_id)
            raise InvalidPathError('Invalid user root')
        return Path(canonical)

    def resolve(self, user_id: str, relative_path: str | None = '', follow_symlinks: bool = True) -> Path:
        root = self.user_root(user_id)
        return self._resolve_under(root, user_id, relative_path, follow_symlinks)

    def resolve_pair(
        self,
        user_id: str,
        source: str | None,
        destination: str | None,
        follow_symlinks: bool = False,
    ) -> tuple[Path, Path]:
        root = self.user_root(user_id)
        return (
            self._resolve_under(root, user_id, source, follow_symlinks),
            self._resolve_under(root, user_id, destination, follow_symlinks),
        )

    def _resolve_under(self, root: Path, user_id: str, relative_path: str | None, follow_symlinks: bool) -> Path:
        rel = relative_path or ''
        if not isinstance(rel, str):
            raise InvalidArgumentError('Path must be a string')
        if '\x00' in rel:
            raise InvalidPathError('Invalid path')

        root_s = str(root)
        lexical = os.path.normpath(os.path.join(root_s, rel.lstrip('/')))
        if not is_contained(root_s, lexical):
            logger.warning('Rejected path %r for user %r: escapes user root', rel, user_id)
            raise InvalidPathError('Path escapes the user directory')

        if follow_symlinks:
            canonical = os.path.realpath(lexical)
        elif lexical == root_s:
            canonical = root_s
        else:
            parent, name = os.path.split(lexical)
            canonical = os.path.join(os.path.realpath(parent), name)

        if not is_contained(root_s, canonical):
            logger.warning('Rejected path %r for user %r: symlink escapes user root', rel, user_id)
            raise InvalidPathError('Path escapes the user directory')
        return Path(canonical)
