from __future__ import annotations

import pytest

from dropfile import main


@pytest.fixture(autouse=True)
def _no_log_handler(monkeypatch):
    monkeypatch.setattr(main, 'configure_logging', lambda _level: None)


@pytest.mark.asyncio
async def test_startup_rejects_default_jwt_secret(monkeypatch, tmp_path):
    storage_root = tmp_path / 'storage'
    monkeypatch.setattr(main.settings, 'jwt_secret', 'change-me')
    monkeypatch.setattr(main.settings, 'storage_root', str(storage_root))

    with pytest.raises(RuntimeError, match='JWT_SECRET'):
        async with main.lifespan(main.app):
            pass

    assert not storage_root.exists()


@pytest.mark.asyncio
async def test_startup_creates_users_directory(monkeypatch, tmp_path):
    storage_root = tmp_path / 'storage'
    monkeypatch.setattr(main.settings, 'jwt_secret', 'super-long-random-secret')
    monkeypatch.setattr(main.settings, 'storage_root', str(storage_root))

    async with main.lifespan(main.app):
        assert (storage_root / 'users').is_dir()

    async with main.lifespan(main.app):
        assert (storage_root / 'users').is_dir()
