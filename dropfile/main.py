from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .routers import files
from .services.path_resolver import USERS_DIRNAME

logger = logging.getLogger(__name__)

_LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'

_SECURITY_HEADERS = {
    'Content-Security-Policy': "default-src 'none'; frame-ancestors 'none'",
    'X-Frame-Options': 'DENY',
    'X-Content-Type-Options': 'nosniff',
    'Referrer-Policy': 'no-referrer',
}


def configure_logging(level: str) -> None:
    root_logger = logging.getLogger()
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(numeric_level)
    if any(handler.get_name() == 'dropfile' for handler in root_logger.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    handler.set_name('dropfile')
    root_logger.addHandler(handler)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if settings.jwt_secret == 'change-me':
        raise RuntimeError('Refusing to start with insecure default JWT secret. Set JWT_SECRET in .env')

    configure_logging(settings.log_level)
    users_dir = Path(settings.storage_root) / USERS_DIRNAME
    users_dir.mkdir(parents=True, exist_ok=True)
    logger.info('Serving user storage from %s', users_dir.resolve())
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)


def _parse_cors_origins(value: str) -> list[str]:
    return [origin.strip() for origin in value.split(',') if origin.strip()]


cors_origins = _parse_cors_origins(settings.cors_origins)
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
        allow_headers=['Authorization', 'Content-Type'],
    )


def _apply_security_headers(response):
    for key, value in _SECURITY_HEADERS.items():
        response.headers[key] = value
    return response


@app.middleware('http')
async def security_middleware(request: Request, call_next):
    response = await call_next(request)
    return _apply_security_headers(response)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error('Unhandled error on %s %s', request.method, request.url.path, exc_info=exc)
    response = JSONResponse({'detail': 'Internal server error. Please try again.'}, status_code=500)
    return _apply_security_headers(response)


@app.get('/healthz')
def healthz():
    return {'ok': True}


app.include_router(files.router)


def run() -> None:
    uvicorn.run('dropfile.main:app', host=settings.app_host, port=settings.app_port, log_level=settings.log_level)
