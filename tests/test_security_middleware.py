from __future__ import annotations

import logging

import pytest
from fastapi.responses import JSONResponse
from starlette.requests import Request

from dropfile import main


def _make_request(method: str, path: str) -> Request:
    scope = {
        'type': 'http',
        'http_version': '1.1',
        'method': method,
        'scheme': 'http',
        'path': path,
        'raw_path': path.encode(),
        'query_string': b'',
        'headers': [],
        'client': ('127.0.0.1', 12345),
        'server': ('testserver', 80),
    }

    async def _receive():
        return {'type': 'http.request', 'body': b'', 'more_body': False}

    return Request(scope, _receive)


@pytest.mark.asyncio
async def test_security_headers_added_on_success_response():
    request = _make_request('GET', '/healthz')

    async def _next(_request: Request):
        return JSONResponse({'ok': True})

    response = await main.security_middleware(request, _next)

    assert response.status_code == 200
    assert response.headers['Content-Security-Policy'] == "default-src 'none'; frame-ancestors 'none'"
    assert response.headers['X-Frame-Options'] == 'DENY'
    assert response.headers['X-Content-Type-Options'] == 'nosniff'
    assert response.headers['Referrer-Policy'] == 'no-referrer'


@pytest.mark.asyncio
async def test_security_headers_added_on_error_response():
    request = _make_request('PUT', '/api/dropfile/move')

    async def _next(_request: Request):
        return JSONResponse({'detail': 'File not found'}, status_code=404)

    response = await main.security_middleware(request, _next)

    assert response.status_code == 404
    assert response.headers['X-Frame-Options'] == 'DENY'


def test_parse_cors_origins_skips_blanks():
    assert main._parse_cors_origins(' https://a.example , ,https://b.example') == [
        'https://a.example',
        'https://b.example',
    ]
    assert main._parse_cors_origins('') == []


def test_configure_logging_installs_single_handler():
    root_logger = logging.getLogger()
    before = list(root_logger.handlers)
    level = root_logger.level
    try:
        main.configure_logging('debug')
        main.configure_logging('warning')

        ours = [h for h in root_logger.handlers if h.get_name() == 'dropfile']
        assert len(ours) == 1
        assert root_logger.level == logging.WARNING
    finally:
        for handler in list(root_logger.handlers):
            if handler not in before:
                root_logger.removeHandler(handler)
        root_logger.setLevel(level)


def test_healthz():
    assert main.healthz() == {'ok': True}
