"""Tests for the middleware layer."""

import pytest
import structlog
from fastapi import FastAPI, Request, Response
from fastapi.testclient import TestClient

from staticdrop.middlewares.base import BaseMiddleware, MiddlewareHandler
from staticdrop.middlewares.request_id import REQUEST_ID_HEADER, RequestContextMiddleware


class BlockingMiddleware(BaseMiddleware):
    """Short-circuits every request it applies to."""

    def before(self, request: Request) -> Request | Response:
        return Response(content="blocked", status_code=403)

    def after(self, request: Request, response: Response) -> Response:
        response.headers["x-after"] = "1"
        return response


@pytest.fixture
def bare_app() -> FastAPI:
    app = FastAPI()

    @app.get("/context")
    async def context() -> dict:
        return dict(structlog.contextvars.get_contextvars())

    @app.get("/open")
    async def open_endpoint() -> dict:
        return {"ok": True}

    return app


def test_subclass_must_implement_a_hook() -> None:
    with pytest.raises(TypeError, match="must implement at least one of before/after"):

        class Empty(BaseMiddleware):
            pass


def test_register_returns_self_for_chaining(bare_app: FastAPI) -> None:
    handler = MiddlewareHandler(bare_app)
    middleware = RequestContextMiddleware()

    assert handler.register(middleware) is handler


def test_endpoint_filter(bare_app: FastAPI) -> None:
    MiddlewareHandler(bare_app).register(BlockingMiddleware(endpoints=["/context"]))

    with TestClient(bare_app) as client:
        blocked = client.get("/context")
        passed = client.get("/open")

    assert blocked.status_code == 403
    assert passed.status_code == 200
    assert "x-after" not in passed.headers


def test_request_id_is_generated_and_bound(bare_app: FastAPI) -> None:
    MiddlewareHandler(bare_app).register(RequestContextMiddleware())

    with TestClient(bare_app) as client:
        response = client.get("/context")

    request_id = response.headers[REQUEST_ID_HEADER]
    assert len(request_id) == 32
    assert response.json() == {"request_id": request_id, "method": "GET", "path": "/context"}


def test_incoming_request_id_is_echoed(bare_app: FastAPI) -> None:
    MiddlewareHandler(bare_app).register(RequestContextMiddleware())

    with TestClient(bare_app) as client:
        response = client.get("/context", headers={REQUEST_ID_HEADER: "abc-123"})

    assert response.headers[REQUEST_ID_HEADER] == "abc-123"
    assert response.json()["request_id"] == "abc-123"
