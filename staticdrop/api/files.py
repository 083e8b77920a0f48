"""Catch-all endpoint feeding every request into the core Router."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from fastapi.exception_handlers import http_exception_handler
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from staticdrop.core.router import Router
from staticdrop.models.core import IncomingRequest

HTTP_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

router = APIRouter()


def get_router(request: Request) -> Router:
    return request.app.state.router


async def to_incoming(request: Request) -> IncomingRequest:
    """Snapshot a Starlette request, reading the whole body."""
    # scope["path"] is already decoded; request.url would re-split it on "?" and "#"
    return IncomingRequest(
        method=request.method,
        path=request.scope["path"],
        headers=request.headers,
        body=await request.body(),
    )


async def run_dispatch(request: Request, server: Router) -> Response:
    incoming = await to_incoming(request)
    # Decoding, writes and file reads block; keep them off the event loop.
    return await run_in_threadpool(server.dispatch, incoming)


@router.api_route("/{path:path}", methods=HTTP_METHODS, include_in_schema=False)
async def dispatch(request: Request, server: Annotated[Router, Depends(get_router)]) -> Response:
    return await run_dispatch(request, server)


async def unlisted_method_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Send methods missing from HTTP_METHODS (TRACE, PROPFIND, ...) through the Router too."""
    if exc.status_code != 405:
        return await http_exception_handler(request, exc)
    return await run_dispatch(request, get_router(request))
