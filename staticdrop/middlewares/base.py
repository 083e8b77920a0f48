"""Base middleware architecture for FastAPI applications."""

from abc import ABC, abstractmethod

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from staticdrop.core.logger import LogIcon, logger


class BaseMiddleware(ABC):
    """Abstract base class for middlewares with before/after hooks."""

    endpoints: frozenset[str] = frozenset()

    def __init__(self, endpoints: frozenset[str] | list[str] | None = None) -> None:
        if endpoints is not None:
            self.endpoints = frozenset(endpoints)

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        # Check that at least one of before/after is implemented
        before_abstract = getattr(cls.before, "__isabstractmethod__", False)
        after_abstract = getattr(cls.after, "__isabstractmethod__", False)
        if before_abstract and after_abstract:
            raise TypeError(f"{cls.__name__} must implement at least one of before/after")

    @abstractmethod
    def before(self, request: Request) -> Request | Response:
        """Called before request handling. Return Request to continue or Response to short-circuit."""
        return request

    @abstractmethod
    def after(self, request: Request, response: Response) -> Response:
        """Called after request handling. Return modified Response."""
        return response

    def applies_to(self, path: str) -> bool:
        return not self.endpoints or path in self.endpoints


class MiddlewareHandler:
    """Manages middleware registration for a FastAPI application."""

    def __init__(self, app: FastAPI) -> None:
        self._app = app

    def register(self, middleware: BaseMiddleware) -> "MiddlewareHandler":
        """Register a middleware. Returns self for chaining."""
        self._app.add_middleware(BaseHTTPMiddleware, dispatch=self._build_dispatch(middleware))
        logger.info(f"Registered middleware: {middleware.__class__.__name__}", icon=LogIcon.ADAPTER)
        return self

    @staticmethod
    def _build_dispatch(middleware: BaseMiddleware):
        """Adapt before/after hooks to a Starlette dispatch function."""
        has_before = not getattr(middleware.before, "__isabstractmethod__", False)
        has_after = not getattr(middleware.after, "__isabstractmethod__", False)

        async def dispatch(request: Request, call_next: RequestResponseEndpoint) -> Response:
            if not middleware.applies_to(request.scope["path"]):
                return await call_next(request)

            if has_before:
                result = middleware.before(request)
                if isinstance(result, Response):
                    return result
                request = result

            response = await call_next(request)
            return middleware.after(request, response) if has_after else response

        return dispatch
