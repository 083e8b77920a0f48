"""staticdrop - static file server with multipart uploads, powered by FastAPI."""

import uvicorn
from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from staticdrop.api.files import router as files_router
from staticdrop.api.files import unlisted_method_handler
from staticdrop.api.health import router as health_router
from staticdrop.core.lifespan import create_lifespan
from staticdrop.core.logger import logger
from staticdrop.core.router import build_router
from staticdrop.core.settings import Settings
from staticdrop.core.settings import settings as st
from staticdrop.events.storage import StorageEvent
from staticdrop.middlewares.base import MiddlewareHandler
from staticdrop.middlewares.request_id import RequestContextMiddleware


def create_app(settings: Settings = st) -> FastAPI:
    """Build the application over the roots named in ``settings``."""
    router = build_router(settings)

    # Lifespan events
    lifespan = create_lifespan()
    lifespan.register(StorageEvent(router.store, public_root=settings.PUBLIC_DIR))

    app = FastAPI(
        title=settings.API_NAME,
        description=settings.API_DESCRIPTION,
        version=settings.API_VERSION,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.router = router

    # Middlewares
    MiddlewareHandler(app).register(RequestContextMiddleware())

    # Routers, catch-all last
    app.include_router(health_router)
    app.include_router(files_router)
    app.add_exception_handler(StarletteHTTPException, unlisted_method_handler)
    return app


app = create_app()


def main() -> None:
    logger.info("🚀 STARTING %s | HOST=%s | PORT=%s", st.API_NAME, st.API_HOST, st.API_PORT)
    uvicorn.run(app, host=st.API_HOST, port=st.API_PORT)


if __name__ == "__main__":
    main()
