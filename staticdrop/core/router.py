"""Request classification and dispatch to the upload handler or file responder."""

from fastapi import Response

from staticdrop.core.errors import BadRequest, MethodNotAllowed, NotFound, ServerError
from staticdrop.core.logger import LogIcon, logger
from staticdrop.core.settings import Settings
from staticdrop.models.core import IncomingRequest
from staticdrop.services.content_types import ContentTypeResolver
from staticdrop.services.multipart import MultipartUploadDecoder
from staticdrop.services.paths import PathResolver
from staticdrop.services.responder import FileResponder
from staticdrop.services.storage import UploadStore

UPLOAD_SUCCESS_HTML = '<h1>File uploaded successfully!</h1><a href="/">Go back</a>'


class Router:
    """Dispatch each request to exactly one handler producing exactly one response."""

    def __init__(
        self,
        resolver: PathResolver,
        responder: FileResponder,
        decoder: MultipartUploadDecoder,
        store: UploadStore,
        upload_endpoint: str = "/upload",
    ) -> None:
        self.resolver = resolver
        self.responder = responder
        self.decoder = decoder
        self.store = store
        self.upload_endpoint = upload_endpoint

    def dispatch(self, request: IncomingRequest) -> Response:
        if request.path == self.upload_endpoint:
            return self.handle_upload(request)
        return self.serve(request)

    def handle_upload(self, request: IncomingRequest) -> Response:
        if request.method.upper() != "POST":
            logger.warning("Upload endpoint method rejected", icon=LogIcon.FORBIDDEN, method=request.method)
            return MethodNotAllowed(allowed=("POST",)).to_response()

        try:
            upload = self.decoder.decode(request.body, request.header("content-type"))
        except BadRequest as err:
            logger.warning("Upload rejected", icon=LogIcon.VALIDATION, reason=err.reason)
            return err.to_response()

        try:
            self.store.save(upload)
        except OSError as err:
            error = ServerError.from_os_error(err, title="Error saving file")
            logger.error("Upload write failed", icon=LogIcon.ERROR, filename=upload.filename, code=error.code)
            return error.to_response()

        logger.info("File uploaded", icon=LogIcon.UPLOAD, filename=upload.filename, size=upload.size)
        return Response(content=UPLOAD_SUCCESS_HTML, status_code=200, headers={"content-type": "text/html"})

    def serve(self, request: IncomingRequest) -> Response:
        target = self.resolver.resolve(request.path)
        if target is None:
            return NotFound().to_response()
        return self.responder.respond(target)


def build_router(settings: Settings) -> Router:
    """Wire the request pipeline from explicit settings."""
    return Router(
        resolver=PathResolver(
            public_root=settings.PUBLIC_DIR,
            uploads_root=settings.UPLOADS_DIR,
            uploads_prefix=settings.UPLOADS_PREFIX,
            index_file=settings.INDEX_FILE,
        ),
        responder=FileResponder(ContentTypeResolver(), index_file=settings.INDEX_FILE),
        decoder=MultipartUploadDecoder(settings.ALLOWED_EXTENSIONS),
        store=UploadStore(settings.UPLOADS_DIR),
        upload_endpoint=settings.UPLOAD_ENDPOINT,
    )
