"""Turn a resolved path into exactly one HTTP response."""

import stat
from pathlib import Path

from fastapi import Response

from staticdrop.core.errors import NotFound, ServerError
from staticdrop.core.logger import LogIcon, logger
from staticdrop.models.core import ResolvedPath
from staticdrop.services.content_types import OCTET_STREAM, TEXT_HTML, ContentTypeResolver


class FileResponder:
    """Serve regular files and directory indexes, buffering the whole file."""

    def __init__(self, content_types: ContentTypeResolver, index_file: str = "index.html") -> None:
        self.content_types = content_types
        self.index_file = index_file

    def respond(self, target: ResolvedPath) -> Response:
        try:
            info = target.path.stat()
        except OSError:
            return NotFound().to_response()

        if stat.S_ISDIR(info.st_mode):
            return self._respond_index(target)
        if stat.S_ISREG(info.st_mode):
            return self._read(target.path, fallback=OCTET_STREAM)

        logger.warning("Refusing special file", icon=LogIcon.FORBIDDEN, path=str(target.path))
        return NotFound().to_response()

    def _respond_index(self, target: ResolvedPath) -> Response:
        index = target.path / self.index_file
        try:
            info = index.stat()
        except OSError:
            return NotFound().to_response()

        if not stat.S_ISREG(info.st_mode) or not target.contains(index):
            return NotFound().to_response()
        return self._read(index, fallback=TEXT_HTML)

    def _read(self, path: Path, fallback: str) -> Response:
        try:
            content = path.read_bytes()
        except OSError as err:
            error = ServerError.from_os_error(err)
            logger.error("File read failed", icon=LogIcon.ERROR, path=str(path), code=error.code)
            return error.to_response()

        content_type = self.content_types.resolve(path, fallback=fallback)
        logger.debug("Serving file", icon=LogIcon.DOWNLOAD, path=str(path), size=len(content))
        return Response(content=content, status_code=200, headers={"content-type": content_type})
