"""HTTP error taxonomy rendered as fixed HTML fragments."""

import errno
from typing import ClassVar

from fastapi import Response


class HTTPError(Exception):
    """Base error that knows how to render itself as a terminal response."""

    status_code: ClassVar[int] = 500
    title: ClassVar[str] = "Server Error"

    def __init__(self, reason: str | None = None, *, title: str | None = None) -> None:
        self.reason = reason or self.title.lower()
        self.message = title or self.title
        super().__init__(self.reason)

    @property
    def html(self) -> str:
        return f"<h1>{self.status_code} - {self.message}</h1>"

    @property
    def headers(self) -> dict[str, str]:
        return {"content-type": "text/html"}

    def to_response(self) -> Response:
        return Response(content=self.html, status_code=self.status_code, headers=self.headers)


class NotFound(HTTPError):
    status_code = 404
    title = "File Not Found"


class MethodNotAllowed(HTTPError):
    status_code = 405
    title = "Method Not Allowed"

    def __init__(self, allowed: tuple[str, ...] = ("POST",)) -> None:
        super().__init__()
        self.allowed = allowed

    @property
    def headers(self) -> dict[str, str]:
        return {**super().headers, "allow": ", ".join(self.allowed)}


class BadRequest(HTTPError):
    status_code = 400
    title = "Bad Request"

    filename: str | None = None

    @classmethod
    def missing_boundary(cls) -> "BadRequest":
        return cls("missing boundary")

    @classmethod
    def invalid_file_type(cls, filename: str) -> "BadRequest":
        error = cls("invalid file type", title="Invalid file type")
        error.filename = filename
        return error

    @classmethod
    def no_file(cls) -> "BadRequest":
        return cls("no file uploaded", title="No file uploaded")


class ServerError(HTTPError):
    status_code = 500
    title = "Server Error"

    code: str = "UNKNOWN"

    @classmethod
    def from_os_error(cls, err: OSError, title: str | None = None) -> "ServerError":
        """Build a 500 whose body names the errno of ``err``."""
        code = errno.errorcode.get(err.errno, "UNKNOWN") if err.errno is not None else "UNKNOWN"
        error = cls(str(err), title=f"{title or cls.title}: {code}")
        error.code = code
        return error
