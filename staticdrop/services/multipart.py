"""Byte-level multipart/form-data reader and single-file upload decoder."""

import posixpath
from collections.abc import Iterator
from dataclasses import dataclass
from urllib.parse import unquote

from beartype import beartype

from staticdrop.core.errors import BadRequest
from staticdrop.core.logger import LogIcon, logger
from staticdrop.models.core import DecodedUpload

CRLF = b"\r\n"
HEADER_END = b"\r\n\r\n"
MAX_BOUNDARY_LENGTH = 70


def _unquote_param(value: str) -> str:
    """Strip a quoted-string, honoring only ``\\"`` and ``\\\\`` escapes."""
    if len(value) < 2 or not (value[0] == value[-1] == '"'):
        return value
    chars: list[str] = []
    inner = value[1:-1]
    i = 0
    while i < len(inner):
        char = inner[i]
        if char == "\\" and i + 1 < len(inner) and inner[i + 1] in '"\\':
            chars.append(inner[i + 1])
            i += 2
            continue
        chars.append(char)
        i += 1
    return "".join(chars)


def split_params(value: str) -> list[str]:
    """Split a header value on ``;`` outside quoted strings."""
    segments: list[str] = []
    current: list[str] = []
    quoted = escaped = False
    for char in value:
        if escaped:
            escaped = False
        elif char == "\\" and quoted:
            escaped = True
        elif char == '"':
            quoted = not quoted
        elif char == ";" and not quoted:
            segments.append("".join(current))
            current = []
            continue
        current.append(char)
    segments.append("".join(current))
    return [segment.strip() for segment in segments]


def parse_header_value(value: str) -> tuple[str, dict[str, str]]:
    """Tokenize ``main; key=value; key="quoted"`` into the main token and parameters.

    Parameter names are lowercased; the first occurrence of a name wins.
    """
    main, *raw_params = split_params(value)
    params: dict[str, str] = {}
    for raw in raw_params:
        name, sep, param_value = raw.partition("=")
        name = name.strip().lower()
        if not sep or not name or name in params:
            continue
        params[name] = _unquote_param(param_value.strip())
    return main.strip().lower(), params


def parse_header_block(block: bytes) -> dict[str, str]:
    """Parse CRLF separated header lines, unfolding continuation lines."""
    try:
        text = block.decode("utf-8")
    except UnicodeDecodeError:
        text = block.decode("latin-1")

    headers: dict[str, str] = {}
    last_name: str | None = None
    for line in text.split("\r\n"):
        if not line:
            continue
        if line[0] in " \t":
            if last_name is not None:
                headers[last_name] = f"{headers[last_name]} {line.strip()}"
            continue
        name, sep, value = line.partition(":")
        if not sep:
            last_name = None
            continue
        last_name = name.strip().lower()
        headers.setdefault(last_name, value.strip())
    return headers


def extract_boundary(content_type: str | None) -> str:
    """Return the boundary parameter of a Content-Type header."""
    if not content_type:
        raise BadRequest.missing_boundary()
    _, params = parse_header_value(content_type)
    boundary = params.get("boundary", "")
    if not boundary or len(boundary) > MAX_BOUNDARY_LENGTH:
        raise BadRequest.missing_boundary()
    return boundary


def disposition_filename(disposition: str) -> str | None:
    """Filename from a Content-Disposition value; ``filename*`` wins over ``filename``."""
    _, params = parse_header_value(disposition)

    extended = params.get("filename*")
    if extended:
        charset, sep, rest = extended.partition("'")
        _, sep2, encoded = rest.partition("'")
        if sep and sep2 and encoded:
            try:
                return unquote(encoded, encoding=charset or "utf-8", errors="strict")
            except (LookupError, UnicodeDecodeError):
                pass

    return params.get("filename") or None


def basename(filename: str) -> str:
    """Drop any client supplied directory components, POSIX or Windows style."""
    return filename.replace("\\", "/").rsplit("/", 1)[-1]


@dataclass(frozen=True, slots=True)
class Part:
    """One multipart part; ``data`` is a view into the request body."""

    headers: dict[str, str]
    data: memoryview

    @property
    def content(self) -> bytes:
        return self.data.tobytes()


class MultipartReader:
    """Walk a multipart body part by part.

    The reader advances an offset over the body: it finds the first delimiter,
    then for each part reads the header block and records a view of the payload
    up to the CRLF preceding the next delimiter. The close delimiter ends the
    walk; a trailing part with no following delimiter is dropped.
    """

    def __init__(self, body: bytes, boundary: str) -> None:
        self._body = body
        self._view = memoryview(body)
        self._delimiter = b"--" + boundary.encode("latin-1")

    def __iter__(self) -> Iterator[Part]:
        body, delimiter = self._body, self._delimiter
        separator = CRLF + delimiter

        if body.startswith(delimiter):
            position = 0
        else:
            position = body.find(separator)
            if position == -1:
                return
            position += len(CRLF)

        while True:
            position += len(delimiter)
            if body.startswith(b"--", position):
                return
            line_end = body.find(CRLF, position)
            if line_end == -1:
                return
            start = line_end + len(CRLF)
            end = body.find(separator, start)
            if end == -1:
                return

            part = self._read_part(start, end)
            if part is not None:
                yield part
            position = end + len(CRLF)

    def _read_part(self, start: int, end: int) -> Part | None:
        if self._body.startswith(CRLF, start, end):
            return Part(headers={}, data=self._view[start + len(CRLF):end])

        header_end = self._body.find(HEADER_END, start, end)
        if header_end == -1:
            return None
        headers = parse_header_block(self._body[start:header_end])
        return Part(headers=headers, data=self._view[header_end + len(HEADER_END):end])


class MultipartUploadDecoder:
    """Extract the first file part of a multipart body.

    Parts are scanned in order. The first part carrying a Content-Disposition with
    a filename is the upload; a disposition without filename is skipped. A filename
    whose extension is not allowed rejects the whole request at once.
    """

    def __init__(self, allowed_extensions: frozenset[str]) -> None:
        self.allowed_extensions = frozenset(ext.lower() for ext in allowed_extensions)

    def is_allowed(self, filename: str) -> bool:
        if not filename or "\x00" in filename:
            return False
        return posixpath.splitext(filename)[1].lower() in self.allowed_extensions

    @beartype
    def decode(self, body: bytes, content_type: str | None) -> DecodedUpload:
        boundary = extract_boundary(content_type)

        for part in MultipartReader(body, boundary):
            disposition = part.headers.get("content-disposition")
            if disposition is None:
                continue
            filename = disposition_filename(disposition)
            if filename is None:
                continue

            name = basename(filename)
            if not self.is_allowed(name):
                logger.warning("Rejected upload", icon=LogIcon.FORBIDDEN, filename=name)
                raise BadRequest.invalid_file_type(name)

            return DecodedUpload(filename=name, content=part.content)

        raise BadRequest.no_file()
