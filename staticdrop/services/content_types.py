"""Extension based content-type lookup."""

import mimetypes
from pathlib import Path

OCTET_STREAM = "application/octet-stream"
TEXT_HTML = "text/html"


class ContentTypeResolver:
    """Map file extensions to MIME types using the ``mimetypes`` registry."""

    def __init__(self, overrides: dict[str, str] | None = None) -> None:
        self._registry = mimetypes.MimeTypes()
        for extension, mime_type in (overrides or {}).items():
            self._registry.add_type(mime_type, extension.lower())

    def resolve(self, path: Path | str, fallback: str = OCTET_STREAM) -> str:
        suffix = Path(path).suffix
        if not suffix:
            return fallback
        mime_type, _ = self._registry.guess_type(f"file{suffix.lower()}", strict=False)
        return mime_type or fallback
