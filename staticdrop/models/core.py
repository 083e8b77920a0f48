"""Core models shared by the request pipeline."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path


class RootKind(StrEnum):
    """Which configured root a request path resolves under."""

    PUBLIC = "public"
    UPLOADS = "uploads"


@dataclass(frozen=True, slots=True)
class IncomingRequest:
    """Transport-independent snapshot of an HTTP request."""

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


@dataclass(frozen=True, slots=True)
class ResolvedPath:
    """Absolute on-disk path that lies inside ``root``."""

    root: Path
    path: Path
    kind: RootKind

    def contains(self, candidate: Path) -> bool:
        """Check that ``candidate`` canonicalizes to the root or a descendant of it."""
        try:
            resolved = candidate.resolve()
        except (OSError, RuntimeError):
            return False
        return resolved == self.root or resolved.is_relative_to(self.root)


@dataclass(frozen=True, slots=True)
class DecodedUpload:
    """Single file extracted from a multipart body."""

    filename: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)
