"""Request path to on-disk path mapping with root containment."""

import posixpath
from pathlib import Path

from beartype import beartype

from staticdrop.core.logger import LogIcon, logger
from staticdrop.models.core import ResolvedPath, RootKind


class PathResolver:
    """Resolve URL paths under the public root or the uploads root.

    Paths are expected already percent-decoded by the transport and are never
    decoded again. A path is normalized as an absolute POSIX path, joined to its
    root and canonicalized; anything that lands outside the root is rejected.
    """

    def __init__(
        self,
        public_root: Path,
        uploads_root: Path,
        uploads_prefix: str = "/uploads/",
        index_file: str = "index.html",
    ) -> None:
        self._roots = {
            RootKind.PUBLIC: Path(public_root).resolve(),
            RootKind.UPLOADS: Path(uploads_root).resolve(),
        }
        self.uploads_prefix = uploads_prefix
        self.index_file = index_file

    def select(self, url_path: str) -> tuple[RootKind, str]:
        """Pick the root for ``url_path`` and return the path relative to it."""
        normalized = posixpath.normpath("/" + url_path.lstrip("/"))
        # normpath drops the trailing separator the uploads prefix depends on
        if url_path.endswith("/") and normalized != "/":
            normalized += "/"
        if normalized == "/":
            return RootKind.PUBLIC, self.index_file
        if normalized.startswith(self.uploads_prefix):
            return RootKind.UPLOADS, normalized[len(self.uploads_prefix):]
        return RootKind.PUBLIC, normalized.lstrip("/")

    @beartype
    def resolve(self, url_path: str) -> ResolvedPath | None:
        """Return the safe target for ``url_path`` or None when it escapes its root."""
        if "\x00" in url_path:
            logger.warning("Rejected path with NUL byte", icon=LogIcon.FORBIDDEN)
            return None

        kind, relative = self.select(url_path)
        root = self._roots[kind]
        try:
            candidate = (root / relative).resolve()
        except (OSError, RuntimeError) as err:
            logger.warning("Unresolvable path", icon=LogIcon.FORBIDDEN, path=url_path, error=str(err))
            return None

        if candidate != root and not candidate.is_relative_to(root):
            logger.warning("Path escapes root", icon=LogIcon.SECURITY, path=url_path, root=kind.value)
            return None

        return ResolvedPath(root=root, path=candidate, kind=kind)
