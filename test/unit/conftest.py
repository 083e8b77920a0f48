"""Test fixtures for staticdrop unit tests."""

from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from staticdrop.core.router import Router, build_router
from staticdrop.core.settings import Settings
from staticdrop.main import create_app
from staticdrop.models.core import IncomingRequest

BOUNDARY = "----staticdropBoundary7MA4YWxkTrZu0gW"


# -----------------------------------------------------------------------------
# Multipart helpers
# -----------------------------------------------------------------------------


def multipart_part(
    content: bytes,
    filename: str | None = "file.txt",
    field: str = "file",
    content_type: str = "application/octet-stream",
) -> bytes:
    """Build one form-data part including its header block."""
    disposition = f'form-data; name="{field}"'
    if filename is not None:
        disposition += f'; filename="{filename}"'
    headers = f"Content-Disposition: {disposition}\r\nContent-Type: {content_type}\r\n\r\n"
    return headers.encode("utf-8") + content


def multipart_body(*parts: bytes, boundary: str = BOUNDARY) -> bytes:
    """Frame pre-built parts with boundary delimiters."""
    delimiter = f"--{boundary}".encode()
    chunks = [delimiter + b"\r\n" + part + b"\r\n" for part in parts]
    return b"".join(chunks) + delimiter + b"--\r\n"


def multipart_content_type(boundary: str = BOUNDARY) -> str:
    return f"multipart/form-data; boundary={boundary}"


# -----------------------------------------------------------------------------
# Filesystem roots
# -----------------------------------------------------------------------------


@pytest.fixture
def public_root(tmp_path: Path) -> Path:
    """Public root with an index, a nested site and an index-less directory."""
    root = tmp_path / "public"
    root.mkdir()
    (root / "index.html").write_bytes(b"<h1>home</h1>")
    (root / "style.css").write_bytes(b"body { color: red; }")
    (root / "docs").mkdir()
    (root / "docs" / "index.html").write_bytes(b"<h1>docs</h1>")
    (root / "empty").mkdir()
    (root / "blob").write_bytes(b"\x00\x01\x02")
    return root


@pytest.fixture
def uploads_root(tmp_path: Path) -> Path:
    """Uploads root path; created by the storage event, not here."""
    return tmp_path / "uploads"


@pytest.fixture
def secret_file(tmp_path: Path) -> Path:
    """File outside both roots."""
    path = tmp_path / "secret.txt"
    path.write_text("SECRET", encoding="utf-8")
    return path


# -----------------------------------------------------------------------------
# Application wiring
# -----------------------------------------------------------------------------


@pytest.fixture
def test_settings(public_root: Path, uploads_root: Path) -> Settings:
    return Settings(PUBLIC_DIR=public_root, UPLOADS_DIR=uploads_root)


@pytest.fixture
def router(test_settings: Settings, uploads_root: Path) -> Router:
    """Core router with its uploads root already created."""
    uploads_root.mkdir(exist_ok=True)
    return build_router(test_settings)


@pytest.fixture
def app(test_settings: Settings) -> FastAPI:
    return create_app(test_settings)


@pytest.fixture
def client(app: FastAPI):
    """Test client running the app lifespan."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_request():
    """Factory fixture to create core requests."""

    def _make(
        method: str = "GET",
        path: str = "/",
        body: bytes = b"",
        headers: dict[str, str] | None = None,
    ) -> IncomingRequest:
        return IncomingRequest(method=method, path=path, headers=headers or {}, body=body)

    return _make
