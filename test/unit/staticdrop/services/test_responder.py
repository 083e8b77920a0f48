"""Tests for the file responder state machine."""

import errno
import os
from pathlib import Path

import pytest

from staticdrop.models.core import ResolvedPath, RootKind
from staticdrop.services.content_types import ContentTypeResolver
from staticdrop.services.responder import FileResponder

NOT_FOUND_HTML = b"<h1>404 - File Not Found</h1>"


@pytest.fixture
def responder() -> FileResponder:
    return FileResponder(ContentTypeResolver())


def target_for(root: Path, relative: str) -> ResolvedPath:
    root = root.resolve()
    return ResolvedPath(root=root, path=(root / relative).resolve(), kind=RootKind.PUBLIC)


def test_regular_file_is_served(responder: FileResponder, public_root: Path) -> None:
    response = responder.respond(target_for(public_root, "style.css"))

    assert response.status_code == 200
    assert response.body == b"body { color: red; }"
    assert response.headers["content-type"] == "text/css"


def test_unknown_type_is_octet_stream(responder: FileResponder, public_root: Path) -> None:
    response = responder.respond(target_for(public_root, "blob"))

    assert response.status_code == 200
    assert response.body == b"\x00\x01\x02"
    assert response.headers["content-type"] == "application/octet-stream"


def test_missing_file_is_404(responder: FileResponder, public_root: Path) -> None:
    response = responder.respond(target_for(public_root, "missing.html"))

    assert response.status_code == 404
    assert response.body == NOT_FOUND_HTML
    assert response.headers["content-type"] == "text/html"


def test_directory_serves_its_index(responder: FileResponder, public_root: Path) -> None:
    response = responder.respond(target_for(public_root, "docs"))

    assert response.status_code == 200
    assert response.body == b"<h1>docs</h1>"
    assert response.headers["content-type"] == "text/html"


def test_directory_without_index_is_404(responder: FileResponder, public_root: Path) -> None:
    response = responder.respond(target_for(public_root, "empty"))

    assert response.status_code == 404
    assert response.body == NOT_FOUND_HTML


def test_directory_whose_index_is_a_directory_is_404(responder: FileResponder, public_root: Path) -> None:
    (public_root / "odd" / "index.html").mkdir(parents=True)

    response = responder.respond(target_for(public_root, "odd"))

    assert response.status_code == 404


def test_index_symlink_escaping_root_is_404(
    responder: FileResponder, public_root: Path, secret_file: Path
) -> None:
    (public_root / "trap").mkdir()
    (public_root / "trap" / "index.html").symlink_to(secret_file)

    response = responder.respond(target_for(public_root, "trap"))

    assert response.status_code == 404


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="requires FIFO support")
def test_special_file_is_404(responder: FileResponder, public_root: Path) -> None:
    os.mkfifo(public_root / "pipe")

    response = responder.respond(target_for(public_root, "pipe"))

    assert response.status_code == 404


def test_read_failure_is_500_with_errno_name(
    responder: FileResponder, public_root: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def deny(self: Path) -> bytes:
        raise PermissionError(errno.EACCES, "Permission denied", str(self))

    monkeypatch.setattr(Path, "read_bytes", deny)

    response = responder.respond(target_for(public_root, "style.css"))

    assert response.status_code == 500
    assert response.body == b"<h1>500 - Server Error: EACCES</h1>"
