"""Tests for the storage lifespan event."""

from pathlib import Path

from staticdrop.events.storage import StorageEvent
from staticdrop.services.storage import UploadStore


async def test_startup_creates_uploads_root(tmp_path: Path) -> None:
    store = UploadStore(tmp_path / "uploads")
    event = StorageEvent(store, public_root=tmp_path)

    result = await event.startup()

    assert result is store
    assert store.root.is_dir()


async def test_startup_is_idempotent(tmp_path: Path) -> None:
    (tmp_path / "uploads").mkdir()
    (tmp_path / "uploads" / "kept.txt").write_text("kept")
    event = StorageEvent(UploadStore(tmp_path / "uploads"), public_root=tmp_path)

    await event.startup()

    assert (tmp_path / "uploads" / "kept.txt").read_text() == "kept"


async def test_missing_public_root_does_not_fail(tmp_path: Path) -> None:
    event = StorageEvent(UploadStore(tmp_path / "uploads"), public_root=tmp_path / "absent")

    await event.startup()

    assert not StorageEvent.has_shutdown()
