"""Storage roots lifespan event."""

from pathlib import Path

from staticdrop.core.lifespan import BaseEvent
from staticdrop.core.logger import LogIcon, logger
from staticdrop.services.storage import UploadStore


class StorageEvent(BaseEvent[UploadStore]):
    """Creates the uploads root before requests are served."""

    name = "storage"

    def __init__(self, store: UploadStore, public_root: Path) -> None:
        self.store = store
        self.public_root = Path(public_root)

    async def startup(self) -> UploadStore:
        root = self.store.ensure_root()
        logger.info("Uploads directory ready", icon=LogIcon.FOLDER, path=str(root))
        if not self.public_root.is_dir():
            logger.warning("Public directory missing", icon=LogIcon.WARNING, path=str(self.public_root))
        return self.store
