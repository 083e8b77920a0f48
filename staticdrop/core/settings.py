"""Unified settings for staticdrop."""

import tomllib
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def read_pyproject(pyproject_path: Path) -> dict:
    """Read pyproject.toml into a dict, empty when the file is not shipped."""
    if not pyproject_path.is_file():
        return {}
    with pyproject_path.open("rb") as file_handle:
        return tomllib.load(file_handle)


def get_version(base_dir: Path) -> str:
    """Get version from git tags or fallback to package metadata."""
    try:
        import git

        repo = git.Repo(base_dir, search_parent_directories=True)
        latest_tag = max(repo.tags, key=lambda t: t.commit.committed_datetime, default=None)
        return str(latest_tag) if latest_tag else "0.0.0"
    except Exception:
        try:
            import importlib.metadata

            return importlib.metadata.version("staticdrop")
        except Exception:
            return "0.0.0"


class Settings(BaseSettings):
    """Unified settings for the staticdrop file server."""

    DEBUG: bool = True
    ENVIRONMENT: Literal["DEV", "PROD"] = "DEV"

    # ClassVar to prevent Pydantic from trying to load from env
    BASE_DIR: ClassVar[Path] = Path(__file__).parent.parent.parent
    PROJECT: ClassVar[dict] = read_pyproject(BASE_DIR / "pyproject.toml")
    API_NAME: ClassVar[str] = PROJECT.get("project", {}).get("name", "staticdrop")
    API_DESCRIPTION: ClassVar[str] = PROJECT.get("project", {}).get("description", "Static file server")
    API_VERSION: ClassVar[str] = get_version(BASE_DIR)

    # Server
    API_HOST: str = "0.0.0.0"
    API_PORT: int = Field(default=3001, validation_alias=AliasChoices("PORT", "API_PORT"))

    # Roots
    PUBLIC_DIR: Path = BASE_DIR / "public"
    UPLOADS_DIR: Path = BASE_DIR / "uploads"

    # Routing
    UPLOAD_ENDPOINT: ClassVar[str] = "/upload"
    UPLOADS_PREFIX: ClassVar[str] = "/uploads/"
    INDEX_FILE: ClassVar[str] = "index.html"

    # Uploads
    ALLOWED_EXTENSIONS: ClassVar[frozenset[str]] = frozenset({".png", ".jpg", ".jpeg", ".gif", ".pdf", ".txt"})

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()  # type: ignore
