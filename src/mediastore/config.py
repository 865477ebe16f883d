"""Application configuration.

The media folder and sync size limit come from the command line or from
the environment, so the same settings can be shared with the sync client
that owns the folder.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from mediastore.utils.files import MEDIA_SYNC_FILESIZE_LIMIT

FOLDER_ENV = "MEDIASTORE_FOLDER"
MAX_SYNC_FILESIZE_ENV = "MEDIASTORE_MAX_SYNC_FILESIZE"


def _parse_filesize(raw: str) -> int:
    try:
        size = int(raw)
    except ValueError:
        raise ValueError(f"{MAX_SYNC_FILESIZE_ENV} must be a whole number of bytes, got {raw!r}") from None
    if size <= 0:
        raise ValueError(f"{MAX_SYNC_FILESIZE_ENV} must be positive, got {size}")
    return size


@dataclass(slots=True)
class AppConfig:
    media_folder: Path | None = None
    max_sync_filesize: int = MEDIA_SYNC_FILESIZE_LIMIT

    @classmethod
    def from_env(
        cls,
        media_folder: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "AppConfig":
        """Build a config, letting an explicit folder win over the environment."""
        env = os.environ if environ is None else environ

        if media_folder is None and env.get(FOLDER_ENV):
            media_folder = Path(env[FOLDER_ENV]).expanduser()

        max_sync_filesize = MEDIA_SYNC_FILESIZE_LIMIT
        if env.get(MAX_SYNC_FILESIZE_ENV):
            max_sync_filesize = _parse_filesize(env[MAX_SYNC_FILESIZE_ENV])

        return cls(media_folder=media_folder, max_sync_filesize=max_sync_filesize)

    def resolve_media_folder(self, base_dir: Path) -> Path:
        """Folder to operate on; ``base_dir`` itself when none is configured."""
        if self.media_folder is None:
            return base_dir
        folder = Path(self.media_folder)
        return folder if folder.is_absolute() else base_dir / folder
