"""Core mediastore data models."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(slots=True)
class AddedFile:
    """A file written into the media folder on behalf of the sync server.

    ``renamed_from`` holds the name the server sent when the file had to be
    stored under a different name.
    """

    fname: str
    sha1: bytes
    mtime: int
    renamed_from: Optional[str] = None


@dataclass(slots=True)
class MediaEntry:
    """A file found while scanning the media folder."""

    path: Path
    fname: str
    size: int
    mtime: int
    normalized: bool
