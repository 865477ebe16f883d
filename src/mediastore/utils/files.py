"""Utility helpers for hashing and inspecting media files."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Iterator

from mediastore.models import MediaEntry
from mediastore.utils.names import is_nonsyncable_filename, normalize_filename

# Sync does not support files over 100MiB.
MEDIA_SYNC_FILESIZE_LIMIT = 100 * 1024 * 1024

HASH_CHUNK_SIZE = 64 * 1024


def sha1_of_data(data: bytes) -> bytes:
    """Return the SHA1 of provided data."""
    return hashlib.sha1(data).digest()


def sha1_of_file(path: Path) -> bytes:
    """Return the SHA1 of a file, failing if it doesn't exist."""
    sha = hashlib.sha1()
    with Path(path).open("rb") as handle:
        while True:
            try:
                chunk = handle.read(HASH_CHUNK_SIZE)
            except InterruptedError:
                continue
            if not chunk:
                break
            sha.update(chunk)
    return sha.digest()


def existing_file_sha1(path: Path) -> bytes | None:
    """Return the SHA1 of a file if it exists, or None."""
    try:
        return sha1_of_file(path)
    except FileNotFoundError:
        return None


def sha1_hex(digest: bytes) -> str:
    return digest.hex()


def mtime_as_int(path: Path) -> int:
    """Modification time of ``path`` in whole seconds since the epoch."""
    return int(Path(path).stat().st_mtime)


def is_syncable_size(size: int, limit: int = MEDIA_SYNC_FILESIZE_LIMIT) -> bool:
    return size <= limit


def iter_media_files(folder: Path) -> Iterator[MediaEntry]:
    """Yield files stored directly in the media folder, skipping junk files."""
    for item in sorted(Path(folder).iterdir()):
        if not item.is_file() or is_nonsyncable_filename(item.name):
            continue
        stat = item.stat()
        yield MediaEntry(
            path=item,
            fname=item.name,
            size=stat.st_size,
            mtime=int(stat.st_mtime),
            normalized=normalize_filename(item.name) == item.name,
        )
