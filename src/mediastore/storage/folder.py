"""Reading, writing and removing files in the media folder.

The folder is owned by a single sync session at a time; nothing here locks.
Probing for an existing file and writing the new one are separate steps.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from send2trash import send2trash

from mediastore.utils.files import existing_file_sha1, sha1_hex
from mediastore.utils.names import (
    MAX_FILENAME_LENGTH,
    join_filename,
    normalize_filename,
    split_and_truncate_filename,
)

LOGGER = logging.getLogger(__name__)


class MediaRemovalError(OSError):
    """Raised when a batch of files could not be moved to the trash."""


def add_data_to_folder_uniquely(
    folder: Path,
    desired_name: str,
    data: bytes,
    sha1: bytes,
) -> str:
    """Write ``data`` into ``folder``, renaming if an existing file has different content.

    ``sha1`` is trusted to be the digest of ``data``. Returns the filename used.
    """
    normalized_name = normalize_filename(desired_name)
    target_path = Path(folder) / normalized_name

    existing_hash = existing_file_sha1(target_path)
    if existing_hash is None:
        target_path.write_bytes(data)
        return normalized_name

    if existing_hash == sha1:
        # same content already stored under this name
        return normalized_name

    hashed_name = add_hash_suffix_to_file_stem(normalized_name, sha1)
    LOGGER.debug("%s exists with different content, using %s", normalized_name, hashed_name)
    target_path.with_name(hashed_name).write_bytes(data)
    return hashed_name


def add_hash_suffix_to_file_stem(fname: str, sha1: bytes) -> str:
    """Convert foo.jpg into foo-<40 hex chars>.jpg.

    The stem and extension are trimmed to leave room for a 20 byte hash plus
    the hyphen. The hex digest is 40 chars, so a long name can come out longer
    than MAX_FILENAME_LENGTH; every client trims the same way, so they agree
    on the name.
    """
    max_len = MAX_FILENAME_LENGTH - 20 - 1
    stem, ext = split_and_truncate_filename(fname, max_len)
    return join_filename(f"{stem}-{sha1_hex(sha1)}", ext)


def remove_files(folder: Path, fnames: Sequence[str]) -> None:
    """Move the named files to the trash in a single call."""
    if not fnames:
        return

    paths = [str(Path(folder) / fname) for fname in fnames]

    LOGGER.debug("removing %s", list(fnames))
    try:
        send2trash(paths)
    except Exception as exc:
        raise MediaRemovalError(f"removing files failed: {exc!r}") from exc


def data_for_file(folder: Path, fname: str) -> bytes | None:
    """Return the contents of ``fname``, or None if it doesn't exist."""
    try:
        return (Path(folder) / fname).read_bytes()
    except FileNotFoundError:
        return None
