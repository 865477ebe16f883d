"""Storing files received from the sync server."""

from __future__ import annotations

import logging
from pathlib import Path

from mediastore.models import AddedFile
from mediastore.storage.folder import add_data_to_folder_uniquely
from mediastore.utils.files import mtime_as_int, sha1_of_data
from mediastore.utils.names import normalize_filename

LOGGER = logging.getLogger(__name__)


def add_file_from_remote(folder: Path, fname: str, data: bytes) -> AddedFile:
    """Add a file received from the sync server into the media folder.

    The server did not always enforce name limits or reject invalid
    characters, so a name that doesn't survive normalization is stored
    through :func:`add_data_to_folder_uniquely` and reported as renamed.

    A name that is already normalized is written directly, replacing any
    local file of the same name without comparing content. The server is
    authoritative for canonical names.
    """
    folder = Path(folder)
    sha1 = sha1_of_data(data)
    normalized = normalize_filename(fname)

    if normalized == fname:
        path = folder / fname
        path.write_bytes(data)
        used_name = fname
        renamed_from = None
    else:
        LOGGER.debug("non-normalized filename received %r", fname)
        used_name = add_data_to_folder_uniquely(folder, fname, data, sha1)
        path = folder / used_name
        renamed_from = fname

    return AddedFile(
        fname=used_name,
        sha1=sha1,
        mtime=mtime_as_int(path),
        renamed_from=renamed_from,
    )
