"""Filename normalization for files stored in the media folder.

Names arrive from local imports and from the sync server, which did not
always enforce any rules. Everything that ends up on disk goes through
:func:`normalize_filename` so the same name is valid on Windows, macOS and
Linux, and so two clients never disagree on how a name is spelled.
"""

from __future__ import annotations

import unicodedata

# Combined with the rest of the path, the full path needs to stay under ~240
# chars on some platforms, and filesystems like eCryptFS lengthen names.
MAX_FILENAME_LENGTH = 120

MAX_EXTENSION_LENGTH = 10

DISALLOWED_CHARS = frozenset('[]<>:"/?*^\\|')

WINDOWS_DEVICE_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{n}" for n in range(1, 10)]
    + [f"LPT{n}" for n in range(1, 10)]
)

NONSYNCABLE_FILENAMES = frozenset(["thumbs.db", ".ds_store"])


def _disallowed_char(char: str) -> bool:
    """True if character may cause problems on one or more platforms."""
    code = ord(char)
    if char in DISALLOWED_CHARS or code < 0x20 or code == 0x7F:
        return True
    # lone surrogates (surrogateescape) can't be encoded to UTF-8
    return 0xD800 <= code <= 0xDFFF


def _escape_device_name(fname: str) -> str:
    head, dot, rest = fname.partition(".")
    if head.upper() in WINDOWS_DEVICE_NAMES:
        return f"{head}_{dot}{rest}"
    return fname


def normalize_filename(fname: str) -> str:
    """Adjust a filename into the format stored on disk.

    - Problem characters are removed.
    - The filename is normalized to NFC. Removal happens first, as dropping
      a control char can leave combining marks that compose differently.
    - Windows device names like CON and PRN have '_' appended.
    - The filename is limited to ``MAX_FILENAME_LENGTH`` bytes.

    Never raises; the result of normalizing an already normalized name is
    the same name.
    """
    output = fname

    if any(_disallowed_char(c) for c in output):
        output = "".join(c for c in output if not _disallowed_char(c))

    if not unicodedata.is_normalized("NFC", output):
        output = unicodedata.normalize("NFC", output)

    output = _escape_device_name(output)

    return truncate_filename(output, MAX_FILENAME_LENGTH)


def truncate_to_char_boundary(text: str, max_bytes: int) -> str:
    """Trim ``text`` to at most ``max_bytes`` UTF-8 bytes without splitting a character."""
    encoded = text.encode("utf-8")
    if max_bytes >= len(encoded):
        return text
    # step back over continuation bytes (0b10xxxxxx)
    while max_bytes > 0 and encoded[max_bytes] & 0xC0 == 0x80:
        max_bytes -= 1
    return encoded[:max_bytes].decode("utf-8")


def split_and_truncate_filename(fname: str, max_bytes: int) -> tuple[str, str]:
    """Split a filename into stem and extension, trimming both to fit ``max_bytes``.

    The extension is capped first, so the stem budget is always positive.
    One byte is reserved for the separating dot.
    """
    if max_bytes <= MAX_EXTENSION_LENGTH:
        raise ValueError(f"max_bytes must be greater than {MAX_EXTENSION_LENGTH}")

    stem, dot, ext = fname.rpartition(".")
    if not dot:
        stem, ext = fname, ""

    ext = truncate_to_char_boundary(ext, MAX_EXTENSION_LENGTH)
    stem_len = max_bytes - len(ext.encode("utf-8")) - 1
    stem = truncate_to_char_boundary(stem, stem_len)
    return stem, ext


def join_filename(stem: str, ext: str) -> str:
    return f"{stem}.{ext}" if ext else stem


def truncate_filename(fname: str, max_bytes: int) -> str:
    """If the filename is longer than ``max_bytes``, truncate it."""
    if len(fname.encode("utf-8")) <= max_bytes:
        return fname
    stem, ext = split_and_truncate_filename(fname, max_bytes)
    return join_filename(stem, ext)


def is_nonsyncable_filename(fname: str) -> bool:
    """True for OS junk files that should never be synced."""
    return fname.lower() in NONSYNCABLE_FILENAMES
