"""Checksum-gated file writes for generated configuration."""
from __future__ import annotations

import hashlib
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

FILE_MODE = 0o644

PathLike = Union[str, os.PathLike]


def byte_md5(data: bytes) -> bytes:
    return hashlib.md5(data).digest()


def file_md5(path: PathLike) -> Optional[bytes]:
    """MD5 of the file content, or None when it cannot be read."""
    h = hashlib.md5()
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(65536), b""):
                h.update(chunk)
    except OSError:
        return None
    return h.digest()


def file_write_with_checksum(path: PathLike, data: bytes, checksum: bool) -> bool:
    """Write ``data`` to ``path`` unless checksum mode finds it unchanged.

    Returns True when the write was skipped because the existing file has
    the same content. Parent directories are created as needed and the file
    always ends up with FILE_MODE. Raises OSError on failure.
    """
    if checksum and file_md5(path) == byte_md5(data):
        return True

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(tmp, FILE_MODE)
        os.replace(tmp, target)
    except OSError:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    return False
