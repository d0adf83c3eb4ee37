"""Atomic file writes for the key file and the secrets file."""

import os
import tempfile
from pathlib import Path


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True, mode=0o700)
    return path


def atomic_write_bytes(path: Path, data: bytes, mode: int = 0o600, no_clobber: bool = False) -> None:
    """
    Write bytes atomically: temp file in the same directory, fsync, rename.

    A crash mid-write leaves either the old file or the new one, never a
    truncated mix. The temp file gets `mode` before any data is written.

    With no_clobber=True the temp file is hard-linked into place instead of
    renamed, so an existing `path` raises FileExistsError and is left as is.
    """
    path = Path(path)
    ensure_dir(path.parent)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    tmp_path = Path(tmp)
    try:
        with os.fdopen(fd, "wb") as f:
            os.chmod(tmp, mode)
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        if no_clobber:
            os.link(tmp, path)
        else:
            tmp_path.replace(path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def atomic_write_text(path: Path, text: str, mode: int = 0o600) -> None:
    atomic_write_bytes(path, text.encode("utf-8"), mode=mode)
