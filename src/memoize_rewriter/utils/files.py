"""File helpers for persisting rewritten source units."""

import contextlib
import logging
import os
import stat
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def atomic_write_text(file_path: Path, text: str) -> None:
    """Replace ``file_path`` with ``text`` atomically, keeping its permissions.

    The text is written to a temporary file in the same directory, flushed
    and fsynced, then moved over the target with ``os.replace``.

    Raises:
        OSError: If the file cannot be written or replaced.
    """
    file_path = Path(file_path)
    original_mode = None
    if file_path.exists():
        original_mode = os.stat(file_path).st_mode

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            newline="",
            dir=file_path.parent,
            prefix=f".{file_path.name}.tmp",
            delete=False,
        ) as tmp:
            temp_path = Path(tmp.name)
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())

        if original_mode is not None:
            os.chmod(temp_path, stat.S_IMODE(original_mode))

        os.replace(temp_path, file_path)
        temp_path = None

        # Best-effort parent dir fsync
        try:
            dir_fd = os.open(file_path.parent, os.O_RDONLY)
            try:
                os.fsync(dir_fd)
            finally:
                os.close(dir_fd)
        except OSError:
            logger.debug("Directory fsync failed for %s", file_path.parent, exc_info=True)
    finally:
        if temp_path and temp_path.exists():
            with contextlib.suppress(OSError):
                temp_path.unlink()
