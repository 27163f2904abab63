"""
Process lock - only one notetune instance may run on a host.
"""

import fcntl
import logging
import os
from pathlib import Path
from typing import Optional

from .errors import LockError


logger = logging.getLogger(__name__)


class ProcessLock:
    """Advisory lock file held for the lifetime of one invocation."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._fd: Optional[int] = None

    def acquire(self) -> None:
        """
        Take the lock without waiting.

        Raises:
            LockError: another instance holds the lock
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o644)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            os.close(fd)
            raise LockError(
                f"notetune is already running (lock file '{self.path}' is held): {e}"
            ) from e
        os.ftruncate(fd, 0)
        os.write(fd, f"{os.getpid()}\n".encode())
        self._fd = fd
        logger.debug("acquired lock '%s'", self.path)

    def release(self) -> None:
        if self._fd is None:
            return
        try:
            fcntl.flock(self._fd, fcntl.LOCK_UN)
        finally:
            os.close(self._fd)
            self._fd = None
        remove_lock(self.path)

    def __enter__(self) -> "ProcessLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


def remove_lock(path: Path) -> None:
    """Remove a (stale) lock file."""
    try:
        Path(path).unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.error("Unable to remove lock file '%s': %s", path, e)
