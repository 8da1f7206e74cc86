"""Exclusive lock preventing concurrent deployments."""

import fcntl
import logging
import os
from pathlib import Path
from typing import Optional, Union

from ..errors import LockError

logger = logging.getLogger(__name__)


class DeployLock:
    """Non-blocking flock on a lock file, held for the whole deployment."""

    def __init__(self, lock_file: Union[str, Path]):
        self.lock_file = Path(lock_file)
        self._fd: Optional[int] = None

    def acquire(self):
        """Take the lock or raise LockError if another deployment holds it."""
        try:
            self.lock_file.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.lock_file, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as e:
            raise LockError(f"Cannot open lock file {self.lock_file}: {e}") from e

        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            os.close(fd)
            raise LockError(f"Another deployment is in progress (lock held on {self.lock_file})")

        os.ftruncate(fd, 0)
        os.write(fd, f"{os.getpid()}\n".encode())
        self._fd = fd
        logger.debug(f"Acquired deployment lock {self.lock_file}")

    def release(self):
        if self._fd is None:
            return
        fcntl.flock(self._fd, fcntl.LOCK_UN)
        os.close(self._fd)
        self._fd = None
        logger.debug(f"Released deployment lock {self.lock_file}")

    @property
    def held(self) -> bool:
        return self._fd is not None

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
