"""Atomic installation of deployment files."""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class FileInstaller:
    """Replaces installed files so a crash never leaves a partial copy behind."""

    def __init__(self, keep_backup: bool = True):
        """Initialize the installer.

        Args:
            keep_backup: Copy the previous file to '<path>.bak' before replacing it
        """
        self.keep_backup = keep_backup

    def install(self, source: PathLike, destination: PathLike, mode: int) -> Tuple[bool, Optional[str]]:
        """Copy source over destination atomically.

        The file is written to a temporary name in the destination directory,
        flushed to disk and then renamed over the destination, so the target
        path always holds either the old or the complete new file.

        Args:
            source: File to install
            destination: Installation path
            mode: Permission bits for the installed file

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        temp_name = None

        try:
            source = Path(source)
            destination = Path(destination)
            destination.parent.mkdir(parents=True, exist_ok=True)

            if self.keep_backup and destination.exists():
                backup = destination.with_name(destination.name + ".bak")
                shutil.copy2(destination, backup)
                logger.debug(f"Created backup at {backup}")

            fd, temp_name = tempfile.mkstemp(prefix=f".{destination.name}.", suffix=".tmp",
                                             dir=destination.parent)
            with os.fdopen(fd, "wb") as dst, open(source, "rb") as src:
                shutil.copyfileobj(src, dst)
                dst.flush()
                os.fsync(dst.fileno())

            os.chmod(temp_name, mode)
            os.replace(temp_name, destination)
            temp_name = None
            self._fsync_dir(destination.parent)

            logger.info(f"Installed {source} -> {destination}")
            return True, None

        except TypeError as e:
            error_msg = f"Could not install {source} to {destination}: invalid path ({e})"
            logger.error(error_msg)
            return False, error_msg

        except OSError as e:
            error_msg = f"Could not install {source} to {destination}: {e.strerror or e}"
            logger.error(error_msg)
            return False, error_msg

        finally:
            if temp_name is not None:
                Path(temp_name).unlink(missing_ok=True)

    @staticmethod
    def _fsync_dir(directory: Path):
        """Persist the rename in the directory entry."""
        try:
            fd = os.open(directory, os.O_RDONLY)
        except OSError:
            return
        try:
            os.fsync(fd)
        except OSError as e:
            logger.debug(f"Could not fsync {directory}: {e}")
        finally:
            os.close(fd)
