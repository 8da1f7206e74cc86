"""Privilege helper for running the whole deployment as root."""

import logging
import os
import shutil
import sys
from typing import List, Optional

from ..errors import PrivilegeError

logger = logging.getLogger(__name__)

# Set in the re-executed child so escalation happens at most once
REEXEC_ENV_VAR = "PALANTIR_DEPLOY_ELEVATED"


class PrivilegeHelper:
    """Acquires root once at startup instead of escalating every command."""

    @staticmethod
    def is_elevated() -> bool:
        """Check if the process runs as root.

        Returns:
            True if the effective user id is 0
        """
        return os.geteuid() == 0

    @staticmethod
    def build_reexec_command(method: str, argv: Optional[List[str]] = None) -> List[str]:
        """Build the command that restarts this program with root privilege.

        Args:
            method: Escalation method, 'sudo' or 'pkexec'
            argv: Arguments to pass through, defaults to sys.argv[1:]

        Returns:
            Command list for os.execvpe
        """
        args = list(sys.argv[1:] if argv is None else argv)
        cmd = [sys.executable, "-m", "palantir_deploy", *args]

        if method == "sudo":
            # --preserve-env keeps the re-exec marker across sudo's env reset
            return ["sudo", f"--preserve-env={REEXEC_ENV_VAR}", *cmd]
        if method == "pkexec":
            # pkexec resets the environment and working directory
            return ["pkexec", "env", f"--chdir={os.getcwd()}", f"{REEXEC_ENV_VAR}=1", *cmd]

        raise PrivilegeError(f"Unsupported escalation method: {method}")

    @staticmethod
    def ensure_elevated(method: str, argv: Optional[List[str]] = None):
        """Make sure the process runs as root, re-executing once if needed.

        Returns normally only when already root. Otherwise the process image is
        replaced, or PrivilegeError is raised before anything is changed.

        Args:
            method: Escalation method: 'sudo', 'pkexec' or 'none'
            argv: Arguments to pass through to the elevated process
        """
        if PrivilegeHelper.is_elevated():
            return

        user = PrivilegeHelper.get_current_username()

        if os.environ.get(REEXEC_ENV_VAR):
            raise PrivilegeError(f"Escalation via {method} did not yield root privilege (running as {user})")

        if method == "none":
            raise PrivilegeError(f"Deployment requires root privilege; running as {user}")

        if shutil.which(method) is None:
            raise PrivilegeError(f"Deployment requires root privilege and {method} is not available")

        cmd = PrivilegeHelper.build_reexec_command(method, argv)
        env = dict(os.environ)
        env[REEXEC_ENV_VAR] = "1"

        logger.info(f"Re-executing with {method} to acquire root privilege")
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            os.execvpe(cmd[0], cmd, env)
        except OSError as e:
            raise PrivilegeError(f"Could not re-execute with {method}: {e}") from e

    @staticmethod
    def get_current_username() -> str:
        """Get the current username.

        Returns:
            Current username
        """
        return os.getenv("SUDO_USER") or os.getenv("USER") or os.getenv("USERNAME") or "unknown"
