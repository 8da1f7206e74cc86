"""Thin wrapper around subprocess for external commands."""

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result of an external command.

    Attributes:
        returncode: Process exit status, -1 if it never ran or timed out
        stdout: Captured standard output
        stderr: Captured standard error, or the reason the command did not run
    """

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def error_message(self, fallback: str) -> str:
        """Get the most useful error text for a failed command."""
        return self.stderr.strip() or self.stdout.strip() or fallback


class CommandRunner:
    """Runs commands and never raises for a failing command."""

    def __init__(self, timeout: Optional[float] = None):
        """Initialize the runner.

        Args:
            timeout: Seconds before a command is killed, None to wait forever
        """
        self.timeout = timeout

    def run(self, cmd: List[str], env: Optional[Dict[str, str]] = None) -> CommandResult:
        """Run a command and capture its output.

        Args:
            cmd: Command and arguments
            env: Extra environment variables merged over the current environment

        Returns:
            CommandResult for the command
        """
        logger.debug(f"Running: {' '.join(cmd)}")

        full_env = None
        if env:
            full_env = dict(os.environ)
            full_env.update(env)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=full_env
            )

        except subprocess.TimeoutExpired:
            error_msg = f"Timeout after {self.timeout}s running {cmd[0]}"
            logger.error(error_msg)
            return CommandResult(-1, "", error_msg)

        except FileNotFoundError:
            error_msg = f"Command not found: {cmd[0]}"
            logger.error(error_msg)
            return CommandResult(-1, "", error_msg)

        except OSError as e:
            error_msg = f"Could not run {cmd[0]}: {e}"
            logger.error(error_msg)
            return CommandResult(-1, "", error_msg)

        if result.returncode != 0:
            logger.debug(f"{cmd[0]} exited with {result.returncode}: {result.stderr.strip()}")

        return CommandResult(result.returncode, result.stdout or "", result.stderr or "")
