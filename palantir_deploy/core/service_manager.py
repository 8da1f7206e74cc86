"""Service manager for interacting with systemd via systemctl."""

import logging
from typing import Optional, Tuple

from ..models.deployment import ServiceStatus
from ..utils.command_runner import CommandRunner

logger = logging.getLogger(__name__)

# systemctl reports these when asked to stop a unit it has never loaded
NOT_LOADED_MARKERS = ("not loaded", "not found", "does not exist")


class ServiceManager:
    """Manages a systemd system service via systemctl commands."""

    def __init__(self, runner: Optional[CommandRunner] = None):
        """Initialize the service manager.

        Args:
            runner: CommandRunner used for systemctl calls
        """
        self.runner = runner or CommandRunner()

    def get_service_status(self, service_name: str) -> ServiceStatus:
        """Get the current status of a service.

        Args:
            service_name: Name of the systemd service

        Returns:
            ServiceStatus enum value
        """
        result = self.runner.run(["systemctl", "show", service_name, "--property=ActiveState", "--value"])
        if not result.success:
            logger.error(f"Failed to get status for {service_name}: {result.stderr.strip()}")
            return ServiceStatus.UNKNOWN

        return ServiceStatus.from_string(result.stdout)

    def is_enabled(self, service_name: str) -> bool:
        """Check whether a service starts on boot.

        Args:
            service_name: Name of the systemd service

        Returns:
            True if systemctl reports the unit as enabled
        """
        result = self.runner.run(["systemctl", "is-enabled", service_name])
        return result.success and result.stdout.strip() in ("enabled", "enabled-runtime")

    def stop_service(self, service_name: str) -> Tuple[bool, Optional[str]]:
        """Stop a systemd service if it is running.

        Stopping a service that is not running, or whose unit is not loaded
        yet, succeeds without doing anything.

        Args:
            service_name: Name of the systemd service

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        if self.get_service_status(service_name) == ServiceStatus.INACTIVE:
            logger.info(f"{service_name} is not running, nothing to stop")
            return True, None

        success, error_msg = self._execute_systemctl_action("stop", service_name)
        if not success and error_msg and any(m in error_msg.lower() for m in NOT_LOADED_MARKERS):
            logger.info(f"{service_name} is not loaded, nothing to stop")
            return True, None

        return success, error_msg

    def start_service(self, service_name: str) -> Tuple[bool, Optional[str]]:
        """Start a systemd service.

        Args:
            service_name: Name of the systemd service

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        return self._execute_systemctl_action("start", service_name)

    def enable_service(self, service_name: str, now: bool = True) -> Tuple[bool, Optional[str]]:
        """Enable a systemd service to start on boot.

        Args:
            service_name: Name of the systemd service
            now: Also start the service immediately

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        if now:
            return self._execute_systemctl_action("enable", "--now", service_name)
        return self._execute_systemctl_action("enable", service_name)

    def daemon_reload(self) -> Tuple[bool, Optional[str]]:
        """Make systemd re-read unit definitions from disk.

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        return self._execute_systemctl_action("daemon-reload")

    def _execute_systemctl_action(self, action: str, *args: str) -> Tuple[bool, Optional[str]]:
        """Execute a systemctl action (start, stop, enable, daemon-reload).

        Args:
            action: Systemctl action
            *args: Flags and unit names following the action

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        target = " ".join(a for a in args if not a.startswith("-")) or "systemd"
        result = self.runner.run(["systemctl", action, *args])

        if result.success:
            logger.info(f"systemctl {action} {target} succeeded")
            return True, None

        error_msg = result.error_message(f"Failed to {action} {target}")
        logger.error(f"Failed to {action} {target}: {error_msg}")
        return False, error_msg
