"""Package manager for provisioning OS-level dependencies."""

import logging
from typing import List, Optional, Tuple

from ..utils.command_runner import CommandRunner

logger = logging.getLogger(__name__)

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


class PackageManager:
    """Installs missing OS packages through apt or dnf."""

    def __init__(self, package_manager: str = "apt", runner: Optional[CommandRunner] = None,
                 update_index: bool = True):
        """Initialize the package manager.

        Args:
            package_manager: Either 'apt' or 'dnf'
            runner: CommandRunner used for package manager calls
            update_index: Refresh the package index before installing
        """
        self.package_manager = package_manager
        self.runner = runner or CommandRunner()
        self.update_index = update_index

    def is_installed(self, package: str) -> bool:
        """Check if a single package is installed.

        Args:
            package: Exact package name for the distribution

        Returns:
            True if installed, False if not installed or the check failed
        """
        if self.package_manager == "apt":
            result = self.runner.run(["dpkg-query", "-W", "-f=${Status}", package])
            return result.success and "install ok installed" in result.stdout

        result = self.runner.run(["rpm", "-q", package])
        return result.success

    def missing_packages(self, packages: List[str]) -> List[str]:
        """Get the packages that still need installing, in the given order."""
        return [p for p in packages if not self.is_installed(p)]

    def ensure_installed(self, packages: List[str]) -> Tuple[bool, Optional[str]]:
        """Make sure every package is present.

        Already-installed packages are skipped; if nothing is missing no
        package manager command is issued at all.

        Args:
            packages: Package names to provision

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        missing = self.missing_packages(packages)
        if not missing:
            logger.info(f"All {len(packages)} packages already installed")
            return True, None

        logger.info(f"Installing missing packages: {', '.join(missing)}")

        if self.update_index:
            cmd = self._build_update_cmd()
            result = self.runner.run(cmd, env=self._env())
            if not result.success:
                error_msg = result.error_message("Failed to update package index")
                logger.error(f"Package index update failed: {error_msg}")
                return False, error_msg

        result = self.runner.run(self._build_install_cmd(missing), env=self._env())
        if not result.success:
            error_msg = result.error_message(f"Failed to install {', '.join(missing)}")
            logger.error(f"Package install failed: {error_msg}")
            return False, error_msg

        logger.info(f"Installed {len(missing)} packages")
        return True, None

    def _build_update_cmd(self) -> List[str]:
        if self.package_manager == "apt":
            return ["apt-get", "update"]
        return ["dnf", "makecache"]

    def _build_install_cmd(self, packages: List[str]) -> List[str]:
        if self.package_manager == "apt":
            return ["apt-get", "install", "-y"] + packages
        return ["dnf", "install", "-y"] + packages

    def _env(self):
        return APT_ENV if self.package_manager == "apt" else None
