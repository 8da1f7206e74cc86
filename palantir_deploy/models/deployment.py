"""Data models for service deployment."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..utils.constants import (
    DEFAULT_ARTIFACT_PATH,
    DEFAULT_ARTIFACT_SOURCE,
    DEFAULT_LOCK_FILE,
    DEFAULT_PACKAGES,
    DEFAULT_SERVICE_NAME,
    DEFAULT_UNIT_DIR,
    DEFAULT_UNIT_SOURCE,
    ESCALATION_METHODS,
    PACKAGE_MANAGERS,
)


# DeployConfig fields that hold names and paths
STRING_FIELDS = (
    "service_name",
    "source_root",
    "artifact_source",
    "artifact_path",
    "unit_source",
    "unit_dir",
    "package_manager",
    "lock_file",
    "escalation",
)


class ServiceStatus(Enum):
    """Enumeration of possible service states."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    FAILED = "failed"
    ACTIVATING = "activating"
    DEACTIVATING = "deactivating"
    RELOADING = "reloading"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, status_str: str) -> 'ServiceStatus':
        """Convert a string to ServiceStatus enum.

        Args:
            status_str: Status string from systemctl

        Returns:
            ServiceStatus enum value
        """
        try:
            return cls(status_str.strip().lower())
        except ValueError:
            return cls.UNKNOWN


class DeploymentState(Enum):
    """Managed service state as observed by the orchestrator."""

    UNKNOWN = "unknown"
    STOPPED = "stopped"
    ARTIFACT_REPLACED = "artifact_replaced"
    UNIT_REPLACED = "unit_replaced"
    RELOADED = "reloaded"
    ENABLED = "enabled"
    RUNNING = "running"


class DeploymentStep(Enum):
    """Named deployment steps, in execution order."""

    PRECONDITIONS = "check preconditions"
    PROVISION = "provision dependencies"
    QUIESCE = "quiesce"
    REPLACE_ARTIFACT = "replace artifact"
    REPLACE_UNIT = "replace unit definition"
    RELOAD = "reload manager state"
    ENABLE = "enable and start"
    START = "explicit start"
    VERIFY = "verify"

    @property
    def label(self) -> str:
        return self.value


@dataclass
class DeployConfig:
    """Configuration for one managed service deployment.

    Attributes:
        service_name: Systemd unit name without the '.service' suffix
        source_root: Directory the source paths are resolved against
        artifact_source: Built executable, relative to source_root
        artifact_path: Where the service manager expects the executable
        unit_source: Unit definition file, relative to source_root
        unit_dir: Service manager configuration directory
        packages: OS packages required at runtime
        package_manager: Either 'apt' or 'dnf'
        update_package_index: Refresh the package index before installing
        keep_backup: Keep '<path>.bak' copies of replaced files
        command_timeout: Per-command timeout in seconds, None for no timeout
        lock_file: Lock file guarding against concurrent deployments
        escalation: How to gain root: 'sudo', 'pkexec' or 'none'
    """

    service_name: str = DEFAULT_SERVICE_NAME
    source_root: str = "."
    artifact_source: str = DEFAULT_ARTIFACT_SOURCE
    artifact_path: str = DEFAULT_ARTIFACT_PATH
    unit_source: str = DEFAULT_UNIT_SOURCE
    unit_dir: str = DEFAULT_UNIT_DIR
    packages: List[str] = field(default_factory=lambda: list(DEFAULT_PACKAGES))
    package_manager: str = "apt"
    update_package_index: bool = True
    keep_backup: bool = True
    command_timeout: Optional[float] = None
    lock_file: str = DEFAULT_LOCK_FILE
    escalation: str = "sudo"

    def __post_init__(self):
        """Validate deployment configuration after initialization."""
        for name in STRING_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ValueError(f"{name} must be a string, got {type(value).__name__}")

        for name in ("update_package_index", "keep_backup"):
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"{name} must be true or false")

        if not self.service_name:
            raise ValueError("Service name cannot be empty")

        if self.service_name.endswith(".service"):
            self.service_name = self.service_name[:-len(".service")]

        if self.package_manager not in PACKAGE_MANAGERS:
            raise ValueError(
                f"Invalid package_manager: {self.package_manager}. "
                f"Must be one of {', '.join(PACKAGE_MANAGERS)}"
            )

        if self.escalation not in ESCALATION_METHODS:
            raise ValueError(
                f"Invalid escalation: {self.escalation}. "
                f"Must be one of {', '.join(ESCALATION_METHODS)}"
            )

        if not isinstance(self.packages, list) or not all(isinstance(p, str) for p in self.packages):
            raise ValueError("packages must be a list of package names")

        if self.command_timeout is not None:
            if isinstance(self.command_timeout, bool) or not isinstance(self.command_timeout, (int, float)):
                raise ValueError("command_timeout must be a number or null")
            if self.command_timeout <= 0:
                raise ValueError("command_timeout must be positive or null")

    @property
    def unit_name(self) -> str:
        return f"{self.service_name}.service"

    @property
    def artifact_source_path(self) -> Path:
        return Path(self.source_root) / self.artifact_source

    @property
    def unit_source_path(self) -> Path:
        return Path(self.source_root) / self.unit_source

    @property
    def unit_path(self) -> Path:
        """Installed unit file, keyed by the service name."""
        return Path(self.unit_dir) / self.unit_name

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization.

        Returns:
            Dictionary representation of the deployment config
        """
        return {
            "service_name": self.service_name,
            "source_root": self.source_root,
            "artifact_source": self.artifact_source,
            "artifact_path": self.artifact_path,
            "unit_source": self.unit_source,
            "unit_dir": self.unit_dir,
            "packages": list(self.packages),
            "package_manager": self.package_manager,
            "update_package_index": self.update_package_index,
            "keep_backup": self.keep_backup,
            "command_timeout": self.command_timeout,
            "lock_file": self.lock_file,
            "escalation": self.escalation,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'DeployConfig':
        """Create DeployConfig from dictionary.

        Unknown keys are ignored, missing keys take their defaults.

        Args:
            data: Dictionary with deployment configuration

        Returns:
            DeployConfig instance
        """
        defaults = cls()
        return cls(
            service_name=data.get("service_name", defaults.service_name),
            source_root=data.get("source_root", defaults.source_root),
            artifact_source=data.get("artifact_source", defaults.artifact_source),
            artifact_path=data.get("artifact_path", defaults.artifact_path),
            unit_source=data.get("unit_source", defaults.unit_source),
            unit_dir=data.get("unit_dir", defaults.unit_dir),
            packages=data.get("packages", defaults.packages),
            package_manager=data.get("package_manager", defaults.package_manager),
            update_package_index=data.get("update_package_index", defaults.update_package_index),
            keep_backup=data.get("keep_backup", defaults.keep_backup),
            command_timeout=data.get("command_timeout", defaults.command_timeout),
            lock_file=data.get("lock_file", defaults.lock_file),
            escalation=data.get("escalation", defaults.escalation),
        )


@dataclass
class DeploymentResult:
    """Outcome of a single deploy() run.

    Attributes:
        success: True when the service reached RUNNING and verified
        state: Last state reached
        failed_step: Step that failed, None on success
        error: Failure message, None on success
        completed_steps: Steps that finished successfully, in order
        service_active: ActiveState observed during verification
        service_enabled: Whether the unit reported as enabled
    """

    success: bool
    state: DeploymentState = DeploymentState.UNKNOWN
    failed_step: Optional[DeploymentStep] = None
    error: Optional[str] = None
    completed_steps: List[DeploymentStep] = field(default_factory=list)
    service_active: ServiceStatus = ServiceStatus.UNKNOWN
    service_enabled: Optional[bool] = None

    @property
    def is_precondition_failure(self) -> bool:
        return self.failed_step is DeploymentStep.PRECONDITIONS

    def describe(self) -> str:
        """Get the one-line diagnostic for this result.

        Returns:
            Human-readable summary (e.g., 'deployment failed at step "quiesce": ...')
        """
        if self.success:
            return f"deployment succeeded: service is {self.state.value}"
        step = self.failed_step.label if self.failed_step else "unknown"
        return f'deployment failed at step "{step}" (state {self.state.value}): {self.error}'
