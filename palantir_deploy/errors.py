"""Exceptions raised during deployment."""

from typing import Optional

from .models.deployment import DeploymentStep


class DeployError(RuntimeError):
    """Base class for deployment errors."""


class PrivilegeError(DeployError):
    """The process does not hold, and cannot acquire, root privilege."""


class LockError(DeployError):
    """Another deployment holds the lock."""


class PreconditionError(DeployError):
    """A build input is missing; nothing has been changed."""


class StepFailedError(DeployError):
    """A deployment step failed and the run was halted."""

    def __init__(self, step: DeploymentStep, message: Optional[str] = None):
        self.step = step
        self.message = message or f"{step.label} failed"
        super().__init__(f"{step.label}: {self.message}")
