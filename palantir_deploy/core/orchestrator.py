"""Deployment orchestrator for the managed service."""

import logging
from typing import Callable, List, Optional, Tuple

from ..errors import PreconditionError, StepFailedError
from ..models.deployment import (
    DeployConfig,
    DeploymentResult,
    DeploymentState,
    DeploymentStep,
    ServiceStatus,
)
from ..utils.command_runner import CommandRunner
from ..utils.constants import ARTIFACT_MODE, UNIT_MODE
from .file_installer import FileInstaller
from .package_manager import PackageManager
from .service_manager import ServiceManager

logger = logging.getLogger(__name__)


class DeploymentOrchestrator:
    """Runs the deployment steps in order and stops at the first failure.

    The sequence is: provision dependencies, quiesce, replace artifact,
    replace unit definition, reload systemd, enable and start, explicit
    start, verify. Every step is idempotent, so a run interrupted at any
    point can simply be repeated. Nothing is retried or rolled back.
    """

    def __init__(
        self,
        config: DeployConfig,
        service_manager: Optional[ServiceManager] = None,
        package_manager: Optional[PackageManager] = None,
        file_installer: Optional[FileInstaller] = None,
    ):
        """Initialize the orchestrator.

        Args:
            config: Deployment configuration
            service_manager: systemd interface, built from config if omitted
            package_manager: Package interface, built from config if omitted
            file_installer: File replacement helper, built from config if omitted
        """
        self.config = config
        runner = CommandRunner(timeout=config.command_timeout)
        self.service_manager = service_manager or ServiceManager(runner)
        self.package_manager = package_manager or PackageManager(
            config.package_manager, runner, update_index=config.update_package_index
        )
        self.file_installer = file_installer or FileInstaller(keep_backup=config.keep_backup)

        self.state = DeploymentState.UNKNOWN
        self._observed_status = ServiceStatus.UNKNOWN
        self._observed_enabled: Optional[bool] = None

    def check_preconditions(self):
        """Verify both build inputs exist before any privileged mutation.

        Raises:
            PreconditionError: If the artifact or unit definition is missing
        """
        try:
            inputs = (("artifact", self.config.artifact_source_path),
                      ("unit definition", self.config.unit_source_path))
        except TypeError as e:
            raise PreconditionError(f"Invalid build input path: {e}") from e

        missing = []
        for label, path in inputs:
            if not path.is_file():
                missing.append(f"{label} {path}")

        if missing:
            raise PreconditionError(f"Missing build input: {', '.join(missing)}")

    def deploy(self) -> DeploymentResult:
        """Perform a full deployment of the managed service.

        Returns:
            DeploymentResult; success only when the service is running and enabled
        """
        self.state = DeploymentState.UNKNOWN
        self._observed_status = ServiceStatus.UNKNOWN
        self._observed_enabled = None
        completed: List[DeploymentStep] = []

        logger.info(f"Deploying {self.config.unit_name}")

        try:
            self.check_preconditions()
        except PreconditionError as e:
            logger.error(f"Step '{DeploymentStep.PRECONDITIONS.label}' failed: {e}")
            return self._result(completed, DeploymentStep.PRECONDITIONS, str(e))
        completed.append(DeploymentStep.PRECONDITIONS)

        steps = self._steps()
        for index, (step, handler) in enumerate(steps, start=1):
            logger.info(f"[{index}/{len(steps)}] {step.label}")
            try:
                handler()
            except StepFailedError as e:
                logger.error(f"Step '{e.step.label}' failed: {e.message}")
                return self._result(completed, e.step, e.message)
            completed.append(step)

        logger.info(f"{self.config.unit_name} deployed and {self.state.value}")
        return self._result(completed)

    def _steps(self) -> List[Tuple[DeploymentStep, Callable[[], None]]]:
        return [
            (DeploymentStep.PROVISION, self._provision),
            (DeploymentStep.QUIESCE, self._quiesce),
            (DeploymentStep.REPLACE_ARTIFACT, self._replace_artifact),
            (DeploymentStep.REPLACE_UNIT, self._replace_unit),
            (DeploymentStep.RELOAD, self._reload),
            (DeploymentStep.ENABLE, self._enable),
            (DeploymentStep.START, self._start),
            (DeploymentStep.VERIFY, self._verify),
        ]

    def _provision(self):
        if not self.config.packages:
            logger.info("No packages to provision")
            return
        self._check(DeploymentStep.PROVISION, self.package_manager.ensure_installed(self.config.packages))

    def _quiesce(self):
        self._check(DeploymentStep.QUIESCE, self.service_manager.stop_service(self.config.service_name))
        self.state = DeploymentState.STOPPED

    def _replace_artifact(self):
        outcome = self.file_installer.install(
            self.config.artifact_source_path, self.config.artifact_path, ARTIFACT_MODE
        )
        self._check(DeploymentStep.REPLACE_ARTIFACT, outcome)
        self.state = DeploymentState.ARTIFACT_REPLACED

    def _replace_unit(self):
        outcome = self.file_installer.install(
            self.config.unit_source_path, self.config.unit_path, UNIT_MODE
        )
        self._check(DeploymentStep.REPLACE_UNIT, outcome)
        self.state = DeploymentState.UNIT_REPLACED

    def _reload(self):
        self._check(DeploymentStep.RELOAD, self.service_manager.daemon_reload())
        self.state = DeploymentState.RELOADED

    def _enable(self):
        self._check(DeploymentStep.ENABLE, self.service_manager.enable_service(self.config.service_name, now=True))
        self.state = DeploymentState.ENABLED

    def _start(self):
        # Issued even after enable --now so start-time errors surface here
        self._check(DeploymentStep.START, self.service_manager.start_service(self.config.service_name))
        self.state = DeploymentState.RUNNING

    def _verify(self):
        name = self.config.service_name
        self._observed_status = self.service_manager.get_service_status(name)
        self._observed_enabled = self.service_manager.is_enabled(name)

        if self._observed_status != ServiceStatus.ACTIVE:
            self.state = DeploymentState.ENABLED
            raise StepFailedError(
                DeploymentStep.VERIFY, f"{name} is {self._observed_status.value} after start"
            )
        if not self._observed_enabled:
            self.state = DeploymentState.RELOADED
            raise StepFailedError(DeploymentStep.VERIFY, f"{name} is not enabled")

    @staticmethod
    def _check(step: DeploymentStep, outcome: Tuple[bool, Optional[str]]):
        success, error_msg = outcome
        if not success:
            raise StepFailedError(step, error_msg)

    def _result(self, completed: List[DeploymentStep], failed_step: Optional[DeploymentStep] = None,
                error: Optional[str] = None) -> DeploymentResult:
        return DeploymentResult(
            success=failed_step is None,
            state=self.state,
            failed_step=failed_step,
            error=error,
            completed_steps=list(completed),
            service_active=self._observed_status,
            service_enabled=self._observed_enabled,
        )
