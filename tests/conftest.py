"""Shared fixtures and fakes for the deployment tests."""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from palantir_deploy.core.file_installer import FileInstaller
from palantir_deploy.models.deployment import DeployConfig, ServiceStatus
from palantir_deploy.utils.command_runner import CommandResult


class FakeRunner:
    """CommandRunner stand-in that records commands and replays scripted results."""

    def __init__(self):
        self.commands: List[List[str]] = []
        self.envs: List[Optional[Dict[str, str]]] = []
        self._responses: List[Tuple[Tuple[str, ...], CommandResult]] = []

    def respond(self, prefix, returncode=0, stdout="", stderr=""):
        self._responses.append((tuple(prefix), CommandResult(returncode, stdout, stderr)))

    def run(self, cmd, env=None):
        self.commands.append(list(cmd))
        self.envs.append(env)
        for prefix, result in self._responses:
            if tuple(cmd[:len(prefix)]) == prefix:
                return result
        return CommandResult(0, "", "")


class FakeServiceManager:
    """In-memory systemd: tracks active/enabled state and records every call."""

    def __init__(self, active=False, enabled=False, loaded=True):
        self.active = active
        self.enabled = enabled
        self.loaded = loaded
        self.calls: List[str] = []
        self.failures: Dict[str, str] = {}
        self.start_leaves_inactive = False

    def fail(self, action, message):
        self.failures[action] = message

    def _outcome(self, action):
        self.calls.append(action)
        if action in self.failures:
            return False, self.failures[action]
        return True, None

    def get_service_status(self, service_name):
        return ServiceStatus.ACTIVE if self.active else ServiceStatus.INACTIVE

    def is_enabled(self, service_name):
        return self.enabled

    def stop_service(self, service_name):
        success, error = self._outcome("stop")
        if success:
            self.active = False
        return success, error

    def daemon_reload(self):
        success, error = self._outcome("daemon-reload")
        if success:
            self.loaded = True
        return success, error

    def enable_service(self, service_name, now=True):
        success, error = self._outcome("enable")
        if success:
            self.enabled = True
            if now and not self.start_leaves_inactive:
                self.active = True
        return success, error

    def start_service(self, service_name):
        success, error = self._outcome("start")
        if success and not self.start_leaves_inactive:
            self.active = True
        return success, error


class FakePackageManager:
    def __init__(self, installed=(), error=None):
        self.installed = set(installed)
        self.error = error
        self.calls: List[List[str]] = []

    def ensure_installed(self, packages):
        self.calls.append(list(packages))
        if self.error:
            return False, self.error
        self.installed.update(packages)
        return True, None


class FailingInstaller(FileInstaller):
    """FileInstaller that fails for one destination path."""

    def __init__(self, fail_for: Path, message="Permission denied"):
        super().__init__(keep_backup=False)
        self.fail_for = Path(fail_for)
        self.message = message
        self.installed: List[Path] = []

    def install(self, source, destination, mode):
        if Path(destination) == self.fail_for:
            return False, f"Could not install {source} to {destination}: {self.message}"
        self.installed.append(Path(destination))
        return super().install(source, destination, mode)


class RecordingInstaller(FileInstaller):
    def __init__(self):
        super().__init__(keep_backup=False)
        self.installed: List[Path] = []

    def install(self, source, destination, mode):
        self.installed.append(Path(destination))
        return super().install(source, destination, mode)


def write_build(source_root: Path, version: str):
    """Write a fake build output and unit file tagged with a version."""
    artifact = source_root / "target" / "release" / "palantir_collector"
    artifact.parent.mkdir(parents=True, exist_ok=True)
    artifact.write_bytes(f"#!/bin/sh\n# collector {version}\n".encode())
    unit = source_root / "palantir-collector.service"
    unit.write_text(f"[Service]\nExecStart=/usr/local/bin/palantir-collector\n# {version}\n")
    return artifact, unit


@pytest.fixture
def source_root(tmp_path):
    root = tmp_path / "collector"
    root.mkdir()
    write_build(root, "v1")
    return root


@pytest.fixture
def config(tmp_path, source_root):
    return DeployConfig(
        source_root=str(source_root),
        artifact_path=str(tmp_path / "host" / "usr" / "local" / "bin" / "palantir-collector"),
        unit_dir=str(tmp_path / "host" / "etc" / "systemd" / "system"),
        lock_file=str(tmp_path / "run" / "palantir-deploy.lock"),
        keep_backup=False,
    )


@pytest.fixture
def runner():
    return FakeRunner()
