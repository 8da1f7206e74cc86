"""Tests for the one-time privilege escalation."""

import os
import sys

import pytest

from palantir_deploy.errors import PrivilegeError
from palantir_deploy.utils import privilege_helper
from palantir_deploy.utils.privilege_helper import REEXEC_ENV_VAR, PrivilegeHelper


class ExecCalled(Exception):
    pass


@pytest.fixture
def non_root(monkeypatch):
    monkeypatch.setattr(privilege_helper.os, "geteuid", lambda: 1000)
    monkeypatch.delenv(REEXEC_ENV_VAR, raising=False)
    monkeypatch.delenv("SUDO_USER", raising=False)
    monkeypatch.setenv("USER", "operator")


@pytest.fixture
def exec_calls(monkeypatch):
    calls = []

    def fake_execvpe(file, args, env):
        calls.append((file, args, env))
        raise ExecCalled()

    monkeypatch.setattr(privilege_helper.os, "execvpe", fake_execvpe)
    return calls


class TestEnsureElevated:

    def test_root_returns_without_exec(self, monkeypatch, exec_calls):
        monkeypatch.setattr(privilege_helper.os, "geteuid", lambda: 0)

        PrivilegeHelper.ensure_elevated("sudo", [])

        assert exec_calls == []

    def test_none_method_fails_fast(self, non_root, exec_calls):
        with pytest.raises(PrivilegeError, match="requires root privilege; running as operator"):
            PrivilegeHelper.ensure_elevated("none", [])
        assert exec_calls == []

    def test_missing_tool(self, non_root, monkeypatch, exec_calls):
        monkeypatch.setattr(privilege_helper.shutil, "which", lambda name: None)

        with pytest.raises(PrivilegeError, match="sudo is not available"):
            PrivilegeHelper.ensure_elevated("sudo", [])

    def test_escalates_only_once(self, non_root, monkeypatch, exec_calls):
        monkeypatch.setenv(REEXEC_ENV_VAR, "1")

        with pytest.raises(PrivilegeError, match="did not yield root"):
            PrivilegeHelper.ensure_elevated("sudo", [])
        assert exec_calls == []

    def test_reexecs_under_sudo(self, non_root, monkeypatch, exec_calls):
        monkeypatch.setattr(privilege_helper.shutil, "which", lambda name: "/usr/bin/sudo")

        with pytest.raises(ExecCalled):
            PrivilegeHelper.ensure_elevated("sudo", ["deploy", "-v"])

        file, args, env = exec_calls[0]
        assert file == "sudo"
        assert args == ["sudo", f"--preserve-env={REEXEC_ENV_VAR}",
                        sys.executable, "-m", "palantir_deploy", "deploy", "-v"]
        assert env[REEXEC_ENV_VAR] == "1"

    def test_exec_failure_becomes_privilege_error(self, non_root, monkeypatch):
        monkeypatch.setattr(privilege_helper.shutil, "which", lambda name: "/usr/bin/sudo")

        def broken_exec(file, args, env):
            raise PermissionError("denied")

        monkeypatch.setattr(privilege_helper.os, "execvpe", broken_exec)

        with pytest.raises(PrivilegeError, match="Could not re-execute"):
            PrivilegeHelper.ensure_elevated("sudo", [])


class TestReexecCommand:

    def test_pkexec_passes_marker_and_directory(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)

        cmd = PrivilegeHelper.build_reexec_command("pkexec", ["status"])

        assert cmd[:4] == ["pkexec", "env", f"--chdir={os.getcwd()}", f"{REEXEC_ENV_VAR}=1"]
        assert cmd[-1] == "status"

    def test_unknown_method(self):
        with pytest.raises(PrivilegeError):
            PrivilegeHelper.build_reexec_command("doas", [])
