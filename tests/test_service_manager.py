"""Tests for the systemctl wrapper."""

from palantir_deploy.core.service_manager import ServiceManager
from palantir_deploy.models.deployment import ServiceStatus

SHOW = ["systemctl", "show", "palantir-collector", "--property=ActiveState", "--value"]


class TestServiceStatus:

    def test_parses_active_state(self, runner):
        runner.respond(SHOW, stdout="active\n")

        assert ServiceManager(runner).get_service_status("palantir-collector") == ServiceStatus.ACTIVE
        assert runner.commands == [SHOW]

    def test_unknown_value(self, runner):
        runner.respond(SHOW, stdout="maintenance\n")

        assert ServiceManager(runner).get_service_status("palantir-collector") == ServiceStatus.UNKNOWN

    def test_failed_query_is_unknown(self, runner):
        runner.respond(SHOW, returncode=1, stderr="Failed to connect to bus")

        assert ServiceManager(runner).get_service_status("palantir-collector") == ServiceStatus.UNKNOWN

    def test_is_enabled(self, runner):
        runner.respond(["systemctl", "is-enabled"], stdout="enabled\n")

        assert ServiceManager(runner).is_enabled("palantir-collector")

    def test_disabled(self, runner):
        runner.respond(["systemctl", "is-enabled"], returncode=1, stdout="disabled\n")

        assert not ServiceManager(runner).is_enabled("palantir-collector")


class TestStop:

    def test_inactive_service_is_not_stopped(self, runner):
        runner.respond(SHOW, stdout="inactive\n")

        success, error = ServiceManager(runner).stop_service("palantir-collector")

        assert success and error is None
        assert ["systemctl", "stop", "palantir-collector"] not in runner.commands

    def test_active_service_is_stopped(self, runner):
        runner.respond(SHOW, stdout="active\n")

        success, _ = ServiceManager(runner).stop_service("palantir-collector")

        assert success
        assert runner.commands[-1] == ["systemctl", "stop", "palantir-collector"]

    def test_unit_not_loaded_is_not_an_error(self, runner):
        runner.respond(SHOW, stdout="failed\n")
        runner.respond(["systemctl", "stop"], returncode=5,
                       stderr="Failed to stop palantir-collector.service: Unit palantir-collector.service not loaded.\n")

        success, error = ServiceManager(runner).stop_service("palantir-collector")

        assert success and error is None

    def test_other_stop_failure_is_reported(self, runner):
        runner.respond(SHOW, stdout="active\n")
        runner.respond(["systemctl", "stop"], returncode=1, stderr="Access denied\n")

        success, error = ServiceManager(runner).stop_service("palantir-collector")

        assert not success
        assert error == "Access denied"


class TestActions:

    def test_enable_now(self, runner):
        success, _ = ServiceManager(runner).enable_service("palantir-collector")

        assert success
        assert runner.commands == [["systemctl", "enable", "--now", "palantir-collector"]]

    def test_enable_without_start(self, runner):
        ServiceManager(runner).enable_service("palantir-collector", now=False)

        assert runner.commands == [["systemctl", "enable", "palantir-collector"]]

    def test_start(self, runner):
        ServiceManager(runner).start_service("palantir-collector")

        assert runner.commands == [["systemctl", "start", "palantir-collector"]]

    def test_daemon_reload(self, runner):
        success, error = ServiceManager(runner).daemon_reload()

        assert success and error is None
        assert runner.commands == [["systemctl", "daemon-reload"]]

    def test_start_failure_uses_stderr(self, runner):
        runner.respond(["systemctl", "start"], returncode=1,
                       stderr="Job for palantir-collector.service failed because the control process exited with error code.\n")

        success, error = ServiceManager(runner).start_service("palantir-collector")

        assert not success
        assert error.startswith("Job for palantir-collector.service failed")

    def test_failure_without_output_has_fallback_message(self, runner):
        runner.respond(["systemctl", "daemon-reload"], returncode=1)

        success, error = ServiceManager(runner).daemon_reload()

        assert not success
        assert error == "Failed to daemon-reload systemd"
