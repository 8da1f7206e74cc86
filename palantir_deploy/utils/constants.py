"""Application constants and configuration."""

from pathlib import Path

# Application metadata
APP_NAME = "palantir-deploy"

# Paths
CONFIG_DIR = Path("/etc/palantir-deploy")
CONFIG_FILE = CONFIG_DIR / "config.yaml"
LOG_FILE = Path("/var/log/palantir-deploy.log")

# Managed service defaults
DEFAULT_SERVICE_NAME = "palantir-collector"
DEFAULT_ARTIFACT_SOURCE = "target/release/palantir_collector"
DEFAULT_ARTIFACT_PATH = "/usr/local/bin/palantir-collector"
DEFAULT_UNIT_SOURCE = "palantir-collector.service"
DEFAULT_UNIT_DIR = "/etc/systemd/system"
DEFAULT_PACKAGES = ("libpcap-dev", "tshark")
DEFAULT_LOCK_FILE = "/run/palantir-deploy.lock"

ARTIFACT_MODE = 0o755
UNIT_MODE = 0o644

PACKAGE_MANAGERS = ("apt", "dnf")
ESCALATION_METHODS = ("sudo", "pkexec", "none")

# Exit codes
EXIT_OK = 0
EXIT_STEP_FAILED = 1
EXIT_SETUP_FAILED = 2
