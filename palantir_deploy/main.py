#!/usr/bin/env python3
"""Entry point for palantir-deploy."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .core.config_manager import ConfigManager
from .core.orchestrator import DeploymentOrchestrator
from .core.service_manager import ServiceManager
from .errors import LockError, PreconditionError, PrivilegeError
from .models.deployment import DeployConfig
from .utils.constants import APP_NAME, EXIT_OK, EXIT_SETUP_FAILED, EXIT_STEP_FAILED, LOG_FILE
from .utils.deploy_lock import DeployLock
from .utils.privilege_helper import PrivilegeHelper


def setup_logging(verbose: bool = False):
    """Set up application logging.

    Args:
        verbose: Log command details at DEBUG level
    """
    handlers = [logging.StreamHandler()]
    try:
        handlers.append(logging.FileHandler(LOG_FILE))
    except OSError:
        # Not writable before privilege is acquired
        pass

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description=f"{APP_NAME} - Install and (re)start the palantir-collector systemd service"
    )
    parser.add_argument('command', nargs='?', default='deploy', choices=['deploy', 'status'],
                        help='deploy (default) or show the current service status')
    parser.add_argument('--config', metavar='PATH',
                        help='Deployment config file (YAML)')
    parser.add_argument('--source-root', metavar='DIR',
                        help='Directory holding the build output and unit file')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log every command that is run')
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    return parser


def load_config(args) -> Optional[DeployConfig]:
    """Load the deployment config named on the command line.

    Returns:
        DeployConfig, or None if an existing config file could not be loaded
    """
    config_manager = ConfigManager(args.config)
    loaded = config_manager.load_config()
    # Only a missing default file falls back to the built-in defaults
    if not loaded and (args.config or config_manager.config_file.exists()):
        print(f"{APP_NAME}: could not load config file {config_manager.config_file}", file=sys.stderr)
        return None

    config = config_manager.config
    if args.source_root:
        config.source_root = args.source_root
    return config


def show_status(config: DeployConfig) -> int:
    """Print the observed state of the managed service."""
    service_manager = ServiceManager()
    status = service_manager.get_service_status(config.service_name)
    enabled = service_manager.is_enabled(config.service_name)

    print(f"service:  {config.unit_name}")
    print(f"active:   {status.value}")
    print(f"enabled:  {'yes' if enabled else 'no'}")
    for label, path in (("artifact", config.artifact_path), ("unit", config.unit_path)):
        present = "present" if Path(path).exists() else "missing"
        print(f"{label + ':':<9} {path} ({present})")
    return EXIT_OK


def run_deploy(config: DeployConfig, argv: List[str]) -> int:
    """Deploy the managed service and report the outcome.

    Returns:
        Process exit code
    """
    logger = logging.getLogger(__name__)
    orchestrator = DeploymentOrchestrator(config)

    try:
        orchestrator.check_preconditions()
        PrivilegeHelper.ensure_elevated(config.escalation, argv)

        with DeployLock(config.lock_file):
            result = orchestrator.deploy()

    except (PreconditionError, PrivilegeError, LockError) as e:
        logger.error(str(e))
        print(f"{APP_NAME}: {e}", file=sys.stderr)
        return EXIT_SETUP_FAILED

    if result.success:
        print(result.describe())
        return EXIT_OK

    print(f"{APP_NAME}: {result.describe()}", file=sys.stderr)
    return EXIT_SETUP_FAILED if result.is_precondition_failure else EXIT_STEP_FAILED


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    argv = list(sys.argv[1:] if argv is None else argv)
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    config = load_config(args)
    if config is None:
        return EXIT_SETUP_FAILED

    if args.command == 'status':
        return show_status(config)

    logger.info(f"Starting {APP_NAME} {__version__}")
    return run_deploy(config, argv)


if __name__ == "__main__":
    sys.exit(main())
