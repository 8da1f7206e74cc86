"""Core functionality for deploying the managed service."""

from .service_manager import ServiceManager
from .package_manager import PackageManager
from .file_installer import FileInstaller
from .config_manager import ConfigManager
from .orchestrator import DeploymentOrchestrator

__all__ = ["ServiceManager", "PackageManager", "FileInstaller", "ConfigManager", "DeploymentOrchestrator"]
