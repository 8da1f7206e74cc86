"""Data models for service deployment."""

from .deployment import DeployConfig, DeploymentResult, DeploymentState, DeploymentStep, ServiceStatus

__all__ = ["DeployConfig", "DeploymentResult", "DeploymentState", "DeploymentStep", "ServiceStatus"]
