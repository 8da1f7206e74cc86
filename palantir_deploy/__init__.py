"""palantir-deploy - Idempotent deployment of the palantir-collector service."""

__version__ = "1.0.0"
