"""
Runner Control

Credential exchange and state reconciliation for GitHub self-hosted runners
and runner groups.
"""

__version__ = "0.1.0"

from runner_control.core.config import ClientConfig, Settings, SigningIdentity
from runner_control.core.errors import (
    ConfigError,
    ExchangeError,
    PreconditionError,
    RemoteError,
    ResponseShapeError,
    RunnerControlError,
    SigningError,
    TransportError,
    ValidationError,
)
from runner_control.services.credentials import (
    AppCredentialProvider,
    CredentialManager,
    StaticCredentialProvider,
    build_credential_provider,
)
from runner_control.services.github import GitHubClient
from runner_control.services.network import NetworkService
from runner_control.services.runner_groups import RunnerGroupService
from runner_control.services.runners import RunnerService

__all__ = [
    "AppCredentialProvider",
    "ClientConfig",
    "ConfigError",
    "CredentialManager",
    "ExchangeError",
    "GitHubClient",
    "NetworkService",
    "PreconditionError",
    "RemoteError",
    "ResponseShapeError",
    "RunnerControlError",
    "RunnerGroupService",
    "RunnerService",
    "Settings",
    "SigningError",
    "SigningIdentity",
    "StaticCredentialProvider",
    "TransportError",
    "ValidationError",
    "build_credential_provider",
]
