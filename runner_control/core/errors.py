"""
Error Taxonomy

Every failure raised by this package derives from RunnerControlError.
Local failures (ConfigError, ValidationError, SigningError, PreconditionError)
never reach the network; RemoteError and TransportError carry what the remote
call returned so callers can decide on retries themselves.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List, Optional

logger = logging.getLogger(__name__)


class RunnerControlError(Exception):
    """Base exception for runner control failures.

    ``step`` names the sub-step of a multi-call operation that failed, so a
    caller can resume from there instead of redoing the whole operation.
    ``resource_id`` is set when the failure happened after the remote system
    had already assigned an identity (e.g. a runner allocated by JIT issuance).
    """

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.step = step
        self.resource_id: Optional[int] = None

    def __str__(self) -> str:
        if self.step:
            return f"{self.message} (step: {self.step})"
        return self.message


class ConfigError(RunnerControlError):
    """Bad key material or an invalid combination of configuration values."""


class ValidationError(RunnerControlError):
    """Desired state violates an invariant; raised before any remote call."""

    def __init__(
        self,
        message: str,
        rejected: Optional[Iterable[str]] = None,
        step: Optional[str] = None,
    ):
        super().__init__(message, step=step)
        self.rejected: List[str] = list(rejected or [])


class SigningError(RunnerControlError):
    """The app JWT could not be built or signed."""


class PreconditionError(RunnerControlError):
    """The remote entity is not in the state the operation requires."""

    def __init__(self, message: str, status: Optional[str] = None, step: Optional[str] = None):
        super().__init__(message, step=step)
        self.status = status


class TransportError(RunnerControlError):
    """Network or connection level failure; no HTTP response was received."""

    def __init__(self, message: str, method: str = "", path: str = "", step: Optional[str] = None):
        super().__init__(message, step=step)
        self.method = method
        self.path = path


class RemoteError(RunnerControlError):
    """Non-2xx response from the GitHub API, status and body kept verbatim."""

    def __init__(
        self,
        method: str,
        path: str,
        status_code: int,
        body: str = "",
        step: Optional[str] = None,
    ):
        super().__init__(f"{method} {path} failed with status {status_code}: {body}", step=step)
        self.method = method
        self.path = path
        self.status_code = status_code
        self.body = body


class ResponseShapeError(RemoteError):
    """A 2xx response whose body does not have the expected structure.

    ``payload`` keeps the decoded body so a caller can still recover remote
    identifiers from it.
    """

    def __init__(
        self,
        method: str,
        path: str,
        status_code: int,
        detail: str,
        payload: Any = None,
        step: Optional[str] = None,
    ):
        super().__init__(method, path, status_code, f"unexpected response shape: {detail}", step=step)
        self.payload = payload


class ExchangeError(RemoteError):
    """The installation token exchange was refused by GitHub."""


@contextmanager
def failing_step(step: str, resource_id: Optional[int] = None) -> Iterator[None]:
    """
    Tag any RunnerControlError raised inside the block with the sub-step name.

    The error is re-raised unchanged otherwise; already applied remote changes
    stay in place.
    """
    try:
        yield
    except RunnerControlError as e:
        e.step = step
        if resource_id is not None:
            e.resource_id = resource_id
        logger.error(f"Step '{step}' failed: {e.message}")
        raise
