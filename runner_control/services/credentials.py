"""
Credential Providers

Turn configuration into a bearer credential for the GitHub API, either by
passing a static token through or by exchanging a signed GitHub App JWT for an
installation access token.
"""

import asyncio
import logging
from typing import Optional, Protocol

import httpx
from pydantic import ValidationError as PydanticValidationError

from runner_control.core.config import ClientConfig, Settings, SigningIdentity
from runner_control.core.constants import DEFAULT_REFRESH_MARGIN_SECONDS, SERVICE_GITHUB_APP_AUTH
from runner_control.core.errors import ConfigError, ExchangeError, TransportError
from runner_control.core.http_utils import InstrumentedAsyncClient, github_headers
from runner_control.core.metrics import credential_mints_total
from runner_control.core.security import create_app_jwt, load_private_key
from runner_control.models.credential import Credential, InstallationToken

logger = logging.getLogger(__name__)


class CredentialProvider(Protocol):
    async def obtain(self) -> Credential: ...


class StaticCredentialProvider:
    """Passes a caller-supplied token through verbatim. No network call."""

    def __init__(self, token: str):
        if not token:
            raise ConfigError("GitHub token must be a non-empty string")
        self._token = token

    async def obtain(self) -> Credential:
        return Credential(token=self._token, origin="static")


class AppCredentialProvider:
    """
    Mints installation access tokens for a GitHub App.

    Each call to obtain() signs a fresh JWT and exchanges it once; nothing is
    cached here. Use CredentialManager for reuse across calls.
    """

    def __init__(
        self,
        identity: SigningIdentity,
        config: ClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.identity = identity
        self.config = config
        self._transport = transport
        # Fail fast on unusable key material
        self._private_key = load_private_key(identity.private_key)

    def _token_path(self) -> str:
        return f"/app/installations/{self.identity.installation_id}/access_tokens"

    async def obtain(self) -> Credential:
        assertion = create_app_jwt(self.identity.app_id, self._private_key)
        path = self._token_path()
        headers = github_headers(assertion, self.config.api_version, self.config.user_agent)

        logger.info(
            f"Requesting installation token for app {self.identity.app_id} "
            f"(installation {self.identity.installation_id})"
        )
        try:
            async with InstrumentedAsyncClient(
                SERVICE_GITHUB_APP_AUTH,
                timeout=self.config.timeout,
                verify=not self.config.insecure,
                transport=self._transport,
            ) as client:
                response = await client.post(f"{self.config.base_url}{path}", headers=headers)
        except httpx.RequestError as e:
            credential_mints_total.labels(outcome="transport_error").inc()
            raise TransportError(f"Installation token request failed: {e}", method="POST", path=path)

        if not response.is_success:
            credential_mints_total.labels(outcome="rejected").inc()
            logger.error(f"Installation token request rejected with status {response.status_code}")
            raise ExchangeError("POST", path, response.status_code, response.text)

        try:
            token = InstallationToken.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            credential_mints_total.labels(outcome="invalid_response").inc()
            raise ExchangeError("POST", path, response.status_code, f"undecodable token response: {e}")

        credential_mints_total.labels(outcome="success").inc()
        logger.info(f"Installation token obtained (expires: {token.expires_at})")
        return Credential(token=token.token, expires_at=token.expires_at, origin="minted")


class CredentialManager:
    """
    Holds the current credential snapshot and refreshes it before expiry.

    The snapshot is replaced, never mutated, so a gateway call that already
    read the old credential keeps using it while a refresh is in progress.
    """

    def __init__(
        self,
        provider: CredentialProvider,
        refresh_margin: float = DEFAULT_REFRESH_MARGIN_SECONDS,
    ):
        self.provider = provider
        self.refresh_margin = refresh_margin
        self._credential: Optional[Credential] = None
        self._lock = asyncio.Lock()

    @property
    def credential(self) -> Optional[Credential]:
        return self._credential

    def _needs_refresh(self, credential: Optional[Credential]) -> bool:
        return credential is None or credential.expires_within(self.refresh_margin)

    async def current(self) -> Credential:
        credential = self._credential
        if not self._needs_refresh(credential):
            return credential

        async with self._lock:
            # Double-check after acquiring lock
            credential = self._credential
            if not self._needs_refresh(credential):
                return credential
            if credential is not None:
                logger.info(f"Credential expires at {credential.expires_at}, refreshing")
            credential = await self.provider.obtain()
            self._credential = credential
            return credential

    def invalidate(self) -> None:
        """Drop the snapshot so the next call obtains a new credential."""
        self._credential = None


def build_credential_provider(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> CredentialProvider:
    """Select minted mode when app auth is configured, otherwise static mode."""
    identity = settings.signing_identity()
    if identity is not None:
        return AppCredentialProvider(identity, settings.client_config(), transport=transport)
    if settings.GITHUB_TOKEN:
        return StaticCredentialProvider(settings.GITHUB_TOKEN)
    raise ConfigError("Either GitHub token or app auth configuration is required")
