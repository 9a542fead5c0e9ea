import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from runner_control.core.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_REFRESH_MARGIN_SECONDS,
    DEFAULT_REQUEST_TIMEOUT,
    GITHUB_API_VERSION,
    USER_AGENT,
)
from runner_control.core.errors import ConfigError

logger = logging.getLogger(__name__)


class ClientConfig(BaseModel):
    """Explicit transport configuration handed to the gateway and the token exchange."""

    model_config = ConfigDict(frozen=True)

    base_url: str = DEFAULT_BASE_URL
    organization: str
    timeout: float = Field(DEFAULT_REQUEST_TIMEOUT, gt=0)
    insecure: bool = False
    user_agent: str = USER_AGENT
    api_version: str = GITHUB_API_VERSION

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("organization")
    @classmethod
    def require_organization(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("GitHub organization is required")
        return value.strip()


class SigningIdentity(BaseModel):
    """GitHub App identity used to mint installation tokens. Never persisted."""

    model_config = ConfigDict(frozen=True)

    app_id: int
    installation_id: int
    private_key: str = Field(..., repr=False)


class Settings(BaseSettings):
    # Static authentication
    GITHUB_TOKEN: str = ""

    # API location
    GITHUB_BASE_URL: str = DEFAULT_BASE_URL
    GITHUB_ORGANIZATION: str = ""
    GITHUB_INSECURE: bool = False
    GITHUB_REQUEST_TIMEOUT: float = DEFAULT_REQUEST_TIMEOUT

    # GitHub App authentication
    GITHUB_APP_ID: Optional[int] = None
    GITHUB_APP_INSTALLATION_ID: Optional[int] = None
    GITHUB_APP_PEM_FILE: str = ""
    GITHUB_APP_PEM_PATH: str = ""

    # Installation token refresh
    CREDENTIAL_REFRESH_MARGIN_SECONDS: int = DEFAULT_REFRESH_MARGIN_SECONDS

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore")

    def client_config(self) -> ClientConfig:
        if not self.GITHUB_ORGANIZATION:
            raise ConfigError("GitHub organization is required")
        return ClientConfig(
            base_url=self.GITHUB_BASE_URL,
            organization=self.GITHUB_ORGANIZATION,
            timeout=self.GITHUB_REQUEST_TIMEOUT,
            insecure=self.GITHUB_INSECURE,
        )

    def _private_key_material(self) -> str:
        if self.GITHUB_APP_PEM_FILE:
            return self.GITHUB_APP_PEM_FILE
        if self.GITHUB_APP_PEM_PATH:
            path = Path(self.GITHUB_APP_PEM_PATH)
            try:
                return path.read_text()
            except OSError as e:
                raise ConfigError(f"Cannot read GitHub App private key from {path}: {e}")
        return ""

    def signing_identity(self) -> Optional[SigningIdentity]:
        """
        Build the GitHub App identity, or None when app auth is not configured.

        A partial configuration (some app fields set, others missing) is an
        error rather than a silent fallback to token authentication.
        """
        key_material = self._private_key_material()
        fields = {
            "GITHUB_APP_ID": self.GITHUB_APP_ID,
            "GITHUB_APP_INSTALLATION_ID": self.GITHUB_APP_INSTALLATION_ID,
            "GITHUB_APP_PEM_FILE or GITHUB_APP_PEM_PATH": key_material or None,
        }
        if all(value is None for value in fields.values()):
            return None

        missing = [name for name, value in fields.items() if value is None]
        if missing:
            raise ConfigError(f"Incomplete GitHub App configuration, missing: {', '.join(missing)}")

        return SigningIdentity(
            app_id=self.GITHUB_APP_ID,
            installation_id=self.GITHUB_APP_INSTALLATION_ID,
            private_key=key_material,
        )
