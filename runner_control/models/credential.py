"""
Pydantic models for bearer credentials.

A Credential is immutable once issued; refreshing replaces the whole object.
"""

from datetime import datetime, timedelta
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from runner_control.core import ensure_utc, utcnow

CredentialOrigin = Literal["static", "minted"]


class Credential(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str = Field(..., repr=False)
    expires_at: Optional[datetime] = None
    origin: CredentialOrigin = "static"

    @field_validator("expires_at")
    @classmethod
    def expires_at_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    def expires_within(self, seconds: float, now: Optional[datetime] = None) -> bool:
        """True if the credential is expired or expires in the next ``seconds``."""
        if self.expires_at is None:
            return False
        current = ensure_utc(now) if now else utcnow()
        return self.expires_at - current <= timedelta(seconds=seconds)


class InstallationToken(BaseModel):
    """Response of POST /app/installations/{id}/access_tokens."""

    model_config = ConfigDict(extra="ignore")

    token: str = Field(..., repr=False)
    expires_at: Optional[datetime] = None
