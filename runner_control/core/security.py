import logging
import re
from datetime import datetime, timedelta
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from jose import jwt
from jose.exceptions import JOSEError

from runner_control.core import utcnow
from runner_control.core.constants import APP_JWT_ALGORITHM, APP_JWT_LIFETIME_SECONDS
from runner_control.core.errors import ConfigError, SigningError

logger = logging.getLogger(__name__)

_PEM_BLOCK = re.compile(r"-----BEGIN ([A-Z ]+)-----.+?-----END \1-----", re.DOTALL)


def normalize_pem(value: str) -> str:
    """
    Replace literal two-character ``\\n`` sequences with real line breaks.

    Some platforms cannot carry new lines inside environment variables, so the
    key often arrives as a single line.
    """
    return value.replace("\\n", "\n").strip() + "\n"


def load_private_key(value: str) -> str:
    """Normalize and validate PEM key material, returning the PEM text.

    Raises ConfigError if no PEM block is present or the block is not an RSA
    private key (PKCS#1 or PKCS#8).
    """
    pem = normalize_pem(value)
    match = _PEM_BLOCK.search(pem)
    if match is None:
        raise ConfigError("Failed to parse PEM block containing the key")

    block = match.group(0)
    try:
        key = serialization.load_pem_private_key(block.encode("utf-8"), password=None)
    except (ValueError, TypeError) as e:
        raise ConfigError(f"Failed to parse private key: {e}")

    if not isinstance(key, RSAPrivateKey):
        raise ConfigError(f"Expected an RSA private key, got {type(key).__name__}")

    return block


def create_app_jwt(app_id: int, private_key_pem: str, now: Optional[datetime] = None) -> str:
    """Sign a short-lived GitHub App assertion (RS256, 10 minutes)."""
    issued_at = now or utcnow()
    to_encode = {
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(seconds=APP_JWT_LIFETIME_SECONDS)).timestamp()),
        "iss": app_id,
    }
    try:
        return jwt.encode(to_encode, private_key_pem, algorithm=APP_JWT_ALGORITHM)
    except (JOSEError, ValueError, TypeError) as e:
        raise SigningError(f"Failed to sign token: {e}")
