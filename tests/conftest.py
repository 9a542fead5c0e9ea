"""
Shared test fixtures and configuration.

Environment variables are cleared BEFORE any package imports so the settings
singleton never picks up real credentials from the developer's shell.
"""

import os
import sys

# Ensure the package and tests.mocks are importable from a source checkout
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

for _name in list(os.environ):
    if _name.startswith("GITHUB_") or _name == "CREDENTIAL_REFRESH_MARGIN_SECONDS":
        del os.environ[_name]

import pytest  # noqa: E402

from tests.mocks.github import RecordingTransport, generate_rsa_pem  # noqa: E402


@pytest.fixture(scope="session")
def rsa_private_pem():
    """PKCS#1 RSA key shared by the whole session (key generation is slow)."""
    return generate_rsa_pem("pkcs1")


@pytest.fixture
def transport():
    """Empty recording transport; tests register the routes they expect."""
    return RecordingTransport()
