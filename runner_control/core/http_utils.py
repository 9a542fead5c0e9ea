"""
HTTP Utilities

Instrumented httpx client shared by the GitHub gateway and the installation
token exchange.
"""

import logging
import time
from typing import Dict, Optional

import httpx

from runner_control.core.constants import GITHUB_ACCEPT, GITHUB_API_VERSION, USER_AGENT
from runner_control.core.metrics import (
    external_api_duration_seconds,
    external_api_errors_total,
    external_api_requests_total,
)

logger = logging.getLogger(__name__)


class InstrumentedAsyncClient:
    """
    A wrapper around httpx.AsyncClient that automatically records metrics.

    Usage:
        async with InstrumentedAsyncClient("GitHub API", timeout=30.0) as client:
            response = await client.request("GET", url)
    """

    def __init__(
        self,
        service_name: str,
        timeout: float = 30.0,
        **kwargs,
    ):
        self.service_name = service_name
        self._client: Optional[httpx.AsyncClient] = None
        self._timeout = timeout
        self._kwargs = kwargs
        self._NOT_STARTED_MSG = "Client not started. Use 'async with' or call start()."

    @property
    def started(self) -> bool:
        return self._client is not None

    async def start(self) -> None:
        """Start the underlying client (for long-lived usage)."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, **self._kwargs)

    async def close(self) -> None:
        """Close the underlying client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "InstrumentedAsyncClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _record_request(self) -> None:
        """Record that a request was made."""
        external_api_requests_total.labels(service=self.service_name).inc()

    def _record_success(self, duration: float) -> None:
        """Record a completed request."""
        external_api_duration_seconds.labels(service=self.service_name).observe(duration)

    def _record_error(self) -> None:
        """Record a failed request."""
        external_api_errors_total.labels(service=self.service_name).inc()

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Make an arbitrary HTTP request with metrics.

        Non-2xx responses count as errors but are returned to the caller,
        which decides how to classify them.
        """
        if self._client is None:
            raise RuntimeError(self._NOT_STARTED_MSG)

        start_time = time.time()
        self._record_request()
        try:
            response = await self._client.request(method, url, **kwargs)
        except Exception:
            self._record_error()
            raise
        self._record_success(time.time() - start_time)
        if not response.is_success:
            self._record_error()
        return response

    async def post(self, url: str, **kwargs) -> httpx.Response:
        """Make a POST request with metrics."""
        return await self.request("POST", url, **kwargs)


def github_headers(
    token: str,
    api_version: str = GITHUB_API_VERSION,
    user_agent: str = USER_AGENT,
) -> Dict[str, str]:
    """Standard headers for an authenticated GitHub REST call."""
    return {
        "Authorization": f"Bearer {token}",
        "Accept": GITHUB_ACCEPT,
        "X-GitHub-Api-Version": api_version,
        "User-Agent": user_agent,
    }

