import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from runner_control.core.config import ClientConfig, Settings
from runner_control.core.constants import SERVICE_GITHUB_API
from runner_control.core.errors import ConfigError, RemoteError, ResponseShapeError, TransportError
from runner_control.core.http_utils import InstrumentedAsyncClient, github_headers
from runner_control.services.credentials import CredentialManager, build_credential_provider

logger = logging.getLogger(__name__)


def parse_response(model: Any, data: Any, method: str, path: str, status_code: int = 200) -> Any:
    """
    Validate a decoded response body against ``model``.

    ``model`` is anything pydantic can adapt, e.g. a BaseModel subclass or
    ``List[SomeModel]``.

    Raises:
        ResponseShapeError: if the body does not fit the model
    """
    try:
        return TypeAdapter(model).validate_python(data)
    except PydanticValidationError as e:
        logger.error(f"GitHub API {method} {path} returned an unexpected body: {e.error_count()} error(s)")
        raise ResponseShapeError(method, path, status_code, str(e), payload=data)


class GitHubClient:
    """
    Authenticated gateway to the GitHub REST API for one organization.

    Every call is independent: the current credential snapshot is attached,
    non-2xx responses become RemoteError, and nothing is retried. A DELETE
    answered with 404 counts as success since the target is already gone.

    Usage:
        async with GitHubClient(config, CredentialManager(provider)) as client:
            runner = await client.get(client.org_path("actions", "runners", 42), model=Runner)
    """

    def __init__(
        self,
        config: ClientConfig,
        credentials: CredentialManager,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.credentials = credentials
        self.organization = config.organization
        self._http = InstrumentedAsyncClient(
            SERVICE_GITHUB_API,
            timeout=config.timeout,
            verify=not config.insecure,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "GitHubClient":
        """Build a client from explicit settings, or from the environment when none are given."""
        if settings is None:
            try:
                settings = Settings()
            except PydanticValidationError as e:
                raise ConfigError(f"Invalid settings in environment: {e}")
        provider = build_credential_provider(settings, transport=transport)
        credentials = CredentialManager(provider, settings.CREDENTIAL_REFRESH_MARGIN_SECONDS)
        return cls(settings.client_config(), credentials, transport=transport)

    async def start(self) -> None:
        await self._http.start()

    async def close(self) -> None:
        await self._http.close()

    async def __aenter__(self) -> "GitHubClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def org_path(self, *parts: Any) -> str:
        """Build ``/orgs/{org}/<parts...>``."""
        suffix = "/".join(str(part).strip("/") for part in parts)
        return f"/orgs/{self.organization}/{suffix}"

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        expect_json: bool = True,
        params: Optional[Dict[str, Any]] = None,
        model: Any = None,
    ) -> Any:
        """
        Issue one authenticated call and return the decoded JSON body.

        With ``model`` the body is validated into that type. Returns None for
        empty responses, when ``expect_json`` is False, and for a DELETE that
        found nothing to delete.

        Raises:
            RemoteError: on any non-2xx response (except DELETE 404)
            ResponseShapeError: when a 2xx body cannot be decoded or validated
            TransportError: when no response was received
        """
        method = method.upper()
        credential = await self.credentials.current()
        headers = github_headers(credential.token, self.config.api_version, self.config.user_agent)

        kwargs: Dict[str, Any] = {}
        if params:
            kwargs["params"] = params
        if body is not None:
            kwargs["json"] = body  # also sets Content-Type: application/json

        if not self._http.started:
            await self._http.start()

        logger.debug(f"GitHub API {method} {path}")
        try:
            response = await self._http.request(
                method, f"{self.config.base_url}{path}", headers=headers, **kwargs
            )
        except httpx.RequestError as e:
            logger.error(f"GitHub API {method} {path} failed: {e}")
            raise TransportError(f"{method} {path} failed: {e}", method=method, path=path)

        if method == "DELETE" and response.status_code == 404:
            logger.warning(f"GitHub API DELETE {path} returned 404, treating as already deleted")
            return None

        if not response.is_success:
            raise RemoteError(method, path, response.status_code, response.text)

        if not expect_json or response.status_code == 204 or not response.content:
            return None
        try:
            data = response.json()
        except ValueError as e:
            raise ResponseShapeError(method, path, response.status_code, f"undecodable body: {e}")

        if model is None:
            return data
        return parse_response(model, data, method, path, response.status_code)

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None, model: Any = None) -> Any:
        return await self.request("GET", path, params=params, model=model)

    async def get_all(
        self,
        path: str,
        items_key: str,
        per_page: int = 100,
        max_pages: int = 10,
        model: Any = None,
    ) -> List[Any]:
        """
        Collect a paginated list endpoint (``{"total_count": n, items_key: [...]}``).

        Items are validated into ``model`` when given. Stops after
        ``max_pages`` pages with a warning if more items remain.
        """
        all_items: List[Any] = []
        page = 1
        while True:
            data = await self.get(path, params={"per_page": per_page, "page": page}) or {}
            items = data.get(items_key) or []
            all_items.extend(items)

            total = data.get("total_count")
            if not items or len(items) < per_page or (total is not None and len(all_items) >= total):
                break
            if page >= max_pages:
                logger.warning(
                    f"GitHub API GET {path} stopped after {max_pages} pages with {len(all_items)} "
                    f"of {total if total is not None else 'unknown'} {items_key}; results are incomplete"
                )
                break
            page += 1

        if model is None:
            return all_items
        return parse_response(List[model], all_items, "GET", path)

    async def post(self, path: str, body: Any = None, model: Any = None) -> Any:
        return await self.request("POST", path, body, model=model)

    async def put(self, path: str, body: Any = None, model: Any = None) -> Any:
        return await self.request("PUT", path, body, model=model)

    async def patch(self, path: str, body: Any = None, model: Any = None) -> Any:
        return await self.request("PATCH", path, body, model=model)

    async def delete(self, path: str) -> None:
        await self.request("DELETE", path, expect_json=False)
