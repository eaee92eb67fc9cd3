"""Async HTTP transport core for the Sidearm API.

WHY: Every Sidearm endpoint shares the same authentication, error format
and `{data: ...}` envelope. Funnelling all calls through one client keeps
those rules in a single place, so resource callers only choose a verb, a
path and a parameter bag.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. HttpClient is an async
context manager: enter it to open the connection pool, exit to close it.
execute() runs one RequestDescriptor end to end; the four raw verbs build
descriptors, and the *_one / get_list helpers unwrap the envelope.

RULES:
- Always use the async context manager (async with HttpClient(...) as http:)
- An open client cannot be entered again until it has been exited
- Authorization and Accept headers are always sent and cannot be overridden
- Non-2xx responses raise SidearmAPIError; nothing is retried
- Non-JSON 2xx bodies are returned as text
- The API key is never logged
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

import httpx

from sidearm.api.errors import SidearmAPIError
from sidearm.api.models import HttpMethod, Page, RequestDescriptor
from sidearm.config import ClientConfig

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_S = 30.0


def build_query(params: Mapping[str, Any] | None) -> dict[str, str]:
    """Drop None entries and string-coerce the rest.

    Booleans become "true"/"false" to match the service's JSON spelling.
    """
    if not params:
        return {}
    query: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            query[key] = "true" if value else "false"
        else:
            query[key] = str(value)
    return query


def error_message(body: Any, text: str) -> str:
    """Pick the human message for a failed response: message, error, raw text."""
    if isinstance(body, dict):
        for key in ("message", "error"):
            if body.get(key) is not None:
                return str(body[key])
    return text


class HttpClient:
    """Authenticated request/response pipeline shared by every resource.

    WHY: Resource methods and Job handles must see identical auth, error
    semantics and envelope handling. The client is stateless per call aside
    from its frozen ClientConfig, so one instance can be shared by any
    number of concurrent Job handles.

    HOW: Wraps httpx.AsyncClient. The config is resolved (and validated) in
    __init__, so a missing key fails before any connection is opened.

    RULES:
    - api_key defaults to SIDEARM_API_KEY from the environment / .env
    - base_url defaults to SIDEARM_BASE_URL or https://api.sdrm.io
    - transport is forwarded to httpx (tests pass an httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        *,
        timeout: float = _DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = ClientConfig.resolve(api_key, base_url)
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._config.base_url

    async def __aenter__(self) -> HttpClient:
        if self._client is not None:
            raise RuntimeError("HttpClient is already open; exit it before entering again")
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=httpx.Timeout(self._timeout),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "HttpClient must be used as an async context manager: "
                "async with HttpClient() as http: ..."
            )
        return self._client

    def _headers(self, descriptor: RequestDescriptor) -> httpx.Headers:
        headers = httpx.Headers(dict(descriptor.headers or {}))
        if descriptor.has_body and "Content-Type" not in headers:
            headers["Content-Type"] = "application/json"
        # Set last: Headers.__setitem__ replaces case-insensitively.
        headers["Authorization"] = f"Bearer {self._config.api_key}"
        headers["Accept"] = "application/json"
        return headers

    # ------------------------------------------------------------------
    # Core pipeline
    # ------------------------------------------------------------------

    async def execute(self, descriptor: RequestDescriptor) -> Any:
        """Run one request and decode its response.

        HOW: Joins base URL and path, appends the filtered query, attaches
        headers, serializes the body, then reads the whole response as text
        and tries to parse it as JSON.

        RULES:
        - JSON + non-2xx: SidearmAPIError(status, message|error|text, body)
        - JSON + 2xx: the parsed value
        - non-JSON + non-2xx: SidearmAPIError(status, text, None)
        - non-JSON + 2xx: the raw text
        - httpx.TransportError propagates unchanged

        Args:
            descriptor: The request to send.

        Returns:
            The decoded response body.
        """
        client = self._ensure_client()
        content = json.dumps(descriptor.body) if descriptor.has_body else None

        resp = await client.request(
            descriptor.method.value,
            descriptor.path,
            params=build_query(descriptor.params) or None,
            headers=self._headers(descriptor),
            content=content,
        )
        text = resp.text
        logger.debug("%s %s -> %d", descriptor.method.value, descriptor.path, resp.status_code)

        try:
            body = json.loads(text)
        except ValueError:
            if not resp.is_success:
                raise SidearmAPIError(resp.status_code, text) from None
            return text

        if not resp.is_success:
            raise SidearmAPIError(resp.status_code, error_message(body, text), body)
        return body

    # ------------------------------------------------------------------
    # Raw verbs
    # ------------------------------------------------------------------

    async def get(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self.execute(RequestDescriptor(HttpMethod.GET, path, params=params))

    async def post(self, path: str, body: Any = None) -> Any:
        return await self.execute(RequestDescriptor(HttpMethod.POST, path, body=body))

    async def patch(self, path: str, body: Any) -> Any:
        return await self.execute(RequestDescriptor(HttpMethod.PATCH, path, body=body))

    async def delete(self, path: str) -> Any:
        return await self.execute(RequestDescriptor(HttpMethod.DELETE, path))

    # ------------------------------------------------------------------
    # Envelope-unwrapping helpers
    # ------------------------------------------------------------------
    # All resource payloads arrive as {"data": ...}; a malformed envelope
    # surfaces as the natural KeyError/TypeError.

    async def get_one(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return (await self.get(path, params))["data"]

    async def get_list(self, path: str, params: Mapping[str, Any] | None = None) -> Page:
        """GET a paginated collection and return its data plus next cursor."""
        envelope = await self.get(path, params)
        meta = envelope.get("meta") or {}
        return Page(data=envelope["data"], cursor=meta.get("next_cursor"))

    async def post_one(self, path: str, body: Any = None) -> Any:
        return (await self.post(path, body))["data"]

    async def patch_one(self, path: str, body: Any) -> Any:
        return (await self.patch(path, body))["data"]

    async def delete_one(self, path: str) -> Any:
        return (await self.delete(path))["data"]
