"""
HTTP transport for the remote query endpoint.

One request primitive serves the connection test, the server descriptor and
every SQL statement. Two sources can abort a request:
- the client's own timeout
- an externally supplied ``asyncio.Event`` (user cancellation)

When the external event has fired the result is always CONNECTION_CANCELLED,
whatever else completed first. Every call returns an OperationResult; no
exception leaves this module.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Sequence

import httpx

from tableedit.config import get_settings
from tableedit.core.exceptions import ErrorCode
from tableedit.core.security import basic_auth_header
from tableedit.schemas.errors import OperationResult
from tableedit.schemas.server import ServerSpec
from tableedit.services.error_handler import (
    create_error,
    from_exception,
    from_response_body,
    from_status,
)
from tableedit.services.url_builder import build_base_url, build_query_url

settings = get_settings()
logger = logging.getLogger(__name__)


def _content(body: Dict[str, Any]) -> Any:
    """Return ``result.content`` from a response body, or None."""
    result = body.get("result")
    return result.get("content") if isinstance(result, dict) else None


class TransportClient:
    """
    Authenticated client for one server.

    The password is held only for the lifetime of this object and is only read
    when building request headers.
    """

    def __init__(
        self,
        spec: ServerSpec,
        username: str,
        password: str,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.spec = spec
        self.username = username
        self._password = password
        self._timeout = timeout if timeout is not None else settings.API_TIMEOUT_SECONDS
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None
        self.base_url = build_base_url(spec)

    @property
    def timeout(self) -> float:
        return self._timeout

    def set_timeout(self, seconds: float) -> None:
        if seconds <= 0:
            raise ValueError("timeout must be positive")
        self._timeout = seconds

    def build_auth_headers(self) -> Dict[str, str]:
        return {
            "Authorization": basic_auth_header(self.username, self._password),
            "Content-Type": "application/json",
        }

    async def request(
        self,
        method: str,
        url: str,
        context: str,
        json: Optional[Dict[str, Any]] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> OperationResult:
        """
        Send one request and map the outcome.

        Args:
            method: HTTP method
            url: Absolute URL
            context: Operation name carried by any resulting error
            json: Optional JSON body
            cancel_event: Optional external cancellation signal

        Returns:
            OperationResult whose data is the decoded response body
        """
        if cancel_event is not None and cancel_event.is_set():
            return self._cancelled(context)

        request_task = asyncio.ensure_future(
            self._client.request(
                method,
                url,
                headers=self.build_auth_headers(),
                json=json,
                timeout=self._timeout,
            )
        )
        waiters = {request_task}
        if cancel_event is not None:
            waiters.add(asyncio.ensure_future(cancel_event.wait()))

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=self._timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in waiters:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*waiters, return_exceptions=True)

        # The external signal wins over the timer and over a late response
        if cancel_event is not None and cancel_event.is_set():
            return self._cancelled(context)

        if request_task not in done:
            logger.debug(f"{context}: timed out after {self._timeout}s")
            return OperationResult.fail(create_error(ErrorCode.CONNECTION_TIMEOUT, context))

        try:
            response = request_task.result()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug(f"{context}: {type(exc).__name__} talking to {self.base_url}")
            return OperationResult.fail(from_exception(exc, context))

        status_error = from_status(response.status_code, context)
        if status_error:
            logger.debug(f"{context}: HTTP {response.status_code}")
            return OperationResult.fail(status_error)

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            logger.warning(f"{context}: response body is not a JSON object")
            return OperationResult.fail(
                create_error(
                    ErrorCode.CONNECTION_FAILED,
                    context,
                    "Received unexpected response from server.",
                )
            )

        body_error = from_response_body(body, context)
        if body_error:
            logger.debug(f"{context}: server reported {body_error.code.value}")
            return OperationResult.fail(body_error)

        return OperationResult.ok(body)

    async def fetch_server_info(
        self,
        context: str = "testConnection",
        cancel_event: Optional[asyncio.Event] = None,
    ) -> OperationResult:
        """GET the API root; data is the descriptor's ``result.content`` dict."""
        result = await self.request("GET", self.base_url, context, cancel_event=cancel_event)
        if not result.success:
            return result
        content = _content(result.data)
        return OperationResult.ok(content if isinstance(content, dict) else {})

    async def test_connection(
        self, cancel_event: Optional[asyncio.Event] = None
    ) -> OperationResult:
        """Check that the server answers and accepts the credentials."""
        logger.debug(f"Testing connection to {self.base_url}")
        result = await self.fetch_server_info("testConnection", cancel_event)
        if result.success:
            namespaces = result.data.get("namespaces") or []
            logger.info(
                f"Connected to {self.spec.host}:{self.spec.port} "
                f"(api {result.data.get('api')}, {len(namespaces)} namespaces)"
            )
        return result

    async def execute_query(
        self,
        namespace: str,
        query: str,
        parameters: Sequence[Any] = (),
        context: str = "executeQuery",
        cancel_event: Optional[asyncio.Event] = None,
    ) -> OperationResult:
        """
        Run one parameterized SQL statement in a namespace.

        Returns:
            OperationResult whose data is the list of result rows
        """
        url = build_query_url(self.base_url, namespace)
        result = await self.request(
            "POST",
            url,
            context,
            json={"query": query, "parameters": list(parameters)},
            cancel_event=cancel_event,
        )
        if not result.success:
            return result
        content = _content(result.data)
        return OperationResult.ok(content if isinstance(content, list) else [])

    def _cancelled(self, context: str) -> OperationResult:
        logger.debug(f"{context}: cancelled by caller")
        return OperationResult.fail(create_error(ErrorCode.CONNECTION_CANCELLED, context))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "TransportClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
