"""HTTP client for HAFAS client interface requests."""

import asyncio
import logging
from typing import TYPE_CHECKING

import aiohttp

from transit_adapters.adapters.api_request_logger import log_api_request
from transit_adapters.domain.exceptions import ParserError, TransportError

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from aiohttp import ClientResponse, ClientSession

DEFAULT_TIMEOUT_SECONDS = 15.0


class HafasHttpClient:
    """Sends signed request bodies and fetches webapp configs.

    Any failure to obtain a response body (connection error, timeout,
    non-200 status) is raised as TransportError. A body that is not UTF-8
    is raised as ParserError.
    """

    def __init__(
        self,
        session: "ClientSession",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str | None = None,
        verify_ssl: bool = True,
    ) -> None:
        self._session = session
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._user_agent = user_agent
        self._verify_ssl = verify_ssl

    def _headers(self, content_type: str | None = None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if content_type:
            headers["Content-Type"] = content_type
        if self._user_agent:
            headers["User-Agent"] = self._user_agent
        return headers

    async def _log_error_response(self, response: "ClientResponse", url: str) -> None:
        """Log error response details."""
        error_text = await response.text()
        error_body = error_text[:500] if error_text else "(empty response body)"
        content_type = response.headers.get("Content-Type", "unknown")
        server = response.headers.get("Server", "unknown")
        logger.error(
            f"HAFAS API returned status {response.status} for {url}: "
            f"{error_body} (Content-Type: {content_type}, Server: {server})"
        )

    async def _read(self, response: "ClientResponse", url: str) -> str:
        if response.status != 200:
            await self._log_error_response(response, url)
            raise TransportError(f"HTTP {response.status} for {url}", response.status)
        body = await response.read()
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.error(f"HAFAS API returned a body that is not UTF-8 for {url}: {e}")
            raise ParserError(
                f"response is not valid UTF-8: {e}", url, body.decode("utf-8", errors="replace")
            ) from e

    async def post(self, url: str, body: str, params: dict[str, str] | None = None) -> str:
        """POST a JSON body and return the response text."""
        headers = self._headers("application/json; charset=utf-8")
        log_api_request("POST", url, params=params, headers=headers, payload=body)
        try:
            async with self._session.post(
                url,
                data=body.encode("utf-8"),
                params=params or None,
                headers=headers,
                timeout=self._timeout,
                ssl=self._verify_ssl,
            ) as response:
                return await self._read(response, url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Error posting to HAFAS API {url}: {e}")
            raise TransportError(f"request to {url} failed: {e}") from e

    async def get_text(self, url: str) -> str:
        """GET a document and return its text."""
        headers = self._headers()
        log_api_request("GET", url, headers=headers)
        try:
            async with self._session.get(
                url,
                headers=headers,
                timeout=self._timeout,
                ssl=self._verify_ssl,
            ) as response:
                return await self._read(response, url)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"Error fetching {url}: {e}")
            raise TransportError(f"request to {url} failed: {e}") from e
