"""Resolution of the ``auth`` block sent with every request."""

import json
import logging
from typing import Any

from transit_adapters.adapters.hafas_api.http_client import HafasHttpClient
from transit_adapters.adapters.hafas_api.profile import HafasProfile
from transit_adapters.domain.exceptions import ParserError

logger = logging.getLogger(__name__)


class HafasAuthorizer:
    """Provides the authorization object of a profile.

    Inline authorizations are used as given. A remote authorization is the
    URL of a webapp config whose ``hciAuth.aid`` is fetched on first use and
    cached for the lifetime of this object. Concurrent first calls may fetch
    twice; the last write wins, and both values are equivalent.
    """

    def __init__(self, profile: HafasProfile, http_client: HafasHttpClient) -> None:
        self._profile = profile
        self._http_client = http_client
        self._cached: dict[str, Any] | None = profile.inline_authorization()

    async def authorization(self) -> dict[str, Any] | None:
        url = self._profile.api_authorization
        if self._cached is not None or url is None or not self._profile.authorization_is_remote:
            return self._cached

        logger.info(f"Fetching HAFAS authorization from {url}")
        page = await self._http_client.get_text(url)
        self._cached = {"type": "AID", "aid": self._extract_aid(page, url)}
        return self._cached

    @staticmethod
    def _extract_aid(page: str, url: str) -> str:
        try:
            config = json.loads(page)
            aid = config["hciAuth"]["aid"]
        except (ValueError, KeyError, TypeError) as e:
            raise ParserError(f"no hciAuth.aid in webapp config: {e}", url, page) from e
        if not isinstance(aid, str) or not aid:
            raise ParserError("hciAuth.aid is not a non-empty string", url, page)
        return aid
