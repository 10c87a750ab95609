"""
Google autocomplete suggestion client.
"""

from typing import List, Optional

import httpx
import structlog

from siteaudit.providers.base import HttpProvider

logger = structlog.get_logger(__name__)

GOOGLE_SUGGEST_API = "https://suggestqueries.google.com/complete/search"


class GoogleSuggestClient(HttpProvider):
    """Suggestion provider using the public firefox autocomplete endpoint. Needs no key."""

    service_name = "google_suggest"

    def __init__(
        self,
        country: str = "gb",
        language: str = "en",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.country = country
        self.language = language

    async def suggest(self, seed: str) -> List[str]:
        params = {"client": "firefox", "q": seed, "gl": self.country, "hl": self.language}
        data = await self._request("GET", GOOGLE_SUGGEST_API, params=params)

        # Response shape: [query, [suggestion, ...], ...]
        if not isinstance(data, list) or len(data) < 2 or not isinstance(data[1], list):
            logger.debug("Unexpected suggestion payload", seed=seed)
            return []
        return [s for s in data[1] if isinstance(s, str) and s.strip()]
