"""
ValueSERP ranking position client.
"""

from typing import Optional

import httpx
import structlog

from siteaudit.core.exceptions import ExternalServiceError, ProviderNotConfiguredError
from siteaudit.detection.html_content import registered_domain
from siteaudit.providers.base import HttpProvider

logger = structlog.get_logger(__name__)

VALUESERP_API = "https://api.valueserp.com/search"


class ValueSerpClient(HttpProvider):
    """Position provider: where a domain ranks on Google UK for a keyword."""

    service_name = "valueserp"

    def __init__(
        self,
        api_key: Optional[str],
        location: str = "United Kingdom",
        num_results: int = 100,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = api_key
        self.location = location
        self.num_results = num_results

    async def check_keyword_position(self, keyword: str, domain: str) -> Optional[int]:
        """Position of the first organic result on ``domain``, or None if it does not rank."""
        if not self.api_key:
            raise ProviderNotConfiguredError("VALUESERP_API_KEY is not set")

        params = {
            "api_key": self.api_key,
            "q": keyword,
            "location": self.location,
            "google_domain": "google.co.uk",
            "gl": "uk",
            "hl": "en",
            "num": str(self.num_results),
            "output": "json",
        }
        data = await self._request("GET", VALUESERP_API, params=params)

        request_info = data.get("request_info") or {}
        if request_info.get("success") is False:
            raise ExternalServiceError(self.service_name, "request was not successful")

        target = registered_domain(domain)
        for index, result in enumerate(data.get("organic_results") or [], start=1):
            link = result.get("link") or result.get("domain") or ""
            if link and registered_domain(link) == target:
                position = result.get("position") or index
                logger.debug("Keyword position found", keyword=keyword, domain=domain, position=position)
                return int(position)

        return None
