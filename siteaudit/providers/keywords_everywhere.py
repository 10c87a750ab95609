"""
Keywords Everywhere search volume client.
"""

import asyncio
from typing import Any, Dict, List, Optional, Sequence

import httpx
import structlog

from siteaudit.core.exceptions import ExternalServiceError, ProviderNotConfiguredError
from siteaudit.core.models import VolumeData
from siteaudit.providers.base import HttpProvider

logger = structlog.get_logger(__name__)

KEYWORDS_EVERYWHERE_API = "https://api.keywordseverywhere.com/v1/get_keyword_data"
MAX_KEYWORDS_PER_REQUEST = 100


def api_country(country: str) -> str:
    """The API knows Great Britain as "uk"."""
    country = (country or "gb").strip().lower()
    return "uk" if country == "gb" else country


def _cpc(value: Any) -> float:
    if isinstance(value, dict):
        value = value.get("value")
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


class KeywordsEverywhereClient(HttpProvider):
    """Volume provider backed by the Keywords Everywhere keyword data API."""

    service_name = "keywords_everywhere"

    def __init__(
        self,
        api_key: Optional[str],
        currency: str = "gbp",
        timeout: float = 30.0,
        batch_delay: float = 0.3,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = api_key
        self.currency = currency
        self.batch_delay = batch_delay

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def get_search_volumes(self, keywords: Sequence[str], country: str = "gb") -> List[VolumeData]:
        """
        Fetch monthly volumes for every keyword.

        Args:
            keywords: Keywords to look up, at most 100 go in one request
            country: Market code; "gb" is sent as "uk"

        Returns:
            One VolumeData per keyword the API returned

        Raises:
            ProviderNotConfiguredError: If no API key is set
            ExternalServiceError: If the API rejects the request
        """
        if not self.api_key:
            raise ProviderNotConfiguredError("KEYWORDS_EVERYWHERE_API_KEY is not set")

        keywords = list(keywords)
        market = api_country(country)
        results: List[VolumeData] = []

        for start in range(0, len(keywords), MAX_KEYWORDS_PER_REQUEST):
            if start and self.batch_delay:
                await asyncio.sleep(self.batch_delay)
            batch = keywords[start : start + MAX_KEYWORDS_PER_REQUEST]
            payload = {
                "kw": batch,
                "country": market.upper(),
                "currency": self.currency.upper(),
                "dataSource": "gkp",
            }
            data = await self._request("POST", KEYWORDS_EVERYWHERE_API, json=payload)
            if isinstance(data, dict) and data.get("error"):
                raise ExternalServiceError(self.service_name, str(data["error"]))

            for item in (data or {}).get("data", []):
                if not item.get("keyword"):
                    continue
                competition = item.get("competition")
                results.append(
                    VolumeData(
                        keyword=item["keyword"],
                        volume=item.get("vol"),
                        cpc=_cpc(item.get("cpc")),
                        competition=float(competition) if competition is not None else None,
                    )
                )

        logger.info(
            "Search volumes fetched",
            requested=len(keywords),
            returned=len(results),
            country=market,
        )
        return results
