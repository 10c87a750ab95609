"""
Companies House registry client.
"""

import re
from typing import Optional

import httpx
import structlog

from siteaudit.core.exceptions import ProviderNotConfiguredError
from siteaudit.core.models import RegistryRecord
from siteaudit.providers.base import HttpProvider

logger = structlog.get_logger(__name__)

COMPANIES_HOUSE_API = "https://api.company-information.service.gov.uk"

_LEGAL_SUFFIX_RE = re.compile(r"\b(?:ltd|limited|llp|plc)\.?$", re.I)


def clean_company_name(name: str) -> str:
    return _LEGAL_SUFFIX_RE.sub("", (name or "").strip()).strip(" ,.")


class CompaniesHouseClient(HttpProvider):
    """Registry provider: registered office and SIC codes for a UK company."""

    service_name = "companies_house"

    def __init__(
        self,
        api_key: Optional[str],
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = api_key

    def _client(self) -> httpx.AsyncClient:
        client = super()._client()
        # Key goes in as the basic auth username with an empty password
        client.auth = httpx.BasicAuth(self.api_key or "", "")
        return client

    async def lookup(self, company_name: str) -> Optional[RegistryRecord]:
        """Best match for the company name, or None when the search finds nothing."""
        if not self.api_key:
            raise ProviderNotConfiguredError("COMPANIES_HOUSE_API_KEY is not set")

        query = clean_company_name(company_name)
        if not query:
            return None

        data = await self._request(
            "GET",
            f"{COMPANIES_HOUSE_API}/search/companies",
            params={"q": query, "items_per_page": 5},
        )
        items = data.get("items") or []
        if not items:
            logger.info("No registry match", company=query)
            return None

        item = items[0]
        address = item.get("address") or item.get("registered_office_address") or {}
        return RegistryRecord(
            company_name=item.get("title") or query,
            company_number=item.get("company_number"),
            locality=address.get("locality"),
            region=address.get("region"),
            postal_code=address.get("postal_code"),
            sic_codes=[str(code) for code in item.get("sic_codes") or []],
        )
