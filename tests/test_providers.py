"""
Test suite for the external data provider clients.

Every client is driven through ``httpx.MockTransport``; no test reaches a real API.
"""

import asyncio
import base64
import json

import httpx
import pytest

from siteaudit.core.exceptions import ExternalServiceError, ProviderNotConfiguredError
from siteaudit.providers.companies_house import CompaniesHouseClient, clean_company_name
from siteaudit.providers.google_suggest import GoogleSuggestClient
from siteaudit.providers.keywords_everywhere import KeywordsEverywhereClient, api_country
from siteaudit.providers.valueserp import ValueSerpClient


def _recording_transport(handler):
    """Wrap a handler so every request it sees is kept for assertions."""
    requests = []

    def record(request):
        requests.append(request)
        return handler(request)

    return httpx.MockTransport(record), requests


class TestKeywordsEverywhere:
    """Test the volume client."""

    @staticmethod
    def _volumes(request):
        body = json.loads(request.content)
        data = [
            {"keyword": kw, "vol": 100 + i, "cpc": {"currency": "£", "value": "1.20"}, "competition": 0.3}
            for i, kw in enumerate(body["kw"])
        ]
        return httpx.Response(200, json={"data": data})

    def test_request_shape_and_parsing(self):
        """Test bearer auth, the uk market code and row parsing."""
        transport, requests = _recording_transport(self._volumes)
        client = KeywordsEverywhereClient("ke-key", transport=transport)

        rows = asyncio.run(client.get_search_volumes(["probate solicitor", "will writing"], "gb"))

        assert len(requests) == 1
        request = requests[0]
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Bearer ke-key"
        body = json.loads(request.content)
        assert body["country"] == "UK"
        assert body["currency"] == "GBP"
        assert body["dataSource"] == "gkp"
        assert body["kw"] == ["probate solicitor", "will writing"]

        assert [r.keyword for r in rows] == ["probate solicitor", "will writing"]
        assert rows[0].volume == 100
        assert rows[0].cpc == pytest.approx(1.2)
        assert rows[0].competition == pytest.approx(0.3)

    def test_large_requests_are_split(self):
        """Test at most 100 keywords go in one request."""
        transport, requests = _recording_transport(self._volumes)
        client = KeywordsEverywhereClient("ke-key", batch_delay=0, transport=transport)
        keywords = [f"keyword {i}" for i in range(150)]

        rows = asyncio.run(client.get_search_volumes(keywords, "us"))

        assert len(requests) == 2
        assert [len(json.loads(r.content)["kw"]) for r in requests] == [100, 50]
        assert json.loads(requests[0].content)["country"] == "US"
        assert len(rows) == 150

    def test_missing_key(self):
        """Test the client refuses to run without a key."""
        client = KeywordsEverywhereClient(None)
        with pytest.raises(ProviderNotConfiguredError):
            asyncio.run(client.get_search_volumes(["a b"]))

    def test_http_error(self):
        """Test server errors carry their status code."""
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="oops"))
        client = KeywordsEverywhereClient("ke-key", transport=transport)

        with pytest.raises(ExternalServiceError) as exc_info:
            asyncio.run(client.get_search_volumes(["a b"]))
        assert exc_info.value.status_code == 500
        assert exc_info.value.service == "keywords_everywhere"

    def test_error_payload(self):
        """Test an error reported in a 200 body."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"error": "Invalid key"}))
        client = KeywordsEverywhereClient("ke-key", transport=transport)

        with pytest.raises(ExternalServiceError, match="Invalid key"):
            asyncio.run(client.get_search_volumes(["a b"]))

    def test_invalid_json(self):
        """Test an undecodable body is a service error."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
        client = KeywordsEverywhereClient("ke-key", transport=transport)

        with pytest.raises(ExternalServiceError, match="Invalid JSON"):
            asyncio.run(client.get_search_volumes(["a b"]))

    @pytest.mark.parametrize("country,expected", [("gb", "uk"), ("GB", "uk"), ("us", "us"), (None, "uk")])
    def test_api_country(self, country, expected):
        """Test the market code translation."""
        assert api_country(country) == expected


class TestValueSerp:
    """Test the ranking position client."""

    @staticmethod
    def _serp(request):
        return httpx.Response(
            200,
            json={
                "request_info": {"success": True},
                "organic_results": [
                    {"position": 1, "link": "https://www.example.com/"},
                    {"position": 2, "link": "https://blog.smithsolicitors.co.uk/probate"},
                    {"position": 3, "link": "https://www.smithsolicitors.co.uk/"},
                ],
            },
        )

    def test_position_matches_registered_domain(self):
        """Test subdomains and www count as the audited domain."""
        transport, requests = _recording_transport(self._serp)
        client = ValueSerpClient("serp-key", transport=transport)

        position = asyncio.run(client.check_keyword_position("probate solicitor", "smithsolicitors.co.uk"))

        assert position == 2
        params = requests[0].url.params
        assert params["api_key"] == "serp-key"
        assert params["q"] == "probate solicitor"
        assert params["gl"] == "uk"
        assert params["google_domain"] == "google.co.uk"

    def test_not_ranking(self):
        """Test a domain absent from the results."""
        client = ValueSerpClient("serp-key", transport=httpx.MockTransport(self._serp))
        assert asyncio.run(client.check_keyword_position("probate", "acme.co.uk")) is None

    def test_unsuccessful_request(self):
        """Test a failed search is an error, not a missing ranking."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"request_info": {"success": False}})
        )
        client = ValueSerpClient("serp-key", transport=transport)
        with pytest.raises(ExternalServiceError):
            asyncio.run(client.check_keyword_position("probate", "acme.co.uk"))

    def test_missing_key(self):
        """Test the client refuses to run without a key."""
        with pytest.raises(ProviderNotConfiguredError):
            asyncio.run(ValueSerpClient("").check_keyword_position("probate", "acme.co.uk"))


class TestGoogleSuggest:
    """Test the autocomplete client."""

    def test_suggestions(self):
        """Test the suggestion list is read from the second element."""
        transport, requests = _recording_transport(
            lambda request: httpx.Response(200, json=["solicitor", ["solicitor near me", "", "solicitor fees"]])
        )
        client = GoogleSuggestClient(transport=transport)

        assert asyncio.run(client.suggest("solicitor")) == ["solicitor near me", "solicitor fees"]
        assert requests[0].url.params["gl"] == "gb"
        assert requests[0].url.params["client"] == "firefox"

    def test_unexpected_payload(self):
        """Test an odd payload gives no suggestions."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"suggestions": []}))
        assert asyncio.run(GoogleSuggestClient(transport=transport).suggest("solicitor")) == []


class TestCompaniesHouse:
    """Test the registry client."""

    @staticmethod
    def _search(request):
        return httpx.Response(
            200,
            json={
                "items": [
                    {
                        "title": "SMITH SOLICITORS LLP",
                        "company_number": "OC123456",
                        "address": {"locality": "Leeds", "region": "West Yorkshire", "postal_code": "LS1 1AA"},
                        "sic_codes": ["69102"],
                    }
                ]
            },
        )

    def test_lookup(self):
        """Test basic auth, the cleaned query and record parsing."""
        transport, requests = _recording_transport(self._search)
        client = CompaniesHouseClient("ch-key", transport=transport)

        record = asyncio.run(client.lookup("Smith Solicitors Ltd"))

        expected_auth = "Basic " + base64.b64encode(b"ch-key:").decode()
        assert requests[0].headers["Authorization"] == expected_auth
        assert requests[0].url.path == "/search/companies"
        assert requests[0].url.params["q"] == "Smith Solicitors"

        assert record.company_name == "SMITH SOLICITORS LLP"
        assert record.company_number == "OC123456"
        assert record.locality == "Leeds"
        assert record.postal_code == "LS1 1AA"
        assert record.sic_codes == ["69102"]

    def test_no_match(self):
        """Test an empty search result."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"items": []}))
        assert asyncio.run(CompaniesHouseClient("ch-key", transport=transport).lookup("Nobody")) is None

    def test_missing_key(self):
        """Test the client refuses to run without a key."""
        with pytest.raises(ProviderNotConfiguredError):
            asyncio.run(CompaniesHouseClient(None).lookup("Smith"))

    @pytest.mark.parametrize(
        "name,expected",
        [("Smith Solicitors Ltd", "Smith Solicitors"), ("Acme Limited", "Acme"), ("Bright PLC.", "Bright")],
    )
    def test_clean_company_name(self, name, expected):
        """Test legal suffixes are stripped."""
        assert clean_company_name(name) == expected
