"""
Test suite for location context building.
"""

import asyncio
from unittest.mock import AsyncMock, Mock

from siteaudit.core.exceptions import ExternalServiceError
from siteaudit.core.models import RegistryRecord
from siteaudit.detection.location import (
    build_location_context,
    lookup_registry,
    mentioned_cities,
    region_for,
    registry_terms,
)


class TestLocationContext:
    """Test location context derived from page text."""

    def test_cities_in_order_of_mention(self):
        """Test the first mentioned city becomes the primary location."""
        context = build_location_context("Local plumbers serving Manchester, Leeds and London.")
        assert context.primary_location == "Manchester"
        assert context.detected_location == "Manchester"
        assert context.service_area == ["Manchester", "Leeds", "London"]
        assert context.is_local_business is True

    def test_no_location(self):
        """Test text without places."""
        context = build_location_context("We make software.")
        assert context.best_location is None
        assert context.service_area == []
        assert context.is_local_business is False

    def test_registry_locality_takes_priority(self):
        """Test a registry record refines the detected location."""
        record = RegistryRecord(company_name="Smith Ltd", locality="salford")
        context = build_location_context("offices in manchester", record)
        assert context.detected_location == "Salford"
        assert context.primary_location == "Manchester"
        assert context.best_location == "Salford"

    def test_target_cities_are_capped(self):
        """Test at most five target cities."""
        text = "london manchester birmingham glasgow liverpool bristol sheffield"
        context = build_location_context(text)
        assert len(context.target_cities) == 5
        assert len(context.service_area) == 7

    def test_city_match_is_word_bounded(self):
        """Test partial words do not count as cities."""
        assert mentioned_cities("leedsville") == []

    def test_region_for(self):
        """Test places map to UK regions."""
        assert region_for("Leeds") == "north_england"
        assert region_for("Brighton") == "south_east"
        assert region_for("Paris") is None
        assert region_for(None) is None


class TestRegistryEnrichment:
    """Test registry lookups and SIC terms."""

    def test_lookup_returns_record(self):
        """Test a successful lookup."""
        record = RegistryRecord(company_name="SMITH SOLICITORS LLP", locality="Leeds", sic_codes=["69102"])
        provider = Mock()
        provider.lookup = AsyncMock(return_value=record)

        result = asyncio.run(lookup_registry(provider, "Smith Solicitors"))
        assert result == record
        provider.lookup.assert_awaited_once_with("Smith Solicitors")

    def test_lookup_failure_is_isolated(self):
        """Test provider errors leave the context text-derived."""
        provider = Mock()
        provider.lookup = AsyncMock(side_effect=ExternalServiceError("companies_house", "HTTP 500", 500))
        assert asyncio.run(lookup_registry(provider, "Smith Solicitors")) is None

    def test_lookup_without_provider(self):
        """Test no provider means no lookup."""
        assert asyncio.run(lookup_registry(None, "Smith Solicitors")) is None

    def test_registry_terms(self):
        """Test SIC codes become industry terms, unknown codes are ignored."""
        assert registry_terms(["69102", "99999", "69109"]) == [
            "solicitors",
            "legal services",
            "legal advice",
        ]
