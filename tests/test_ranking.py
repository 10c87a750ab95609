"""
Test suite for relevance filtering and ranking.
"""

import pytest

from siteaudit.core.config import KeywordConfig
from siteaudit.core.models import BusinessSize, KeywordCandidate
from siteaudit.detection.html_content import parse_page
from siteaudit.keywords.ranking import (
    brand_variations,
    extract_services,
    is_branded,
    is_business_specific,
    partition_keywords,
    volume_band,
)


def _kw(keyword, relevance, volume=None):
    return KeywordCandidate(keyword=keyword, relevance_score=relevance, search_volume=volume)


class TestBrandVariations:
    """Test brand variation derivation."""

    def test_descriptor_words_are_not_variations(self):
        """Test "Marketing" alone does not mark a keyword as branded."""
        variations = brand_variations("XYZ Marketing Agency")
        assert "xyz marketing agency" in variations
        assert "xyzmarketingagency" in variations
        assert "marketing" not in variations
        assert "agency" not in variations

    def test_camel_case_brand(self):
        """Test spaced and compound forms are both produced."""
        variations = brand_variations("HenryAdams")
        assert "henryadams" in variations
        assert "henry adams" in variations
        assert "henry" in variations
        assert "adams" in variations

    def test_short_words_are_skipped(self):
        """Test brand words under four characters are not variations on their own."""
        assert "co" not in brand_variations("Acme Co")
        assert "acme" in brand_variations("Acme Co")

    def test_empty_brand(self):
        """Test no brand gives no variations."""
        assert brand_variations("") == []
        assert brand_variations(None) == []

    def test_short_brand_matches_whole_words_only(self):
        """Test a three letter brand does not match inside longer words."""
        variations = brand_variations("Pro")
        assert is_branded("professional plumbing", variations) is False
        assert is_branded("pro plumbing leeds", variations) is True
        assert is_branded("labcoat suppliers", brand_variations("ABC")) is False
        assert is_branded("abc supplies", brand_variations("ABC")) is True

    def test_is_branded_substring(self):
        """Test branded matching is a substring test."""
        variations = brand_variations("Henry Adams")
        assert is_branded("henryadams reviews", variations) is True
        assert is_branded("henry adams estate agents", variations) is True
        assert is_branded("estate agents chichester", variations) is False


class TestBusinessSpecificity:
    """Test the genericity rule."""

    def test_generic_two_word_term_without_overlap_is_rejected(self):
        """Test "best digital marketing agency" is excluded."""
        assert is_business_specific("best digital marketing agency", "Acme", []) is False

    @pytest.mark.parametrize("keyword", ["marketing", "web design", "seo services", "digital marketing"])
    def test_exact_generic_terms_are_rejected(self, keyword):
        """Test exact matches on the generic list."""
        assert is_business_specific(keyword, "Acme", ["web design"]) is False

    def test_region_overlap_rescues_generic_term(self):
        """Test a region name makes a generic keyword specific."""
        assert is_business_specific("digital marketing london", None, []) is True

    def test_service_overlap_rescues_generic_term(self):
        """Test overlap with a detected service."""
        assert is_business_specific(
            "digital marketing for dentists", None, ["marketing for dentists"]
        ) is True

    def test_multi_word_and_modifier_rules(self):
        """Test two words, or a business modifier for single words."""
        assert is_business_specific("conveyancing solicitor", None, []) is True
        assert is_business_specific("solicitor", None, []) is False
        assert is_business_specific("consultant", None, []) is True

    def test_volume_bands(self):
        """Test the size dependent volume bands."""
        assert volume_band(BusinessSize.NEW) == (10, 2500)
        assert volume_band("small") == (10, 2500)
        assert volume_band(BusinessSize.MEDIUM) == (10, 5000)
        assert volume_band("large") == (10, 50000)


class TestPartition:
    """Test branded and non-branded partitioning."""

    def _pool(self):
        return [
            _kw("acme co reviews", 0.95, 90),
            _kw("acme pricing", 0.9),
            _kw("conveyancing solicitor leeds", 0.85, 500),
            _kw("best digital marketing agency", 0.9, 200),
            _kw("family law advice", 0.3, 100),
            _kw("probate solicitor", 0.8, 40000),
            _kw("will writing service", 0.7),
            _kw("estate planning advice", 0.7, 1200),
        ]

    def test_partition_rules(self):
        """Test threshold, band, genericity and strictness."""
        result = partition_keywords(self._pool(), "Acme Co", [], BusinessSize.SMALL, KeywordConfig())

        branded = [k.keyword for k in result.branded]
        non_branded = [k.keyword for k in result.non_branded]

        assert branded == ["acme co reviews", "acme pricing"]
        assert non_branded == [
            "conveyancing solicitor leeds",
            "estate planning advice",
            "will writing service",
        ]
        assert not set(branded) & set(non_branded)

    def test_unknown_volume_skips_band(self):
        """Test keywords without volume are not dropped by the band."""
        result = partition_keywords([_kw("will writing service", 0.7)], "Acme", [], "small")
        assert [k.keyword for k in result.non_branded] == ["will writing service"]

    def test_large_business_band(self):
        """Test large businesses keep higher volume keywords."""
        result = partition_keywords(self._pool(), "Acme Co", [], BusinessSize.LARGE)
        assert "probate solicitor" in [k.keyword for k in result.non_branded]

    def test_caps(self):
        """Test every list is capped."""
        config = KeywordConfig(KEYWORD_NON_BRANDED_CAP=1, KEYWORD_BRANDED_CAP=1, KEYWORD_TOP_CAP=1)
        result = partition_keywords(self._pool(), "Acme Co", [], BusinessSize.SMALL, config)

        assert len(result.branded) == 1
        assert len(result.non_branded) == 1
        assert len(result.top) == 1
        assert result.top[0].keyword == "acme co reviews"

    def test_top_is_sorted_merge(self):
        """Test the top list merges both partitions by relevance then volume."""
        result = partition_keywords(self._pool(), "Acme Co", [], BusinessSize.SMALL)
        scores = [(k.relevance_score, k.search_volume or 0) for k in result.top]
        assert scores == sorted(scores, reverse=True)
        assert len(result.top) == len(result.branded) + len(result.non_branded)

    def test_duplicate_keywords_appear_once(self):
        """Test a repeated keyword cannot land in both lists."""
        pool = [_kw("acme solicitor", 0.9), _kw("acme solicitor", 0.9)]
        result = partition_keywords(pool, "Acme", [], "small")
        assert len(result.branded) == 1
        assert result.non_branded == []


class TestExtractServices:
    """Test service phrase extraction."""

    def test_service_sentences_and_menus(self, legal_html):
        """Test "we offer" sentences and navigation items."""
        services = extract_services(parse_page(legal_html, "smithsolicitors.co.uk"))
        assert "conveyancing" in services
        assert "probate services" in services
        assert "estate planning" in services
        assert len(services) <= 10

    def test_page_without_services(self):
        """Test nothing is invented."""
        assert extract_services(parse_page("<p>Hello there.</p>", "example.com")) == []
