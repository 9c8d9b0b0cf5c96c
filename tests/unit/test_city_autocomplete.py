"""
Unit tests for destination suggestions
"""
import pytest

from tebitrip.services.city_autocomplete import MAX_SUGGESTIONS, POPULAR_CITIES, suggest_cities


def test_case_insensitive_substring_match():
    suggestions = suggest_cities("pARis")
    assert [s.full_text for s in suggestions] == ["Paris, France"]
    assert suggestions[0].city_name == "Paris"
    assert suggestions[0].id == "Paris-0"


def test_matches_country_part():
    assert "Kyoto, Japan" in [s.full_text for s in suggest_cities("japan")]


@pytest.mark.parametrize("query", ["", "   "])
def test_blank_query_has_no_suggestions(query):
    assert suggest_cities(query) == []


def test_no_match():
    assert suggest_cities("Atlantis") == []


def test_results_are_capped():
    assert len(suggest_cities("a")) == MAX_SUGGESTIONS
    assert len(suggest_cities("a", limit=3)) == 3


def test_custom_city_list():
    suggestions = suggest_cities("porto", cities=["Porto, Portugal", "Porto Alegre, Brazil"])
    assert [s.id for s in suggestions] == ["Porto-0", "Porto Alegre-1"]


def test_known_cities_are_unique():
    assert len(set(POPULAR_CITIES)) == len(POPULAR_CITIES)
