"""Tests for the area registry and postcode eligibility."""

import pytest

from pb_portal.services.area_registry import (
    CROSS_AREA,
    DEFAULT_AREA_BUDGETS,
    clear_cache,
    find_area_for_postcode,
    get_area_budgets,
    get_priority_categories,
    list_areas,
    normalize_postcode,
)


class TestNormalizePostcode:
    """Upper-case, whitespace removed."""

    @pytest.mark.parametrize("raw", ["np4 9aa", "NP4 9AA", " np49aa ", "NP4\t9AA"])
    def test_variants(self, raw):
        assert normalize_postcode(raw) == "NP49AA"

    def test_empty(self):
        assert normalize_postcode("") == ""
        assert normalize_postcode(None) == ""


class TestFindArea:
    """Lookups against pb_portal/data/areas.yaml."""

    def test_blaenavon(self):
        assert find_area_for_postcode("np4 9aa") == "Blaenavon"

    def test_thornhill(self):
        assert find_area_for_postcode("NP44 1AA") == "Thornhill & Upper Cwmbran"

    def test_trevethin(self):
        assert find_area_for_postcode("np4 8aa") == "Trevethin, Penygarn & St. Cadocs"

    def test_outside_area(self):
        assert find_area_for_postcode("CF10 1AA") is None

    def test_empty(self):
        assert find_area_for_postcode("") is None


class TestAreas:
    """Area names, budgets and priority categories."""

    def test_three_areas(self):
        assert list_areas() == list(DEFAULT_AREA_BUDGETS)

    def test_cross_area_is_not_an_area(self):
        assert CROSS_AREA == "Cross-Area"
        assert CROSS_AREA not in list_areas()

    def test_budgets(self):
        assert get_area_budgets() == DEFAULT_AREA_BUDGETS

    def test_priority_categories_include_other(self):
        categories = get_priority_categories()
        assert "Other" in categories
        assert "Health & Wellbeing" in categories

    def test_categories_returned_as_copy(self):
        get_priority_categories().clear()
        assert get_priority_categories()


class TestFallback:
    """Missing areas.yaml → built-in areas, no postcodes."""

    def test_defaults(self, empty_config_dir):
        assert get_area_budgets() == DEFAULT_AREA_BUDGETS
        assert find_area_for_postcode("NP4 9AA") is None

    def test_custom_file(self, empty_config_dir):
        (empty_config_dir / "areas.yaml").write_text(
            "areas:\n"
            "  - name: North\n"
            "    budget: 1000\n"
            "    postcodes: [ab1 2cd]\n"
            "priority_categories: [Parks]\n"
        )
        assert list_areas() == ["North"]
        assert get_area_budgets() == {"North": 1000.0}
        assert find_area_for_postcode("AB12CD") == "North"
        assert get_priority_categories() == ["Parks", "Other"]

    def test_cache(self, empty_config_dir):
        assert "North" not in list_areas()
        (empty_config_dir / "areas.yaml").write_text("areas:\n  - name: North\n")
        assert "North" not in list_areas()
        clear_cache()
        assert list_areas() == ["North"]
