"""
Tests for turning raw query string values into search filters.
"""

import pytest
from decimal import Decimal

from estate_api.models.property import PropertyType, ListingType, PropertyStatus
from estate_api.utils.exceptions import ValidationError
from estate_api.utils.filters import build_search_filters, parse_price_range, parse_featured


class TestParsePriceRange:

    @pytest.mark.parametrize("raw, expected", [
        ("100000-500000", (Decimal("100000"), Decimal("500000"))),
        ("2000000+", (Decimal("2000000"), None)),
        (" 1500 - 3000 ", (Decimal("1500"), Decimal("3000"))),
        ("-500000", (None, Decimal("500000"))),
        ("250000-", (Decimal("250000"), None)),
        ("750000", (Decimal("750000"), None)),
    ])
    def test_valid_ranges(self, raw, expected):
        assert parse_price_range(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_blank_range(self, raw):
        assert parse_price_range(raw) == (None, None)

    def test_unparseable_parts_are_dropped(self):
        """A part that is not a number imposes no bound."""
        assert parse_price_range("cheap-500000") == (None, Decimal("500000"))
        assert parse_price_range("lots+") == (None, None)


class TestParseFeatured:

    def test_true_any_case(self):
        assert parse_featured("true") is True
        assert parse_featured("TRUE") is True

    def test_other_values_are_false(self):
        assert parse_featured("false") is False
        assert parse_featured("yes") is False
        assert parse_featured("1") is False

    def test_blank_means_unset(self):
        assert parse_featured(None) is None
        assert parse_featured("") is None


class TestBuildSearchFilters:

    def test_empty_strings_mean_no_filter(self):
        filters = build_search_filters(
            property_type="", listing_type="", city="", min_price="", max_price="",
            price_range="", status="", bedrooms="", bathrooms="", featured=""
        )

        assert all(value is None for value in vars(filters).values())

    def test_typed_values(self):
        filters = build_search_filters(
            property_type="House",
            listing_type="rent",
            city="  Austin ",
            status="available",
            bedrooms="3",
            bathrooms="2",
            featured="true",
            agent_id="7"
        )

        assert filters.property_type == PropertyType.HOUSE
        assert filters.listing_type == ListingType.RENT
        assert filters.city == "Austin"
        assert filters.status == PropertyStatus.AVAILABLE
        assert filters.bedrooms == 3
        assert filters.bathrooms == 2
        assert filters.featured is True
        assert filters.agent_id == 7

    def test_price_range_fills_bounds(self):
        filters = build_search_filters(price_range="100000-500000")

        assert filters.min_price == Decimal("100000")
        assert filters.max_price == Decimal("500000")

    def test_explicit_bounds_override_range(self):
        """An explicit min or max replaces only its own bound of the range."""
        filters = build_search_filters(price_range="100000-500000", min_price="200000")

        assert filters.min_price == Decimal("200000")
        assert filters.max_price == Decimal("500000")

        filters = build_search_filters(price_range="2000000+", max_price="3000000")

        assert filters.min_price == Decimal("2000000")
        assert filters.max_price == Decimal("3000000")

    @pytest.mark.parametrize("kwargs, field", [
        ({"property_type": "castle"}, "property_type"),
        ({"listing_type": "lease"}, "listing_type"),
        ({"status": "gone"}, "status"),
        ({"bedrooms": "three"}, "bedrooms"),
        ({"bathrooms": "-1"}, "bathrooms"),
        ({"min_price": "abc"}, "min_price"),
        ({"max_price": "-5"}, "max_price"),
    ])
    def test_invalid_values(self, kwargs, field):
        with pytest.raises(ValidationError) as exc_info:
            build_search_filters(**kwargs)

        assert exc_info.value.status_code == 400
        assert exc_info.value.field_errors[0]["field"] == field
