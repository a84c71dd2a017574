"""Tests for the filter validation boundary."""
import pytest

from app.core.exceptions import ValidationError
from app.models.property_model import ListingType, PropertyStatus, PropertyType
from app.schemas.search_schema import SortOrder, parse_property_filter, parse_search_filters


class TestDefaults:
    def test_empty_input(self):
        filters = parse_search_filters({})
        assert filters.page == 1
        assert filters.limit == 20
        assert filters.sort_by == "createdAt"
        assert filters.sort_order == SortOrder.DESC
        assert filters.property_type is None
        assert filters.has_elevator is False

    def test_blank_strings_are_absent(self):
        filters = parse_search_filters({"query": "  ", "city": "", "listingType": "", "sortBy": ""})
        assert filters.query is None
        assert filters.city is None
        assert filters.listing_type is None
        assert filters.sort_by == "createdAt"

    def test_null_flag_is_false(self):
        assert parse_search_filters({"hasStorage": None}).has_storage is False

    def test_unknown_keys_ignored(self):
        assert parse_search_filters({"colour": "blue"}).page == 1


class TestCoercion:
    def test_query_string_numbers(self):
        filters = parse_search_filters({"page": "2", "limit": "5", "minPrice": "1000.5", "maxArea": "90"})
        assert filters.page == 2
        assert filters.limit == 5
        assert filters.min_price == 1000.5
        assert filters.max_area == 90

    def test_multi_values_from_comma_string(self):
        filters = parse_search_filters({"propertyType": "apartment, villa", "bedrooms": "1,2"})
        assert filters.property_type == (PropertyType.APARTMENT, PropertyType.VILLA)
        assert filters.bedrooms == (1, 2)

    def test_multi_values_from_repeated_keys(self):
        filters = parse_search_filters({"amenities": ["gym", "pool"]})
        assert filters.amenities == ("gym", "pool")

    def test_scalar_becomes_singleton(self):
        assert parse_search_filters({"bathrooms": 2}).bathrooms == (2,)

    def test_sort_order_case_insensitive(self):
        assert parse_search_filters({"sortOrder": "asc"}).sort_order == SortOrder.ASC

    def test_snake_case_keys_accepted(self):
        filters = parse_search_filters({"listing_type": "rent", "min_price": 5})
        assert filters.listing_type == ListingType.RENT
        assert filters.min_price == 5

    def test_filters_are_immutable(self):
        filters = parse_search_filters({})
        with pytest.raises(Exception):
            filters.page = 3


class TestRejection:
    def test_unknown_property_type(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_search_filters({"propertyType": ["apartment", "castle"]})
        assert exc_info.value.field == "propertyType"
        assert exc_info.value.detail[0]["field"] == "propertyType.1"

    def test_negative_price(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_search_filters({"maxPrice": -1})
        assert exc_info.value.field == "maxPrice"

    def test_negative_bedroom(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_search_filters({"bedrooms": "-1"})
        assert exc_info.value.field == "bedrooms"

    def test_message_names_field(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_search_filters({"limit": 0})
        assert str(exc_info.value).startswith("limit:")


class TestPropertyFilter:
    def test_defaults_to_active(self):
        assert parse_property_filter({}).status == PropertyStatus.ACTIVE

    def test_single_type(self):
        assert parse_property_filter({"propertyType": "land"}).property_type == PropertyType.LAND

    def test_unknown_status(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_property_filter({"status": "archived"})
        assert exc_info.value.field == "status"


class TestLenientInput:
    @pytest.mark.parametrize("sort_by", [5, ["price"], {"x": 1}, True, None])
    def test_non_string_sort_by_uses_default(self, sort_by):
        assert parse_search_filters({"sortBy": sort_by}).sort_by == "createdAt"

    def test_non_string_sort_by_on_property_filter(self):
        assert parse_property_filter({"sortBy": 7}).sort_by == "createdAt"

    def test_blank_numbers_are_absent(self):
        filters = parse_search_filters({"minPrice": "", "maxPrice": "500", "minArea": " ", "maxArea": ""})
        assert filters.min_price is None
        assert filters.max_price == 500
        assert filters.min_area is None
        assert filters.max_area is None

    def test_blank_paging_uses_defaults(self):
        filters = parse_search_filters({"page": "", "limit": " "})
        assert filters.page == 1
        assert filters.limit == 20

    def test_blank_numbers_on_property_filter(self):
        filters = parse_property_filter({"minPrice": "", "maxArea": "", "page": "", "limit": ""})
        assert filters.min_price is None
        assert filters.max_area is None
        assert filters.page == 1
        assert filters.limit == 20
