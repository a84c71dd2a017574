"""Tests for the in-memory search engine: filtering, sorting and pagination."""
from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import ValidationError
from app.services.search_service import search, total_pages
from tests.conftest import make_record

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def three_listings():
    p1 = make_record(title="P1", price=100, area=50, property_type="apartment", city="Tehran",
                     created_at=BASE_TIME + timedelta(days=3))
    p2 = make_record(title="P2", price=200, area=80, property_type="villa", city="Tehran",
                     created_at=BASE_TIME + timedelta(days=2))
    p3 = make_record(title="P3", price=150, area=60, property_type="apartment", city="Karaj",
                     created_at=BASE_TIME + timedelta(days=1))
    return [p1, p2, p3]


def _titles(result):
    return [item.title for item in result.data]


class TestConcreteScenario:
    def test_type_and_city(self, three_listings):
        result = search({"propertyType": ["apartment"], "city": "Tehran", "page": 1, "limit": 10}, three_listings)
        assert _titles(result) == ["P1"]
        assert result.total == 1
        assert result.total_pages == 1

    def test_price_range(self, three_listings):
        result = search({"minPrice": 120, "maxPrice": 180}, three_listings)
        assert _titles(result) == ["P3"]
        assert result.total == 1

    def test_second_page_of_default_sort(self, three_listings):
        result = search({"limit": 2, "page": 2}, three_listings)
        assert _titles(result) == ["P3"]
        assert result.total == 3
        assert result.total_pages == 2


class TestFiltering:
    def test_empty_filters_match_all_active(self, three_listings):
        result = search({}, three_listings)
        assert result.total == 3
        assert _titles(result) == ["P1", "P2", "P3"]

    def test_none_raw_is_empty_filters(self, three_listings):
        assert search(None, three_listings).total == 3

    def test_inactive_listings_excluded(self):
        records = [make_record(title="open"), make_record(title="gone", status="sold")]
        assert _titles(search({}, records)) == ["open"]

    def test_property_type_any_of(self):
        records = [
            make_record(title="a", property_type="apartment"),
            make_record(title="v", property_type="villa"),
            make_record(title="o", property_type="office"),
        ]
        result = search({"propertyType": "apartment,villa", "sortBy": "price", "sortOrder": "asc"}, records)
        assert sorted(_titles(result)) == ["a", "v"]

    def test_bedrooms_any_of(self):
        records = [make_record(title=str(n), bedrooms=n) for n in range(5)]
        result = search({"bedrooms": ["2", "4"]}, records)
        assert sorted(_titles(result)) == ["2", "4"]

    def test_half_open_price_range(self):
        records = [make_record(title=str(p), price=p) for p in (50, 100, 150)]
        assert sorted(_titles(search({"minPrice": 100}, records))) == ["100", "150"]
        assert sorted(_titles(search({"maxPrice": 100}, records))) == ["100", "50"]

    def test_inverted_range_matches_nothing(self):
        records = [make_record(price=p) for p in (50, 100, 150)]
        result = search({"minPrice": 200, "maxPrice": 10}, records)
        assert result.total == 0
        assert result.total_pages == 0

    def test_city_is_case_insensitive_substring(self):
        records = [make_record(title="x", city="Harbor City"), make_record(title="y", city="Lakeside")]
        assert _titles(search({"city": "harbor"}, records)) == ["x"]

    def test_text_query_matches_any_text_field(self):
        records = [
            make_record(title="Sea view loft"),
            make_record(title="Plain", description="has a SEA breeze"),
            make_record(title="Other", address="1 Sea Road"),
            make_record(title="None"),
        ]
        result = search({"query": "sea"}, records)
        assert sorted(_titles(result)) == ["Other", "Plain", "Sea view loft"]

    def test_amenities_match_any(self):
        records = [
            make_record(title="gym", amenities=["gym"]),
            make_record(title="pool", amenities=["pool", "sauna"]),
            make_record(title="none", amenities=[]),
        ]
        result = search({"amenities": ["gym", "pool"]}, records)
        assert sorted(_titles(result)) == ["gym", "pool"]

    def test_has_parking_uses_parking_spaces(self):
        records = [make_record(title="p", parking_spaces=2), make_record(title="n", parking_spaces=0)]
        assert _titles(search({"hasParking": True}, records)) == ["p"]

    def test_false_flag_does_not_constrain(self):
        records = [make_record(title="b", has_balcony=True), make_record(title="n", has_balcony=False)]
        assert search({"hasBalcony": False}, records).total == 2
        assert search({"hasBalcony": "false"}, records).total == 2
        assert _titles(search({"hasBalcony": "true"}, records)) == ["b"]


class TestSortingAndPaging:
    def test_sort_by_price_ascending(self):
        records = [make_record(title=str(p), price=p) for p in (300, 100, 200)]
        result = search({"sortBy": "price", "sortOrder": "ASC"}, records)
        assert _titles(result) == ["100", "200", "300"]

    def test_unknown_sort_field_falls_back_to_created_at(self, three_listings):
        result = search({"sortBy": "title; DROP TABLE"}, three_listings)
        assert _titles(result) == ["P1", "P2", "P3"]

    def test_equal_sort_keys_keep_collection_order(self):
        records = [make_record(title=str(i), price=100) for i in range(5)]
        for order in ("ASC", "DESC"):
            result = search({"sortBy": "price", "sortOrder": order}, records)
            assert _titles(result) == ["0", "1", "2", "3", "4"]

    def test_page_beyond_last_is_empty(self, three_listings):
        result = search({"page": 9, "limit": 2}, three_listings)
        assert result.data == []
        assert result.total == 3
        assert result.total_pages == 2

    def test_empty_result_has_zero_pages(self):
        result = search({}, [])
        assert result.total == 0
        assert result.total_pages == 0
        assert result.page == 1
        assert result.limit == 20


class TestValidation:
    @pytest.mark.parametrize("raw, field", [
        ({"propertyType": "castle"}, "propertyType"),
        ({"listingType": "lease"}, "listingType"),
        ({"sortOrder": "sideways"}, "sortOrder"),
        ({"minPrice": "cheap"}, "minPrice"),
        ({"limit": 500}, "limit"),
        ({"page": 0}, "page"),
    ])
    def test_invalid_values_name_the_field(self, raw, field):
        with pytest.raises(ValidationError) as exc_info:
            search(raw, [])
        assert exc_info.value.field == field


def test_total_pages():
    assert total_pages(0, 20) == 0
    assert total_pages(1, 20) == 1
    assert total_pages(20, 20) == 1
    assert total_pages(21, 20) == 2


def test_mixed_naive_and_aware_timestamps_sort_together():
    naive = make_record(title="naive", created_at=datetime(2030, 1, 1))
    aware = make_record(title="aware")
    result = search({}, [aware, naive])
    assert _titles(result) == ["naive", "aware"]
    assert result.data[0].created_at.tzinfo is not None
