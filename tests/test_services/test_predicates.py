"""Tests for filter compilation and individual predicates."""
from sqlalchemy.dialects import sqlite

from app.schemas.search_schema import SortOrder, parse_property_filter, parse_search_filters
from app.services.filter_service import (
    AnyOf,
    Between,
    Contains,
    Equals,
    HasAnyAmenity,
    IsTrue,
    Positive,
    TextQuery,
    compile_filters,
    compile_property_filter,
    resolve_sort,
)
from tests.conftest import make_record


def _sql(clause) -> str:
    return str(clause.compile(dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True}))


class TestPredicates:
    def test_equals_unwraps_enums(self):
        record = make_record(listing_type="rent")
        assert Equals("listing_type", "rent").matches(record)
        assert not Equals("listing_type", "sale").matches(record)

    def test_between_is_inclusive(self):
        pred = Between("price", 100, 200)
        assert pred.matches(make_record(price=100))
        assert pred.matches(make_record(price=200))
        assert not pred.matches(make_record(price=201))

    def test_between_missing_value_never_matches(self):
        assert not Between("year_built", minimum=2000).matches(make_record(year_built=None))

    def test_any_of(self):
        pred = AnyOf("property_type", frozenset({"villa", "land"}))
        assert pred.matches(make_record(property_type="villa"))
        assert not pred.matches(make_record(property_type="office"))

    def test_is_true_and_positive(self):
        assert IsTrue("has_storage").matches(make_record(has_storage=True))
        assert not IsTrue("has_storage").matches(make_record(has_storage=False))
        assert Positive("parking_spaces").matches(make_record(parking_spaces=1))
        assert not Positive("parking_spaces").matches(make_record(parking_spaces=0))

    def test_has_any_amenity(self):
        pred = HasAnyAmenity(frozenset({"pool"}))
        assert pred.matches(make_record(amenities=["gym", "pool"]))
        assert not pred.matches(make_record(amenities=["gym"]))

    def test_contains_and_text_query_ignore_case(self):
        record = make_record(title="Garden House", city="North Bay")
        assert Contains("city", "BAY").matches(record)
        assert TextQuery("garden").matches(record)
        assert not TextQuery("penthouse").matches(record)

    def test_predicates_are_hashable_values(self):
        assert Between("area", 10, 20) == Between("area", 10, 20)
        assert len({Equals("city", "x"), Equals("city", "x")}) == 1


class TestClauses:
    def test_range_clause(self):
        sql = _sql(Between("price", 100, 200).clause())
        assert "properties.price >= 100" in sql
        assert "properties.price <= 200" in sql

    def test_in_clause(self):
        assert "IN (2, 3)" in _sql(AnyOf("bedrooms", frozenset({3, 2})).clause())

    def test_amenity_clause_uses_exists(self):
        assert "EXISTS" in _sql(HasAnyAmenity(frozenset({"gym"})).clause())

    def test_contains_escapes_wildcards(self):
        sql = _sql(Contains("city", "50%").clause())
        assert "ESCAPE" in sql


class TestCompileFilters:
    def test_empty_filters_compile_to_no_predicates(self):
        plan = compile_filters(parse_search_filters({}))
        assert plan.predicates == ()
        assert plan.status == "active"
        assert plan.sort.field == "created_at"
        assert plan.sort.descending is True

    def test_one_predicate_per_active_filter(self):
        plan = compile_filters(parse_search_filters({
            "query": "loft",
            "propertyType": ["apartment"],
            "minPrice": 10,
            "maxPrice": 20,
            "bedrooms": [1],
            "hasElevator": True,
            "hasBalcony": False,
        }))
        kinds = sorted(type(p).__name__ for p in plan.predicates)
        assert kinds == ["AnyOf", "AnyOf", "Between", "IsTrue", "TextQuery"]

    def test_predicates_ordered_by_cost(self):
        plan = compile_filters(parse_search_filters({
            "query": "loft", "city": "bay", "amenities": "gym", "propertyType": "villa", "hasStorage": True,
        }))
        costs = [p.cost for p in plan.predicates]
        assert costs == sorted(costs)

    def test_page_window(self):
        plan = compile_filters(parse_search_filters({"page": 3, "limit": 15}))
        assert plan.offset == 30
        assert plan.limit == 15

    def test_resolve_sort(self):
        assert resolve_sort("price", SortOrder.ASC).field == "price"
        assert resolve_sort("price", SortOrder.ASC).descending is False
        assert resolve_sort("bogus", SortOrder.DESC).field == "created_at"


class TestCompilePropertyFilter:
    def test_rooms_are_minimums(self):
        plan = compile_property_filter(parse_property_filter({"bedrooms": "2"}))
        assert plan.predicates == (Between("bedrooms", minimum=2),)

    def test_explicit_status(self):
        plan = compile_property_filter(parse_property_filter({"status": "sold"}))
        assert plan.status == "sold"

    def test_is_featured_false_is_a_constraint(self):
        plan = compile_property_filter(parse_property_filter({"isFeatured": "false"}))
        assert Equals("is_featured", False) in plan.predicates
