"""Filter service — compiles validated filters into an explicit predicate plan.

Every active filter becomes exactly one immutable predicate value. A predicate
can be evaluated two ways with identical semantics:

- ``matches(record)`` against any object exposing the property attributes
  (ORM rows, ``PropertyRead`` instances, client-side collections)
- ``clause()`` as a SQLAlchemy boolean expression on ``Property``

Absent or default filters produce no predicate, so an empty filter set
compiles to an empty predicate tuple ("match everything").
"""
import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, FrozenSet, List, Optional, Tuple

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from app.core.logging import get_logger
from app.models.property_amenity_model import PropertyAmenity
from app.models.property_model import Property, PropertyStatus
from app.schemas.search_schema import PropertyFilter, SearchFilters, SortOrder

logger = get_logger(__name__)

DEFAULT_SORT_FIELD = "created_at"

# Public sort keys -> Property attribute. Anything else falls back to created_at.
SORT_FIELDS = {
    "createdAt": "created_at",
    "created_at": "created_at",
    "price": "price",
    "area": "area",
    "views": "views",
}

TEXT_SEARCH_FIELDS = ("title", "description", "address")


def _plain(value: Any) -> Any:
    """Unwrap enum members so str-enums and raw strings compare and hash alike."""
    return value.value if isinstance(value, enum.Enum) else value


class Predicate(ABC):
    """A single boolean test over one property, derived from one filter field."""

    # Relative evaluation cost; cheaper predicates run first.
    cost: ClassVar[int] = 1

    @abstractmethod
    def matches(self, record: Any) -> bool:
        ...

    @abstractmethod
    def clause(self) -> ColumnElement[bool]:
        ...


@dataclass(frozen=True)
class Equals(Predicate):
    field: str
    value: Any

    def matches(self, record: Any) -> bool:
        return _plain(getattr(record, self.field)) == self.value

    def clause(self) -> ColumnElement[bool]:
        return getattr(Property, self.field) == self.value


@dataclass(frozen=True)
class Between(Predicate):
    """Inclusive range; either bound may be omitted (half-open range)."""
    field: str
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def matches(self, record: Any) -> bool:
        value = getattr(record, self.field)
        if value is None:
            return False
        if self.minimum is not None and value < self.minimum:
            return False
        if self.maximum is not None and value > self.maximum:
            return False
        return True

    def clause(self) -> ColumnElement[bool]:
        column = getattr(Property, self.field)
        bounds = []
        if self.minimum is not None:
            bounds.append(column >= self.minimum)
        if self.maximum is not None:
            bounds.append(column <= self.maximum)
        return and_(*bounds)


@dataclass(frozen=True)
class IsTrue(Predicate):
    field: str

    def matches(self, record: Any) -> bool:
        return bool(getattr(record, self.field))

    def clause(self) -> ColumnElement[bool]:
        return getattr(Property, self.field).is_(True)


@dataclass(frozen=True)
class Positive(Predicate):
    field: str

    def matches(self, record: Any) -> bool:
        return (getattr(record, self.field) or 0) > 0

    def clause(self) -> ColumnElement[bool]:
        return getattr(Property, self.field) > 0


@dataclass(frozen=True)
class AnyOf(Predicate):
    """IN semantics: the field value is one of ``values``."""
    cost: ClassVar[int] = 2

    field: str
    values: FrozenSet[Any]

    def matches(self, record: Any) -> bool:
        return _plain(getattr(record, self.field)) in self.values

    def clause(self) -> ColumnElement[bool]:
        return getattr(Property, self.field).in_(sorted(self.values))


@dataclass(frozen=True)
class HasAnyAmenity(Predicate):
    """True when the property carries at least one of the requested tags."""
    cost: ClassVar[int] = 3

    values: FrozenSet[str]

    def matches(self, record: Any) -> bool:
        return not self.values.isdisjoint(getattr(record, "amenities", None) or ())

    def clause(self) -> ColumnElement[bool]:
        return Property.amenity_links.any(PropertyAmenity.name.in_(sorted(self.values)))


@dataclass(frozen=True)
class Contains(Predicate):
    """Case-insensitive substring match on a single text field."""
    cost: ClassVar[int] = 4

    field: str
    text: str

    def matches(self, record: Any) -> bool:
        return self.text.lower() in (getattr(record, self.field) or "").lower()

    def clause(self) -> ColumnElement[bool]:
        return getattr(Property, self.field).icontains(self.text, autoescape=True)


@dataclass(frozen=True)
class TextQuery(Predicate):
    """Free text: substring of title OR description OR address."""
    cost: ClassVar[int] = 5

    text: str
    fields: Tuple[str, ...] = TEXT_SEARCH_FIELDS

    def matches(self, record: Any) -> bool:
        needle = self.text.lower()
        return any(needle in (getattr(record, f) or "").lower() for f in self.fields)

    def clause(self) -> ColumnElement[bool]:
        return or_(*(getattr(Property, f).icontains(self.text, autoescape=True) for f in self.fields))


@dataclass(frozen=True)
class SortDirective:
    field: str
    descending: bool = True


@dataclass(frozen=True)
class SearchPlan:
    """Compiled search: ordered predicates, status scope, sort and page window."""
    predicates: Tuple[Predicate, ...]
    sort: SortDirective
    page: int
    limit: int
    status: Optional[str] = PropertyStatus.ACTIVE.value

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def matches(self, record: Any) -> bool:
        if self.status is not None and _plain(getattr(record, "status", None)) != self.status:
            return False
        return all(predicate.matches(record) for predicate in self.predicates)

    def where_clauses(self) -> List[ColumnElement[bool]]:
        clauses: List[ColumnElement[bool]] = []
        if self.status is not None:
            clauses.append(Property.status == self.status)
        clauses.extend(predicate.clause() for predicate in self.predicates)
        return clauses


def resolve_sort(sort_by: str, sort_order: SortOrder) -> SortDirective:
    """Map a public sort key onto a Property attribute, falling back to created_at."""
    field = SORT_FIELDS.get(sort_by)
    if field is None:
        logger.debug("Unsupported sort field %r, using %s", sort_by, DEFAULT_SORT_FIELD)
        field = DEFAULT_SORT_FIELD
    return SortDirective(field=field, descending=sort_order == SortOrder.DESC)


def _range(field: str, minimum: Optional[float], maximum: Optional[float]) -> Optional[Between]:
    if minimum is None and maximum is None:
        return None
    return Between(field, minimum, maximum)


def _build_plan(predicates: List[Optional[Predicate]], filters, status: Optional[str]) -> SearchPlan:
    active = [p for p in predicates if p is not None]
    return SearchPlan(
        predicates=tuple(sorted(active, key=lambda p: p.cost)),
        sort=resolve_sort(filters.sort_by, filters.sort_order),
        page=filters.page,
        limit=filters.limit,
        status=status,
    )


def compile_filters(filters: SearchFilters) -> SearchPlan:
    """Compile public search filters into a plan scoped to active listings."""
    predicates: List[Optional[Predicate]] = []

    if filters.query:
        predicates.append(TextQuery(filters.query))
    if filters.property_type:
        predicates.append(AnyOf("property_type", frozenset(t.value for t in filters.property_type)))
    if filters.listing_type:
        predicates.append(Equals("listing_type", filters.listing_type.value))

    predicates.append(_range("price", filters.min_price, filters.max_price))
    predicates.append(_range("area", filters.min_area, filters.max_area))

    if filters.bedrooms:
        predicates.append(AnyOf("bedrooms", frozenset(filters.bedrooms)))
    if filters.bathrooms:
        predicates.append(AnyOf("bathrooms", frozenset(filters.bathrooms)))

    if filters.city:
        predicates.append(Contains("city", filters.city))
    if filters.district:
        predicates.append(Contains("district", filters.district))

    if filters.amenities:
        predicates.append(HasAnyAmenity(frozenset(filters.amenities)))

    # Flags only ever narrow: False means "no constraint", never "must be False".
    if filters.has_elevator:
        predicates.append(IsTrue("has_elevator"))
    if filters.has_parking:
        predicates.append(Positive("parking_spaces"))
    if filters.has_balcony:
        predicates.append(IsTrue("has_balcony"))
    if filters.has_storage:
        predicates.append(IsTrue("has_storage"))

    return _build_plan(predicates, filters, PropertyStatus.ACTIVE.value)


def compile_property_filter(filters: PropertyFilter) -> SearchPlan:
    """Compile listing-endpoint filters (single type, minimum rooms, explicit status)."""
    predicates: List[Optional[Predicate]] = []

    if filters.property_type:
        predicates.append(Equals("property_type", filters.property_type.value))
    if filters.listing_type:
        predicates.append(Equals("listing_type", filters.listing_type.value))

    predicates.append(_range("price", filters.min_price, filters.max_price))
    predicates.append(_range("area", filters.min_area, filters.max_area))

    if filters.bedrooms:
        predicates.append(Between("bedrooms", minimum=filters.bedrooms))
    if filters.bathrooms:
        predicates.append(Between("bathrooms", minimum=filters.bathrooms))

    if filters.city:
        predicates.append(Contains("city", filters.city))
    if filters.district:
        predicates.append(Contains("district", filters.district))

    if filters.is_featured is not None:
        predicates.append(Equals("is_featured", filters.is_featured))

    return _build_plan(predicates, filters, filters.status.value)
