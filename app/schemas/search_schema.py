"""Search filter specification, its validation boundary, and the result envelope.

Raw filters arrive as loosely typed key/value pairs (query strings, JSON bodies,
persisted client state). ``parse_search_filters`` is the only way to turn them
into a ``SearchFilters`` value: numbers are coerced, enums are matched against
closed sets, and absent keys resolve to explicit defaults. Anything that cannot
be coerced raises ``ValidationError`` naming the offending key.
"""
import enum
from typing import Annotated, Any, List, Mapping, Optional, Tuple

from pydantic import ConfigDict, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import ValidationError
from app.models.property_model import ListingType, PropertyStatus, PropertyType
from app.schemas.base_schema import CamelModel
from app.schemas.property_schema import PropertyRead

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
DEFAULT_SORT_BY = "createdAt"
_PAGING_DEFAULTS = {"page": DEFAULT_PAGE, "limit": DEFAULT_LIMIT}

NonNegativeInt = Annotated[int, Field(ge=0)]


class SortOrder(str, enum.Enum):
    ASC = "ASC"
    DESC = "DESC"


def _split_multi(v: Any) -> Any:
    """Accept a list, a scalar, or a comma-separated string for set filters."""
    if v is None:
        return None
    if isinstance(v, str):
        parts = [part.strip() for part in v.split(",")]
        return [part for part in parts if part] or None
    if isinstance(v, (list, tuple, set, frozenset)):
        flat: List[Any] = []
        for item in v:
            if isinstance(item, str) and "," in item:
                flat.extend(part.strip() for part in item.split(",") if part.strip())
            else:
                flat.append(item)
        return flat
    return [v]


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class _FilterModel(CamelModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    page: int = Field(DEFAULT_PAGE, ge=1)
    limit: int = Field(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)
    sort_by: str = DEFAULT_SORT_BY
    sort_order: SortOrder = SortOrder.DESC

    @field_validator("sort_order", mode="before")
    @classmethod
    def normalize_sort_order(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("sort_by", mode="before")
    @classmethod
    def default_unusable_sort_by(cls, v):
        # Anything that is not a non-blank string sorts by the default key.
        if not isinstance(v, str):
            return DEFAULT_SORT_BY
        return v.strip() or DEFAULT_SORT_BY

    @field_validator("page", "limit", mode="before")
    @classmethod
    def blank_paging_is_default(cls, v, info: ValidationInfo):
        v = _blank_to_none(v)
        return _PAGING_DEFAULTS[info.field_name] if v is None else v


class SearchFilters(_FilterModel):
    """Validated, typed description of one public search.

    Set-valued filters use match-any semantics. Boolean amenity flags only
    constrain results when ``True``. Public search is always scoped to
    active listings, so there is no status field here.
    """

    query: Optional[str] = None
    property_type: Optional[Tuple[PropertyType, ...]] = None
    listing_type: Optional[ListingType] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    min_area: Optional[float] = Field(None, ge=0)
    max_area: Optional[float] = Field(None, ge=0)
    bedrooms: Optional[Tuple[NonNegativeInt, ...]] = None
    bathrooms: Optional[Tuple[NonNegativeInt, ...]] = None
    city: Optional[str] = None
    district: Optional[str] = None
    amenities: Optional[Tuple[str, ...]] = None
    has_elevator: bool = False
    has_parking: bool = False
    has_balcony: bool = False
    has_storage: bool = False

    @field_validator("property_type", "bedrooms", "bathrooms", "amenities", mode="before")
    @classmethod
    def split_multi_value(cls, v):
        return _split_multi(v)

    @field_validator(
        "query", "city", "district", "listing_type",
        "min_price", "max_price", "min_area", "max_area",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator("has_elevator", "has_parking", "has_balcony", "has_storage", mode="before")
    @classmethod
    def null_flag_is_unset(cls, v):
        return False if v is None or v == "" else v


class PropertyFilter(_FilterModel):
    """Filters for the property listing endpoint.

    Unlike ``SearchFilters`` this takes a single property type, treats
    bedrooms/bathrooms as minimums, and lets the caller pick the status.
    """

    property_type: Optional[PropertyType] = None
    listing_type: Optional[ListingType] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    min_area: Optional[float] = Field(None, ge=0)
    max_area: Optional[float] = Field(None, ge=0)
    bedrooms: Optional[NonNegativeInt] = None
    bathrooms: Optional[NonNegativeInt] = None
    city: Optional[str] = None
    district: Optional[str] = None
    is_featured: Optional[bool] = None
    status: PropertyStatus = PropertyStatus.ACTIVE

    @field_validator(
        "property_type", "listing_type", "city", "district",
        "min_price", "max_price", "min_area", "max_area",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)


class SearchResult(CamelModel):
    """Paginated search results."""

    data: List[PropertyRead]
    total: int
    page: int
    limit: int
    total_pages: int


class LocationsRead(CamelModel):
    cities: List[str] = []
    districts: List[str] = []


def _to_validation_error(exc: PydanticValidationError) -> ValidationError:
    errors = exc.errors(include_url=False)
    details = [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in errors
    ]
    first = errors[0]
    field = str(first["loc"][0]) if first["loc"] else None
    return ValidationError(field, first["msg"], detail=details)


def parse_search_filters(raw: Optional[Mapping[str, Any]]) -> SearchFilters:
    """Validate raw key/value input into a ``SearchFilters``.

    Raises:
        ValidationError: a value failed coercion, violated a bound, or used an
            unrecognized enum value. ``field`` names the first offending key.
    """
    try:
        return SearchFilters.model_validate(dict(raw or {}))
    except PydanticValidationError as exc:
        raise _to_validation_error(exc) from exc


def parse_property_filter(raw: Optional[Mapping[str, Any]]) -> PropertyFilter:
    """Validate raw key/value input into a ``PropertyFilter``."""
    try:
        return PropertyFilter.model_validate(dict(raw or {}))
    except PydanticValidationError as exc:
        raise _to_validation_error(exc) from exc
