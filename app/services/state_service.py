"""Persisted favorites and saved search filters.

Both states follow the same lifecycle: load once from a ``KeyValueStore`` on
construction, then write back after every mutation. The store is injected, so
a browser-like local store, a JSON file on disk, or a plain dict in tests are
interchangeable.

Stored payloads are JSON. A corrupt payload is logged and replaced by the
defaults rather than propagated, since saved UI state is disposable.
"""
import json
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol

from app.core.logging import get_logger
from app.schemas.search_schema import SearchResult
from app.services.search_service import search

logger = get_logger(__name__)

FAVORITES_KEY = "real-estate-favorites"
SEARCH_FILTERS_KEY = "real-estate-search-filters"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """Process-local store; the default for tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """All keys live in one JSON object file, rewritten on every ``set``."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read state file %s: %s", self.path, str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
            tmp.replace(self.path)


def _load_json(store: KeyValueStore, key: str) -> Any:
    stored = store.get(key)
    if not stored:
        return None
    try:
        return json.loads(stored)
    except json.JSONDecodeError as e:
        logger.warning("Discarding corrupt state for %s: %s", key, str(e))
        return None


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------

class FavoritesState:
    """Ordered set of favorite property ids."""

    def __init__(self, store: KeyValueStore, key: str = FAVORITES_KEY):
        self._store = store
        self._key = key
        loaded = _load_json(store, key)
        if isinstance(loaded, list):
            self._ids: List[str] = list(dict.fromkeys(str(i) for i in loaded))
        else:
            self._ids = []

    def _save(self) -> None:
        self._store.set(self._key, json.dumps(self._ids))

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    @property
    def count(self) -> int:
        return len(self._ids)

    def is_favorite(self, property_id: Any) -> bool:
        return str(property_id) in self._ids

    def add(self, property_id: Any) -> None:
        if not self.is_favorite(property_id):
            self._ids.append(str(property_id))
            self._save()

    def remove(self, property_id: Any) -> None:
        if self.is_favorite(property_id):
            self._ids.remove(str(property_id))
            self._save()

    def toggle(self, property_id: Any) -> bool:
        """Flip membership; returns True when the id is now a favorite."""
        if self.is_favorite(property_id):
            self.remove(property_id)
            return False
        self.add(property_id)
        return True

    def clear(self) -> None:
        self._ids = []
        self._save()

    def favorite_properties(self, records: Iterable[Any]) -> List[Any]:
        """Records whose id is a favorite, in collection order."""
        wanted = set(self._ids)
        return [r for r in records if str(r.id) in wanted]


# ---------------------------------------------------------------------------
# Saved search filters
# ---------------------------------------------------------------------------

DEFAULT_SEARCH_FILTERS: Dict[str, Any] = {
    "query": "",
    "propertyType": [],
    "listingType": None,
    "minPrice": None,
    "maxPrice": None,
    "minArea": None,
    "maxArea": None,
    "bedrooms": [],
    "bathrooms": [],
    "city": "",
    "district": "",
    "amenities": [],
    "hasElevator": False,
    "hasParking": False,
    "hasBalcony": False,
    "hasStorage": False,
    "sortBy": "createdAt",
    "sortOrder": "DESC",
    "limit": 20,
}

# Keys that shape ordering/paging rather than narrowing results.
_PRESENTATION_KEYS = frozenset({"sortBy", "sortOrder", "limit"})


class SearchFilterState:
    """Raw search filters remembered between sessions."""

    def __init__(self, store: KeyValueStore, key: str = SEARCH_FILTERS_KEY):
        self._store = store
        self._key = key
        self._filters: Dict[str, Any] = dict(DEFAULT_SEARCH_FILTERS)
        loaded = _load_json(store, key)
        if isinstance(loaded, dict):
            self._filters.update({k: v for k, v in loaded.items() if k in DEFAULT_SEARCH_FILTERS})

    def _save(self) -> None:
        self._store.set(self._key, json.dumps(self._filters, ensure_ascii=False))

    @property
    def filters(self) -> Dict[str, Any]:
        return dict(self._filters)

    def update(self, key: str, value: Any) -> None:
        if key not in DEFAULT_SEARCH_FILTERS:
            raise KeyError(f"Unknown search filter '{key}'")
        self._filters[key] = value
        self._save()

    def reset(self) -> None:
        self._filters = dict(DEFAULT_SEARCH_FILTERS)
        self._save()

    def active_filter_count(self) -> int:
        """Number of filters that differ from their defaults."""
        return sum(
            1
            for key, default in DEFAULT_SEARCH_FILTERS.items()
            if key not in _PRESENTATION_KEYS and self._filters.get(key) != default
        )

    def search(self, records: Iterable[Any], page: int = 1) -> SearchResult:
        """Run the remembered filters over ``records``.

        Raises:
            ValidationError: a remembered value is no longer valid.
        """
        raw = {k: v for k, v in self._filters.items() if v not in (None, "", [])}
        raw["page"] = page
        return search(raw, records)
