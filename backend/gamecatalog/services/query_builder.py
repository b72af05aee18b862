"""
Game Catalog API — Query Builder
==================================

What:  Translates raw query-string values into filter descriptors,
       pagination, sort and projection parameters.
How:   Pure functions over strings. Nothing here touches storage, and no
       input makes them raise: malformed numbers fall back to defaults or
       drop the bound.

List endpoint (GET /api/games):
    page, limit       integers; page < 1 → 1, page > MAX_PAGE → MAX_PAGE,
                      limit < 1 → default, limit > max → max
    platform, genre   comma lists → AnyOf membership predicates
    sort              title | releaseDate | rating | price, '-' prefix = desc

Search endpoint (GET /api/games/search):
    title, developer  case-insensitive substring
    genre             single value, exact match (Equals)
    minRating         rating >= value
    maxPrice          price.amount <= value
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from gamecatalog.schemas.game import GAME_FIELDS
from gamecatalog.services.filters import (
    Contains,
    Equals,
    FilterSpec,
    NonEmptyList,
    Projection,
    Range,
    SortSpec,
    any_of,
)

DEFAULT_PAGE = 1
# Keeps OFFSET well inside PostgreSQL's bigint range
MAX_PAGE = 1_000_000

# Public sort keys → document paths
SORTABLE_FIELDS: Dict[str, str] = {
    "title": "title",
    "releaseDate": "releaseDate",
    "rating": "rating",
    "price": "price.amount",
}


# ── Coercion helpers ──────────────────────────────────────────────────────

def coerce_int(raw: Optional[str], default: int) -> int:
    """Parse an integer leniently ("3", " 3 ", "3.7" → 3); anything else → default."""
    if raw is None:
        return default
    text = str(raw).strip()
    if not text:
        return default
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return default
    if not math.isfinite(number):
        return default
    return int(number)


def coerce_float(raw: Optional[str]) -> Optional[float]:
    """Parse a finite float or return None."""
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def split_list(raw: Optional[str]) -> List[str]:
    """Split a comma list, dropping blank items."""
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


# ── List endpoint ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ListQuery:
    """Everything the repository needs to serve one page of the list endpoint."""

    filter: FilterSpec
    page: int
    limit: int
    sort: Optional[SortSpec] = None

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def total_pages(self, total_count: int) -> int:
        return math.ceil(total_count / self.limit)


def parse_sort(raw: Optional[str]) -> Optional[SortSpec]:
    """Map ``title`` / ``-rating`` style keys to a SortSpec; unknown keys → None."""
    if not raw:
        return None
    key = raw.strip()
    descending = key.startswith("-")
    key = key.lstrip("-")
    path = SORTABLE_FIELDS.get(key)
    if path is None:
        return None
    return SortSpec(path=path, descending=descending)


def build_list_query(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    platform: Optional[str] = None,
    genre: Optional[str] = None,
    sort: Optional[str] = None,
    *,
    default_limit: int = 10,
    max_limit: int = 50,
) -> ListQuery:
    page_number = min(max(coerce_int(page, DEFAULT_PAGE), 1), MAX_PAGE)

    page_size = coerce_int(limit, default_limit)
    if page_size < 1:
        page_size = default_limit
    page_size = min(page_size, max_limit)

    spec: FilterSpec = {}
    platforms = split_list(platform)
    if platforms:
        spec["platforms"] = any_of(platforms)
    genres = split_list(genre)
    if genres:
        spec["genre"] = any_of(genres)

    return ListQuery(filter=spec, page=page_number, limit=page_size, sort=parse_sort(sort))


# ── Search endpoint ───────────────────────────────────────────────────────

def build_search_filter(
    title: Optional[str] = None,
    genre: Optional[str] = None,
    developer: Optional[str] = None,
    min_rating: Optional[str] = None,
    max_price: Optional[str] = None,
) -> FilterSpec:
    spec: FilterSpec = {}
    if title:
        spec["title"] = Contains(title)
    if genre:
        spec["genre"] = Equals(genre)
    if developer:
        spec["developer"] = Contains(developer)

    lower = coerce_float(min_rating)
    if lower is not None:
        spec["rating"] = Range(gte=lower)

    upper = coerce_float(max_price)
    if upper is not None:
        spec["price.amount"] = Range(lte=upper)
    return spec


# ── Fixed filters ─────────────────────────────────────────────────────────

def build_platform_filter(platform: str) -> FilterSpec:
    return {"platforms": Equals(platform)}


def build_with_dlc_filter() -> FilterSpec:
    return {"dlc": NonEmptyList()}


# ── Projection ────────────────────────────────────────────────────────────

def parse_fields(raw: Optional[str]) -> Optional[Projection]:
    """
    ``fields=title,price`` → Projection(("title", "price")).

    Names that are not Game fields are ignored; if nothing usable remains the
    whole document is returned (None).
    """
    names: Tuple[str, ...] = tuple(
        dict.fromkeys(name for name in split_list(raw) if name in GAME_FIELDS)
    )
    if not names:
        return None
    return Projection(fields=names)
