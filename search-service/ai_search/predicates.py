"""
SearchFilters -> storage-agnostic predicates and sort keys.

The query executor (see mongo_client.py) is responsible for turning these into
actual database operations.
"""
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from .schemas import SearchFilters, SortBy

EQ = "eq"
GTE = "gte"
RANGE = "range"  # value: {"gte": x, "lte": y}, either bound optional

ASC = "asc"
DESC = "desc"

ROI_FIELD = "investmentData.expectedROI"
RENTAL_YIELD_FIELD = "investmentData.rentalYield"
CREATED_AT_FIELD = "createdAt"


@dataclass(frozen=True)
class Predicate:
    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class SortKey:
    field: str
    direction: str = DESC


def _bounds(lower: Optional[int], upper: Optional[int]) -> dict:
    out = {}
    if lower is not None:
        out["gte"] = lower
    if upper is not None:
        out["lte"] = upper
    return out


def build_predicates(filters: SearchFilters) -> Tuple[List[Predicate], List[SortKey]]:
    predicates: List[Predicate] = []
    f = filters

    if f.country is not None:
        predicates.append(Predicate("country", EQ, f.country.value))

    if f.minPrice is not None or f.maxPrice is not None:
        predicates.append(Predicate("price", RANGE, _bounds(f.minPrice, f.maxPrice)))

    # exact count takes precedence over a range
    if f.bedrooms is not None:
        predicates.append(Predicate("bedrooms", EQ, f.bedrooms))
    elif f.minBedrooms is not None or f.maxBedrooms is not None:
        predicates.append(Predicate("bedrooms", RANGE, _bounds(f.minBedrooms, f.maxBedrooms)))

    # bathrooms is a minimum, unlike bedrooms
    if f.bathrooms is not None:
        predicates.append(Predicate("bathrooms", GTE, f.bathrooms))

    if f.isGoldenVisaEligible:
        predicates.append(Predicate("isGoldenVisaEligible", EQ, True))

    if f.status is not None:
        predicates.append(Predicate("status", EQ, f.status.value))

    return predicates, build_sort_keys(filters)


def build_sort_keys(filters: SearchFilters) -> List[SortKey]:
    sort_keys: List[SortKey] = []
    if filters.sortBy == SortBy.roi:
        sort_keys.append(SortKey(ROI_FIELD, DESC))
    elif filters.sortBy == SortBy.rentalYield:
        sort_keys.append(SortKey(RENTAL_YIELD_FIELD, DESC))

    # recency tiebreak, always last
    sort_keys.append(SortKey(CREATED_AT_FIELD, DESC))
    return sort_keys
