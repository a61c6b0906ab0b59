import math
import os
from typing import Any, Dict, List, Optional, Tuple

from pymongo import ASCENDING, DESCENDING, MongoClient

from .predicates import ASC, EQ, GTE, RANGE, Predicate, SortKey

MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://mongo:27017")
DB_NAME = os.getenv("DB_NAME", "propgroup")
COLLECTION = os.getenv("COLLECTION_NAME", "properties")

# hard cap on records returned per search
MAX_RESULTS = 50

INDEXED_FIELDS = (
    "country",
    "price",
    "bedrooms",
    "bathrooms",
    "status",
    "isGoldenVisaEligible",
    "createdAt",
    "investmentData.expectedROI",
    "investmentData.rentalYield",
)

client = MongoClient(MONGODB_URI, serverSelectionTimeoutMS=5000)


def get_collection():
    return client[DB_NAME][COLLECTION]


def ensure_indexes():
    coll = get_collection()
    existing = {name for name in coll.index_information()}
    for field in INDEXED_FIELDS:
        name = f"{field}_1"
        if name not in existing:
            coll.create_index([(field, ASCENDING)], name=name)


def build_mongo_filter(predicates: List[Predicate]) -> Dict[str, Any]:
    """
    eq -> plain value, gte -> {"$gte": v}, range -> {"$gte": lo, "$lte": hi}
    (only the bounds that are set).
    """
    query: Dict[str, Any] = {}
    for p in predicates:
        if p.op == EQ:
            query[p.field] = p.value
        elif p.op == GTE:
            query[p.field] = {"$gte": p.value}
        elif p.op == RANGE:
            query[p.field] = {f"${k}": v for k, v in p.value.items()}
        else:
            raise ValueError(f"unsupported predicate operator: {p.op}")
    return query


def build_mongo_sort(sort_keys: List[SortKey]) -> List[Tuple[str, int]]:
    return [(k.field, ASCENDING if k.direction == ASC else DESCENDING) for k in sort_keys]


def _clean_value(v: Any):
    if isinstance(v, dict):
        return {k: _clean_value(vv) for k, vv in v.items()}
    if isinstance(v, list):
        return [_clean_value(x) for x in v]
    if isinstance(v, float):
        return v if math.isfinite(v) else None
    return v


def to_record(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Mongo document -> JSON-friendly record (ObjectId and datetimes as strings)."""
    record = {k: v for k, v in doc.items() if k != "_id"}
    record["id"] = str(doc.get("_id"))
    for key in ("createdAt", "updatedAt"):
        value = record.get(key)
        if hasattr(value, "isoformat"):
            record[key] = value.isoformat()
    return _clean_value(record)


def find_properties(
    predicates: List[Predicate],
    sort_keys: List[SortKey],
    limit: int = MAX_RESULTS,
    collection: Optional[Any] = None,
) -> Tuple[List[Dict[str, Any]], int]:
    coll = collection if collection is not None else get_collection()
    query = build_mongo_filter(predicates)
    cursor = coll.find(
        query,
        sort=build_mongo_sort(sort_keys),
        limit=min(max(limit, 1), MAX_RESULTS),
    )
    records = [to_record(doc) for doc in cursor]
    total = coll.count_documents(query)
    return records, total
