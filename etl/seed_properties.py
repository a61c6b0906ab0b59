# etl/seed_properties.py
import json
import math
import os
import time
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

from dotenv import load_dotenv
from pymongo import MongoClient, UpdateOne
from pymongo.errors import PyMongoError

load_dotenv()

# === Config via .env ===
MONGODB_URI     = os.getenv("MONGODB_URI", "mongodb://127.0.0.1:27017")
DB_NAME         = os.getenv("DB_NAME", "propgroup")
COLLECTION_NAME = os.getenv("COLLECTION_NAME", "properties")
SEED_FILE       = os.getenv("SEED_FILE", os.path.join(os.path.dirname(__file__), "sample_properties.json"))
BATCH_UPSERT    = int(os.getenv("BATCH_UPSERT", "128"))

# stored upper-case, matched by equality in the search service
ENUM_FIELDS = ("country", "status")


# === Helpers ===
def _clean_value(v: Any):
    if isinstance(v, dict):
        return {k: _clean_value(vv) for k, vv in v.items()}
    if isinstance(v, list):
        return [_clean_value(x) for x in v]
    if isinstance(v, float):
        return v if math.isfinite(v) else None
    return v


def _upper(x: Any) -> Optional[str]:
    return x.upper().strip() if isinstance(x, str) else x


def build_document(raw: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Listing as loaded from the seed file -> document stored in MongoDB."""
    now = now or datetime.now(timezone.utc)
    doc = dict(raw)
    doc.pop("createdAt", None)
    for key in ENUM_FIELDS:
        if key in doc:
            doc[key] = _upper(doc[key])
    if "propertyType" in doc and isinstance(doc["propertyType"], str):
        doc["propertyType"] = doc["propertyType"].lower().strip()
    doc["isGoldenVisaEligible"] = bool(doc.get("isGoldenVisaEligible", False))
    doc["investmentData"] = doc.get("investmentData") or {}
    doc["updatedAt"] = now
    return _clean_value(doc)


def to_operation(doc: Dict[str, Any], now: datetime) -> UpdateOne:
    # title is the natural key; createdAt is only set on first insert
    return UpdateOne(
        {"title": doc["title"]},
        {"$set": doc, "$setOnInsert": {"createdAt": now}},
        upsert=True,
    )


def load_listings(path: str) -> List[Dict[str, Any]]:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise SystemExit(f"[error] {path} must contain a JSON list of listings")
    return data


def upsert_batch(coll, ops: List[UpdateOne]):
    result = coll.bulk_write(ops, ordered=False)
    return result.upserted_count, result.modified_count


# === Main ===
def main():
    listings = load_listings(SEED_FILE)
    client = MongoClient(MONGODB_URI)
    coll = client[DB_NAME][COLLECTION_NAME]

    print(f"[start] seed {len(listings)} listings -> {DB_NAME}.{COLLECTION_NAME}")
    t0 = time.time()

    inserted = 0
    updated = 0
    skipped = 0
    failed = 0
    batch: List[UpdateOne] = []

    def flush():
        nonlocal inserted, updated, failed
        try:
            ins, upd = upsert_batch(coll, batch)
        except PyMongoError as e:
            print(f"[warn] bulk_write failed (retrying): {e}")
            time.sleep(1.0)
            try:
                ins, upd = upsert_batch(coll, batch)
            except PyMongoError as e2:
                failed += len(batch)
                print(f"[error] bulk_write failed again: {e2}")
                batch.clear()
                return
        inserted += ins
        updated += upd
        batch.clear()

    now = datetime.now(timezone.utc)
    for raw in listings:
        if not raw.get("title"):
            skipped += 1
            print(f"[warn] skipping listing without title: {raw}")
            continue
        batch.append(to_operation(build_document(raw, now), now))
        if len(batch) >= BATCH_UPSERT:
            flush()

    # final flush
    if batch:
        flush()

    elapsed = time.time() - t0
    print(f"[done] inserted={inserted} | updated={updated} | skipped={skipped} | failed={failed} | time={elapsed:.1f}s")


if __name__ == "__main__":
    main()
