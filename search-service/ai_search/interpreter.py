"""
Free-text query -> SearchFilters.

Pure keyword and regex matching over a lower-cased copy of the query. Nothing
here raises: a query with no recognisable phrase yields an empty filter set.
"""
import logging
import re
from typing import Any, Dict, Optional

from .schemas import Country, Goal, PropertyStatus, SearchFilters, SortBy

logger = logging.getLogger(__name__)

# priority order matters: first hit wins
COUNTRY_KEYWORDS = (
    ("georgia", Country.GEORGIA),
    ("cyprus", Country.CYPRUS),
    ("greece", Country.GREECE),
    ("lebanon", Country.LEBANON),
)

STATUS_KEYWORDS = (
    (("off plan", "off-plan"), PropertyStatus.OFF_PLAN),
    (("new build", "new-build", "newly built"), PropertyStatus.NEW_BUILD),
    (("resale", "existing"), PropertyStatus.RESALE),
)

PROPERTY_TYPES = ("apartment", "villa", "house", "condo", "penthouse")

GOLDEN_VISA_PHRASES = ("golden visa", "residency", "citizenship")
HIGH_ROI_PHRASES = ("roi", "return on investment", "highest return")
PASSIVE_INCOME_PHRASES = ("rental", "passive income", "rental yield")

# BSON stores integers as signed 64-bit
MAX_INT64 = 2 ** 63 - 1

# a number is never a slice of a longer digit run
_NUM = r"\$?([0-9][0-9,]{0,24})(?![0-9,])k?"
PRICE_PATTERNS = (
    ("range", re.compile(r"between\s*" + _NUM + r"\s*(?:and|to|-)\s*" + _NUM, re.ASCII)),
    ("max", re.compile(r"(?:under|below|less than|max|maximum)\s*" + _NUM, re.ASCII)),
    ("min", re.compile(r"(?:above|over|more than|min|minimum)\s*" + _NUM, re.ASCII)),
)

BEDROOM_PATTERN = re.compile(
    r"(?<!\d)(\d{1,9})(?:\s*-\s*(\d{1,9}))?\s*(?:bed|bedroom|br)", re.ASCII
)
BATHROOM_PATTERN = re.compile(r"(?<!\d)(\d{1,9})\s*(?:bath|bathroom)", re.ASCII)


def _contains_any(text: str, phrases) -> bool:
    return any(p in text for p in phrases)


def _first_match(text: str, table):
    for keywords, value in table:
        if isinstance(keywords, str):
            keywords = (keywords,)
        if _contains_any(text, keywords):
            return value
    return None


def _parse_amount(raw: str, thousands: bool) -> Optional[int]:
    amount = int(raw.replace(",", ""))
    if thousands:
        amount *= 1000
    # too large to store: treat as no match
    return amount if amount <= MAX_INT64 else None


def extract_country(text: str) -> Optional[Country]:
    return _first_match(text, COUNTRY_KEYWORDS)


def extract_price(text: str) -> Dict[str, int]:
    # "k"/"thousand" anywhere in the query scales every captured number
    thousands = "k" in text or "thousand" in text
    for kind, pattern in PRICE_PATTERNS:
        m = pattern.search(text)
        if not m:
            continue
        amounts = [_parse_amount(g, thousands) for g in m.groups()]
        if None in amounts:
            continue
        if kind == "range":
            return {"minPrice": amounts[0], "maxPrice": amounts[1]}
        if kind == "max":
            return {"maxPrice": amounts[0]}
        return {"minPrice": amounts[0]}
    return {}


def extract_bedrooms(text: str) -> Dict[str, int]:
    m = BEDROOM_PATTERN.search(text)
    if not m:
        return {}
    if m.group(2):
        return {"minBedrooms": int(m.group(1)), "maxBedrooms": int(m.group(2))}
    return {"bedrooms": int(m.group(1))}


def extract_bathrooms(text: str) -> Dict[str, int]:
    m = BATHROOM_PATTERN.search(text)
    return {"bathrooms": int(m.group(1))} if m else {}


def extract_goal(text: str) -> Dict[str, Any]:
    """
    The three checks are independent: a later match overwrites goal/sortBy set
    by an earlier one, while isGoldenVisaEligible stays as it was.
    """
    found: Dict[str, Any] = {}
    if _contains_any(text, GOLDEN_VISA_PHRASES):
        found["goal"] = Goal.GOLDEN_VISA
        found["isGoldenVisaEligible"] = True
    if _contains_any(text, HIGH_ROI_PHRASES):
        found["goal"] = Goal.HIGH_ROI
        found["sortBy"] = SortBy.roi
    if _contains_any(text, PASSIVE_INCOME_PHRASES):
        found["goal"] = Goal.PASSIVE_INCOME
        found["sortBy"] = SortBy.rentalYield
    return found


def extract_status(text: str) -> Optional[PropertyStatus]:
    return _first_match(text, STATUS_KEYWORDS)


def extract_property_type(text: str) -> Optional[str]:
    for property_type in PROPERTY_TYPES:
        if property_type in text:
            return property_type
    return None


def interpret(query: str) -> SearchFilters:
    text = query.lower()
    found: Dict[str, Any] = {}

    country = extract_country(text)
    if country:
        found["country"] = country

    found.update(extract_price(text))
    found.update(extract_bedrooms(text))
    found.update(extract_bathrooms(text))
    found.update(extract_goal(text))

    status = extract_status(text)
    if status:
        found["status"] = status

    property_type = extract_property_type(text)
    if property_type:
        found["propertyType"] = property_type

    logger.debug("interpreted %r -> %s", query, found)
    return SearchFilters(**found)
