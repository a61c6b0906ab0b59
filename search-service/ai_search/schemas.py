from enum import Enum
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field


# ===== Enumerations stored on property documents =====
class Country(str, Enum):
    GEORGIA = "GEORGIA"
    CYPRUS = "CYPRUS"
    GREECE = "GREECE"
    LEBANON = "LEBANON"


class PropertyStatus(str, Enum):
    OFF_PLAN = "OFF_PLAN"
    NEW_BUILD = "NEW_BUILD"
    RESALE = "RESALE"


class Goal(str, Enum):
    GOLDEN_VISA = "GOLDEN_VISA"
    HIGH_ROI = "HIGH_ROI"
    PASSIVE_INCOME = "PASSIVE_INCOME"


class SortBy(str, Enum):
    roi = "roi"
    rentalYield = "rentalYield"


class SearchFilters(BaseModel):
    """Filters extracted from a free-text query. Unset fields mean no constraint."""
    model_config = ConfigDict(frozen=True)

    country: Optional[Country] = None

    # inclusive price bounds
    minPrice: Optional[int] = None
    maxPrice: Optional[int] = None

    # exact count, or a range (never both)
    bedrooms: Optional[int] = None
    minBedrooms: Optional[int] = None
    maxBedrooms: Optional[int] = None

    # minimum threshold
    bathrooms: Optional[int] = None

    goal: Optional[Goal] = None
    isGoldenVisaEligible: Optional[bool] = None
    sortBy: Optional[SortBy] = None

    status: Optional[PropertyStatus] = None
    propertyType: Optional[str] = None  # e.g., "villa"


# ===== API =====
class SearchContext(BaseModel):
    userId: Optional[str] = None
    previousSearches: Optional[List[str]] = None


class AISearchRequest(BaseModel):
    query: str = Field(min_length=1)
    context: Optional[SearchContext] = None


class AISearchResponse(BaseModel):
    query: str
    filters: Dict[str, Any]
    summary: str
    properties: List[Dict[str, Any]]
    count: int


class Suggestion(BaseModel):
    text: str
    category: str
    icon: str
