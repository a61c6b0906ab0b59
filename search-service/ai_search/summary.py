from .schemas import Goal, SearchFilters

NO_RESULTS_MESSAGE = (
    "I couldn't find any properties matching your criteria. "
    "Try adjusting your requirements."
)


def humanize_enum(value: str) -> str:
    """OFF_PLAN -> off plan"""
    return value.replace("_", " ").lower()


def _money(amount: int) -> str:
    return f"${amount:,}"


def _bedroom_fragment(f: SearchFilters):
    if f.bedrooms is not None:
        return f"{f.bedrooms} bedroom{'s' if f.bedrooms > 1 else ''}"
    if f.minBedrooms is None and f.maxBedrooms is None:
        return None
    bounds = []
    if f.minBedrooms is not None:
        bounds.append(f"{f.minBedrooms}+")
    if f.maxBedrooms is not None:
        bounds.append(f"up to {f.maxBedrooms}")
    return f"{' '.join(bounds)} bedrooms"


def _price_fragment(f: SearchFilters):
    if f.minPrice is not None and f.maxPrice is not None:
        return f"between {_money(f.minPrice)} and {_money(f.maxPrice)}"
    if f.maxPrice is not None:
        return f"under {_money(f.maxPrice)}"
    if f.minPrice is not None:
        return f"above {_money(f.minPrice)}"
    return None


def summarize(query: str, filters: SearchFilters, result_count: int) -> str:
    if result_count == 0:
        return NO_RESULTS_MESSAGE

    noun = "property" if result_count == 1 else "properties"
    text = f"I found {result_count} {noun} matching your search"

    criteria = [
        _bedroom_fragment(filters),
        f"in {filters.country.value.capitalize()}" if filters.country is not None else None,
        _price_fragment(filters),
        "eligible for Golden Visa programs" if filters.goal == Goal.GOLDEN_VISA else None,
        f"({humanize_enum(filters.status.value)})" if filters.status is not None else None,
    ]
    criteria = [c for c in criteria if c]

    if criteria:
        text += " with the following criteria: " + ", ".join(criteria)
    return text + "."
