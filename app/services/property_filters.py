from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple
import re

from sqlalchemy import or_

from app.core.errors import ValidationError
from app.models import Property
from app.schemas.property import PropertyFilterParams

PRICE_MULTIPLIERS = {"": 1, "k": 1_000, "m": 1_000_000}
_PRICE_PART = re.compile(r"^(\d+(?:\.\d+)?)([km]?)$")


def split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_part(part: str, price_range: str) -> Tuple[Decimal, str]:
    match = _PRICE_PART.match(part)
    if not match:
        raise ValidationError(f"Invalid priceRange: {price_range!r}")
    try:
        return Decimal(match.group(1)), match.group(2)
    except InvalidOperation:
        raise ValidationError(f"Invalid priceRange: {price_range!r}")


def _scale(amount: Decimal, suffix: str) -> int:
    return int(amount * PRICE_MULTIPLIERS[suffix])


def parse_price_range(price_range: str) -> Tuple[int, Optional[int]]:
    """
    Parse a price filter into inclusive (min, max) bounds; max is None for open ranges.

        "100k-500k" -> (100000, 500000)
        "1M-2.5M"   -> (1000000, 2500000)
        "100-500k"  -> (100000, 500000)   a bare bound takes the other's suffix
        "₦50k-200k" -> (50000, 200000)
        "5M+"       -> (5000000, None)
    """
    cleaned = re.sub(r"[₦,\s]", "", price_range or "").lower()
    if not cleaned:
        raise ValidationError("priceRange is empty")

    if cleaned.endswith("+"):
        amount, suffix = _parse_part(cleaned[:-1], price_range)
        return _scale(amount, suffix), None

    parts = cleaned.split("-")
    if len(parts) != 2:
        raise ValidationError(f"Invalid priceRange: {price_range!r}")

    (low, low_suffix), (high, high_suffix) = (_parse_part(p, price_range) for p in parts)
    low_suffix = low_suffix or high_suffix
    high_suffix = high_suffix or low_suffix

    minimum, maximum = _scale(low, low_suffix), _scale(high, high_suffix)
    if minimum > maximum:
        raise ValidationError(f"Invalid priceRange: {price_range!r} (min above max)")
    return minimum, maximum


def build_property_filters(params: PropertyFilterParams) -> list:
    """ Query params -> SQLAlchemy filter expressions (all case-insensitive contains) """
    filters = []

    # Buy / Rent / Book / Service
    if params.transaction_type:
        filters.append(Property.transaction_type.icontains(params.transaction_type.strip(), autoescape=True))

    states = split_csv(params.states)
    if states:
        filters.append(or_(*[Property.location.icontains(s, autoescape=True) for s in states]))

    types = split_csv(params.types)
    if types:
        filters.append(or_(*[Property.type.icontains(t, autoescape=True) for t in types]))

    if params.price_range:
        minimum, maximum = parse_price_range(params.price_range)
        filters.append(Property.price >= minimum)
        if maximum is not None:
            filters.append(Property.price <= maximum)

    if params.search and params.search.strip():
        term = params.search.strip()
        filters.append(or_(
            Property.title.icontains(term, autoescape=True),
            Property.location.icontains(term, autoescape=True),
            Property.type.icontains(term, autoescape=True),
            Property.description.icontains(term, autoescape=True),
        ))

    return filters
