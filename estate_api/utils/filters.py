"""
Normalization of raw search query parameters into PropertySearchFilters.

Query values arrive as strings exactly as a browser filter form sends them:
empty strings mean "not set", ``featured`` is the literal text ``"true"`` or
anything else, and the price can be given as a ``price_range`` shorthand.
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Tuple, Type, TypeVar
from estate_api.models.property import PropertyType, ListingType, PropertyStatus
from estate_api.repositories.property import PropertySearchFilters
from estate_api.utils.exceptions import ValidationError

EnumType = TypeVar("EnumType", bound=Enum)


def _blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def _to_decimal(value: str) -> Optional[Decimal]:
    try:
        number = Decimal(value.strip())
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def parse_price_range(price_range: Optional[str]) -> Tuple[Optional[Decimal], Optional[Decimal]]:
    """
    Parse a price range shorthand into (min_price, max_price).

    ``"100000-500000"`` gives both bounds, ``"2000000+"`` only a lower bound.
    A blank range, or a part that is not a number, yields None for that bound.
    """
    if _blank(price_range):
        return None, None

    text = price_range.strip()

    if text.endswith("+"):
        return _to_decimal(text[:-1]), None

    if "-" in text:
        low, high = text.split("-", 1)
        return (
            _to_decimal(low) if low.strip() else None,
            _to_decimal(high) if high.strip() else None
        )

    return _to_decimal(text), None


def parse_featured(value: Optional[str]) -> Optional[bool]:
    """``"true"`` (any case) is True, any other non-empty value is False."""
    if _blank(value):
        return None
    return value.strip().lower() == "true"


def _parse_enum(enum_cls: Type[EnumType], value: Optional[str], field: str) -> Optional[EnumType]:
    if _blank(value):
        return None
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"Invalid {field} '{value}'. Allowed values: {allowed}",
            field_errors=[{"field": field, "message": f"Must be one of: {allowed}"}]
        )


def _parse_int(value: Optional[str], field: str) -> Optional[int]:
    if _blank(value):
        return None
    try:
        number = int(value.strip())
    except ValueError:
        raise ValidationError(
            f"Invalid {field} '{value}'",
            field_errors=[{"field": field, "message": "Must be an integer"}]
        )
    if number < 0:
        raise ValidationError(
            f"Invalid {field} '{value}'",
            field_errors=[{"field": field, "message": "Must not be negative"}]
        )
    return number


def _parse_price(value: Optional[str], field: str) -> Optional[Decimal]:
    if _blank(value):
        return None
    number = _to_decimal(value)
    if number is None or number < 0:
        raise ValidationError(
            f"Invalid {field} '{value}'",
            field_errors=[{"field": field, "message": "Must be a non-negative number"}]
        )
    return number


def build_search_filters(
    property_type: Optional[str] = None,
    listing_type: Optional[str] = None,
    city: Optional[str] = None,
    min_price: Optional[str] = None,
    max_price: Optional[str] = None,
    price_range: Optional[str] = None,
    status: Optional[str] = None,
    bedrooms: Optional[str] = None,
    bathrooms: Optional[str] = None,
    featured: Optional[str] = None,
    agent_id: Optional[str] = None
) -> PropertySearchFilters:
    """
    Build search filters from raw query string values.

    An explicit min_price or max_price wins over the matching bound of
    price_range.

    Raises:
        ValidationError: If an explicit value cannot be parsed
    """
    range_min, range_max = parse_price_range(price_range)
    explicit_min = _parse_price(min_price, "min_price")
    explicit_max = _parse_price(max_price, "max_price")

    return PropertySearchFilters(
        property_type=_parse_enum(PropertyType, property_type, "property_type"),
        listing_type=_parse_enum(ListingType, listing_type, "listing_type"),
        city=None if _blank(city) else city.strip(),
        min_price=explicit_min if explicit_min is not None else range_min,
        max_price=explicit_max if explicit_max is not None else range_max,
        status=_parse_enum(PropertyStatus, status, "status"),
        bedrooms=_parse_int(bedrooms, "bedrooms"),
        bathrooms=_parse_int(bathrooms, "bathrooms"),
        featured=parse_featured(featured),
        agent_id=_parse_int(agent_id, "agent_id")
    )
