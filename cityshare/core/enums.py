"""Closed value sets for listings, shared by models, schemas and services."""

from enum import Enum


class ListingKind(str, Enum):
    SELL = "sell"
    DONATE = "donate"
    BORROW = "borrow"


class ListingCondition(str, Enum):
    NEW = "new"
    LIKE_NEW = "like_new"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class ListingStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"
    SOLD = "sold"
    DELETED = "deleted"


class UsageStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    BORROWED = "borrowed"


def parse_enum(enum_cls: type[Enum], value: str | None):
    """Return the enum member for value (trimmed, case-insensitive) or None."""
    if value is None:
        return None
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return None
