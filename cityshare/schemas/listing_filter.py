"""
Typed browse filter - one optional field per filter dimension.
The repository turns it into WHERE clauses; invalid combinations cannot be expressed.
"""

from dataclasses import dataclass

from cityshare.core.enums import ListingKind, ListingStatus, UsageStatus, parse_enum


@dataclass(frozen=True)
class ListingFilter:
    q: str | None = None
    category_id: int | None = None
    category_name: str | None = None
    kind: ListingKind | None = None
    usage_status: UsageStatus | None = None
    # None means "any status" (owner views); public browse always sets one
    status: ListingStatus | None = ListingStatus.ACTIVE
    owner_id: int | None = None

    @classmethod
    def from_query(
        cls,
        q: str | None = None,
        category: str | None = None,
        kind: str | None = None,
        usage_status: str | None = None,
        status: str | None = None,
    ) -> "ListingFilter":
        """
        Build a public browse filter from raw query-string values.
        Unrecognized enum values are dropped rather than rejected; an omitted or
        unrecognized status falls back to active.
        """
        q = (q or "").strip() or None
        category = (category or "").strip() or None
        category_id = None
        category_name = None
        if category is not None:
            if category.isascii() and category.isdigit():
                category_id = int(category)
            else:
                category_name = category
        return cls(
            q=q,
            category_id=category_id,
            category_name=category_name,
            kind=parse_enum(ListingKind, kind),
            usage_status=parse_enum(UsageStatus, usage_status),
            status=parse_enum(ListingStatus, status) or ListingStatus.ACTIVE,
        )
