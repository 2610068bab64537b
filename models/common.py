"""
models/common.py
----------------
Pieces shared by every entity: sort allow-list, list filters and the
timestamp checks that make up response validation.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from utils.errors import ValidationError


class SortBy(str, Enum):
    """Columns a list may be ordered by. Nothing else reaches ORDER BY."""
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


@dataclass
class ListFilter:
    """
    Paging and ordering options common to every list query.

    Attributes:
        page: 1-based page number; values below 1 mean page 1.
        page_size: Rows per page; below 1 means the default (10),
            above the maximum (100) is clamped to the maximum.
        sort_by: A SortBy member or its string value; None means created_at.
        sort_ascending: Oldest first when True, newest first otherwise.
    """
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    sort_by: Optional[Union[SortBy, str]] = None
    sort_ascending: bool = False

    def normalized(self):
        """
        Return a copy with paging clamped and sort_by coerced to SortBy.

        Raises:
            ValidationError: If sort_by names a column outside the allow-list.
        """
        page = self.page if self.page and self.page >= 1 else 1

        page_size = self.page_size
        if not page_size or page_size < 1:
            page_size = DEFAULT_PAGE_SIZE
        elif page_size > MAX_PAGE_SIZE:
            page_size = MAX_PAGE_SIZE

        sort_by = self.sort_by or SortBy.CREATED_AT
        try:
            sort_by = SortBy(sort_by)
        except ValueError:
            raise ValidationError(f"invalid sort column: {sort_by}") from None

        return replace(self, page=page, page_size=page_size, sort_by=sort_by)

    @property
    def offset(self) -> int:
        return (max(self.page, 1) - 1) * self.page_size

    @property
    def direction(self) -> str:
        return "ASC" if self.sort_ascending else "DESC"


def coerce_enum(enum_cls, value, label: str):
    """
    Turn ``value`` into a member of ``enum_cls``.

    Raises:
        ValidationError: "<label> missing" for empty values and
            "<label> invalid = <value>" for unknown ones.
    """
    if value is None or str(value).strip() == "":
        raise ValidationError(f"{label} missing")
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"{label} invalid = {value}") from None


def validate_timestamps(
    created_at: Optional[datetime],
    updated_at: Optional[datetime],
) -> None:
    """Both timestamps present and updated_at not before created_at."""
    if created_at is None:
        raise ValidationError("createdAt missing")
    if updated_at is None:
        raise ValidationError("updatedAt missing")
    if updated_at < created_at:
        raise ValidationError("updatedAt before createdAt")


def isoformat(value) -> Optional[str]:
    """ISO-8601 string for dates/datetimes, None passes through."""
    return value.isoformat() if value is not None else None


def enum_value(member):
    """Plain value of an Enum member; other values pass through."""
    return member.value if isinstance(member, Enum) else member


def enum_or_raw(enum_cls, value):
    """
    Member of ``enum_cls`` for known values, the raw value otherwise.

    Used when reading rows back so an unknown stored value reaches
    response validation instead of failing inside the row mapper.
    """
    try:
        return enum_cls(value)
    except ValueError:
        return value
