"""
Task filter consumed by the task store.

Each dimension of a ``TaskFilter`` is combined with AND. Status and priority
use ``FieldFilter`` so that "no filter" is never confused with a real value,
and date dimensions use ``DateFilter`` so that "must have no date" is never
confused with "no date filter".
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class FieldFilterKind(Enum):
    UNSET = "unset"
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"


@dataclass(frozen=True)
class FieldFilter:
    """Unset, equal to a value, or not equal to a value."""

    kind: FieldFilterKind = FieldFilterKind.UNSET
    value: Optional[Any] = None

    @classmethod
    def unset(cls) -> "FieldFilter":
        return cls()

    @classmethod
    def equals(cls, value: Any) -> "FieldFilter":
        return cls(FieldFilterKind.EQUALS, value)

    @classmethod
    def not_equals(cls, value: Any) -> "FieldFilter":
        return cls(FieldFilterKind.NOT_EQUALS, value)

    @property
    def is_set(self) -> bool:
        return self.kind != FieldFilterKind.UNSET

    def __str__(self) -> str:
        if self.kind == FieldFilterKind.UNSET:
            return "any"
        value = getattr(self.value, "value", self.value)
        if self.kind == FieldFilterKind.NOT_EQUALS:
            return f"not {value}"
        return str(value)


class DateFilterKind(Enum):
    NO_FILTER = "no_filter"
    MUST_BE_NULL = "must_be_null"
    RANGE = "range"


@dataclass(frozen=True)
class DateFilter:
    """
    Filter on a date column.

    ``RANGE`` bounds are inclusive SQL timestamps (``YYYY-MM-DD HH:MM:SS``);
    either bound may be None for an open-ended range.
    """

    kind: DateFilterKind = DateFilterKind.NO_FILTER
    start: Optional[str] = None
    end: Optional[str] = None

    @classmethod
    def no_filter(cls) -> "DateFilter":
        return cls()

    @classmethod
    def must_be_null(cls) -> "DateFilter":
        return cls(DateFilterKind.MUST_BE_NULL)

    @classmethod
    def between(cls, start: Optional[str], end: Optional[str]) -> "DateFilter":
        if start is None and end is None:
            raise ValueError("a date range needs at least one bound")
        return cls(DateFilterKind.RANGE, start, end)

    @property
    def is_set(self) -> bool:
        return self.kind != DateFilterKind.NO_FILTER

    def __str__(self) -> str:
        if self.kind == DateFilterKind.NO_FILTER:
            return "any"
        if self.kind == DateFilterKind.MUST_BE_NULL:
            return "none"
        return f"{self.start or '...'} .. {self.end or '...'}"


@dataclass
class TaskFilter:
    """Storage-ready filter for listing and counting tasks."""

    status: FieldFilter = field(default_factory=FieldFilter.unset)
    priority: FieldFilter = field(default_factory=FieldFilter.unset)
    project_id: Optional[int] = None
    tags: List[str] = field(default_factory=list)
    exclude_tags: List[str] = field(default_factory=list)
    due_date: DateFilter = field(default_factory=DateFilter.no_filter)
    created: DateFilter = field(default_factory=DateFilter.no_filter)
    search_query: str = ""

    # Pass-through, never produced by the query language
    sort_by: str = ""
    sort_order: str = ""
    limit: int = 0
    offset: int = 0

    @property
    def due_date_from(self) -> Optional[str]:
        return self.due_date.start

    @property
    def due_date_to(self) -> Optional[str]:
        return self.due_date.end

    @property
    def created_from(self) -> Optional[str]:
        return self.created.start

    @property
    def created_to(self) -> Optional[str]:
        return self.created.end
