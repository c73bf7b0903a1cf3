"""
Field filter parsing for the query language.

A query is a whitespace separated list of tokens. Recognized tokens:

- ``status:V`` / ``-status:V`` and ``priority:V`` / ``-priority:V``
- ``tag:V`` / ``-tag:V``
- ``project:NAME`` (same as ``@NAME``), ``@NAME`` and ``@~NAME``
- ``due`` and ``created`` with ``:``, ``<``, ``>`` (``due<V`` or ``due:<V``)
  and ``A..B`` ranges for ``:``

Every other token is free text. All clauses combine with AND.
"""

from dataclasses import dataclass, field
import logging
import re
from typing import List

from ..filters import FieldFilter
from ..models import Priority, Status, enum_values
from .dates import parse_date_range
from .errors import QuerySyntaxError
from .mentions import ProjectMention, parse_project_mentions

logger = logging.getLogger(__name__)

ENUM_FIELDS = {"status": Status, "priority": Priority}
DATE_FIELDS = ("due", "created")
KNOWN_FIELDS = ("status", "priority", "tag", "project") + DATE_FIELDS

_FIELD_TOKEN = re.compile(r"^(-)?([A-Za-z]+)(:[<>]?|[<>])(.*)$")


@dataclass(frozen=True)
class DateClause:
    """An unevaluated ``due``/``created`` clause."""

    operator: str
    value: str

    def __str__(self) -> str:
        return f"{self.operator}{self.value}"


@dataclass
class ParsedQuery:
    """Validated clauses of one query, before project and date resolution."""

    status: FieldFilter = field(default_factory=FieldFilter.unset)
    priority: FieldFilter = field(default_factory=FieldFilter.unset)
    tags: List[str] = field(default_factory=list)
    exclude_tags: List[str] = field(default_factory=list)
    project_mentions: List[ProjectMention] = field(default_factory=list)
    due: List[DateClause] = field(default_factory=list)
    created: List[DateClause] = field(default_factory=list)
    search_query: str = ""


def _parse_enum_value(field_name: str, value: str):
    enum_cls = ENUM_FIELDS[field_name]
    try:
        return enum_cls(value.lower())
    except ValueError:
        allowed = ", ".join(enum_values(enum_cls))
        raise QuerySyntaxError(f"invalid {field_name} value: '{value}' (must be one of: {allowed})") from None


def _apply_field(parsed: ParsedQuery, negated: bool, field_name: str, operator: str, value: str) -> None:
    if not value:
        raise QuerySyntaxError(f"missing value for '{field_name}'")

    if field_name in DATE_FIELDS:
        if negated:
            raise QuerySyntaxError(f"'{field_name}' cannot be negated")
        # Shape check only; the value is evaluated again at conversion time
        parse_date_range(value, operator)
        getattr(parsed, field_name).append(DateClause(operator=operator, value=value))
        return

    if operator != ":":
        raise QuerySyntaxError(f"'{field_name}' only supports ':' (got '{operator}')")

    if field_name in ENUM_FIELDS:
        member = _parse_enum_value(field_name, value)
        state = FieldFilter.not_equals(member) if negated else FieldFilter.equals(member)
        setattr(parsed, field_name, state)
    elif field_name == "tag":
        if negated:
            parsed.exclude_tags.append(value)
        else:
            parsed.tags.append(value)
    elif field_name == "project":
        if negated:
            raise QuerySyntaxError("'project' cannot be negated")
        parsed.project_mentions.append(ProjectMention(name=value))


def parse_query(text: str) -> ParsedQuery:
    """
    Parse a query string into its validated clauses.

    Project mentions are extracted first. Status and priority values are
    validated immediately; date clauses are kept verbatim and evaluated at
    conversion time.

    Args:
        text: Raw query text, e.g. ``"status:pending @backend tag:bug"``

    Returns:
        ParsedQuery

    Raises:
        QuerySyntaxError: On the first invalid clause; nothing is returned
    """
    mention_query = parse_project_mentions(text)
    parsed = ParsedQuery(project_mentions=list(mention_query.project_mentions))

    free_text = []
    for token in mention_query.base_query.split():
        match = _FIELD_TOKEN.match(token)
        if not match or match.group(2).lower() not in KNOWN_FIELDS:
            free_text.append(token)
            continue

        negated, field_name, operator, value = match.groups()
        operator = operator[-1]
        _apply_field(parsed, bool(negated), field_name.lower(), operator, value)

    parsed.search_query = " ".join(free_text)
    logger.debug("Parsed query %r into %s", text, parsed)
    return parsed


def is_query_language(text: str) -> bool:
    """
    Guess whether ``text`` uses the query language rather than plain search.

    True when the text starts with ``@`` or contains a known ``field:``
    prefix.
    """
    stripped = (text or "").strip()
    if stripped.startswith("@"):
        return True

    lowered = stripped.lower()
    return any(f"{name}:" in lowered for name in KNOWN_FIELDS)
