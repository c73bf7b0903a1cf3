"""
Conversion of a parsed query into a storage-ready TaskFilter.

Project mentions are resolved through a read-only project lookup, and
date clauses are evaluated against a single reference instant.
"""

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import List, Optional, Protocol

from ..filters import DateFilter, TaskFilter
from ..fuzzy import match_many
from ..models import Project
from .dates import format_date_for_sql, parse_date_range
from .errors import DateExpressionError, ProjectResolutionError, QuerySyntaxError
from .mentions import ProjectMention
from .parser import DateClause, ParsedQuery

logger = logging.getLogger(__name__)

DEFAULT_FUZZY_THRESHOLD = 60
DEFAULT_SEARCH_LIMIT = 10


class ProjectLookup(Protocol):
    """
    Read-only project access needed to resolve mentions.

    Lookups raise ``LookupError`` (e.g. ``ProjectNotFoundError``) when
    nothing matches. ``search("", 0)`` lists every non-archived project.
    """

    def get_by_name(self, name: str) -> Project: ...

    def get_by_alias(self, alias: str) -> Project: ...

    def search(self, query: str, limit: int = 0) -> List[Project]: ...


@dataclass
class ConverterContext:
    """Per-invocation settings and collaborators for conversion."""

    projects: Optional[ProjectLookup] = None
    fuzzy_threshold: int = DEFAULT_FUZZY_THRESHOLD
    search_limit: int = DEFAULT_SEARCH_LIMIT


def _resolve_exact(projects: ProjectLookup, name: str) -> Project:
    # Names are case sensitive, aliases are not
    try:
        return projects.get_by_name(name)
    except LookupError:
        pass

    try:
        return projects.get_by_alias(name)
    except LookupError:
        raise ProjectResolutionError(f"project not found: '{name}' (tried name and alias)", term=name) from None


def _best_match(name: str, candidates: List[Project], threshold: int) -> Optional[Project]:
    results = match_many(name, [project.name for project in candidates], threshold)
    for result in results:
        logger.debug("Fuzzy score %d for %r against %r", result.score, name, result.text)
    # Equal scores keep listing order, so the earliest candidate wins ties
    return candidates[results[0].index] if results else None


def _resolve_fuzzy(context: ConverterContext, name: str) -> Project:
    threshold = context.fuzzy_threshold

    best = _best_match(name, context.projects.search(name, context.search_limit), threshold)
    if best is None:
        # Substring search misses typos, so widen to every active project once
        best = _best_match(name, context.projects.search("", 0), threshold)

    if best is None:
        raise ProjectResolutionError(
            f"no matching project found for '{name}' (threshold: {threshold})",
            term=name,
            threshold=threshold,
        )
    return best


def _resolve_project_id(mentions: List[ProjectMention], context: Optional[ConverterContext]) -> Optional[int]:
    if not mentions:
        return None

    if context is None or context.projects is None:
        raise ProjectResolutionError("project lookup is not available to resolve project mentions", term=mentions[0].name)

    resolved = []
    for mention in mentions:
        if mention.fuzzy:
            project = _resolve_fuzzy(context, mention.name)
        else:
            project = _resolve_exact(context.projects, mention.name)
        logger.debug("Resolved %s to project %d (%s)", mention, project.id, project.name)
        resolved.append(project)

    if len({project.id for project in resolved}) > 1:
        names = ", ".join(sorted({project.name for project in resolved}))
        raise ProjectResolutionError(
            f"project mentions resolve to different projects ({names}); a task belongs to only one project",
            term=" ".join(str(mention) for mention in mentions),
        )

    return resolved[0].id


def _resolve_dates(field_name: str, clauses: List[DateClause], now: datetime) -> DateFilter:
    if not clauses:
        return DateFilter.no_filter()

    start = end = None
    must_be_null = False
    has_range = False

    for clause in clauses:
        try:
            clause_start, clause_end = parse_date_range(clause.value, clause.operator, now)
        except DateExpressionError as e:
            raise DateExpressionError(f"invalid {field_name} date '{clause.value}': {e}") from e

        if clause_start is None and clause_end is None:
            must_be_null = True
            continue

        # Several clauses on one field narrow the window (AND)
        has_range = True
        if clause_start is not None and (start is None or clause_start > start):
            start = clause_start
        if clause_end is not None and (end is None or clause_end < end):
            end = clause_end

    if must_be_null and has_range:
        raise QuerySyntaxError(f"'{field_name}:none' cannot be combined with another {field_name} clause")

    if must_be_null:
        return DateFilter.must_be_null()

    return DateFilter.between(
        format_date_for_sql(start) if start is not None else None,
        format_date_for_sql(end) if end is not None else None,
    )


def convert_to_task_filter(
    parsed: ParsedQuery, context: Optional[ConverterContext] = None, now: Optional[datetime] = None
) -> TaskFilter:
    """
    Resolve a parsed query into a TaskFilter.

    Args:
        parsed: Result of ``parse_query``
        context: Project lookup and fuzzy matching settings
        now: Reference instant for relative dates (default: current time)

    Returns:
        TaskFilter with every clause applied

    Raises:
        ProjectResolutionError: If a project mention cannot be resolved
        QuerySyntaxError: If a date clause cannot be evaluated
    """
    if now is None:
        now = datetime.now()

    task_filter = TaskFilter(
        status=parsed.status,
        priority=parsed.priority,
        project_id=_resolve_project_id(parsed.project_mentions, context),
        tags=list(parsed.tags),
        exclude_tags=list(parsed.exclude_tags),
        due_date=_resolve_dates("due", parsed.due, now),
        created=_resolve_dates("created", parsed.created, now),
        search_query=parsed.search_query,
    )

    logger.debug("Converted query into %s", task_filter)
    return task_filter
