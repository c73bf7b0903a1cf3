"""
Query language for TaskFlow

Turns a free-text expression such as
``status:pending priority:high @backend tag:bug -tag:wontfix due:<2025-12-31``
into a ``TaskFilter``:

    parsed = parse_query(text)
    task_filter = convert_to_task_filter(parsed, ConverterContext(projects=project_manager))
"""

from .converter import ConverterContext, ProjectLookup, convert_to_task_filter
from .dates import (
    end_of_day,
    format_date_for_display,
    format_date_for_sql,
    parse_date,
    parse_date_range,
    start_of_day,
)
from .errors import DateExpressionError, ProjectResolutionError, QueryError, QuerySyntaxError
from .mentions import (
    ProjectMention,
    ProjectMentionQuery,
    format_project_mentions,
    parse_project_mentions,
    reconstruct_query,
    validate_project_name,
)
from .parser import DateClause, ParsedQuery, is_query_language, parse_query

__all__ = [
    "ConverterContext",
    "DateClause",
    "DateExpressionError",
    "ParsedQuery",
    "ProjectLookup",
    "ProjectMention",
    "ProjectMentionQuery",
    "ProjectResolutionError",
    "QueryError",
    "QuerySyntaxError",
    "convert_to_task_filter",
    "end_of_day",
    "format_date_for_display",
    "format_date_for_sql",
    "format_project_mentions",
    "is_query_language",
    "parse_date",
    "parse_date_range",
    "parse_project_mentions",
    "parse_query",
    "reconstruct_query",
    "start_of_day",
    "validate_project_name",
]
