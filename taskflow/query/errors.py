"""
Errors raised by the query language.

Parsing raises ``QuerySyntaxError``; converting a parsed query into a
``TaskFilter`` raises ``ProjectResolutionError`` when a project reference
cannot be resolved.
"""

from typing import Optional


class QueryError(Exception):
    """Base class for every query language failure."""


class QuerySyntaxError(QueryError, ValueError):
    """Unknown field value, empty value or unsupported form."""


class DateExpressionError(QuerySyntaxError):
    """A date expression could not be evaluated."""


class ProjectResolutionError(QueryError):
    """A project mention did not resolve to exactly one known project."""

    def __init__(self, message: str, term: str, threshold: Optional[int] = None):
        super().__init__(message)
        self.term = term
        self.threshold = threshold
