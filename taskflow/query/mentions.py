"""
Project mention extraction for the query language.

A mention is a whitespace-delimited token of the form ``@name`` (exact
project name) or ``@~name`` (approximate project name). Everything that is
not a mention is handed back as the base query.
"""

from dataclasses import dataclass, field
import re
from typing import List

from .errors import QuerySyntaxError

_MENTION_PATTERN = re.compile(r"^@(~)?([A-Za-z0-9_-]+)$")
_PROJECT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(frozen=True)
class ProjectMention:
    """One ``@`` reference to a project."""

    name: str
    fuzzy: bool = False

    def __str__(self) -> str:
        if self.fuzzy:
            return f"@~{self.name}"
        return f"@{self.name}"


@dataclass
class ProjectMentionQuery:
    """A query split into its project mentions and the remaining text."""

    base_query: str = ""
    project_mentions: List[ProjectMention] = field(default_factory=list)

    def has_project_filter(self) -> bool:
        return len(self.project_mentions) > 0

    def has_fuzzy_project_filter(self) -> bool:
        return any(mention.fuzzy for mention in self.project_mentions)

    def project_names(self) -> List[str]:
        return [mention.name for mention in self.project_mentions]


def parse_project_mentions(text: str) -> ProjectMentionQuery:
    """
    Split ``text`` into project mentions and the base query.

    Tokens are separated by any run of whitespace. Mentions keep their
    encounter order and are never deduplicated; the remaining tokens are
    rejoined with single spaces.

    Args:
        text: Raw query text

    Returns:
        ProjectMentionQuery with the base query and the mentions found
    """
    if not text or not text.strip():
        return ProjectMentionQuery()

    mentions = []
    remaining = []
    for token in text.split():
        match = _MENTION_PATTERN.match(token)
        if match:
            mentions.append(ProjectMention(name=match.group(2), fuzzy=match.group(1) == "~"))
        else:
            remaining.append(token)

    return ProjectMentionQuery(base_query=" ".join(remaining), project_mentions=mentions)


def format_project_mentions(mentions: List[ProjectMention]) -> str:
    """Render mentions in their canonical form, space separated."""
    return " ".join(str(mention) for mention in mentions)


def reconstruct_query(query: ProjectMentionQuery) -> str:
    """
    Rebuild a query string with the mentions first.

    The result is equivalent to the original query but does not reproduce
    the original token positions.
    """
    parts = [str(mention) for mention in query.project_mentions]
    if query.base_query:
        parts.append(query.base_query)
    return " ".join(parts)


def validate_project_name(name: str) -> None:
    """
    Check that a project name can be referenced with an ``@`` mention.

    Raises:
        QuerySyntaxError: If the name is empty or has invalid characters
    """
    if not name:
        raise QuerySyntaxError("project name cannot be empty")

    if not _PROJECT_NAME_PATTERN.match(name):
        raise QuerySyntaxError(
            f"project name '{name}' contains invalid characters "
            "(only alphanumeric, hyphens, and underscores allowed)"
        )
