"""
Domain models for TaskFlow.

Defines the enums for task status, task priority and project status, and
the Project record returned by the project store.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class Status(Enum):
    """Lifecycle state of a task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Priority(Enum):
    """How urgent a task is."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ProjectStatus(Enum):
    """Lifecycle state of a project."""

    ACTIVE = "active"
    ARCHIVED = "archived"
    COMPLETED = "completed"


def enum_values(enum_cls) -> List[str]:
    """Return the string values of an enum, in declaration order."""
    return [member.value for member in enum_cls]


@dataclass
class Project:
    """A project that tasks can belong to."""

    id: int
    name: str
    description: str = ""
    status: ProjectStatus = ProjectStatus.ACTIVE
    aliases: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None

    def has_alias(self, alias: str) -> bool:
        """Aliases compare case-insensitively."""
        return alias.lower() in (existing.lower() for existing in self.aliases)

    @property
    def is_archived(self) -> bool:
        return self.status == ProjectStatus.ARCHIVED
