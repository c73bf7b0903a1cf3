"""
Projects module for TaskFlow

Handles CRUD operations for projects and the lookups used to resolve
``@project`` mentions in queries.
"""

from datetime import datetime
import json
import logging
import re
from typing import List, Optional

from .db import DatabaseManager, like_pattern
from .models import Project, ProjectStatus
from .query.mentions import validate_project_name

logger = logging.getLogger(__name__)

MAX_ALIASES = 10
_ALIAS_PATTERN = re.compile(r"^[a-z0-9_-]{2,30}$")

_PROJECT_COLUMNS = "id, name, description, status, aliases, created_at"


class ProjectNotFoundError(LookupError):
    """No project matched the requested name, alias or ID."""


def _row_to_project(row) -> Project:
    created_at = datetime.fromisoformat(row[5]) if row[5] else None
    return Project(
        id=row[0],
        name=row[1],
        description=row[2] or "",
        status=ProjectStatus(row[3]),
        aliases=json.loads(row[4]) if row[4] else [],
        created_at=created_at,
    )


class ProjectManager:
    """Manages project CRUD operations and lookups."""

    def __init__(self, db_manager: DatabaseManager):
        """
        Initialize project manager.

        Args:
            db_manager: Database manager instance
        """
        self.db_manager = db_manager

    def _validate_aliases(self, aliases: List[str]) -> List[str]:
        if len(aliases) > MAX_ALIASES:
            raise ValueError(f"A project cannot have more than {MAX_ALIASES} aliases")

        normalized = []
        for alias in aliases:
            alias = alias.strip()
            if not _ALIAS_PATTERN.match(alias):
                raise ValueError(
                    f"Invalid alias '{alias}': use 2-30 lowercase letters, digits, hyphens or underscores"
                )
            if alias in normalized:
                raise ValueError(f"Duplicate alias: {alias}")

            try:
                owner = self.get_by_alias(alias)
            except ProjectNotFoundError:
                owner = None
            if owner is not None:
                raise ValueError(f"Alias '{alias}' is already used by project '{owner.name}'")

            normalized.append(alias)
        return normalized

    def add_project(self, name: str, description: str = "", aliases: Optional[List[str]] = None) -> int:
        """
        Add a new project.

        Args:
            name: Unique project name (letters, digits, hyphens, underscores)
            description: Optional description
            aliases: Optional short names; matched case-insensitively

        Returns:
            The ID of the newly created project

        Raises:
            ValueError: If the name or an alias is invalid or already taken
        """
        validate_project_name(name)
        alias_list = self._validate_aliases(aliases or [])

        try:
            self.get_by_name(name)
        except ProjectNotFoundError:
            pass
        else:
            raise ValueError(f"Project '{name}' already exists")

        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                INSERT INTO projects (name, description, status, aliases)
                VALUES (?, ?, ?, ?)
            """,
                (name, description, ProjectStatus.ACTIVE.value, json.dumps(alias_list)),
            )

            project_id = cursor.lastrowid
            conn.commit()

        logger.debug("Created project %d (%s)", project_id, name)
        return project_id

    def _fetch_one(self, where: str, args: tuple) -> Optional[Project]:
        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_PROJECT_COLUMNS} FROM projects WHERE {where} LIMIT 1", args)
            row = cursor.fetchone()
            return _row_to_project(row) if row else None

    def get_by_id(self, project_id: int) -> Project:
        project = self._fetch_one("id = ?", (project_id,))
        if project is None:
            raise ProjectNotFoundError(f"Project not found: {project_id}")
        return project

    def get_by_name(self, name: str) -> Project:
        """
        Get a project by its exact, case-sensitive name.

        Raises:
            ProjectNotFoundError: If no project has that name
        """
        project = self._fetch_one("name = ?", (name,))
        if project is None:
            raise ProjectNotFoundError(f"Project not found: {name}")
        return project

    def get_by_alias(self, alias: str) -> Project:
        """
        Get a project by one of its aliases, ignoring case.

        Raises:
            ProjectNotFoundError: If no project has that alias
        """
        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT projects.id, projects.name, projects.description, projects.status,
                       projects.aliases, projects.created_at
                FROM projects, json_each(projects.aliases)
                WHERE LOWER(json_each.value) = LOWER(?)
                LIMIT 1
            """,
                (alias,),
            )
            row = cursor.fetchone()

        if row is None:
            raise ProjectNotFoundError(f"Project not found with alias: {alias}")
        return _row_to_project(row)

    def search(self, query: str, limit: int = 0) -> List[Project]:
        """
        Search non-archived projects by name or description.

        Args:
            query: Substring to look for (case-insensitive); empty lists all
            limit: Maximum number of results, 0 for no limit

        Returns:
            Matching projects ordered by name
        """
        sql = f"SELECT {_PROJECT_COLUMNS} FROM projects WHERE status != ?"
        args = [ProjectStatus.ARCHIVED.value]

        if query:
            pattern = like_pattern(query)
            sql += " AND (name LIKE ? ESCAPE '\\' OR COALESCE(description, '') LIKE ? ESCAPE '\\')"
            args.extend([pattern, pattern])

        sql += " ORDER BY name"

        if limit > 0:
            sql += " LIMIT ?"
            args.append(limit)

        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(sql, args)
            return [_row_to_project(row) for row in cursor.fetchall()]

    def list_projects(self, include_archived: bool = False) -> List[Project]:
        """List projects ordered by name."""
        if not include_archived:
            return self.search("")

        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_PROJECT_COLUMNS} FROM projects ORDER BY name")
            return [_row_to_project(row) for row in cursor.fetchall()]

    def archive_project(self, name: str) -> bool:
        """
        Archive a project so fuzzy lookups and listings skip it.

        Returns:
            True if archived, False if it was already archived
        """
        project = self.get_by_name(name)
        if project.is_archived:
            return False

        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE projects SET status = ? WHERE id = ?",
                (ProjectStatus.ARCHIVED.value, project.id),
            )
            conn.commit()

        return True
