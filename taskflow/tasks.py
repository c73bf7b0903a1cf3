"""
Tasks module for TaskFlow

Handles CRUD operations for tasks and turns a TaskFilter into SQL.
"""

from datetime import datetime
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from .db import DatabaseManager, like_pattern
from .filters import DateFilter, DateFilterKind, FieldFilter, FieldFilterKind, TaskFilter
from .models import Priority, Status
from .query.dates import format_date_for_sql

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = ("created_at", "updated_at", "due_date", "priority", "status", "title")

_TASK_COLUMNS = """
    t.id, t.title, t.description, t.status, t.priority, t.tags,
    t.project_id, p.name, t.due_date, t.created_at, t.updated_at
"""


def _normalize_tags(tags: Optional[List[str]]) -> List[str]:
    """Trim tags and drop blanks and repeats, keeping the first spelling."""
    normalized = []
    for tag in tags or []:
        tag = tag.strip()
        if tag and tag not in normalized:
            normalized.append(tag)
    return normalized


def _row_to_task(row) -> Dict[str, Any]:
    return {
        "id": row[0],
        "title": row[1],
        "description": row[2] or "",
        "status": row[3],
        "priority": row[4],
        "tags": json.loads(row[5]) if row[5] else [],
        "project_id": row[6],
        "project_name": row[7],
        "due_date": row[8],
        "created_at": row[9],
        "updated_at": row[10],
    }


def _field_condition(column: str, state: FieldFilter, conditions: List[str], args: List[Any]) -> None:
    if state.kind == FieldFilterKind.EQUALS:
        conditions.append(f"{column} = ?")
    elif state.kind == FieldFilterKind.NOT_EQUALS:
        conditions.append(f"{column} != ?")
    else:
        return
    args.append(getattr(state.value, "value", state.value))


def _date_condition(column: str, state: DateFilter, conditions: List[str], args: List[Any]) -> None:
    if state.kind == DateFilterKind.MUST_BE_NULL:
        conditions.append(f"{column} IS NULL")
    elif state.kind == DateFilterKind.RANGE:
        if state.start is not None:
            conditions.append(f"{column} >= ?")
            args.append(state.start)
        if state.end is not None:
            conditions.append(f"{column} <= ?")
            args.append(state.end)


def build_where_clause(task_filter: TaskFilter) -> Tuple[str, List[Any]]:
    """
    Build the WHERE clause for a filter.

    Every dimension is ANDed.

    Returns:
        Tuple of (clause, args); the clause is empty when nothing filters
    """
    conditions = []
    args = []

    _field_condition("t.status", task_filter.status, conditions, args)
    _field_condition("t.priority", task_filter.priority, conditions, args)

    if task_filter.project_id is not None:
        conditions.append("t.project_id = ?")
        args.append(task_filter.project_id)

    for tag in task_filter.tags:
        conditions.append("EXISTS (SELECT 1 FROM json_each(t.tags) WHERE value = ?)")
        args.append(tag)

    for tag in task_filter.exclude_tags:
        conditions.append("NOT EXISTS (SELECT 1 FROM json_each(t.tags) WHERE value = ?)")
        args.append(tag)

    if task_filter.search_query:
        pattern = like_pattern(task_filter.search_query)
        conditions.append(
            """(
                t.title LIKE ? ESCAPE '\\' OR
                COALESCE(t.description, '') LIKE ? ESCAPE '\\' OR
                COALESCE(p.name, '') LIKE ? ESCAPE '\\' OR
                COALESCE(t.tags, '') LIKE ? ESCAPE '\\'
            )"""
        )
        args.extend([pattern] * 4)

    _date_condition("t.due_date", task_filter.due_date, conditions, args)
    _date_condition("t.created_at", task_filter.created, conditions, args)

    if not conditions:
        return "", args
    return " WHERE " + " AND ".join(conditions), args


def build_order_clause(task_filter: TaskFilter) -> str:
    sort_by = task_filter.sort_by if task_filter.sort_by in SORTABLE_COLUMNS else "created_at"
    sort_order = task_filter.sort_order.lower() if task_filter.sort_order else "desc"
    if sort_order not in ("asc", "desc"):
        sort_order = "desc"
    return f" ORDER BY t.{sort_by} {sort_order.upper()}, t.id {sort_order.upper()}"


class TaskManager:
    """Manages task CRUD operations."""

    def __init__(self, db_manager: DatabaseManager):
        """
        Initialize task manager.

        Args:
            db_manager: Database manager instance
        """
        self.db_manager = db_manager

    def add_task(
        self,
        title: str,
        description: str = "",
        status: Status = Status.PENDING,
        priority: Priority = Priority.MEDIUM,
        tags: Optional[List[str]] = None,
        project_id: Optional[int] = None,
        due_date: Optional[datetime] = None,
        created_at: Optional[datetime] = None,
    ) -> int:
        """
        Add a new task to the database.

        Args:
            title: Short task title
            description: Optional longer description
            status: Initial status
            priority: Task priority
            tags: Optional tags; case is preserved, repeats are dropped
            project_id: Optional owning project
            due_date: Optional due date
            created_at: Creation time (default: now)

        Returns:
            The ID of the newly created task
        """
        if not title or not title.strip():
            raise ValueError("Task title cannot be empty")

        created_str = format_date_for_sql(created_at or datetime.now())
        due_str = format_date_for_sql(due_date) if due_date else None

        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                """
                INSERT INTO tasks (title, description, status, priority, tags, project_id,
                                   due_date, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    title.strip(),
                    description,
                    status.value,
                    priority.value,
                    json.dumps(_normalize_tags(tags)),
                    project_id,
                    due_str,
                    created_str,
                    created_str,
                ),
            )

            task_id = cursor.lastrowid
            conn.commit()

            return task_id

    def get_task(self, task_id: int) -> Optional[Dict[str, Any]]:
        """
        Get a specific task by ID.

        Returns:
            Task dictionary or None if not found
        """
        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute(
                f"""
                SELECT {_TASK_COLUMNS}
                FROM tasks t LEFT JOIN projects p ON t.project_id = p.id
                WHERE t.id = ?
                """,
                (task_id,),
            )

            row = cursor.fetchone()
            return _row_to_task(row) if row else None

    def list_tasks(self, task_filter: Optional[TaskFilter] = None) -> List[Dict[str, Any]]:
        """
        List tasks matching every dimension of ``task_filter``.

        Args:
            task_filter: Filter to apply (default: all tasks)

        Returns:
            List of task dictionaries
        """
        task_filter = task_filter or TaskFilter()
        where, args = build_where_clause(task_filter)

        query = f"SELECT {_TASK_COLUMNS} FROM tasks t LEFT JOIN projects p ON t.project_id = p.id"
        query += where + build_order_clause(task_filter)

        if task_filter.limit > 0:
            query += " LIMIT ?"
            args.append(task_filter.limit)
            if task_filter.offset > 0:
                query += " OFFSET ?"
                args.append(task_filter.offset)

        logger.debug("Listing tasks: %s %s", query, args)

        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, args)
            return [_row_to_task(row) for row in cursor.fetchall()]

    def count_tasks(self, task_filter: Optional[TaskFilter] = None) -> int:
        """Count tasks matching ``task_filter``."""
        where, args = build_where_clause(task_filter or TaskFilter())

        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) FROM tasks t LEFT JOIN projects p ON t.project_id = p.id" + where,
                args,
            )
            return cursor.fetchone()[0]

    def update_task_status(self, task_id: int, status: Status) -> bool:
        """
        Update task status and set updated_at timestamp.

        Returns:
            True if updated, False if not found or no change
        """
        task = self.get_task(task_id)
        if not task or task["status"] == status.value:
            return False

        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE tasks SET status = ?, updated_at = ? WHERE id = ?",
                (status.value, format_date_for_sql(datetime.now()), task_id),
            )
            conn.commit()

        return True

    def delete_task(self, task_id: int) -> bool:
        """
        Delete a task by ID.

        Returns:
            True if deleted, False if not found
        """
        with self.db_manager.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            conn.commit()

            return cursor.rowcount > 0
