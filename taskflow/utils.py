"""
Utils module for TaskFlow

Contains formatting helpers for tasks, projects and filters.
"""

from typing import Any, Dict, List

from .filters import TaskFilter
from .models import Project

_STATUS_MARKERS = {
    "pending": "[ ]",
    "in_progress": "[~]",
    "completed": "[x]",
    "cancelled": "[-]",
}


def format_task_for_display(task: Dict[str, Any]) -> str:
    """
    Format a task as one line.

    Returns:
        Formatted string: 3 [ ] high  Fix login  @backend  #bug,#api  due:2025-12-31
    """
    marker = _STATUS_MARKERS.get(task["status"], "[?]")
    line = f"{task['id']} {marker} {task['priority']:<6}  {task['title']}"

    if task.get("project_name"):
        line += f"  @{task['project_name']}"

    if task.get("tags"):
        line += "  " + ",".join(f"#{tag}" for tag in task["tags"])

    if task.get("due_date"):
        # Stored as "YYYY-MM-DD HH:MM:SS"; show the date only
        line += f"  due:{task['due_date'][:10]}"

    return line


def format_project_for_display(project: Project) -> str:
    line = f"{project.id} {project.name}"
    if project.aliases:
        line += f" ({', '.join(project.aliases)})"
    if project.is_archived:
        line += " [archived]"
    if project.description:
        line += f"  {project.description}"
    return line


def describe_filter(task_filter: TaskFilter, project_name: str = None) -> List[str]:
    """Describe each active dimension of a filter, one line per dimension."""
    lines = []
    if task_filter.status.is_set:
        lines.append(f"status: {task_filter.status}")
    if task_filter.priority.is_set:
        lines.append(f"priority: {task_filter.priority}")
    if task_filter.project_id is not None:
        label = f"{project_name} (id {task_filter.project_id})" if project_name else f"id {task_filter.project_id}"
        lines.append(f"project: {label}")
    if task_filter.tags:
        lines.append(f"tags: {', '.join(task_filter.tags)}")
    if task_filter.exclude_tags:
        lines.append(f"exclude tags: {', '.join(task_filter.exclude_tags)}")
    if task_filter.due_date.is_set:
        lines.append(f"due: {task_filter.due_date}")
    if task_filter.created.is_set:
        lines.append(f"created: {task_filter.created}")
    if task_filter.search_query:
        lines.append(f"text: {task_filter.search_query}")
    return lines
