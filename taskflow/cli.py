"""
TaskFlow - a personal task and project manager

Command line interface built on click.
"""

import logging
import sys

import click

from taskflow import __version__
from taskflow.config import Config
from taskflow.db import DatabaseManager
from taskflow.models import Priority, Status, enum_values
from taskflow.projects import ProjectManager, ProjectNotFoundError
from taskflow.query import (
    ConverterContext,
    ParsedQuery,
    ProjectMention,
    QueryError,
    convert_to_task_filter,
    is_query_language,
    parse_date,
    parse_query,
)
from taskflow.tasks import SORTABLE_COLUMNS, TaskManager
from taskflow.utils import describe_filter, format_project_for_display, format_task_for_display

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

QUERY_HELP = """
Query Language Syntax Reference

Use it with: taskflow list --query "your query here"

FIELD FILTERS:
  status:<value>       pending, in_progress, completed, cancelled
  priority:<value>     low, medium, high, urgent
  tag:<value>          Tasks with this tag
  project:<name>       Tasks in this project (same as @name)

NEGATION:
  -status:<value>      Exclude tasks with status
  -priority:<value>    Exclude tasks with priority
  -tag:<value>         Exclude tasks with tag

PROJECT MENTIONS:
  @<name>              Exact project name (or alias)
  @~<name>             Fuzzy project name match (typo-tolerant)

DATE FILTERS (due, created):
  due:2025-01-15       Due on that day (YYYY-MM-DD or YYYY/MM/DD)
  due:today            today, tomorrow, yesterday
  due:+7d              Offsets: d (days), w (weeks), M (months)
  due<2025-12-31       Due on or before (also due:<...)
  due>today            Due on or after (also due:>...)
  due:today..+7d       Between two dates, inclusive
  due:none             Tasks without a due date

COMBINING FILTERS:
  Separate filters with spaces; all of them must match (AND).
  Anything else is free-text search over title, description, project and tags.

EXAMPLES:
  taskflow list --query "status:pending @frontend"
  taskflow list --query "priority:high due<+7d"
  taskflow list --query "@~back tag:bug -status:completed"
  taskflow list --query "status:pending -tag:blocked -tag:waiting"
"""


def setup_logging(log_level: str = "WARNING") -> None:
    """Set up logging configuration."""
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT, handlers=[logging.StreamHandler(sys.stderr)])


def _get_db_manager(config: Config) -> DatabaseManager:
    """Get database manager - lazy initialization to avoid import-time connections."""
    return DatabaseManager(config.get_db_path())


def _converter_context(config: Config, project_manager: ProjectManager) -> ConverterContext:
    return ConverterContext(
        projects=project_manager,
        fuzzy_threshold=config.get_fuzzy_threshold(),
        search_limit=config.get_search_limit(),
    )


def _fail(message: str) -> None:
    click.echo(f"❌ Error: {message}")
    sys.exit(1)


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(version=__version__, prog_name="TaskFlow")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose):
    """TaskFlow - a personal task and project manager

    Manage tasks and projects in a local database and filter them with a
    small query language.

    Examples:
        taskflow project add backend --alias be
        taskflow add "Fix login" --priority high --project backend --tag bug
        taskflow list --query "status:pending @backend tag:bug"
        taskflow query help
    """
    setup_logging("DEBUG" if verbose else Config().get_log_level())


@cli.command(name="init")
@click.option("--db-path", help="Custom database path (default: ~/.taskflow/tasks.db)")
def init(db_path: str):
    """
    Initialize the TaskFlow database.

    The database is also created automatically when first needed.
    """
    config = Config()
    if db_path:
        config.set_db_path(db_path)
    DatabaseManager(db_path=config.get_db_path())
    click.echo("✅ Database initialized successfully!")


@cli.group(name="project")
def project_group():
    """Manage projects."""


@project_group.command(name="add")
@click.argument("name")
@click.option("--description", "-d", default="", help="Project description")
@click.option("--alias", "-a", multiple=True, help="Alias for the project (repeatable)")
def project_add(name, description, alias):
    """Add a new project."""
    project_manager = ProjectManager(_get_db_manager(Config()))
    try:
        project_id = project_manager.add_project(name, description=description, aliases=list(alias))
    except ValueError as e:
        _fail(str(e))
    click.echo(f'✅ Project added: "{name}" (id {project_id})')


@project_group.command(name="list")
@click.option("--all", "show_all", is_flag=True, help="Include archived projects")
def project_list(show_all):
    """List projects."""
    project_manager = ProjectManager(_get_db_manager(Config()))
    projects = project_manager.list_projects(include_archived=show_all)
    if not projects:
        click.echo("No projects found")
        return
    for project in projects:
        click.echo(format_project_for_display(project))


@project_group.command(name="archive")
@click.argument("name")
def project_archive(name):
    """Archive a project."""
    project_manager = ProjectManager(_get_db_manager(Config()))
    try:
        archived = project_manager.archive_project(name)
    except ProjectNotFoundError as e:
        _fail(str(e))
    if archived:
        click.echo(f"📦 Project archived: {name}")
    else:
        click.echo(f"Project {name} is already archived")


def _resolve_project_option(project: str, config: Config, project_manager: ProjectManager):
    """Resolve --project NAME (or ~NAME for a fuzzy match) to a project ID."""
    mention = ProjectMention(name=project.lstrip("~"), fuzzy=project.startswith("~"))
    parsed = ParsedQuery(project_mentions=[mention])
    return convert_to_task_filter(parsed, _converter_context(config, project_manager)).project_id


@cli.command(name="add")
@click.argument("title", nargs=-1)
@click.option("--description", "-d", default="", help="Task description")
@click.option("--priority", type=click.Choice(enum_values(Priority)), default=Priority.MEDIUM.value)
@click.option("--status", type=click.Choice(enum_values(Status)), default=Status.PENDING.value)
@click.option("--tag", "-t", multiple=True, help="Tag for the task (repeatable)")
@click.option("--project", "-p", help="Project name or alias; prefix with ~ for a fuzzy match")
@click.option("--due", help="Due date: YYYY-MM-DD, today, tomorrow, +3d, +1w, +1M")
def add_command(title, description, priority, status, tag, project, due):
    """Add a new task."""
    if not title:
        _fail("Missing task title")

    config = Config()
    db_manager = _get_db_manager(config)

    try:
        project_id = _resolve_project_option(project, config, ProjectManager(db_manager)) if project else None
        due_date = parse_date(due)[0] if due else None
    except QueryError as e:
        _fail(str(e))

    task_title = " ".join(title)
    task_id = TaskManager(db_manager).add_task(
        task_title,
        description=description,
        status=Status(status),
        priority=Priority(priority),
        tags=list(tag),
        project_id=project_id,
        due_date=due_date,
    )
    click.echo(f'✅ Task added: "{task_title}" (id {task_id})')


@cli.command(name="list")
@click.option("--query", "-q", "query_text", default="", help="Filter expression (see: taskflow query help)")
@click.option("--search", "-s", "search_text", default="", help="Plain text search; query syntax is detected automatically")
@click.option("--sort-by", type=click.Choice(SORTABLE_COLUMNS), help="Column to sort by")
@click.option("--order", type=click.Choice(["asc", "desc"]), help="Sort order")
@click.option("--limit", "-n", type=int, default=0, help="Maximum number of tasks to show")
def list_command(query_text, search_text, sort_by, order, limit):
    """List tasks matching a query."""
    if search_text and is_query_language(search_text):
        query_text = f"{query_text} {search_text}".strip()
        search_text = ""

    config = Config()
    db_manager = _get_db_manager(config)
    project_manager = ProjectManager(db_manager)

    # Any parse or resolution error aborts; never list with a partial filter
    try:
        parsed = parse_query(query_text)
        task_filter = convert_to_task_filter(parsed, _converter_context(config, project_manager))
    except QueryError as e:
        _fail(str(e))

    if search_text:
        task_filter.search_query = " ".join(part for part in (task_filter.search_query, search_text) if part)
    task_filter.sort_by = sort_by or config.get_default_sort_by()
    task_filter.sort_order = order or config.get_default_sort_order()
    task_filter.limit = limit

    tasks = TaskManager(db_manager).list_tasks(task_filter)
    if not tasks:
        click.echo("📝 No tasks found matching your criteria.")
        return

    for task in tasks:
        click.echo(format_task_for_display(task))


@cli.command(name="set-status")
@click.argument("task_id", type=int)
@click.argument("status", type=click.Choice(enum_values(Status)))
def set_status_command(task_id, status):
    """Change the status of a task."""
    task_manager = TaskManager(_get_db_manager(Config()))
    if task_manager.get_task(task_id) is None:
        _fail(f"Task {task_id} not found")
    if task_manager.update_task_status(task_id, Status(status)):
        click.echo(f"✅ Task {task_id} is now {status}")
    else:
        click.echo(f"Task {task_id} is already {status}")


@cli.command(name="delete")
@click.argument("task_id", type=int)
def delete_command(task_id):
    """Delete a task."""
    task_manager = TaskManager(_get_db_manager(Config()))
    if not task_manager.delete_task(task_id):
        _fail(f"Task {task_id} not found")
    click.echo(f"🗑️  Task {task_id} deleted")


@cli.group(name="query")
def query_group():
    """Query language help and utilities."""


@query_group.command(name="help")
def query_help():
    """Display the query language syntax reference."""
    click.echo(QUERY_HELP)


@query_group.command(name="explain")
@click.argument("expression", nargs=-1, required=True)
def query_explain(expression):
    """Show how a query expression is resolved."""
    config = Config()
    project_manager = ProjectManager(_get_db_manager(config))

    try:
        parsed = parse_query(" ".join(expression))
        task_filter = convert_to_task_filter(parsed, _converter_context(config, project_manager))
    except QueryError as e:
        _fail(str(e))

    project_name = None
    if task_filter.project_id is not None:
        project_name = project_manager.get_by_id(task_filter.project_id).name

    lines = describe_filter(task_filter, project_name)
    if not lines:
        click.echo("No filters: matches every task")
        return

    click.echo("🔍 Filters (all must match):")
    for line in lines:
        click.echo(f"   • {line}")


def main():
    cli()


if __name__ == "__main__":
    main()
