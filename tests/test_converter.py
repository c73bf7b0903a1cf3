"""
Tests for converting parsed queries into task filters
"""

import pytest

from taskflow.filters import DateFilter, DateFilterKind, FieldFilter
from taskflow.models import Priority, Project, Status
from taskflow.projects import ProjectNotFoundError
from taskflow.query import (
    ConverterContext,
    DateClause,
    DateExpressionError,
    ParsedQuery,
    ProjectMention,
    ProjectResolutionError,
    QuerySyntaxError,
    convert_to_task_filter,
    parse_query,
)


class FakeProjects:
    """In-memory project lookup that records search calls."""

    def __init__(self, projects):
        self.projects = projects
        self.searches = []

    def get_by_name(self, name):
        for project in self.projects:
            if project.name == name:
                return project
        raise ProjectNotFoundError(name)

    def get_by_alias(self, alias):
        for project in self.projects:
            if project.has_alias(alias):
                return project
        raise ProjectNotFoundError(alias)

    def search(self, query, limit=0):
        self.searches.append((query, limit))
        found = [project for project in self.projects if query.lower() in project.name.lower()]
        return found[:limit] if limit > 0 else found


@pytest.fixture
def context(project_manager, sample_projects):
    return ConverterContext(projects=project_manager)


def convert(text, context=None, now=None):
    return convert_to_task_filter(parse_query(text), context, now)


class TestConvertFields:
    """Test fields that carry over unchanged."""

    def test_empty_query(self):
        """Test an empty query filters nothing and needs no lookup."""
        task_filter = convert("")

        assert task_filter.status == FieldFilter.unset()
        assert task_filter.project_id is None
        assert task_filter.due_date == DateFilter.no_filter()
        assert task_filter.created == DateFilter.no_filter()
        assert task_filter.search_query == ""

    def test_fields_without_projects(self):
        """Test status, tags and text need no project lookup."""
        task_filter = convert("-status:completed priority:urgent tag:a -tag:b fix login")

        assert task_filter.status == FieldFilter.not_equals(Status.COMPLETED)
        assert task_filter.priority == FieldFilter.equals(Priority.URGENT)
        assert task_filter.tags == ["a"]
        assert task_filter.exclude_tags == ["b"]
        assert task_filter.search_query == "fix login"

    def test_full_example(self, context, sample_projects, now):
        """Test the end-to-end example query."""
        task_filter = convert(
            "status:pending priority:high @backend tag:bug -tag:wontfix due:<2025-12-31", context, now
        )

        assert task_filter.status == FieldFilter.equals(Status.PENDING)
        assert task_filter.priority == FieldFilter.equals(Priority.HIGH)
        assert task_filter.project_id == sample_projects["backend"]
        assert task_filter.tags == ["bug"]
        assert task_filter.exclude_tags == ["wontfix"]
        assert task_filter.due_date_from is None
        assert "2025-12-31" in task_filter.due_date_to


class TestExactMentions:
    """Test resolving @name and project:name."""

    def test_name(self, context, sample_projects):
        """Test an exact project name."""
        assert convert("@backend", context).project_id == sample_projects["backend"]

    def test_project_field(self, context, sample_projects):
        """Test project:NAME."""
        assert convert("project:mobile-app", context).project_id == sample_projects["mobile-app"]

    def test_alias_fallback(self, context, sample_projects):
        """Test an alias resolves when no name matches."""
        assert convert("@web", context).project_id == sample_projects["frontend"]

    def test_alias_ignores_case(self, context, sample_projects):
        """Test aliases match in any case."""
        assert convert("@BE", context).project_id == sample_projects["backend"]

    def test_name_is_case_sensitive(self, context):
        """Test names only match with the same case."""
        with pytest.raises(ProjectResolutionError):
            convert("@Backend", context)

    def test_not_found(self, context):
        """Test an unknown project."""
        with pytest.raises(ProjectResolutionError) as exc_info:
            convert("@nonexistent", context)

        assert "project not found: 'nonexistent'" in str(exc_info.value)
        assert exc_info.value.term == "nonexistent"

    def test_same_project_twice(self, context, sample_projects):
        """Test a name and its alias agree."""
        assert convert("@backend @be", context).project_id == sample_projects["backend"]

    def test_conflicting_projects(self, context):
        """Test mentions of two different projects."""
        with pytest.raises(ProjectResolutionError, match="different projects"):
            convert("@backend @frontend", context)

    def test_mentions_need_a_lookup(self):
        """Test mentions without a project lookup."""
        with pytest.raises(ProjectResolutionError):
            convert("@backend")

        with pytest.raises(ProjectResolutionError):
            convert("@backend", ConverterContext())


class TestFuzzyMentions:
    """Test resolving @~name."""

    def test_typo(self, context, sample_projects):
        """Test a misspelled name still resolves."""
        assert convert("@~bakend", context).project_id == sample_projects["backend"]

    def test_prefix(self, context, sample_projects):
        """Test the shortest name wins for a prefix."""
        assert convert("@~back", context).project_id == sample_projects["backend"]

    def test_exact_name_wins(self, context, sample_projects):
        """Test an exact name beats longer names starting with it."""
        assert convert("@~backend", context).project_id == sample_projects["backend"]

    def test_case_insensitive(self, context, sample_projects):
        """Test fuzzy matching ignores case."""
        assert convert("@~FrontEnd", context).project_id == sample_projects["frontend"]

    def test_no_match(self, context):
        """Test nothing above the threshold."""
        with pytest.raises(ProjectResolutionError) as exc_info:
            convert("@~xyz", context)

        assert "no matching project found for 'xyz' (threshold: 60)" in str(exc_info.value)
        assert exc_info.value.threshold == 60

    def test_custom_threshold(self, project_manager, sample_projects):
        """Test a stricter threshold rejects a typo."""
        strict = ConverterContext(projects=project_manager, fuzzy_threshold=95)

        with pytest.raises(ProjectResolutionError, match="threshold: 95"):
            convert("@~bakend", strict)

    def test_archived_projects_are_skipped(self, context, project_manager):
        """Test fuzzy matching ignores archived projects."""
        project_manager.archive_project("mobile-app")

        with pytest.raises(ProjectResolutionError):
            convert("@~mobile", context)

    def test_widens_search_once(self):
        """Test the lookup falls back to every project when search finds nothing."""
        projects = FakeProjects([Project(id=1, name="backend"), Project(id=2, name="frontend")])
        context = ConverterContext(projects=projects, search_limit=5)

        task_filter = convert("@~bakend", context)

        assert task_filter.project_id == 1
        assert projects.searches == [("bakend", 5), ("", 0)]

    def test_no_widening_when_search_matches(self):
        """Test the first search is enough when it has a good candidate."""
        projects = FakeProjects([Project(id=1, name="backend"), Project(id=2, name="frontend")])
        context = ConverterContext(projects=projects)

        assert convert("@~front", context).project_id == 2
        assert projects.searches == [("front", 10)]

    def test_ties_keep_first_candidate(self):
        """Test equal scores resolve to the earlier candidate."""
        projects = FakeProjects([Project(id=7, name="backend-web"), Project(id=3, name="backend-api")])

        assert convert("@~backend", ConverterContext(projects=projects)).project_id == 7


class TestDateConversion:
    """Test evaluating due and created clauses."""

    def test_due_none(self, now):
        """Test due:none requires a missing due date."""
        task_filter = convert("due:none", now=now)

        assert task_filter.due_date.kind == DateFilterKind.MUST_BE_NULL
        assert task_filter.due_date_from is None
        assert task_filter.due_date_to is None

    def test_due_on_day(self, now):
        """Test due:today covers the whole day."""
        task_filter = convert("due:today", now=now)

        assert task_filter.due_date == DateFilter.between("2025-01-15 00:00:00", "2025-01-15 23:59:59")

    def test_due_after_offset(self, now):
        """Test due>+7d."""
        task_filter = convert("due>+7d", now=now)

        assert task_filter.due_date_from == "2025-01-22 00:00:00"
        assert task_filter.due_date_to is None

    def test_due_range(self, now):
        """Test due:today..+7d."""
        task_filter = convert("due:today..+7d", now=now)

        assert task_filter.due_date_from == "2025-01-15 00:00:00"
        assert task_filter.due_date_to == "2025-01-22 23:59:59"

    def test_created(self, now):
        """Test created:>-7d."""
        task_filter = convert("created:>-7d", now=now)

        assert task_filter.created_from == "2025-01-08 00:00:00"
        assert task_filter.created_to is None
        assert task_filter.due_date == DateFilter.no_filter()

    def test_clauses_intersect(self, now):
        """Test several due clauses narrow one window."""
        task_filter = convert("due>2025-01-01 due<2025-01-31 due:2025-01-10..2025-02-28", now=now)

        assert task_filter.due_date_from == "2025-01-10 00:00:00"
        assert task_filter.due_date_to == "2025-01-31 23:59:59"

    def test_none_with_range(self, now):
        """Test due:none cannot be combined with a window."""
        with pytest.raises(QuerySyntaxError, match="cannot be combined"):
            convert("due:none due>today", now=now)

    def test_invalid_clause(self):
        """Test a clause that never went through the parser."""
        parsed = ParsedQuery(due=[DateClause(":", "bogus")])

        with pytest.raises(DateExpressionError, match="invalid due date 'bogus'"):
            convert_to_task_filter(parsed)

    def test_manual_parsed_query(self, context, sample_projects, now):
        """Test converting a ParsedQuery built by hand."""
        parsed = ParsedQuery(
            project_mentions=[ProjectMention("fe")],
            created=[DateClause("<", "yesterday")],
        )

        task_filter = convert_to_task_filter(parsed, context, now)

        assert task_filter.project_id == sample_projects["frontend"]
        assert task_filter.created_to == "2025-01-14 23:59:59"
