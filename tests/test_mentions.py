"""
Tests for project mention extraction
"""

import pytest

from taskflow.query import (
    ProjectMention,
    ProjectMentionQuery,
    QuerySyntaxError,
    format_project_mentions,
    parse_project_mentions,
    reconstruct_query,
    validate_project_name,
)


class TestParseProjectMentions:
    """Test splitting a query into mentions and base text."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("", ""),
            ("   \t  ", ""),
            ("fix login bug", "fix login bug"),
            ("  fix   login\tbug  ", "fix login bug"),
            ("Fix Login", "Fix Login"),
        ],
    )
    def test_no_mentions(self, text, expected):
        """Without @ tokens the base query is the collapsed input."""
        result = parse_project_mentions(text)

        assert result.base_query == expected
        assert result.project_mentions == []

    def test_single_exact_mention(self):
        """Test an exact mention after free text."""
        result = parse_project_mentions("tasks @backend")

        assert result.base_query == "tasks"
        assert result.project_mentions == [ProjectMention("backend", False)]

    def test_exact_and_fuzzy_mentions(self):
        """Test mixed exact and fuzzy mentions."""
        result = parse_project_mentions("@backend @~frontend urgent")

        assert result.base_query == "urgent"
        assert result.project_mentions == [
            ProjectMention("backend", False),
            ProjectMention("frontend", True),
        ]

    def test_mentions_in_middle_collapse_whitespace(self):
        """Removing a mention leaves single spaces behind."""
        result = parse_project_mentions("fix   @backend   login")

        assert result.base_query == "fix login"

    def test_duplicates_are_kept_in_order(self):
        """Test that repeated mentions are not deduplicated."""
        result = parse_project_mentions("@api @~api @api")

        assert result.project_names() == ["api", "api", "api"]
        assert [mention.fuzzy for mention in result.project_mentions] == [False, True, False]

    def test_case_is_preserved(self):
        """Test that mention names keep their case."""
        result = parse_project_mentions("@BackEnd")

        assert result.project_mentions[0].name == "BackEnd"

    def test_name_characters(self):
        """Test hyphens, underscores and digits in names."""
        result = parse_project_mentions("@mobile-app @data_2024")

        assert result.project_names() == ["mobile-app", "data_2024"]

    @pytest.mark.parametrize("token", ["@", "@~", "@foo!", "user@example.com"])
    def test_invalid_mentions_stay_in_base_query(self, token):
        """Tokens that are not valid mentions are plain text."""
        result = parse_project_mentions(f"email {token}")

        assert result.base_query == f"email {token}"
        assert result.project_mentions == []

    def test_helpers(self):
        """Test the ProjectMentionQuery helpers."""
        result = parse_project_mentions("@backend @~front")

        assert result.has_project_filter() is True
        assert result.has_fuzzy_project_filter() is True
        assert parse_project_mentions("@backend").has_fuzzy_project_filter() is False
        assert parse_project_mentions("plain").has_project_filter() is False


class TestMentionFormatting:
    """Test rendering mentions back to text."""

    def test_mention_string(self):
        """Test the canonical @ and @~ forms."""
        assert str(ProjectMention("backend", False)) == "@backend"
        assert str(ProjectMention("backend", True)) == "@~backend"

    def test_format_project_mentions(self):
        """Test joining several mentions."""
        mentions = [ProjectMention("backend"), ProjectMention("web", fuzzy=True)]

        assert format_project_mentions(mentions) == "@backend @~web"
        assert format_project_mentions([]) == ""

    def test_reconstruct_query(self):
        """Mentions come first, then the base query."""
        query = ProjectMentionQuery(base_query="fix bug", project_mentions=[ProjectMention("backend")])

        assert reconstruct_query(query) == "@backend fix bug"
        assert reconstruct_query(ProjectMentionQuery()) == ""


class TestValidateProjectName:
    """Test project name validation."""

    def test_valid_names(self):
        """Test names that can be mentioned."""
        for name in ["backend", "mobile-app", "data_2024", "API"]:
            validate_project_name(name)

    @pytest.mark.parametrize("name", ["", "my project", "back/end", "café"])
    def test_invalid_names(self, name):
        """Test names that cannot be mentioned."""
        with pytest.raises(QuerySyntaxError):
            validate_project_name(name)
