"""
Pytest configuration and fixtures for TaskFlow test suite
"""

from datetime import datetime
import os
import tempfile

import pytest

from taskflow.db import DatabaseManager


@pytest.fixture(autouse=True)
def isolate_tests_from_real_database(monkeypatch):
    """
    Global fixture that ensures all tests use isolated databases and config.

    This fixture runs automatically for every test and prevents tests from
    accidentally using the real user database or config file.
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as tmp:
        temp_db_path = tmp.name

    with tempfile.TemporaryDirectory() as config_dir:
        monkeypatch.setenv("TASKFLOW_DB_PATH", temp_db_path)
        monkeypatch.setenv("TASKFLOW_CONFIG_DIR", config_dir)

        yield

    if os.path.exists(temp_db_path):
        os.unlink(temp_db_path)


@pytest.fixture
def temp_db_path():
    """Create a temporary database path for testing."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as tmp:
        return tmp.name


@pytest.fixture
def db_manager(temp_db_path):
    """Create a database manager with a temporary database."""
    manager = DatabaseManager(temp_db_path)
    yield manager
    # Cleanup
    if os.path.exists(temp_db_path):
        os.unlink(temp_db_path)


@pytest.fixture
def project_manager(db_manager):
    from taskflow.projects import ProjectManager

    return ProjectManager(db_manager)


@pytest.fixture
def task_manager(db_manager):
    from taskflow.tasks import TaskManager

    return TaskManager(db_manager)


@pytest.fixture
def sample_projects(project_manager):
    """Create the projects most query tests resolve against; returns name -> id."""
    return {
        "backend": project_manager.add_project("backend", description="API and services", aliases=["be"]),
        "backend-api": project_manager.add_project("backend-api"),
        "backend-auth": project_manager.add_project("backend-auth"),
        "frontend": project_manager.add_project("frontend", aliases=["fe", "web"]),
        "mobile-app": project_manager.add_project("mobile-app"),
    }


@pytest.fixture
def now():
    """A fixed reference instant: Wednesday, January 15, 2025, 10:30."""
    return datetime(2025, 1, 15, 10, 30, 0)


@pytest.fixture
def cli_runner():
    """Create a Click CLI runner for testing."""
    from click.testing import CliRunner

    return CliRunner()
