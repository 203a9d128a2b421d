"""Shared fixtures for the dashboard backend tests."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from services.classifier import IssueClassifier
from services.config import DashboardConfig, Team
from services.issue import Issue


@pytest.fixture
def config():
    """Config with two teams and test Jira credentials."""
    return DashboardConfig(
        jira_url="https://test.atlassian.net",
        jira_email="test@example.com",
        jira_token="test-token-123",
        filter_id=12345,
        teams=(Team(name="Alpha", label="TeamAlpha"), Team(name="Beta", label="TeamBeta")),
        retry_delay=0,
    )


@pytest.fixture
def classifier(config):
    return IssueClassifier.from_config(config)


@pytest.fixture
def make_issue():
    """Factory for Issue records with sensible defaults."""
    def _make(key="PROJ-1", **kwargs):
        if "labels" in kwargs:
            kwargs["labels"] = frozenset(kwargs["labels"])
        for name in ("fix_versions", "sprints"):
            if name in kwargs:
                kwargs[name] = tuple(kwargs[name])
        kwargs.setdefault("issue_type", "Task")
        return Issue(key=key, **kwargs)
    return _make


@pytest.fixture
def make_raw_issue():
    """Factory for raw Jira search API issue dicts."""
    def _make(key="PROJ-1", fix_versions=(), sprints=(), labels=(), issue_type="Task",
              hle=None, assignee=None, status="In Progress", summary="Do something",
              time_spent=None):
        fields = {
            "summary": summary,
            "labels": list(labels),
            "issuetype": {"name": issue_type},
            "status": {"name": status},
            "fixVersions": [{"name": name} for name in fix_versions],
            "customfield_10000": [{"id": i, "name": name} for i, name in enumerate(sprints)],
            "customfield_11605": hle,
            "assignee": {"displayName": assignee} if assignee else None,
        }
        if time_spent is not None:
            fields["timetracking"] = {"timeSpentSeconds": time_spent}
        return {"key": key, "fields": fields}
    return _make


@pytest.fixture
def scenario_issues(make_issue):
    """Three issues across two fix versions."""
    return [
        make_issue("TEST-1", fix_versions=["6.12.0 (16. 9. - 29. 9)"], effort=5.5),
        make_issue("TEST-2", fix_versions=["6.12.0 (16. 9. - 29. 9)"],
                   labels=["Maintenance"], effort=3.2),
        make_issue("TEST-3", fix_versions=["6.13.0 (30. 9. - 13. 10)"],
                   issue_type="Bug", effort=2.1),
    ]


@pytest.fixture
def app(config):
    """Create Flask test app."""
    from app import create_app
    app = create_app(config)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    return app.test_client()
