"""Pytest configuration for all tests."""

import os

import pytest


@pytest.fixture(autouse=True)
def clean_printhook_env(monkeypatch):
    """Keep PRINTHOOK_ variables from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.upper().startswith("PRINTHOOK_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def issue_payload():
    """A trimmed `issues` webhook payload as sent by GitHub."""
    return {
        "action": "opened",
        "issue": {
            "number": 42,
            "title": "Printer jams on long receipts",
            "body": "Steps to reproduce:\r\n\r\n1. Print a long receipt\r\n2. Watch it jam",
            "html_url": "https://github.com/acme/widgets/issues/42",
            "created_at": "2024-05-01T12:00:00Z",
            "labels": [{"name": "bug"}, {"name": "hardware"}],
            "user": {"login": "octocat"},
            "assignee": {"login": "hubot"},
        },
        "repository": {"full_name": "acme/widgets"},
    }


@pytest.fixture
def pull_request_payload():
    """A trimmed `pull_request` webhook payload as sent by GitHub."""
    return {
        "action": "synchronize",
        "pull_request": {
            "number": 7,
            "title": "Wrap long lines",
            "body": "Fixes #42",
            "html_url": "https://github.com/acme/widgets/pull/7",
            "created_at": "2024-05-02T08:30:00Z",
            "labels": [{"name": "enhancement"}],
            "user": {"login": "monalisa"},
        },
        "repository": {"full_name": "acme/widgets"},
    }


@pytest.fixture
def workflow_run_payload():
    """A trimmed failed `workflow_run` webhook payload."""
    return {
        "action": "completed",
        "workflow_run": {
            "id": 30433642,
            "name": "CI",
            "conclusion": "failure",
            "html_url": "https://github.com/acme/widgets/actions/runs/30433642",
            "updated_at": "2024-05-03T17:45:10Z",
        },
        "repository": {"full_name": "acme/widgets"},
    }
