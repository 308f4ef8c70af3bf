"""Shared test fixtures."""

import json
from typing import Any, Dict

import pytest

from monitoring.metrics import MetricsCollector
from webhook_receiver.github.dispatcher import EventDispatcher
from webhook_receiver.github.processors import RecordingSink
from webhook_receiver.github.signature import generate_signature
from webhook_receiver.github.webhook_handler import WebhookHandler, WebhookServer

SECRET = "It's a Secret to Everybody"

REPO = {"full_name": "octo-org/hello-world", "stargazers_count": 3, "watchers_count": 7, "forks_count": 2}

AUDIT_ENTRY = {
    "action": "repo.create",
    "actor": {"login": "octocat"},
    "created_at": "2024-01-01T00:00:00Z",
    "resource": "octo-org/hello-world",
    "resource_type": "repository",
}

# Smallest payload each event accepts
MINIMAL_PAYLOADS: Dict[str, Dict[str, Any]] = {
    "ping": {"zen": "Keep it logically awesome.", "hook_id": 123},
    "repository": {"action": "created", "repository": REPO},
    "push": {
        "ref": "refs/heads/main",
        "commits": [{"id": "abc1234def5678", "message": "Initial commit", "author": {"name": "Octo"}}],
        "repository": REPO,
    },
    "pull_request": {"action": "opened", "number": 5, "repository": REPO},
    "pull_request_review": {
        "action": "submitted",
        "pull_request": {"number": 5},
        "review": {"state": "approved"},
    },
    "pull_request_review_comment": {
        "action": "created",
        "pull_request": {"number": 5},
        "comment": {"id": 11, "path": "README.md", "line": 3},
    },
    "issues": {"action": "opened", "issue": {"number": 9}},
    "issue_comment": {"action": "created", "issue": {"number": 9}, "comment": {"id": 12}},
    "workflow_run": {
        "action": "completed",
        "workflow_run": {"name": "CI", "status": "completed", "conclusion": "success"},
    },
    "workflow_job": {"action": "queued", "workflow_job": {"name": "build"}},
    "check_suite": {"action": "completed", "check_suite": {"head_sha": "deadbeefcafe"}},
    "check_run": {"action": "created", "check_run": {"name": "lint"}},
    "status": {"sha": "deadbeefcafe1234", "state": "success", "branches": [{"name": "main"}]},
    "star": {"action": "created", "repository": REPO},
    "watch": {"action": "started", "repository": REPO},
    "fork": {"forkee": {"full_name": "someone/hello-world"}, "repository": REPO},
    "create": {"ref": "feature", "ref_type": "branch"},
    "delete": {"ref": "feature", "ref_type": "branch"},
    "team": {"action": "created", "team": {"name": "core"}},
    "organization": {"action": "member_added", "organization": {"login": "octo-org"}},
    "member": {"action": "added", "member": {"login": "alice"}},
    "release": {"action": "published", "release": {"tag_name": "v1.0.0"}},
    "package": {"action": "published", "package": {"name": "hello-pkg"}},
    "discussion": {"action": "created", "discussion": {"number": 1, "title": "Question"}},
    "discussion_comment": {"action": "created", "discussion": {"number": 1}, "comment": {"id": 2}},
    "gollum": {"pages": [{"page_name": "Home", "title": "Home", "action": "edited"}]},
    "commit_comment": {"action": "created", "comment": {"id": 3, "commit_id": "abcdef1234567"}},
    "deployment": {"action": "created", "deployment": {"id": 4, "environment": "production"}},
    "deployment_status": {
        "action": "created",
        "deployment": {"id": 4},
        "deployment_status": {"state": "success", "environment": "production"},
    },
    "audit_log_streaming": {
        "action": "audit_log_streaming",
        "audit_log_events": [AUDIT_ENTRY],
        "organization": {"login": "octo-org"},
    },
}

# Acknowledgement message each minimal payload produces
ACKNOWLEDGEMENTS: Dict[str, str] = {
    "ping": "Ping received successfully",
    "repository": "Repository created event processed",
    "push": "Push event processed",
    "pull_request": "Pull request opened event processed",
    "pull_request_review": "PR Review submitted event processed",
    "pull_request_review_comment": "Pull request review comment created event processed",
    "issues": "Issue opened event processed",
    "issue_comment": "Issue comment created event processed",
    "workflow_run": "Workflow run completed event processed",
    "workflow_job": "Workflow job queued event processed",
    "check_suite": "Check suite completed event processed",
    "check_run": "Check run created event processed",
    "status": "Status event processed",
    "star": "Star created event processed",
    "watch": "Watch started event processed",
    "fork": "Fork event processed",
    "create": "Create branch event processed",
    "delete": "Delete branch event processed",
    "team": "Team created event processed",
    "organization": "Organization member_added event processed",
    "member": "Member added event processed",
    "release": "Release published event processed",
    "package": "Package published event processed",
    "discussion": "Discussion created event processed",
    "discussion_comment": "Discussion comment created event processed",
    "gollum": "Gollum (wiki) event processed",
    "commit_comment": "Commit comment created event processed",
    "deployment": "Deployment created event processed",
    "deployment_status": "Deployment status created event processed",
    "audit_log_streaming": "Audit log events processed successfully",
}


def encode(payload: Any) -> bytes:
    return json.dumps(payload).encode("utf-8")


def signed_headers(body: bytes, event: str, secret: str = SECRET) -> Dict[str, str]:
    return {
        "X-GitHub-Event": event,
        "X-Hub-Signature-256": generate_signature(body, secret),
        "X-GitHub-Delivery": "72d3162e-cc78-11e3-81ab-4c9367dc0958",
        "User-Agent": "GitHub-Hookshot/044aadd",
    }


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def dispatcher(sink, metrics):
    return EventDispatcher(sink=sink, metrics=metrics)


@pytest.fixture
def handler(sink, metrics):
    return WebhookHandler(secret=SECRET, sink=sink, metrics=metrics)


@pytest.fixture
def server(handler):
    return WebhookServer(handler, host="127.0.0.1", port=0)
