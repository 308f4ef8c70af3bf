"""Tests for event descriptions and the logging sink."""

from webhook_receiver.github.events import AuditLogEntry, parse_event
from webhook_receiver.github.processors import LoggingSink, RecordingSink, describe

from tests.conftest import AUDIT_ENTRY, MINIMAL_PAYLOADS


class FakeLogger:
    def __init__(self):
        self.calls = []

    def info(self, event, **kwargs):
        self.calls.append((event, kwargs))


class TestDescribe:
    def test_repository_privatized(self):
        event = parse_event("repository", {"action": "privatized", "repository": {"full_name": "o/r"}})
        assert describe(event) == "Repository made private"

    def test_pull_request_merged(self):
        event = parse_event("pull_request", {
            "action": "closed", "number": 1, "pull_request": {"merged": True},
        })
        assert describe(event) == "PR merged"

    def test_pull_request_closed_without_merge(self):
        event = parse_event("pull_request", {
            "action": "closed", "number": 1, "pull_request": {"merged": False},
        })
        assert describe(event) == "PR closed without merge"

    def test_review_state(self):
        event = parse_event("pull_request_review", MINIMAL_PAYLOADS["pull_request_review"])
        assert describe(event) == "Review approved the changes"

    def test_workflow_job_queued(self):
        event = parse_event("workflow_job", MINIMAL_PAYLOADS["workflow_job"])
        assert describe(event) == "Job queued"

    def test_status_state(self):
        event = parse_event("status", MINIMAL_PAYLOADS["status"])
        assert describe(event) == "Status: Success"

    def test_branch_created(self):
        event = parse_event("create", MINIMAL_PAYLOADS["create"])
        assert describe(event) == "Branch created: feature"

    def test_unknown_action(self):
        event = parse_event("star", {"action": "exploded", "repository": {"full_name": "o/r"}})
        assert describe(event) == "Unhandled star action: exploded"


class TestLoggingSink:
    def test_event_logged_with_fields(self):
        log = FakeLogger()
        LoggingSink(logger=log).record(parse_event("issues", MINIMAL_PAYLOADS["issues"]))

        message, fields = log.calls[0]
        assert message == "Issue opened"
        assert fields["github_event"] == "issues"
        assert fields["issue_number"] == 9

    def test_push_logs_one_line_per_commit(self):
        log = FakeLogger()
        LoggingSink(logger=log).record(parse_event("push", MINIMAL_PAYLOADS["push"]))

        assert [call[0] for call in log.calls] == ["Push received", "Commit pushed"]
        commit_fields = log.calls[1][1]
        assert commit_fields["commit"] == "abc1234"
        assert commit_fields["author"] == "Octo"

    def test_push_commit_with_numeric_id(self):
        log = FakeLogger()
        payload = {"ref": "refs/heads/main", "commits": [{"id": 123456789, "message": "fix\nbody"}]}
        LoggingSink(logger=log).record(parse_event("push", payload))

        commit_fields = log.calls[1][1]
        assert commit_fields["commit"] == "1234567"
        assert commit_fields["commit_message"] == "fix"

    def test_audit_entry_logs_actor_and_resource(self):
        log = FakeLogger()
        entry = AuditLogEntry.from_entry(AUDIT_ENTRY, "octo-org")
        LoggingSink(logger=log).record(entry)

        message, fields = log.calls[0]
        assert message == "Audit log entry"
        assert fields["actor"] == "octocat"
        assert fields["resource"] == "octo-org/hello-world"
        assert fields["resource_type"] == "repository"

    def test_default_logger_does_not_raise(self):
        LoggingSink().record(parse_event("gollum", MINIMAL_PAYLOADS["gollum"]))


class TestRecordingSink:
    def test_of_type(self):
        sink = RecordingSink()
        sink.record(parse_event("ping", MINIMAL_PAYLOADS["ping"]))
        sink.record(parse_event("star", MINIMAL_PAYLOADS["star"]))

        assert len(sink.of_type("ping")) == 1
        assert len(sink.of_type("push")) == 0
