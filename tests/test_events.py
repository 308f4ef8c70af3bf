"""Tests for event variants: required fields and acknowledgements."""

import pytest

from webhook_receiver.github.errors import MalformedPayloadError
from webhook_receiver.github.events import (
    EVENT_TYPES,
    SUPPORTED_EVENTS,
    AuditLogStreamingEvent,
    CommitCommentEvent,
    GollumEvent,
    PingEvent,
    PushEvent,
    StatusEvent,
    lookup,
    parse_event,
)

from tests.conftest import MINIMAL_PAYLOADS


class TestRegistry:
    def test_thirty_supported_events(self):
        assert len(SUPPORTED_EVENTS) == 30
        assert len(set(SUPPORTED_EVENTS)) == 30

    def test_every_supported_event_has_a_variant(self):
        assert list(EVENT_TYPES) == list(SUPPORTED_EVENTS)

    def test_fixture_covers_every_event(self):
        assert set(MINIMAL_PAYLOADS) == set(SUPPORTED_EVENTS)


class TestLookup:
    def test_nested_path(self):
        assert lookup({"a": {"b": {"c": 1}}}, "a.b.c") == 1

    def test_missing_segment_returns_default(self):
        assert lookup({"a": {}}, "a.b.c") is None
        assert lookup({"a": "text"}, "a.b", default="x") == "x"


class TestParseEvent:
    @pytest.mark.parametrize("event_type", SUPPORTED_EVENTS)
    def test_minimal_payload_narrows(self, event_type):
        event = parse_event(event_type, MINIMAL_PAYLOADS[event_type])
        assert event.event_type == event_type
        ack = event.acknowledgement()
        assert isinstance(ack["message"], str) and ack["message"]

    def test_unknown_event_raises_key_error(self):
        with pytest.raises(KeyError):
            parse_event("label", {})

    @pytest.mark.parametrize("event_type", [e for e in SUPPORTED_EVENTS if e != "audit_log_streaming"])
    def test_non_object_payload_rejected(self, event_type):
        with pytest.raises(MalformedPayloadError) as exc_info:
            parse_event(event_type, ["not", "an", "object"])
        assert exc_info.value.message == f"Invalid {event_type} payload"
        assert exc_info.value.status_code == 400


class TestRequiredFields:
    def test_missing_field_names_path(self):
        with pytest.raises(MalformedPayloadError) as exc_info:
            PingEvent.from_payload({"zen": "Design for failure."})
        assert exc_info.value.to_body() == {
            "message": "Invalid ping payload",
            "error": "missing required field 'hook_id'",
        }

    def test_nested_missing_field(self):
        with pytest.raises(MalformedPayloadError) as exc_info:
            parse_event("issues", {"action": "opened", "issue": {}})
        assert exc_info.value.details == "missing required field 'issue.number'"

    def test_wrong_type_rejected(self):
        with pytest.raises(MalformedPayloadError) as exc_info:
            parse_event("pull_request", {"action": "opened", "number": "5"})
        assert exc_info.value.details == "field 'number' must be int"

    def test_bool_is_not_an_int(self):
        with pytest.raises(MalformedPayloadError):
            parse_event("ping", {"zen": "z", "hook_id": True})

    def test_null_counts_as_missing(self):
        with pytest.raises(MalformedPayloadError):
            parse_event("release", {"action": "published", "release": {"tag_name": None}})

    def test_push_without_action_is_valid(self):
        event = parse_event("push", {"ref": "refs/heads/main", "commits": []})
        assert isinstance(event, PushEvent)
        assert event.repository is None

    def test_push_commit_must_be_object(self):
        with pytest.raises(MalformedPayloadError) as exc_info:
            parse_event("push", {"ref": "refs/heads/main", "commits": ["abc"]})
        assert exc_info.value.details == "commits[0] must be an object"

    def test_push_commit_fields_normalised_to_str(self):
        event = parse_event("push", {
            "ref": "refs/heads/main",
            "commits": [{"id": 12345, "message": 42}, {"id": None}],
        })
        assert event.commits[0].id == "12345"
        assert event.commits[0].message == "42"
        assert event.commits[1].id is None
        assert event.commits[1].message is None


class TestAcknowledgements:
    def test_ping_echoes_exactly_zen_and_hook_id(self):
        event = parse_event("ping", {"zen": "Keep it logically awesome.", "hook_id": 123, "hook": {}})
        assert event.acknowledgement() == {
            "message": "Ping received successfully",
            "zen": "Keep it logically awesome.",
            "hook_id": 123,
        }

    def test_push_reports_commit_count(self):
        event = parse_event("push", MINIMAL_PAYLOADS["push"])
        assert event.acknowledgement() == {
            "message": "Push event processed",
            "repository": "octo-org/hello-world",
            "ref": "refs/heads/main",
            "commits": 1,
        }

    def test_repository_message_includes_action(self):
        ack = parse_event("repository", MINIMAL_PAYLOADS["repository"]).acknowledgement()
        assert ack == {
            "message": "Repository created event processed",
            "repository": "octo-org/hello-world",
            "action": "created",
        }

    def test_status_shortens_sha(self):
        event = parse_event("status", MINIMAL_PAYLOADS["status"])
        assert isinstance(event, StatusEvent)
        ack = event.acknowledgement()
        assert ack["sha"] == "deadbee"
        assert ack["branches"] == ["main"]

    def test_commit_comment_shortens_sha(self):
        event = parse_event("commit_comment", MINIMAL_PAYLOADS["commit_comment"])
        assert isinstance(event, CommitCommentEvent)
        assert event.acknowledgement()["commit_sha"] == "abcdef1"

    def test_gollum_lists_pages(self):
        event = parse_event("gollum", MINIMAL_PAYLOADS["gollum"])
        assert isinstance(event, GollumEvent)
        ack = event.acknowledgement()
        assert ack["pages_count"] == 1
        assert ack["pages"] == [{"page_name": "Home", "title": "Home", "action": "edited"}]

    def test_create_message_uses_ref_type(self):
        ack = parse_event("create", {"ref": "v1.0", "ref_type": "tag"}).acknowledgement()
        assert ack["message"] == "Create tag event processed"

    def test_deployment_status_environment(self):
        ack = parse_event("deployment_status", MINIMAL_PAYLOADS["deployment_status"]).acknowledgement()
        assert ack == {
            "message": "Deployment status created event processed",
            "deployment_id": 4,
            "state": "success",
            "environment": "production",
            "action": "created",
        }

    def test_audit_log_counts_entries(self):
        event = parse_event("audit_log_streaming", MINIMAL_PAYLOADS["audit_log_streaming"])
        assert isinstance(event, AuditLogStreamingEvent)
        assert event.entries[0].actor == "octocat"
        assert event.entries[0].organization == "octo-org"
        assert event.acknowledgement() == {
            "message": "Audit log events processed successfully",
            "processed_events": 1,
        }

    def test_audit_log_empty_list(self):
        payload = {"action": "audit_log_streaming", "audit_log_events": []}
        event = parse_event("audit_log_streaming", payload)
        assert event.acknowledgement()["processed_events"] == 0
