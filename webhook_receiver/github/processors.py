# =============================================================================
# GITHUB WEBHOOK RECEIVER - EVENT PROCESSORS
# =============================================================================
"""
Event Processors

Side effects for accepted deliveries go through an :class:`EventSink`
handed to the dispatcher at construction. The default
:class:`LoggingSink` writes one structured log line per event (and one
per pushed commit / audit entry) describing what happened.

Sinks are never consulted for the response body, so swapping the sink
cannot change what the sender sees.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

import structlog

from webhook_receiver.github.events import (
    AuditLogEntry,
    PullRequestEvent,
    PullRequestReviewEvent,
    PushEvent,
    WebhookEvent,
    short_sha,
)

Recordable = Union[WebhookEvent, AuditLogEntry]


# =============================================================================
# ACTION DESCRIPTIONS
# =============================================================================

# event type -> action -> human-readable description
ACTION_DESCRIPTIONS: Dict[str, Dict[str, str]] = {
    "repository": {
        "created": "New repository created",
        "deleted": "Repository deleted",
        "archived": "Repository archived",
        "unarchived": "Repository unarchived",
        "edited": "Repository edited",
        "renamed": "Repository renamed",
        "transferred": "Repository transferred",
        "publicized": "Repository made public",
        "privatized": "Repository made private",
    },
    "pull_request": {
        "opened": "Pull request opened",
        "closed": "Pull request closed",
        "reopened": "Pull request reopened",
        "edited": "Pull request edited",
        "assigned": "Pull request assigned",
        "unassigned": "Pull request unassigned",
        "labeled": "Label added",
        "unlabeled": "Label removed",
        "synchronize": "Pull request synchronized (new commits)",
        "ready_for_review": "Pull request ready for review (no longer draft)",
        "converted_to_draft": "Pull request converted to draft",
        "review_requested": "Review requested",
        "review_request_removed": "Review request removed",
    },
    "pull_request_review": {
        "submitted": "Review submitted",
        "edited": "Review edited",
        "dismissed": "Review dismissed",
    },
    "pull_request_review_comment": {
        "created": "Review comment created",
        "edited": "Review comment edited",
        "deleted": "Review comment deleted",
    },
    "issues": {
        "opened": "Issue opened",
        "closed": "Issue closed",
        "reopened": "Issue reopened",
        "edited": "Issue edited",
        "assigned": "Issue assigned",
        "unassigned": "Issue unassigned",
        "labeled": "Label added",
        "unlabeled": "Label removed",
        "locked": "Issue locked",
        "unlocked": "Issue unlocked",
    },
    "issue_comment": {
        "created": "Issue comment created",
        "edited": "Issue comment edited",
        "deleted": "Issue comment deleted",
    },
    "workflow_run": {
        "completed": "Workflow run completed",
        "requested": "Workflow run requested",
        "in_progress": "Workflow run in progress",
    },
    "workflow_job": {
        "queued": "Job queued",
        "in_progress": "Job in progress",
        "completed": "Job completed",
    },
    "check_suite": {
        "completed": "Check suite completed",
        "requested": "Check suite requested",
        "rerequested": "Check suite re-requested",
    },
    "check_run": {
        "created": "Check run created",
        "completed": "Check run completed",
        "rerequested": "Check run re-requested",
        "requested_action": "Check run requested action",
    },
    "star": {
        "created": "Repository starred",
        "deleted": "Repository unstarred",
    },
    "watch": {
        "started": "Repository starred (watched)",
    },
    "team": {
        "created": "Team created",
        "deleted": "Team deleted",
        "edited": "Team edited",
        "added_to_repository": "Team added to repository",
        "removed_from_repository": "Team removed from repository",
    },
    "organization": {
        "deleted": "Organization deleted",
        "renamed": "Organization renamed",
        "member_added": "Member added to organization",
        "member_removed": "Member removed from organization",
        "member_invited": "Member invited to organization",
    },
    "member": {
        "added": "Collaborator added",
        "removed": "Collaborator removed",
        "edited": "Collaborator permissions edited",
    },
    "release": {
        "published": "Release published",
        "created": "Release created (draft)",
        "edited": "Release edited",
        "deleted": "Release deleted",
        "prereleased": "Release marked as prerelease",
        "released": "Release published (no longer prerelease)",
        "unpublished": "Release unpublished (back to draft)",
    },
    "package": {
        "published": "Package published",
        "updated": "Package updated",
    },
    "discussion": {
        "created": "Discussion created",
        "edited": "Discussion edited",
        "deleted": "Discussion deleted",
        "answered": "Discussion answered",
        "unanswered": "Discussion unanswered",
        "labeled": "Discussion labeled",
        "unlabeled": "Discussion unlabeled",
        "locked": "Discussion locked",
        "unlocked": "Discussion unlocked",
        "pinned": "Discussion pinned",
        "unpinned": "Discussion unpinned",
        "category_changed": "Discussion category changed",
        "transferred": "Discussion transferred",
    },
    "discussion_comment": {
        "created": "Discussion comment created",
        "edited": "Discussion comment edited",
        "deleted": "Discussion comment deleted",
    },
    "commit_comment": {
        "created": "Commit comment created",
    },
    "deployment": {
        "created": "Deployment created",
    },
    "deployment_status": {
        "created": "Deployment status created",
    },
}

REVIEW_STATE_DESCRIPTIONS = {
    "approved": "Review approved the changes",
    "changes_requested": "Review requested changes",
    "commented": "Review left comments",
    "dismissed": "Review was dismissed",
}

STATUS_STATE_DESCRIPTIONS = {
    "success": "Status: Success",
    "failure": "Status: Failure",
    "error": "Status: Error",
    "pending": "Status: Pending",
}

# Actionless events get a fixed description
FIXED_DESCRIPTIONS = {
    "ping": "Webhook ping received",
    "push": "Push received",
    "fork": "Repository forked",
    "gollum": "Wiki pages updated",
}


def describe(event: WebhookEvent) -> str:
    """
    Return a human-readable description of what an event represents.

    Unknown actions fall back to ``"Unhandled <event> action: <action>"``.
    """
    event_type = event.event_type

    if isinstance(event, PullRequestEvent) and event.action == "closed":
        return "PR merged" if event.merged else "PR closed without merge"

    if isinstance(event, PullRequestReviewEvent) and event.action == "submitted":
        return REVIEW_STATE_DESCRIPTIONS.get(event.review_state, "Review submitted")

    if event_type == "status":
        state = getattr(event, "state", None)
        return STATUS_STATE_DESCRIPTIONS.get(state, f"Status: {state}")

    if event_type in ("create", "delete"):
        verb = "created" if event_type == "create" else "deleted"
        ref_type = getattr(event, "ref_type", None)
        return f"{str(ref_type).capitalize()} {verb}: {getattr(event, 'ref', None)}"

    if event_type in FIXED_DESCRIPTIONS:
        return FIXED_DESCRIPTIONS[event_type]

    action = getattr(event, "action", None)
    descriptions = ACTION_DESCRIPTIONS.get(event_type, {})
    if action in descriptions:
        return descriptions[action]
    return f"Unhandled {event_type.replace('_', ' ')} action: {action}"


# =============================================================================
# SINKS
# =============================================================================


class EventSink(ABC):
    """Destination for accepted events."""

    @abstractmethod
    def record(self, event: Recordable) -> None:
        """Record one narrowed event or one audit log entry."""


class LoggingSink(EventSink):
    """
    Sink that writes structured log lines.

    Push events add one line per commit; audit entries log the acting
    user and the affected resource.
    """

    def __init__(self, logger: Optional[Any] = None):
        self.log = logger or structlog.get_logger(__name__)

    def record(self, event: Recordable) -> None:
        if isinstance(event, AuditLogEntry):
            self._record_audit_entry(event)
            return

        self.log.info(
            describe(event),
            github_event=event.event_type,
            **event.log_fields(),
        )

        if isinstance(event, PushEvent):
            self._record_commits(event)

    def _record_commits(self, event: PushEvent) -> None:
        for commit in event.commits:
            message = (commit.message or "").split("\n", 1)[0]
            self.log.info(
                "Commit pushed",
                github_event=event.event_type,
                commit=short_sha(commit.id),
                author=commit.author_name,
                commit_message=message,
                ref=event.ref,
            )

    def _record_audit_entry(self, entry: AuditLogEntry) -> None:
        self.log.info(
            "Audit log entry",
            github_event=entry.event_type,
            audit_action=entry.action,
            actor=entry.actor,
            resource=entry.resource,
            resource_type=entry.resource_type,
            created_at=entry.created_at,
            organization=entry.organization,
        )


class RecordingSink(EventSink):
    """In-memory sink that keeps every recorded event. Used in tests."""

    def __init__(self):
        self.events: List[Recordable] = []

    def record(self, event: Recordable) -> None:
        self.events.append(event)

    def of_type(self, event_type: str) -> List[Recordable]:
        return [e for e in self.events if e.event_type == event_type]


__all__ = [
    "EventSink",
    "LoggingSink",
    "RecordingSink",
    "describe",
    "ACTION_DESCRIPTIONS",
]
