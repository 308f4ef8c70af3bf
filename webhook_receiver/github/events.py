# =============================================================================
# GITHUB WEBHOOK RECEIVER - EVENT VARIANTS
# =============================================================================
"""
GitHub Event Variants

One dataclass per supported ``X-GitHub-Event`` token. The header alone
selects the variant; the payload is then deserialized into it, and the
variant's required fields are enforced at that boundary. A payload
missing a required field raises :class:`MalformedPayloadError` instead of
failing later on a missing key.

Shared fields (``action``, ``repository``, ``sender``, ``organization``)
are optional unless a variant's acknowledgement is built from them:
``push`` carries no ``action``, ``status`` has no ``sender`` guarantee.

Each variant knows:
    - ``required_fields`` / ``optional_fields``: attribute -> payload path
    - ``acknowledgement()``: the JSON body echoed back on success
    - ``log_fields()``: structured fields for the processors
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import (
    Any,
    ClassVar,
    Dict,
    List,
    Optional,
    Tuple,
    Type,
    Union,
)

from webhook_receiver.github.errors import MalformedPayloadError


# =============================================================================
# TYPE DEFINITIONS
# =============================================================================

# (payload path, accepted type) - paths are dot-separated object keys
FieldKind = Union[type, Tuple[type, ...]]
FieldSpec = Tuple[str, FieldKind]

_MISSING = object()


# =============================================================================
# CONSTANTS
# =============================================================================

# Supported GitHub events, in the order reported to senders
SUPPORTED_EVENTS: Tuple[str, ...] = (
    "ping",
    "repository",
    "push",
    "pull_request",
    "pull_request_review",
    "pull_request_review_comment",
    "issues",
    "issue_comment",
    "workflow_run",
    "workflow_job",
    "check_suite",
    "check_run",
    "status",
    "star",
    "watch",
    "fork",
    "create",
    "delete",
    "team",
    "organization",
    "member",
    "release",
    "package",
    "discussion",
    "discussion_comment",
    "gollum",
    "commit_comment",
    "deployment",
    "deployment_status",
    "audit_log_streaming",
)

AUDIT_LOG_STREAMING = "audit_log_streaming"


# =============================================================================
# PAYLOAD ACCESS
# =============================================================================


def lookup(payload: Any, path: str, default: Any = None) -> Any:
    """
    Read a dot-separated path from nested dicts.

    Returns ``default`` when any segment is missing or not an object.
    """
    node = payload
    for part in path.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def _kind_name(kind: FieldKind) -> str:
    if isinstance(kind, tuple):
        return " or ".join(k.__name__ for k in kind)
    return kind.__name__


def require(payload: Dict[str, Any], path: str, kind: FieldKind, event_type: str) -> Any:
    """
    Read a required field, raising MalformedPayloadError if absent,
    null, empty or of the wrong type.
    """
    value = lookup(payload, path, _MISSING)
    if value is _MISSING or value is None or value == "":
        raise MalformedPayloadError(
            f"Invalid {event_type} payload",
            f"missing required field '{path}'",
        )
    # bool is an int subclass; never accept it where a number is expected
    if not isinstance(value, kind) or (isinstance(value, bool) and kind is not bool):
        raise MalformedPayloadError(
            f"Invalid {event_type} payload",
            f"field '{path}' must be {_kind_name(kind)}",
        )
    return value


def short_sha(sha: Optional[str]) -> Optional[str]:
    return sha[:7] if isinstance(sha, str) else None


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


# =============================================================================
# BASE VARIANT
# =============================================================================


class WebhookEvent:
    """
    Base class for event variants.

    Subclasses are dataclasses; ``from_payload`` fills required fields
    first, then optional ones, then anything ``_extra_fields`` builds.
    """

    event_type: ClassVar[str] = ""
    required_fields: ClassVar[Dict[str, FieldSpec]] = {}
    optional_fields: ClassVar[Dict[str, str]] = {}

    @classmethod
    def from_payload(cls, payload: Any) -> "WebhookEvent":
        """
        Deserialize a parsed JSON payload into this variant.

        Raises:
            MalformedPayloadError: If the payload is not an object or a
                required field is missing / mistyped
        """
        if not isinstance(payload, dict):
            raise MalformedPayloadError(
                f"Invalid {cls.event_type} payload",
                "payload must be a JSON object",
            )

        values: Dict[str, Any] = {}
        for name, (path, kind) in cls.required_fields.items():
            values[name] = require(payload, path, kind, cls.event_type)
        for name, path in cls.optional_fields.items():
            values[name] = lookup(payload, path)
        values.update(cls._extra_fields(payload))
        return cls(**values)

    @classmethod
    def _extra_fields(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        return {}

    def acknowledgement(self) -> Dict[str, Any]:
        raise NotImplementedError

    def log_fields(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# CORE EVENTS
# =============================================================================


@dataclass
class PingEvent(WebhookEvent):
    """Sent once when a webhook is created."""

    event_type: ClassVar[str] = "ping"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "zen": ("zen", str),
        "hook_id": ("hook_id", int),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
    }

    zen: str
    hook_id: int
    repository: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": "Ping received successfully",
            "zen": self.zen,
            "hook_id": self.hook_id,
        }


@dataclass
class RepositoryEvent(WebhookEvent):
    event_type: ClassVar[str] = "repository"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "repository": ("repository.full_name", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "private": "repository.private",
        "default_branch": "repository.default_branch",
        "sender": "sender.login",
    }

    action: str
    repository: str
    private: Optional[bool] = None
    default_branch: Optional[str] = None
    sender: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Repository {self.action} event processed",
            "repository": self.repository,
            "action": self.action,
        }


@dataclass
class Commit:
    id: Optional[str]
    message: Optional[str]
    author_name: Optional[str]
    author_email: Optional[str]
    distinct: bool = True


@dataclass
class PushEvent(WebhookEvent):
    """Branch or tag push. Carries no ``action``."""

    event_type: ClassVar[str] = "push"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "ref": ("ref", str),
        "raw_commits": ("commits", list),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "before": "before",
        "after": "after",
        "pusher": "pusher.name",
        "forced": "forced",
    }

    ref: str
    raw_commits: List[Any] = field(repr=False)
    repository: Optional[str] = None
    before: Optional[str] = None
    after: Optional[str] = None
    pusher: Optional[str] = None
    forced: Optional[bool] = None
    commits: List[Commit] = field(default_factory=list)

    @classmethod
    def _extra_fields(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        commits = []
        for index, raw in enumerate(payload["commits"]):
            if not isinstance(raw, dict):
                raise MalformedPayloadError(
                    "Invalid push payload",
                    f"commits[{index}] must be an object",
                )
            commits.append(Commit(
                id=_optional_str(raw.get("id")),
                message=_optional_str(raw.get("message")),
                author_name=lookup(raw, "author.name"),
                author_email=lookup(raw, "author.email"),
                distinct=bool(raw.get("distinct", True)),
            ))
        return {"commits": commits}

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": "Push event processed",
            "repository": self.repository,
            "ref": self.ref,
            "commits": len(self.commits),
        }

    def log_fields(self) -> Dict[str, Any]:
        return {
            "repository": self.repository,
            "ref": self.ref,
            "before": short_sha(self.before),
            "after": short_sha(self.after),
            "pusher": self.pusher,
            "forced": self.forced,
            "commits_count": len(self.commits),
            "distinct_commits": sum(1 for c in self.commits if c.distinct),
        }


@dataclass
class CreateEvent(WebhookEvent):
    event_type: ClassVar[str] = "create"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "ref": ("ref", str),
        "ref_type": ("ref_type", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "master_branch": "master_branch",
        "pusher_type": "pusher_type",
        "sender": "sender.login",
    }

    ref: str
    ref_type: str
    repository: Optional[str] = None
    master_branch: Optional[str] = None
    pusher_type: Optional[str] = None
    sender: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Create {self.ref_type} event processed",
            "ref": self.ref,
            "ref_type": self.ref_type,
            "repository": self.repository,
        }


@dataclass
class DeleteEvent(WebhookEvent):
    event_type: ClassVar[str] = "delete"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "ref": ("ref", str),
        "ref_type": ("ref_type", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "pusher_type": "pusher_type",
        "sender": "sender.login",
    }

    ref: str
    ref_type: str
    repository: Optional[str] = None
    pusher_type: Optional[str] = None
    sender: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Delete {self.ref_type} event processed",
            "ref": self.ref,
            "ref_type": self.ref_type,
            "repository": self.repository,
        }


# =============================================================================
# COLLABORATION EVENTS
# =============================================================================


@dataclass
class PullRequestEvent(WebhookEvent):
    event_type: ClassVar[str] = "pull_request"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "number": ("number", int),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "title": "pull_request.title",
        "author": "pull_request.user.login",
        "merged": "pull_request.merged",
        "head_ref": "pull_request.head.ref",
        "base_ref": "pull_request.base.ref",
    }

    action: str
    number: int
    repository: Optional[str] = None
    title: Optional[str] = None
    author: Optional[str] = None
    merged: Optional[bool] = None
    head_ref: Optional[str] = None
    base_ref: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Pull request {self.action} event processed",
            "repository": self.repository,
            "pr_number": self.number,
            "action": self.action,
        }


@dataclass
class PullRequestReviewEvent(WebhookEvent):
    event_type: ClassVar[str] = "pull_request_review"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "pr_number": ("pull_request.number", int),
        "review_state": ("review.state", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "review_id": "review.id",
        "reviewer": "review.user.login",
    }

    action: str
    pr_number: int
    review_state: str
    repository: Optional[str] = None
    review_id: Optional[int] = None
    reviewer: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"PR Review {self.action} event processed",
            "pr_number": self.pr_number,
            "review_state": self.review_state,
            "action": self.action,
        }


@dataclass
class PullRequestReviewCommentEvent(WebhookEvent):
    event_type: ClassVar[str] = "pull_request_review_comment"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "pr_number": ("pull_request.number", int),
        "comment_id": ("comment.id", int),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "author": "comment.user.login",
        "path": "comment.path",
        "line": "comment.line",
    }

    action: str
    pr_number: int
    comment_id: int
    repository: Optional[str] = None
    author: Optional[str] = None
    path: Optional[str] = None
    line: Optional[int] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Pull request review comment {self.action} event processed",
            "repository": self.repository,
            "pull_request_number": self.pr_number,
            "comment_id": self.comment_id,
            "author": self.author,
            "file": self.path,
            "line": self.line,
            "action": self.action,
        }


@dataclass
class IssuesEvent(WebhookEvent):
    event_type: ClassVar[str] = "issues"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "issue_number": ("issue.number", int),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "title": "issue.title",
        "author": "issue.user.login",
        "state": "issue.state",
    }

    action: str
    issue_number: int
    repository: Optional[str] = None
    title: Optional[str] = None
    author: Optional[str] = None
    state: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Issue {self.action} event processed",
            "repository": self.repository,
            "issue_number": self.issue_number,
            "action": self.action,
        }


@dataclass
class IssueCommentEvent(WebhookEvent):
    event_type: ClassVar[str] = "issue_comment"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "issue_number": ("issue.number", int),
        "comment_id": ("comment.id", int),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "author": "comment.user.login",
        "body": "comment.body",
    }

    action: str
    issue_number: int
    comment_id: int
    repository: Optional[str] = None
    author: Optional[str] = None
    body: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Issue comment {self.action} event processed",
            "issue_number": self.issue_number,
            "comment_id": self.comment_id,
            "action": self.action,
        }

    def log_fields(self) -> Dict[str, Any]:
        fields = asdict(self)
        # Comment bodies can be arbitrarily long
        if isinstance(self.body, str):
            fields["body"] = self.body[:100]
        return fields


# =============================================================================
# WORKFLOW EVENTS
# =============================================================================


@dataclass
class WorkflowRunEvent(WebhookEvent):
    event_type: ClassVar[str] = "workflow_run"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "name": ("workflow_run.name", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "status": "workflow_run.status",
        "conclusion": "workflow_run.conclusion",
        "run_number": "workflow_run.run_number",
        "head_branch": "workflow_run.head_branch",
    }

    action: str
    name: str
    repository: Optional[str] = None
    status: Optional[str] = None
    conclusion: Optional[str] = None
    run_number: Optional[int] = None
    head_branch: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Workflow run {self.action} event processed",
            "workflow": self.name,
            "status": self.status,
            "conclusion": self.conclusion,
            "action": self.action,
        }


@dataclass
class WorkflowJobEvent(WebhookEvent):
    event_type: ClassVar[str] = "workflow_job"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "name": ("workflow_job.name", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "status": "workflow_job.status",
        "conclusion": "workflow_job.conclusion",
        "run_id": "workflow_job.run_id",
        "runner_name": "workflow_job.runner_name",
    }

    action: str
    name: str
    repository: Optional[str] = None
    status: Optional[str] = None
    conclusion: Optional[str] = None
    run_id: Optional[int] = None
    runner_name: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Workflow job {self.action} event processed",
            "job": self.name,
            "status": self.status,
            "conclusion": self.conclusion,
            "action": self.action,
        }


@dataclass
class CheckSuiteEvent(WebhookEvent):
    event_type: ClassVar[str] = "check_suite"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "head_sha": ("check_suite.head_sha", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "status": "check_suite.status",
        "conclusion": "check_suite.conclusion",
        "app_name": "check_suite.app.name",
    }

    action: str
    head_sha: str
    repository: Optional[str] = None
    status: Optional[str] = None
    conclusion: Optional[str] = None
    app_name: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Check suite {self.action} event processed",
            "head_sha": self.head_sha,
            "status": self.status,
            "conclusion": self.conclusion,
            "action": self.action,
        }


@dataclass
class CheckRunEvent(WebhookEvent):
    event_type: ClassVar[str] = "check_run"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "name": ("check_run.name", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "status": "check_run.status",
        "conclusion": "check_run.conclusion",
        "head_sha": "check_run.head_sha",
    }

    action: str
    name: str
    repository: Optional[str] = None
    status: Optional[str] = None
    conclusion: Optional[str] = None
    head_sha: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Check run {self.action} event processed",
            "check_run": self.name,
            "status": self.status,
            "conclusion": self.conclusion,
            "action": self.action,
        }


@dataclass
class StatusEvent(WebhookEvent):
    """Commit status update. Carries no ``action``."""

    event_type: ClassVar[str] = "status"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "sha": ("sha", str),
        "state": ("state", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "context": "context",
        "description": "description",
        "target_url": "target_url",
    }

    sha: str
    state: str
    repository: Optional[str] = None
    context: Optional[str] = None
    description: Optional[str] = None
    target_url: Optional[str] = None
    branches: List[str] = field(default_factory=list)

    @classmethod
    def _extra_fields(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        branches = payload.get("branches")
        if not isinstance(branches, list):
            return {"branches": []}
        return {
            "branches": [
                b["name"] for b in branches
                if isinstance(b, dict) and isinstance(b.get("name"), str)
            ],
        }

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": "Status event processed",
            "repository": self.repository,
            "sha": short_sha(self.sha),
            "state": self.state,
            "context": self.context,
            "description": self.description,
            "target_url": self.target_url,
            "branches": list(self.branches),
        }


# =============================================================================
# SOCIAL EVENTS
# =============================================================================


@dataclass
class StarEvent(WebhookEvent):
    event_type: ClassVar[str] = "star"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "repository": ("repository.full_name", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "stargazers_count": "repository.stargazers_count",
        "sender": "sender.login",
        "starred_at": "starred_at",
    }

    action: str
    repository: str
    stargazers_count: Optional[int] = None
    sender: Optional[str] = None
    starred_at: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Star {self.action} event processed",
            "repository": self.repository,
            "stargazers_count": self.stargazers_count,
            "action": self.action,
        }


@dataclass
class WatchEvent(WebhookEvent):
    event_type: ClassVar[str] = "watch"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "repository": ("repository.full_name", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "watchers_count": "repository.watchers_count",
        "sender": "sender.login",
    }

    action: str
    repository: str
    watchers_count: Optional[int] = None
    sender: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Watch {self.action} event processed",
            "repository": self.repository,
            "watchers_count": self.watchers_count,
            "action": self.action,
        }


@dataclass
class ForkEvent(WebhookEvent):
    """Repository forked. Carries no ``action``."""

    event_type: ClassVar[str] = "fork"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "forkee": ("forkee.full_name", str),
        "repository": ("repository.full_name", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "forks_count": "repository.forks_count",
        "sender": "sender.login",
    }

    forkee: str
    repository: str
    forks_count: Optional[int] = None
    sender: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": "Fork event processed",
            "forked_repository": self.forkee,
            "original_repository": self.repository,
            "forks_count": self.forks_count,
        }


# =============================================================================
# ADMIN EVENTS
# =============================================================================


@dataclass
class TeamEvent(WebhookEvent):
    event_type: ClassVar[str] = "team"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "team": ("team.name", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "organization": "organization.login",
        "repository": "repository.full_name",
        "privacy": "team.privacy",
    }

    action: str
    team: str
    organization: Optional[str] = None
    repository: Optional[str] = None
    privacy: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Team {self.action} event processed",
            "team": self.team,
            "action": self.action,
        }


@dataclass
class OrganizationEvent(WebhookEvent):
    event_type: ClassVar[str] = "organization"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "organization": ("organization.login", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "membership_user": "membership.user.login",
        "membership_role": "membership.role",
        "sender": "sender.login",
    }

    action: str
    organization: str
    membership_user: Optional[str] = None
    membership_role: Optional[str] = None
    sender: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Organization {self.action} event processed",
            "organization": self.organization,
            "action": self.action,
        }


@dataclass
class MemberEvent(WebhookEvent):
    event_type: ClassVar[str] = "member"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "member": ("member.login", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "permission_from": "changes.permission.from",
        "permission_to": "changes.permission.to",
    }

    action: str
    member: str
    repository: Optional[str] = None
    permission_from: Optional[str] = None
    permission_to: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Member {self.action} event processed",
            "member": self.member,
            "repository": self.repository,
            "action": self.action,
        }


@dataclass
class DeploymentEvent(WebhookEvent):
    event_type: ClassVar[str] = "deployment"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "deployment_id": ("deployment.id", int),
        "environment": ("deployment.environment", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "sha": "deployment.sha",
        "ref": "deployment.ref",
        "creator": "deployment.creator.login",
    }

    action: str
    deployment_id: int
    environment: str
    repository: Optional[str] = None
    sha: Optional[str] = None
    ref: Optional[str] = None
    creator: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Deployment {self.action} event processed",
            "deployment_id": self.deployment_id,
            "environment": self.environment,
            "action": self.action,
        }


@dataclass
class DeploymentStatusEvent(WebhookEvent):
    event_type: ClassVar[str] = "deployment_status"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "deployment_id": ("deployment.id", int),
        "state": ("deployment_status.state", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "status_id": "deployment_status.id",
        "environment": "deployment_status.environment",
        "description": "deployment_status.description",
    }

    action: str
    deployment_id: int
    state: str
    repository: Optional[str] = None
    status_id: Optional[int] = None
    environment: Optional[str] = None
    description: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Deployment status {self.action} event processed",
            "deployment_id": self.deployment_id,
            "state": self.state,
            "environment": self.environment,
            "action": self.action,
        }


# =============================================================================
# CONTENT EVENTS
# =============================================================================


@dataclass
class ReleaseEvent(WebhookEvent):
    event_type: ClassVar[str] = "release"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "tag_name": ("release.tag_name", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "name": "release.name",
        "draft": "release.draft",
        "prerelease": "release.prerelease",
    }

    action: str
    tag_name: str
    repository: Optional[str] = None
    name: Optional[str] = None
    draft: Optional[bool] = None
    prerelease: Optional[bool] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Release {self.action} event processed",
            "tag_name": self.tag_name,
            "name": self.name,
            "action": self.action,
        }


@dataclass
class PackageEvent(WebhookEvent):
    event_type: ClassVar[str] = "package"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "name": ("package.name", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "ecosystem": "package.ecosystem",
        "package_type": "package.package_type",
        "version": "package.package_version.version",
        "owner": "package.owner.login",
    }

    action: str
    name: str
    repository: Optional[str] = None
    ecosystem: Optional[str] = None
    package_type: Optional[str] = None
    version: Optional[str] = None
    owner: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Package {self.action} event processed",
            "package_name": self.name,
            "ecosystem": self.ecosystem,
            "package_type": self.package_type,
            "version": self.version,
            "action": self.action,
        }


@dataclass
class DiscussionEvent(WebhookEvent):
    event_type: ClassVar[str] = "discussion"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "number": ("discussion.number", int),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "title": "discussion.title",
        "author": "discussion.user.login",
        "category": "discussion.category.name",
    }

    action: str
    number: int
    repository: Optional[str] = None
    title: Optional[str] = None
    author: Optional[str] = None
    category: Optional[str] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Discussion {self.action} event processed",
            "repository": self.repository,
            "discussion_number": self.number,
            "discussion_title": self.title,
            "action": self.action,
        }


@dataclass
class DiscussionCommentEvent(WebhookEvent):
    event_type: ClassVar[str] = "discussion_comment"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "discussion_number": ("discussion.number", int),
        "comment_id": ("comment.id", int),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "author": "comment.user.login",
        "parent_id": "comment.parent_id",
    }

    action: str
    discussion_number: int
    comment_id: int
    repository: Optional[str] = None
    author: Optional[str] = None
    parent_id: Optional[int] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Discussion comment {self.action} event processed",
            "repository": self.repository,
            "discussion_number": self.discussion_number,
            "comment_id": self.comment_id,
            "author": self.author,
            "action": self.action,
        }


@dataclass
class WikiPage:
    page_name: Optional[str]
    title: Optional[str]
    action: Optional[str]
    sha: Optional[str]


@dataclass
class GollumEvent(WebhookEvent):
    """Wiki pages created or edited. Carries no ``action``."""

    event_type: ClassVar[str] = "gollum"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "raw_pages": ("pages", list),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "sender": "sender.login",
    }

    raw_pages: List[Any] = field(repr=False)
    repository: Optional[str] = None
    sender: Optional[str] = None
    pages: List[WikiPage] = field(default_factory=list)

    @classmethod
    def _extra_fields(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        pages = []
        for index, raw in enumerate(payload["pages"]):
            if not isinstance(raw, dict):
                raise MalformedPayloadError(
                    "Invalid gollum payload",
                    f"pages[{index}] must be an object",
                )
            pages.append(WikiPage(
                page_name=raw.get("page_name"),
                title=raw.get("title"),
                action=raw.get("action"),
                sha=raw.get("sha"),
            ))
        return {"pages": pages}

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": "Gollum (wiki) event processed",
            "repository": self.repository,
            "pages_count": len(self.pages),
            "modified_by": self.sender,
            "pages": [
                {"page_name": p.page_name, "title": p.title, "action": p.action}
                for p in self.pages
            ],
        }

    def log_fields(self) -> Dict[str, Any]:
        return {
            "repository": self.repository,
            "sender": self.sender,
            "pages_count": len(self.pages),
        }


@dataclass
class CommitCommentEvent(WebhookEvent):
    event_type: ClassVar[str] = "commit_comment"
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "action": ("action", str),
        "comment_id": ("comment.id", int),
        "commit_id": ("comment.commit_id", str),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "repository": "repository.full_name",
        "author": "comment.user.login",
        "path": "comment.path",
        "line": "comment.line",
    }

    action: str
    comment_id: int
    commit_id: str
    repository: Optional[str] = None
    author: Optional[str] = None
    path: Optional[str] = None
    line: Optional[int] = None

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": f"Commit comment {self.action} event processed",
            "repository": self.repository,
            "comment_id": self.comment_id,
            "commit_sha": short_sha(self.commit_id),
            "author": self.author,
            "action": self.action,
        }


# =============================================================================
# SECURITY EVENTS
# =============================================================================


@dataclass
class AuditLogEntry:
    """A single entry inside an ``audit_log_streaming`` delivery."""

    event_type: ClassVar[str] = "audit_log_entry"

    action: str
    actor: str
    created_at: Any
    resource: str
    resource_type: str
    organization: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: Dict[str, Any], organization: Optional[str]) -> "AuditLogEntry":
        return cls(
            action=entry["action"],
            actor=entry["actor"]["login"],
            created_at=entry["created_at"],
            resource=entry["resource"],
            resource_type=entry["resource_type"],
            organization=organization,
        )

    def log_fields(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AuditLogStreamingEvent(WebhookEvent):
    """
    Batch of audit log entries.

    The payload must pass the structural validator before this variant
    is built; ``from_payload`` assumes every entry is well-formed.
    """

    event_type: ClassVar[str] = AUDIT_LOG_STREAMING
    required_fields: ClassVar[Dict[str, FieldSpec]] = {
        "raw_entries": ("audit_log_events", list),
    }
    optional_fields: ClassVar[Dict[str, str]] = {
        "organization": "organization.login",
        "sender": "sender.login",
    }

    raw_entries: List[Any] = field(repr=False)
    organization: Optional[str] = None
    sender: Optional[str] = None
    entries: List[AuditLogEntry] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Any) -> "WebhookEvent":
        # An empty entry list is valid; require() would reject it as missing.
        if isinstance(payload, dict) and payload.get("audit_log_events") == []:
            return cls(
                raw_entries=[],
                organization=lookup(payload, "organization.login"),
                sender=lookup(payload, "sender.login"),
            )
        return super().from_payload(payload)

    @classmethod
    def _extra_fields(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        organization = lookup(payload, "organization.login")
        return {
            "entries": [
                AuditLogEntry.from_entry(entry, organization)
                for entry in payload["audit_log_events"]
            ],
        }

    def acknowledgement(self) -> Dict[str, Any]:
        return {
            "message": "Audit log events processed successfully",
            "processed_events": len(self.entries),
        }

    def log_fields(self) -> Dict[str, Any]:
        return {
            "organization": self.organization,
            "sender": self.sender,
            "entries_count": len(self.entries),
        }


# =============================================================================
# REGISTRY
# =============================================================================

EVENT_TYPES: Dict[str, Type[WebhookEvent]] = {
    cls.event_type: cls
    for cls in (
        PingEvent,
        RepositoryEvent,
        PushEvent,
        PullRequestEvent,
        PullRequestReviewEvent,
        PullRequestReviewCommentEvent,
        IssuesEvent,
        IssueCommentEvent,
        WorkflowRunEvent,
        WorkflowJobEvent,
        CheckSuiteEvent,
        CheckRunEvent,
        StatusEvent,
        StarEvent,
        WatchEvent,
        ForkEvent,
        CreateEvent,
        DeleteEvent,
        TeamEvent,
        OrganizationEvent,
        MemberEvent,
        ReleaseEvent,
        PackageEvent,
        DiscussionEvent,
        DiscussionCommentEvent,
        GollumEvent,
        CommitCommentEvent,
        DeploymentEvent,
        DeploymentStatusEvent,
        AuditLogStreamingEvent,
    )
}


def parse_event(event_type: str, payload: Any) -> WebhookEvent:
    """
    Narrow a parsed payload to the variant named by ``event_type``.

    Raises:
        KeyError: If ``event_type`` is not a supported event
        MalformedPayloadError: If the payload does not fit the variant
    """
    return EVENT_TYPES[event_type].from_payload(payload)


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "SUPPORTED_EVENTS",
    "AUDIT_LOG_STREAMING",
    "EVENT_TYPES",
    "WebhookEvent",
    "parse_event",
    "lookup",
    "require",
    "short_sha",
    # Variants
    "PingEvent",
    "RepositoryEvent",
    "PushEvent",
    "Commit",
    "CreateEvent",
    "DeleteEvent",
    "PullRequestEvent",
    "PullRequestReviewEvent",
    "PullRequestReviewCommentEvent",
    "IssuesEvent",
    "IssueCommentEvent",
    "WorkflowRunEvent",
    "WorkflowJobEvent",
    "CheckSuiteEvent",
    "CheckRunEvent",
    "StatusEvent",
    "StarEvent",
    "WatchEvent",
    "ForkEvent",
    "TeamEvent",
    "OrganizationEvent",
    "MemberEvent",
    "DeploymentEvent",
    "DeploymentStatusEvent",
    "ReleaseEvent",
    "PackageEvent",
    "DiscussionEvent",
    "DiscussionCommentEvent",
    "GollumEvent",
    "WikiPage",
    "CommitCommentEvent",
    "AuditLogEntry",
    "AuditLogStreamingEvent",
]
