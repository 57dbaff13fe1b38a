"""GitHub webhook event models.

The models use Pydantic for validation, consistent with the configuration
approach in config.py.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


UNKNOWN_EVENT_LABEL = "unknown"


class GitHubEventType(str, Enum):
    """GitHub event types that have a dedicated receipt layout.

    Any other value of the X-GitHub-Event header is still accepted and
    printed as an unknown event.
    """

    ISSUES = "issues"
    PULL_REQUEST = "pull_request"
    WORKFLOW_RUN = "workflow_run"


class WebhookEvent(BaseModel):
    """One decoded webhook delivery.

    Attributes:
        event_type: Value of the X-GitHub-Event header, "" when absent.
        payload: The decoded JSON object from the request body.
        delivery_id: Value of the X-GitHub-Delivery header, if sent.
    """

    event_type: str = ""
    payload: dict[str, Any] = Field(default_factory=dict)
    delivery_id: Optional[str] = None

    @property
    def known_type(self) -> Optional[GitHubEventType]:
        try:
            return GitHubEventType(self.event_type)
        except ValueError:
            return None

    @property
    def metric_label(self) -> str:
        """Event type for metric labels; unknown headers share one label."""
        known = self.known_type
        return known.value if known is not None else UNKNOWN_EVENT_LABEL

    @property
    def repository(self) -> Optional[str]:
        repo = self.payload.get("repository")
        if isinstance(repo, dict) and isinstance(repo.get("full_name"), str):
            return repo["full_name"]
        return None


class DispatchStatus(str, Enum):
    PRINTED = "printed"
    SKIPPED = "skipped"


class DispatchResult(BaseModel):
    """Outcome of handling one webhook event."""

    status: DispatchStatus
    event_type: str
    commands: int = 0
    duration_seconds: float = 0.0
