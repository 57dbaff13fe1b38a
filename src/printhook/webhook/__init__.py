"""GitHub webhook handling.

This module receives and parses GitHub webhook deliveries and dispatches
them to the receipt formatters:
- issues - New issue receipt
- pull_request - Pull request receipt, with the action in the header
- workflow_run - Printed only when the run failed

Any other event type is printed as an unknown event.
"""

from src.printhook.webhook.handler import (
    InvalidPayloadError,
    WebhookHandler,
    create_webhook_handler,
)
from src.printhook.webhook.models import (
    DispatchResult,
    DispatchStatus,
    GitHubEventType,
    WebhookEvent,
)

__all__ = [
    "DispatchResult",
    "DispatchStatus",
    "GitHubEventType",
    "InvalidPayloadError",
    "WebhookEvent",
    "WebhookHandler",
    "create_webhook_handler",
]
