"""Event formatters that turn GitHub webhook payloads into receipts.

There is one formatter per supported GitHub event type. Each formatter
reads the fields it needs from the raw payload, substituting placeholder
values for anything missing, and emits the receipt sections in a fixed
order: logo, header, labels, title, body, footer and cut.

GitHub Webhook Payload Structure (issues event, trimmed):
{
  "action": "opened",
  "issue": {
    "number": 123,
    "title": "Issue title",
    "body": "Issue body",
    "html_url": "https://github.com/acme/widgets/issues/123",
    "created_at": "2024-05-01T12:00:00Z",
    "labels": [{"name": "bug"}],
    "user": {"login": "username"},
    "assignee": {"login": "someone"}
  },
  "repository": {"full_name": "acme/widgets"}
}
"""

import os
from typing import Any, Callable, Mapping, Optional

import structlog

from src.printhook.receipt.builder import ReceiptBuilder
from src.printhook.receipt.models import FormattedReceipt, Justification, ReceiptOptions

logger = structlog.get_logger()

EventFormatter = Callable[[Mapping[str, Any], ReceiptOptions], FormattedReceipt]

NO_TITLE = "(no title)"
UNKNOWN_USER = "unknown"
UNKNOWN_REPOSITORY = "unknown"
UNKNOWN_WORKFLOW = "(unknown workflow)"


# =============================================================================
# Payload access
# =============================================================================


def _lookup(payload: Any, *path: str) -> Any:
    """Follow a path of keys through nested mappings.

    Returns None as soon as a step is missing, null, or not a mapping.
    """
    current = payload
    for key in path:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def _text(payload: Any, *path: str, default: str = "") -> str:
    value = _lookup(payload, *path)
    if value is None or isinstance(value, (Mapping, list)):
        return default
    return str(value)


def _number(payload: Any, *path: str) -> int:
    value = _lookup(payload, *path)
    if isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


def _label_names(labels: Any) -> list[str]:
    if not isinstance(labels, list):
        return []
    names = []
    for label in labels:
        name = _text(label, "name") if isinstance(label, Mapping) else ""
        if name.strip():
            names.append(name.strip())
    return names


# =============================================================================
# Receipt sections
# =============================================================================


def _logo(builder: ReceiptBuilder, options: ReceiptOptions) -> None:
    if not options.logo_path:
        return
    if not os.path.isfile(options.logo_path):
        logger.debug("Logo file not found, skipping", logo_path=options.logo_path)
        return
    builder.justify(Justification.CENTER).image(options.logo_path).feed(2)


def _header(
    builder: ReceiptBuilder,
    title: str,
    user: str,
    repo: str,
    number: int,
    assignee: str = "",
    number_label: str = "Issue",
) -> None:
    builder.justify(Justification.CENTER).size(2, 2).emphasis(True)
    # Double width halves the characters per line
    builder.wrapped(title, width=max(builder.line_width // 2, 1))
    builder.feed(2)

    builder.size(1, 1).emphasis(False).justify(Justification.LEFT)

    if number > 0:
        builder.wrapped(f"{number_label}: #{number}")
    if repo:
        builder.wrapped(f"Repo: {repo}")
    if user:
        builder.wrapped(f"Created by: @{user}")
    if assignee:
        builder.wrapped(f"Assigned to: @{assignee}")

    builder.feed(2)


def _labels(builder: ReceiptBuilder, labels: list[str]) -> None:
    if not labels:
        return
    builder.emphasis(True)
    builder.wrapped(" ".join(f"[{name}]" for name in labels))
    builder.emphasis(False)
    builder.feed(1)


def _title(builder: ReceiptBuilder, title: str) -> None:
    if not title:
        return
    builder.emphasis(True).wrapped(title).emphasis(False).feed(2)


def _body(builder: ReceiptBuilder, body: str) -> None:
    if not body.strip():
        return
    builder.wrapped(body).feed(2)


def _footer(
    builder: ReceiptBuilder,
    options: ReceiptOptions,
    timestamp: str,
    url: str = "",
) -> None:
    if timestamp:
        builder.wrapped(timestamp).feed(2)
    if options.qr_codes and url:
        builder.justify(Justification.CENTER).qr_code(url)
        builder.justify(Justification.LEFT).feed(1)
    builder.cut(options.cut_mode)


# =============================================================================
# Formatters
# =============================================================================


def format_issue(payload: Mapping[str, Any], options: ReceiptOptions) -> FormattedReceipt:
    """Render an ``issues`` event."""
    builder = ReceiptBuilder("issues", line_width=options.line_width)

    _logo(builder, options)
    _header(
        builder,
        "New Issue",
        user=_text(payload, "issue", "user", "login", default=UNKNOWN_USER),
        repo=_text(payload, "repository", "full_name", default=UNKNOWN_REPOSITORY),
        number=_number(payload, "issue", "number"),
        assignee=_text(payload, "issue", "assignee", "login"),
    )
    _labels(builder, _label_names(_lookup(payload, "issue", "labels")))
    _title(builder, _text(payload, "issue", "title", default=NO_TITLE))
    _body(builder, _text(payload, "issue", "body"))
    _footer(
        builder,
        options,
        timestamp=_text(payload, "issue", "created_at"),
        url=_text(payload, "issue", "html_url"),
    )

    return builder.build()


def format_pull_request(payload: Mapping[str, Any], options: ReceiptOptions) -> FormattedReceipt:
    """Render a ``pull_request`` event, showing the action in the header."""
    builder = ReceiptBuilder("pull_request", line_width=options.line_width)
    action = _text(payload, "action", default="opened")

    _logo(builder, options)
    _header(
        builder,
        f"Pull Request [{action}]",
        user=_text(payload, "pull_request", "user", "login", default=UNKNOWN_USER),
        repo=_text(payload, "repository", "full_name", default=UNKNOWN_REPOSITORY),
        number=_number(payload, "pull_request", "number"),
        number_label="PR",
    )
    _labels(builder, _label_names(_lookup(payload, "pull_request", "labels")))
    _title(builder, _text(payload, "pull_request", "title", default=NO_TITLE))
    _body(builder, _text(payload, "pull_request", "body"))
    _footer(
        builder,
        options,
        timestamp=_text(payload, "pull_request", "created_at"),
        url=_text(payload, "pull_request", "html_url"),
    )

    return builder.build()


def format_workflow_run(payload: Mapping[str, Any], options: ReceiptOptions) -> FormattedReceipt:
    """Render a ``workflow_run`` event.

    Only failed runs are printed. Any other conclusion (success, cancelled,
    or a run that has not finished yet) produces an empty receipt.
    """
    conclusion = _text(payload, "workflow_run", "conclusion")
    if conclusion != "failure":
        logger.info("Ignoring workflow run", conclusion=conclusion or None)
        return FormattedReceipt(event_type="workflow_run")

    builder = ReceiptBuilder("workflow_run", line_width=options.line_width)

    _logo(builder, options)
    _header(
        builder,
        "Workflow Failed",
        user="",
        repo=_text(payload, "repository", "full_name", default=UNKNOWN_REPOSITORY),
        number=0,
    )
    builder.wrapped(f"Workflow: {_text(payload, 'workflow_run', 'name', default=UNKNOWN_WORKFLOW)}")
    builder.wrapped(f"Run ID: {_text(payload, 'workflow_run', 'id')}")
    builder.line("Status: FAILURE")
    builder.feed(2)
    _footer(
        builder,
        options,
        timestamp=_text(payload, "workflow_run", "updated_at"),
        url=_text(payload, "workflow_run", "html_url"),
    )

    return builder.build()


def format_unknown_event(
    event_type: str,
    options: ReceiptOptions,
) -> FormattedReceipt:
    """Render a short notice for an event type without a formatter."""
    builder = ReceiptBuilder(event_type, line_width=options.line_width)
    builder.justify(Justification.CENTER)
    builder.line("Unknown GitHub Event")
    if event_type:
        builder.wrapped(event_type)
    else:
        builder.line("")
    builder.feed(2)
    return builder.build()


EVENT_FORMATTERS: dict[str, EventFormatter] = {
    "issues": format_issue,
    "pull_request": format_pull_request,
    "workflow_run": format_workflow_run,
}


def select_formatter(event_type: str) -> Optional[EventFormatter]:
    """Return the formatter registered for an event type, if any."""
    return EVENT_FORMATTERS.get(event_type)


def format_event(
    event_type: str,
    payload: Mapping[str, Any],
    options: ReceiptOptions,
) -> FormattedReceipt:
    """Format a webhook payload using the formatter for its event type.

    Args:
        event_type: Value of the X-GitHub-Event header.
        payload: The decoded webhook body.
        options: Layout options.

    Returns:
        The formatted receipt. Unknown event types get a short notice.
    """
    formatter = select_formatter(event_type)
    if formatter is None:
        logger.info("No formatter for event type", event_type=event_type)
        return format_unknown_event(event_type, options)
    return formatter(payload, options)
