"""Receipt models and the formatters that build them from webhook payloads.

Models:
- FormattedReceipt: Ordered print commands for one event
- ReceiptOptions: Layout options shared by the formatters

Formatters:
- format_event: Dispatch on the GitHub event type
- format_issue, format_pull_request, format_workflow_run,
  format_unknown_event
"""

from src.printhook.receipt.builder import ReceiptBuilder, wrap_text
from src.printhook.receipt.formatters import (
    EVENT_FORMATTERS,
    format_event,
    format_issue,
    format_pull_request,
    format_unknown_event,
    format_workflow_run,
    select_formatter,
)
from src.printhook.receipt.models import (
    CutMode,
    FormattedReceipt,
    Justification,
    ReceiptOptions,
)

__all__ = [
    "CutMode",
    "EVENT_FORMATTERS",
    "FormattedReceipt",
    "Justification",
    "ReceiptBuilder",
    "ReceiptOptions",
    "format_event",
    "format_issue",
    "format_pull_request",
    "format_unknown_event",
    "format_workflow_run",
    "select_formatter",
    "wrap_text",
]
