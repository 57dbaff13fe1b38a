"""GitHub webhook handler.

This module provides the WebhookHandler class, which decodes raw webhook
deliveries and dispatches them to the receipt formatter for their event
type before sending the result to the printer. Signature validation is not
performed; the service is meant to sit on a trusted network.

Each delivery is handled synchronously and independently. The printer
device is opened for one delivery and closed again before the handler
returns, on success and on failure.
"""

import json
import time
from typing import Optional

import structlog

from src.printhook.metrics import ReceiptMetrics
from src.printhook.printer.driver import PrinterFactory, print_receipt
from src.printhook.receipt.formatters import format_event
from src.printhook.receipt.models import FormattedReceipt, ReceiptOptions
from src.printhook.webhook.models import DispatchResult, DispatchStatus, WebhookEvent

logger = structlog.get_logger()


class InvalidPayloadError(ValueError):
    """Raised when a webhook body is not a JSON object."""


class WebhookHandler:
    """Decodes webhook deliveries and prints a receipt for each.

    Attributes:
        options: Receipt layout options passed to every formatter.
        printer_factory: Creates a fresh printer device per delivery.
        metrics: Optional Prometheus metrics to update.
    """

    def __init__(
        self,
        options: ReceiptOptions,
        printer_factory: PrinterFactory,
        metrics: Optional[ReceiptMetrics] = None,
    ) -> None:
        self.options = options
        self.printer_factory = printer_factory
        self.metrics = metrics

    def parse_event(
        self,
        event_type: Optional[str],
        body: bytes,
        delivery_id: Optional[str] = None,
    ) -> WebhookEvent:
        """Decode a raw webhook body into a WebhookEvent.

        Args:
            event_type: The X-GitHub-Event header value, if any.
            body: The raw request body.
            delivery_id: The X-GitHub-Delivery header value, if any.

        Returns:
            The decoded event.

        Raises:
            InvalidPayloadError: If the body is not valid JSON or does not
                decode to a JSON object.
        """
        try:
            payload = json.loads(body)
        except ValueError as e:
            raise InvalidPayloadError(f"Body is not valid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise InvalidPayloadError(
                f"Expected a JSON object, got {type(payload).__name__}"
            )

        return WebhookEvent(
            event_type=(event_type or "").strip(),
            payload=payload,
            delivery_id=delivery_id,
        )

    def build_receipt(self, event: WebhookEvent) -> FormattedReceipt:
        """Select the formatter for the event type and run it."""
        return format_event(event.event_type, event.payload, self.options)

    def dispatch(self, event: WebhookEvent) -> DispatchResult:
        """Format the event and print it.

        An empty receipt (for example a workflow run that did not fail)
        is not sent, and the printer is never opened for it.

        Returns:
            DispatchResult describing what happened.

        Raises:
            Exception: Any formatting or printer failure propagates to the
                caller after being logged and counted.
        """
        log = logger.bind(
            event_type=event.event_type,
            delivery_id=event.delivery_id,
            repository=event.repository,
        )
        if self.metrics is not None:
            self.metrics.record_webhook(event.metric_label)

        try:
            receipt = self.build_receipt(event)

            if receipt.is_empty:
                log.info("Nothing to print")
                if self.metrics is not None:
                    self.metrics.record_skipped(event.metric_label)
                return DispatchResult(
                    status=DispatchStatus.SKIPPED,
                    event_type=event.event_type,
                )

            start_time = time.monotonic()
            print_receipt(receipt, self.printer_factory)
            duration = time.monotonic() - start_time
        except Exception as e:
            if self.metrics is not None:
                self.metrics.record_failed(event.metric_label)
            log.error("Printing failed", error=str(e), exc_info=True)
            raise

        if self.metrics is not None:
            self.metrics.record_printed(event.metric_label, duration)
        log.info("Receipt printed", commands=len(receipt.commands), duration=duration)

        return DispatchResult(
            status=DispatchStatus.PRINTED,
            event_type=event.event_type,
            commands=len(receipt.commands),
            duration_seconds=duration,
        )


def create_webhook_handler(
    options: ReceiptOptions,
    printer_factory: PrinterFactory,
    metrics: Optional[ReceiptMetrics] = None,
) -> WebhookHandler:
    """Factory function to create a WebhookHandler instance."""
    return WebhookHandler(
        options=options,
        printer_factory=printer_factory,
        metrics=metrics,
    )
