"""FastAPI application entry point for printhook.

This module provides the HTTP surface of the service: the GitHub webhook
receiver, a liveness probe and the Prometheus metrics endpoint. The
receiver answers with short plain-text bodies:

- 405 for anything other than POST
- 400 when the body is not a JSON object
- 200 once the receipt is printed (or there was nothing to print)
- 500 when formatting or printing failed
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.printhook.config import PrinthookSettings, get_settings
from src.printhook.metrics import ReceiptMetrics
from src.printhook.printer.driver import PrinterFactory, create_printer_factory
from src.printhook.webhook.handler import InvalidPayloadError, create_webhook_handler
from src.printhook.webhook.models import DispatchStatus

logger = structlog.get_logger()

WEBHOOK_PATHS = ("/", "/webhooks/github")
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _method_not_allowed() -> PlainTextResponse:
    return PlainTextResponse(
        "Error: Expecting a POST request",
        status_code=405,
        headers={"Allow": "POST"},
    )


def configure_logging(settings: PrinthookSettings) -> None:
    """Configure structlog on top of the standard logging module."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )

    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _log_configuration(settings: PrinthookSettings) -> None:
    logger.info(
        "Printhook configuration",
        printer_backend=settings.printer_backend,
        printer_device=settings.printer_device,
        printer_host=settings.printer_host or None,
        printer_port=settings.printer_port,
        line_width=settings.line_width,
        cut_mode=settings.cut_mode.value,
        print_logo=settings.print_logo,
        logo_path=settings.logo_path,
        print_qr_codes=settings.print_qr_codes,
        host=settings.host,
        port=settings.port,
    )


def create_app(
    settings: Optional[PrinthookSettings] = None,
    printer_factory: Optional[PrinterFactory] = None,
    metrics: Optional[ReceiptMetrics] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Service settings. Read from the environment when omitted.
        printer_factory: Creates one printer device per delivery. Defaults
            to the backend named in the settings.
        metrics: Prometheus metrics. A fresh registry is used when omitted.

    Returns:
        The configured application.
    """
    settings = settings or get_settings()
    metrics = metrics or ReceiptMetrics()
    handler = create_webhook_handler(
        options=settings.receipt_options(),
        printer_factory=printer_factory or create_printer_factory(settings),
        metrics=metrics,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Printhook starting up")
        _log_configuration(settings)
        yield
        logger.info("Printhook shutting down")

    app = FastAPI(
        title="Printhook",
        description="Prints GitHub webhook events on an ESC/POS receipt printer",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.metrics = metrics
    app.state.webhook_handler = handler

    @app.exception_handler(StarletteHTTPException)
    async def plain_text_method_not_allowed(request: Request, exc: StarletteHTTPException):
        # Methods outside ALL_METHODS (TRACE, CONNECT, ...) are refused by the
        # router before reaching the receiver.
        if exc.status_code == 405 and request.url.path in WEBHOOK_PATHS:
            return _method_not_allowed()
        return await http_exception_handler(request, exc)

    async def github_webhook(request: Request):
        """GitHub webhook receiver endpoint.

        The print job runs inline, so deliveries are printed one at a time
        in the order they arrive.
        """
        if request.method != "POST":
            return _method_not_allowed()

        body = await request.body()
        try:
            event = handler.parse_event(
                request.headers.get("X-GitHub-Event"),
                body,
                delivery_id=request.headers.get("X-GitHub-Delivery"),
            )
        except InvalidPayloadError as e:
            logger.warning("Rejected webhook payload", error=str(e))
            return PlainTextResponse("Error: Invalid JSON payload", status_code=400)

        try:
            result = handler.dispatch(event)
        except Exception as e:
            return PlainTextResponse(f"Printing failed: {e}", status_code=500)

        if result.status is DispatchStatus.SKIPPED:
            return PlainTextResponse("Nothing to print")
        return PlainTextResponse("Printed successfully")

    for path in WEBHOOK_PATHS:
        app.add_api_route(path, github_webhook, methods=ALL_METHODS, include_in_schema=path != "/")

    @app.get("/health")
    async def health():
        """Liveness probe endpoint."""
        return {"status": "healthy"}

    @app.get("/metrics")
    async def prometheus_metrics():
        """Prometheus metrics endpoint."""
        return Response(content=metrics.generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


def run() -> None:
    """Console entry point: configure logging and serve with uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
