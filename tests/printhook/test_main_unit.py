"""Unit tests for the FastAPI application.

Exercises the HTTP contract of the webhook receiver: status codes, the
plain-text response bodies, and that the printer is released on every
path.
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from escpos.printer import Dummy
from fastapi.testclient import TestClient

from src.printhook.config import PrinthookSettings
from src.printhook.main import create_app
from src.printhook.metrics import ReceiptMetrics


@pytest.fixture
def device():
    return MagicMock(spec=Dummy)


@pytest.fixture
def factory(device):
    return MagicMock(return_value=device)


@pytest.fixture
def metrics():
    return ReceiptMetrics()


@pytest.fixture
def client(factory, metrics):
    settings = PrinthookSettings(printer_backend="dummy")
    app = create_app(settings=settings, printer_factory=factory, metrics=metrics)
    return TestClient(app)


def _post(client, event_type, payload, path="/"):
    headers = {"Content-Type": "application/json"}
    if event_type is not None:
        headers["X-GitHub-Event"] = event_type
    body = payload if isinstance(payload, (bytes, str)) else json.dumps(payload)
    return client.post(path, content=body, headers=headers)


# ---------------------------------------------------------------------------
# Method and payload validation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE"])
@pytest.mark.parametrize("path", ["/", "/webhooks/github"])
def test_non_post_is_rejected(client, factory, method, path):
    response = client.request(method, path)

    assert response.status_code == 405
    assert response.text == "Error: Expecting a POST request"
    assert response.headers["content-type"].startswith("text/plain")
    assert response.headers["allow"] == "POST"
    factory.assert_not_called()


@pytest.mark.parametrize("method", ["TRACE", "PROPFIND", "PURGE"])
def test_unlisted_methods_get_the_same_plain_text_405(client, factory, method):
    response = client.request(method, "/")

    assert response.status_code == 405
    assert response.text == "Error: Expecting a POST request"
    assert response.headers["content-type"].startswith("text/plain")
    assert response.headers["allow"] == "POST"
    factory.assert_not_called()


def test_other_routes_keep_default_405(client):
    response = client.post("/health")

    assert response.status_code == 405
    assert response.json() == {"detail": "Method Not Allowed"}


@pytest.mark.parametrize("body", [b"", b"not json", b"{\"issue\": ", b"[]", b"\"issue\""])
def test_invalid_json_is_rejected(client, factory, body):
    response = _post(client, "issues", body)

    assert response.status_code == 400
    assert response.text == "Error: Invalid JSON payload"
    factory.assert_not_called()


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("path", ["/", "/webhooks/github"])
def test_issue_is_printed(client, device, issue_payload, path):
    response = _post(client, "issues", issue_payload, path=path)

    assert response.status_code == 200
    assert response.text == "Printed successfully"
    device.text.assert_any_call("Printer jams on long receipts\n")
    device.close.assert_called_once()


def test_pull_request_is_printed(client, device, pull_request_payload):
    response = _post(client, "pull_request", pull_request_payload)

    assert response.status_code == 200
    device.text.assert_any_call("Wrap long lines\n")


def test_successful_workflow_run_prints_nothing(client, factory, workflow_run_payload):
    workflow_run_payload["workflow_run"]["conclusion"] = "success"

    response = _post(client, "workflow_run", workflow_run_payload)

    assert response.status_code == 200
    assert response.text == "Nothing to print"
    factory.assert_not_called()


def test_failed_workflow_run_is_printed(client, device, workflow_run_payload):
    response = _post(client, "workflow_run", workflow_run_payload)

    assert response.status_code == 200
    assert response.text == "Printed successfully"
    device.text.assert_any_call("Workflow: CI\n")


def test_missing_event_header_prints_unknown_event(client, device):
    response = _post(client, None, {"zen": "Design for failure."})

    assert response.status_code == 200
    device.text.assert_any_call("Unknown GitHub Event\n")
    device.text.assert_any_call("\n")


@pytest.mark.parametrize("number", ["1e400", "-1e400", "NaN", "Infinity"])
def test_non_finite_issue_number_is_printed_without_number(client, device, number):
    body = '{"issue": {"number": ' + number + ', "title": "Overflow"}}'

    response = _post(client, "issues", body)

    assert response.status_code == 200
    assert response.text == "Printed successfully"
    device.text.assert_any_call("Overflow\n")
    printed = [c.args[0] for c in device.text.call_args_list]
    assert not any(text.startswith("Issue: #") for text in printed)


def test_missing_fields_print_placeholders(client, device):
    response = _post(client, "issues", {})

    assert response.status_code == 200
    device.text.assert_any_call("(no title)\n")
    device.text.assert_any_call("Created by: @unknown\n")


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


def test_printer_failure_returns_500_and_closes(client, device, issue_payload):
    device.text.side_effect = OSError("Device or resource busy")

    response = _post(client, "issues", issue_payload)

    assert response.status_code == 500
    assert response.text == "Printing failed: Device or resource busy"
    device.close.assert_called_once()


def test_factory_failure_returns_500(client, factory, issue_payload):
    factory.side_effect = PermissionError("Permission denied: '/dev/usb/lp0'")

    response = _post(client, "issues", issue_payload)

    assert response.status_code == 500
    assert response.text.startswith("Printing failed: Permission denied")


def test_service_keeps_running_after_failure(client, device, issue_payload):
    device.text.side_effect = [OSError("paper out")]

    assert _post(client, "issues", issue_payload).status_code == 500

    device.text.side_effect = None
    assert _post(client, "issues", issue_payload).status_code == 200


# ---------------------------------------------------------------------------
# Probes
# ---------------------------------------------------------------------------


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_metrics_counts_receipts(client, issue_payload, workflow_run_payload):
    _post(client, "issues", issue_payload)
    workflow_run_payload["workflow_run"]["conclusion"] = "cancelled"
    _post(client, "workflow_run", workflow_run_payload)

    response = client.get("/metrics")

    assert response.status_code == 200
    assert 'printhook_receipts_total{event_type="issues",result="printed"} 1.0' in response.text
    assert 'printhook_receipts_total{event_type="workflow_run",result="skipped"} 1.0' in response.text
    assert 'printhook_webhooks_received_total{event_type="issues"} 1.0' in response.text


def test_metrics_fold_unrecognised_event_types(client, metrics):
    for i in range(5):
        _post(client, f"junk-{i}", {"zen": "Anything added dilutes everything else."})
    _post(client, None, {})

    text = client.get("/metrics").text

    assert "junk" not in text
    assert 'printhook_webhooks_received_total{event_type="unknown"} 6.0' in text
    assert metrics.value("unknown", "printed") == 6


def test_lifespan_starts_and_stops(factory, metrics):
    app = create_app(
        settings=PrinthookSettings(printer_backend="dummy"),
        printer_factory=factory,
        metrics=metrics,
    )

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
