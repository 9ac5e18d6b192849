import base64
from pathlib import Path

import pytest
import requests

from conftest import make_items, make_order

from aof.domain.errors import SubmissionError, ValidationError
from aof.services.dispatch_service import DispatchOutcome, DispatchService
from aof.services.export_service import ExportService, order_file_name
from aof.services.layout_service import DocumentLayout
from aof.services.submission_service import SubmissionService


class CountingLayout(DocumentLayout):
    def __init__(self):
        super().__init__()
        self.calls = 0

    def render(self, order):
        self.calls += 1
        return super().render(order)


class RecordingSubmission(SubmissionService):
    def __init__(self, error: Exception | None = None):
        super().__init__("http://orders.invalid/api/send-order", timeout=1)
        self.error = error
        self.payloads = []

    def _post_json(self, payload: dict) -> None:
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error


def _services(tmp_path: Path, error: Exception | None = None):
    layout = CountingLayout()
    exports = ExportService(layout, tmp_path / "exports")
    submission = RecordingSubmission(error)
    return layout, exports, submission, DispatchService(exports, submission)


def test_file_name_convention():
    assert order_file_name(make_order(salesperson="Ana", order_code="X1")) == "Order_Ana_X1.pdf"
    assert order_file_name(make_order(salesperson="Ana/Sul", order_code="A:1")) == "Order_Ana_Sul_A_1.pdf"


def test_export_writes_pdf_with_suggested_name(tmp_path: Path):
    layout, exports, _sub, _dispatch = _services(tmp_path)

    result = exports.save(make_order(items=make_items(("Adubo", "kg", "1", 2.0))))

    assert result.path == tmp_path / "exports" / "Order_Ana_X1.pdf"
    assert result.path.read_bytes() == result.document.content
    assert layout.calls == 1


def test_export_to_explicit_target(tmp_path: Path):
    _layout, exports, _sub, _dispatch = _services(tmp_path)
    target = tmp_path / "chosen" / "pedido.pdf"

    result = exports.save(make_order(), target)

    assert result.path == target
    assert result.file_name == "Order_Ana_X1.pdf"
    assert target.exists()


@pytest.mark.parametrize("salesperson, code", [("", "X1"), ("Ana", ""), ("  ", "X1")])
def test_export_blocked_without_identification(tmp_path: Path, salesperson, code):
    layout, exports, _sub, _dispatch = _services(tmp_path)

    with pytest.raises(ValidationError):
        exports.save(make_order(salesperson=salesperson, order_code=code))

    assert layout.calls == 0
    assert not (tmp_path / "exports").exists()


def test_submit_blocked_without_identification(tmp_path: Path):
    layout, _exports, submission, dispatch = _services(tmp_path)

    with pytest.raises(ValidationError):
        dispatch.submit(make_order(salesperson=""))

    assert layout.calls == 0
    assert submission.payloads == []
    assert not (tmp_path / "exports").exists()


def test_successful_submission_sends_payload_and_keeps_local_copy(tmp_path: Path):
    layout, _exports, submission, dispatch = _services(tmp_path)

    result = dispatch.submit(make_order())

    assert result.outcome is DispatchOutcome.SENT
    assert result.delivered
    assert layout.calls == 1
    assert len(submission.payloads) == 1
    payload = submission.payloads[0]
    assert set(payload) == {"salesperson", "orderCode", "documentBase64", "fileName"}
    assert payload["salesperson"] == "Ana"
    assert payload["orderCode"] == "X1"
    assert payload["fileName"] == "Order_Ana_X1.pdf"
    assert base64.b64decode(payload["documentBase64"]) == result.path.read_bytes()


def test_unreachable_endpoint_falls_back_to_local_save(tmp_path: Path):
    _layout, _exports, submission, dispatch = _services(tmp_path, requests.ConnectionError("network down"))

    result = dispatch.submit(make_order())

    assert result.outcome is DispatchOutcome.UNREACHABLE
    assert not result.delivered
    assert result.path.exists()
    assert "unavailable" in result.message
    assert len(submission.payloads) == 1


def test_timeout_counts_as_unreachable(tmp_path: Path):
    _layout, _exports, _sub, dispatch = _services(tmp_path, requests.Timeout("slow"))

    assert dispatch.submit(make_order()).outcome is DispatchOutcome.UNREACHABLE


def test_error_status_falls_back_with_same_message(tmp_path: Path):
    _layout, _exports, _sub, dispatch = _services(tmp_path, requests.HTTPError("500 Server Error"))
    _l2, _e2, _s2, unreachable = _services(tmp_path / "other", requests.ConnectionError("down"))

    rejected = dispatch.submit(make_order())

    assert rejected.outcome is DispatchOutcome.REJECTED
    assert rejected.path.exists()
    assert rejected.message == unreachable.submit(make_order()).message


def test_submission_service_maps_transport_errors():
    svc = RecordingSubmission(requests.ConnectionError("refused"))
    doc = DocumentLayout().render(make_order())

    with pytest.raises(SubmissionError) as exc_info:
        svc.send(make_order(), doc, "Order_Ana_X1.pdf")

    assert exc_info.value.unreachable is True
    assert isinstance(exc_info.value.__cause__, requests.ConnectionError)


def test_submission_service_posts_json_with_timeout(monkeypatch):
    captured = {}

    class FakeResponse:
        def raise_for_status(self):
            return None

    def fake_post(url, json, timeout):
        captured.update(url=url, json=json, timeout=timeout)
        return FakeResponse()

    monkeypatch.setattr(requests, "post", fake_post)
    svc = SubmissionService("http://localhost:9/api/send-order", timeout=3)
    doc = DocumentLayout().render(make_order())

    svc.send(make_order(), doc, "Order_Ana_X1.pdf")

    assert captured["url"] == "http://localhost:9/api/send-order"
    assert captured["timeout"] == 3
    assert captured["json"]["fileName"] == "Order_Ana_X1.pdf"
