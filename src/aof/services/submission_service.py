from __future__ import annotations

import base64
import logging

import requests

from aof.domain.errors import SubmissionError
from aof.domain.models import Order
from aof.services.layout_service import Document

log = logging.getLogger("aof.submission")


class SubmissionService:
    """Delivers a rendered order to the e-mail endpoint as base64 JSON."""

    def __init__(self, url: str, timeout: float = 15.0):
        self.url = url
        self.timeout = timeout

    def _post_json(self, payload: dict) -> None:
        r = requests.post(self.url, json=payload, timeout=self.timeout)
        r.raise_for_status()

    @staticmethod
    def build_payload(order: Order, document: Document, file_name: str) -> dict:
        return {
            "salesperson": order.salesperson,
            "orderCode": order.order_code,
            "documentBase64": base64.b64encode(document.content).decode("ascii"),
            "fileName": file_name,
        }

    def send(self, order: Order, document: Document, file_name: str) -> None:
        payload = self.build_payload(order, document, file_name)
        try:
            self._post_json(payload)
        except (requests.ConnectionError, requests.Timeout) as e:
            log.warning("submission_unreachable url=%s error=%s", self.url, e)
            raise SubmissionError(f"Order endpoint unreachable: {e}", unreachable=True) from e
        except requests.RequestException as e:
            log.warning("submission_rejected url=%s error=%s", self.url, e)
            raise SubmissionError(f"Order endpoint returned an error: {e}") from e
        log.info("submission_sent code=%s file=%s", order.order_code, file_name)
