from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from aof.domain.errors import SubmissionError
from aof.domain.models import Order
from aof.services.export_service import ExportService
from aof.services.submission_service import SubmissionService

log = logging.getLogger("aof.submission")


class DispatchOutcome(str, Enum):
    SENT = "sent"
    REJECTED = "rejected"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class DispatchResult:
    outcome: DispatchOutcome
    path: Path
    message: str

    @property
    def delivered(self) -> bool:
        return self.outcome is DispatchOutcome.SENT


class DispatchService:
    """
    Generate-and-send: renders the order once, submits it, and always keeps
    a local copy. A failed submission never blocks the local save.
    """

    def __init__(self, exports: ExportService, submission: SubmissionService):
        self.exports = exports
        self.submission = submission

    def submit(self, order: Order, target: Path | str | None = None) -> DispatchResult:
        file_name, document = self.exports.build(order)

        try:
            self.submission.send(order, document, file_name)
        except SubmissionError as e:
            outcome = DispatchOutcome.UNREACHABLE if e.unreachable else DispatchOutcome.REJECTED
            saved = self.exports.write(file_name, document, target)
            log.warning("submission_fallback outcome=%s file=%s", outcome.value, saved.path.name)
            return DispatchResult(
                outcome=outcome,
                path=saved.path,
                message="PDF saved locally. Automatic e-mail delivery is unavailable.",
            )

        saved = self.exports.write(file_name, document, target)
        return DispatchResult(
            outcome=DispatchOutcome.SENT,
            path=saved.path,
            message="Order sent successfully.",
        )
