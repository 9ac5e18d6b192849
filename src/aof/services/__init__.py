from .ledger_service import LineItemLedger
from .layout_service import DocumentLayout, Document
from .export_service import ExportService
from .submission_service import SubmissionService
from .dispatch_service import DispatchService, DispatchOutcome, DispatchResult

__all__ = [
    "LineItemLedger",
    "DocumentLayout",
    "Document",
    "ExportService",
    "SubmissionService",
    "DispatchService",
    "DispatchOutcome",
    "DispatchResult",
]
