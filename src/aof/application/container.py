from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from aof.config import Settings
from aof.services.dispatch_service import DispatchService
from aof.services.export_service import ExportService
from aof.services.layout_service import DocumentLayout
from aof.services.submission_service import SubmissionService


@dataclass(frozen=True)
class AppContainer:
    settings: Settings
    layout: DocumentLayout
    exports: ExportService
    submission: SubmissionService
    dispatch: DispatchService


def build_container(settings: Settings, exports_dir: Path | str) -> AppContainer:
    layout = DocumentLayout(
        company=settings.company,
        logo_path=settings.logo_path,
        min_item_rows=settings.min_item_rows,
    )
    exports = ExportService(layout, exports_dir)
    submission = SubmissionService(settings.submit_url, timeout=settings.submit_timeout)
    dispatch = DispatchService(exports, submission)

    return AppContainer(
        settings=settings,
        layout=layout,
        exports=exports,
        submission=submission,
        dispatch=dispatch,
    )
