from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from aof.domain.errors import ValidationError
from aof.domain.models import Order
from aof.services.layout_service import Document, DocumentLayout

log = logging.getLogger("aof.orders")

_UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def require_identification(order: Order) -> None:
    if not (order.salesperson or "").strip() or not (order.order_code or "").strip():
        raise ValidationError("Fill in the salesperson and the order code.")


def order_file_name(order: Order, ext: str = "pdf") -> str:
    salesperson = _UNSAFE_CHARS.sub("_", order.salesperson.strip())
    code = _UNSAFE_CHARS.sub("_", order.order_code.strip())
    return f"Order_{salesperson}_{code}.{ext}"


@dataclass(frozen=True)
class ExportResult:
    path: Path
    file_name: str
    document: Document


class ExportService:
    def __init__(self, layout: DocumentLayout, exports_dir: Path | str):
        self.layout = layout
        self.exports_dir = Path(exports_dir)

    def build(self, order: Order) -> tuple[str, Document]:
        """Validate and render ``order``; returns (suggested file name, document)."""
        require_identification(order)
        return order_file_name(order), self.layout.render(order)

    def save(self, order: Order, target: Path | str | None = None) -> ExportResult:
        file_name, document = self.build(order)
        return self.write(file_name, document, target)

    def write(self, file_name: str, document: Document, target: Path | str | None = None) -> ExportResult:
        path = Path(target) if target else self.exports_dir / file_name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(document.content)
        log.info("order_exported file=%s pages=%s bytes=%s", path.name, document.page_count, len(document.content))
        return ExportResult(path=path, file_name=file_name, document=document)
