from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from aof.config import CompanyProfile
from aof.domain.errors import RenderError
from aof.domain.formatting import format_date, format_money
from aof.domain.models import (
    Address,
    BarterCommodity,
    CropCycle,
    Currency,
    FreightPayer,
    Order,
    PaymentMode,
    PersonType,
)

log = logging.getLogger(__name__)

# Geometry is in millimetres, y grows downwards from the top edge of the page.
PAGE_W = 210.0
PAGE_H = 297.0
MARGIN = 15.0
CONTENT_W = PAGE_W - 2 * MARGIN
MAX_Y = 282.0
CONTINUATION_TOP = 20.0
HEADER_H = 35.0

BRAND = "#1E643C"
BRAND_PALE = "#F0F8F0"
ROW_ALT = "#F8FCF8"
INK = "#000000"
WHITE = "#FFFFFF"
LABEL_GRAY = "#646464"
RULE_GRAY = "#C8C8C8"

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

DISCLAIMER = "PEDIDO VÁLIDO SOMENTE APÓS APROVAÇÃO DO DPTO. CRÉDITO/COMERCIAL."
SIGNATURE_CAPTIONS = ("Assinatura do Vendedor", "Visto Depto. Crédito", "Assinatura do Cliente")

PERSON_LABELS = {PersonType.INDIVIDUAL: "Física", PersonType.COMPANY: "Jurídica"}
PAYMENT_LABELS = {
    PaymentMode.CASH: "À Vista",
    PaymentMode.TERM: "À Prazo",
    PaymentMode.BONUS: "Bonificação",
    PaymentMode.BARTER: "Troca",
}
CURRENCY_LABELS = {Currency.REAL: "Real (R$)", Currency.DOLLAR: "Dólar (US$)"}
BARTER_LABELS = {
    BarterCommodity.SOY: "Soja em Grãos (SJ$)",
    BarterCommodity.CORN: "Milho em Grãos (ML$)",
    BarterCommodity.SEED: "Semente de Soja (SM$)",
}
CYCLE_LABELS = {CropCycle.MAIN: "Safra", CropCycle.SECOND: "Safrinha"}
FREIGHT_LABELS = {FreightPayer.SELLER: "CIF", FreightPayer.BUYER: "FOB"}

TABLE_HEAD = ("Descrição", "Unid.", "Volume", "Preço Un.", "Total")
TABLE_WIDTHS = (78.0, 20.0, 22.0, 30.0, 30.0)
TABLE_ALIGNS = ("left", "left", "right", "right", "right")
HEAD_ROW_H = 8.0
BODY_ROW_H = 7.0
TOTAL_ROW_H = 9.0


# ---------- layout primitives ----------

@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    size: float = 9.0
    bold: bool = False
    color: str = INK
    align: str = "left"


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    w: float
    h: float
    fill: Optional[str] = None
    stroke: Optional[str] = None


@dataclass(frozen=True)
class Rule:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str = RULE_GRAY
    width: float = 0.5


@dataclass(frozen=True)
class Checkbox:
    x: float
    y: float
    label: str
    checked: bool
    group: str


@dataclass(frozen=True)
class Picture:
    x: float
    y: float
    w: float
    h: float
    path: str


@dataclass(frozen=True)
class TableRow:
    x: float
    y: float
    widths: tuple[float, ...]
    height: float
    cells: tuple[str, ...]
    style: str
    aligns: tuple[str, ...] = TABLE_ALIGNS
    sizes: tuple[float, ...] = ()


Element = Union[Text, Box, Rule, Checkbox, Picture, TableRow]


@dataclass(frozen=True)
class Page:
    number: int
    elements: tuple[Element, ...]
    sections: tuple[str, ...]


@dataclass(frozen=True)
class Document:
    pages: tuple[Page, ...]
    content: bytes

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def elements(self, kind: type | None = None) -> Iterator[Element]:
        for page in self.pages:
            for el in page.elements:
                if kind is None or isinstance(el, kind):
                    yield el

    def sections(self) -> list[str]:
        out: list[str] = []
        for page in self.pages:
            for name in page.sections:
                if name not in out:
                    out.append(name)
        return out

    def texts(self) -> list[str]:
        return [t.text for t in self.elements(Text)]

    def checkboxes(self, group: str | None = None) -> list[Checkbox]:
        return [c for c in self.elements(Checkbox) if group is None or c.group == group]

    def marked(self, group: str | None = None) -> list[str]:
        return [c.label for c in self.checkboxes(group) if c.checked]

    def table_rows(self, *styles: str) -> list[TableRow]:
        return [r for r in self.elements(TableRow) if not styles or r.style in styles]


# ---------- text measuring ----------

def fit_text(text: str, width: float, font: str = FONT, size: float = 9.0) -> str:
    """Truncate ``text`` with an ellipsis so it fits ``width`` millimetres."""
    text = (text or "").replace("\n", " ")
    limit = width * mm
    if stringWidth(text, font, size) <= limit:
        return text
    while text and stringWidth(text + "...", font, size) > limit:
        text = text[:-1]
    return text + "..."


def fit_size(text: str, width: float, font: str = FONT, size: float = 9.0, min_size: float = 5.0) -> float:
    """Largest font size, in half-point steps, at which ``text`` fits ``width`` millimetres."""
    limit = width * mm
    while size > min_size and stringWidth(text or "", font, size) > limit:
        size -= 0.5
    return size


def row_font(style: str) -> tuple[str, float]:
    bold = style in ("head", "total")
    return (FONT_BOLD if bold else FONT), (10.0 if style == "total" else 8.0)


def cell_sizes(cells: tuple[str, ...], widths: tuple[float, ...], style: str) -> tuple[float, ...]:
    font, size = row_font(style)
    return tuple(fit_size(text, w - 4, font, size) for text, w in zip(cells, widths))


def wrap_text(text: str, width: float, font: str = FONT, size: float = 9.0) -> list[str]:
    limit = width * mm
    lines: list[str] = []
    for paragraph in (text or "").splitlines():
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if stringWidth(candidate, font, size) <= limit:
                current = candidate
                continue
            if current:
                lines.append(current)
            current = fit_text(word, width, font, size)
        lines.append(current)
    return lines


class _Sheet:
    """Mutable page accumulator used during a single render call."""

    def __init__(self):
        self.pages: list[tuple[list[Element], list[str]]] = []
        self.y = 0.0
        self.new_page(top=0.0)

    @property
    def elements(self) -> list[Element]:
        return self.pages[-1][0]

    def new_page(self, top: float = CONTINUATION_TOP) -> None:
        self.pages.append(([], []))
        self.y = top

    def begin(self, name: str, height: float) -> None:
        # sections never straddle a page; only the product table continues
        if self.y + height > MAX_Y and self.elements:
            self.new_page()
        self.mark(name)

    def mark(self, name: str) -> None:
        sections = self.pages[-1][1]
        if name not in sections:
            sections.append(name)

    def add(self, *elements: Element) -> None:
        self.elements.extend(elements)


class DocumentLayout:
    """
    Lays an Order out on A4 portrait pages and paints it as PDF.

    ``render`` is a pure function of the order: the page plan and the PDF
    bytes are identical for identical input.
    """

    def __init__(
        self,
        company: CompanyProfile | None = None,
        logo_path: Path | str | None = None,
        min_item_rows: int = 0,
    ):
        self.company = company or CompanyProfile()
        self.logo_path = Path(logo_path) if logo_path else None
        self.min_item_rows = max(int(min_item_rows), 0)

    def render(self, order: Order) -> Document:
        pages = self.plan(order)
        content = self.paint(pages, title=f"Pedido de Venda {order.order_code}".strip())
        return Document(pages=pages, content=content)

    # ---------- planning ----------

    def plan(self, order: Order) -> tuple[Page, ...]:
        sheet = _Sheet()
        self._header(sheet, order)
        self._metadata(sheet, order)
        self._client(sheet, order)
        self._address(sheet, "billing_address", "ENDEREÇO DE FATURAMENTO", order.billing_address)
        self._address(sheet, "shipping_address", "ENDEREÇO DE ENTREGA", order.shipping_address)
        self._items(sheet, order)
        self._payment(sheet, order)
        self._delivery(sheet, order)
        self._notes(sheet, order)
        self._disclaimer(sheet)
        self._signatures(sheet)

        total = len(sheet.pages)
        pages = []
        for idx, (elements, sections) in enumerate(sheet.pages, start=1):
            footer = Text(PAGE_W - MARGIN, PAGE_H - 8, f"{idx}/{total}", 7, color=LABEL_GRAY, align="right")
            pages.append(Page(number=idx, elements=tuple(elements) + (footer,), sections=tuple(sections)))
        return tuple(pages)

    def _load_logo(self) -> str:
        path = self.logo_path
        try:
            ImageReader(str(path)).getSize()
        except Exception as e:
            raise RenderError(f"Logo unavailable: {path} ({e})") from e
        return str(path)

    def _section_bar(self, sheet: _Sheet, title: str) -> None:
        sheet.add(
            Box(MARGIN, sheet.y, CONTENT_W, 6, fill=BRAND),
            Text(MARGIN + 3, sheet.y + 4, title, 8, bold=True, color=WHITE),
        )
        sheet.y += 10

    def _field(self, sheet: _Sheet, label: str, value: str, x: float, max_width: float = 55.0) -> None:
        sheet.add(
            Text(x, sheet.y, label, 7, bold=True, color=LABEL_GRAY),
            Text(x, sheet.y + 4, fit_text(value or "", max_width)),
        )

    def _choices(self, sheet: _Sheet, group: str, labels: dict, selected, x: float, step: float, y: float) -> None:
        for i, (option, label) in enumerate(labels.items()):
            sheet.add(Checkbox(x + i * step, y, label, option == selected, group))

    def _header(self, sheet: _Sheet, order: Order) -> None:
        sheet.mark("header")
        c = self.company
        sheet.add(Box(0, 0, PAGE_W, HEADER_H, fill=BRAND))

        text_x = MARGIN
        if self.logo_path is not None:
            text_x = MARGIN + 26
            try:
                sheet.add(Picture(MARGIN, 6.5, 22, 22, self._load_logo()))
            except RenderError as e:
                log.warning("logo_fallback error=%s", e)
                sheet.add(
                    Box(MARGIN, 6.5, 22, 22, stroke=WHITE),
                    Text(MARGIN + 11, 18.5, fit_text(c.name, 20, FONT_BOLD, 8), 8, bold=True, color=WHITE, align="center"),
                )

        right = PAGE_W - MARGIN
        sheet.add(
            Text(text_x, 13, c.name, 16, bold=True, color=WHITE),
            Text(text_x, 19, fit_text(c.legal_name, 95, FONT, 8), 8, color=WHITE),
            Text(text_x, 24, fit_text(c.tax_line, 95, FONT, 7), 7, color=WHITE),
            Text(text_x, 29, fit_text(c.contact_line, 95, FONT, 7), 7, color=WHITE),
            Text(right, 15, "PEDIDO DE VENDA", 14, bold=True, color=WHITE, align="right"),
            Text(right, 22, fit_text(f"Código: {order.order_code}", 55), 9, color=WHITE, align="right"),
            Text(right, 28, fit_text(f"Vendedor: {order.salesperson}", 55), 9, color=WHITE, align="right"),
        )
        sheet.y = HEADER_H + 7

    def _metadata(self, sheet: _Sheet, order: Order) -> None:
        sheet.begin("metadata", 10)
        self._field(sheet, "ORDEM DE COMPRA", order.purchase_order_ref, MARGIN, 60)
        self._field(sheet, "DATA", format_date(order.date), 80, 30)
        sheet.y += 10

    def _client(self, sheet: _Sheet, order: Order) -> None:
        client = order.client
        individual = client.person_type == PersonType.INDIVIDUAL
        sheet.begin("client", 42)
        self._section_bar(sheet, "DADOS DO CLIENTE")

        self._field(sheet, "RAZÃO SOCIAL", client.legal_name, MARGIN, 118)
        sheet.add(Text(140, sheet.y, "PESSOA", 7, bold=True, color=LABEL_GRAY))
        self._choices(sheet, "person_type", PERSON_LABELS, client.person_type, 140, 22, sheet.y + 4)
        sheet.y += 10

        self._field(sheet, "CPF" if individual else "CNPJ", client.tax_id, MARGIN, 60)
        self._field(sheet, "RG" if individual else "INSCRIÇÃO ESTADUAL", client.registration, 80, 60)
        sheet.y += 10

        self._field(sheet, "CONTATO", client.contact, MARGIN, 60)
        self._field(sheet, "FONE", client.phone, 80, 45)
        self._field(sheet, "E-MAIL", client.email, 130, 65)
        sheet.y += 12

    def _address(self, sheet: _Sheet, name: str, title: str, address: Address) -> None:
        sheet.begin(name, 22)
        self._section_bar(sheet, title)
        self._field(sheet, "ENDEREÇO", address.street, MARGIN, 62)
        self._field(sheet, "CEP", address.postal_code, 80, 25)
        self._field(sheet, "CIDADE", address.city, 108, 33)
        self._field(sheet, "BAIRRO", address.district, 144, 34)
        self._field(sheet, "UF", address.state, 181, 14)
        sheet.y += 12

    def _table_head(self, sheet: _Sheet) -> None:
        sheet.add(TableRow(MARGIN, sheet.y, TABLE_WIDTHS, HEAD_ROW_H, TABLE_HEAD, "head", ("left",) * 5,
                           cell_sizes(TABLE_HEAD, TABLE_WIDTHS, "head")))
        sheet.y += HEAD_ROW_H

    def _table_row(self, sheet: _Sheet, cells: tuple[str, ...], style: str, height: float) -> None:
        if sheet.y + height > MAX_Y:
            sheet.new_page()
            sheet.mark("items")
            self._table_head(sheet)
        sheet.add(TableRow(MARGIN, sheet.y, TABLE_WIDTHS, height, cells, style,
                           sizes=cell_sizes(cells, TABLE_WIDTHS, style)))
        sheet.y += height

    def _items(self, sheet: _Sheet, order: Order) -> None:
        items = order.items
        first_row = BODY_ROW_H if items or self.min_item_rows else TOTAL_ROW_H
        sheet.begin("items", 10 + HEAD_ROW_H + first_row)
        self._section_bar(sheet, "DISCRIMINAÇÃO DO PRODUTO")
        self._table_head(sheet)

        widths = TABLE_WIDTHS
        for i, it in enumerate(items):
            cells = (
                fit_text(it.description, widths[0] - 4, FONT, 8),
                fit_text(it.unit, widths[1] - 4, FONT, 8),
                fit_text(it.quantity, widths[2] - 4, FONT, 8),
                format_money(it.unit_price),
                format_money(it.line_total),
            )
            self._table_row(sheet, cells, "alt" if i % 2 else "body", BODY_ROW_H)

        for _ in range(self.min_item_rows - len(items)):
            self._table_row(sheet, ("",) * 5, "blank", BODY_ROW_H)

        self._table_row(sheet, ("", "", "", "TOTAL:", format_money(order.grand_total)), "total", TOTAL_ROW_H)
        sheet.y += 8

    def _payment(self, sheet: _Sheet, order: Order) -> None:
        payment = order.payment
        bank_lines = wrap_text(payment.bank_details, CONTENT_W)[:2] or [""]
        detail = payment.mode in (PaymentMode.TERM, PaymentMode.BARTER)
        height = 10 + 8 + (12 if detail else 0) + 4 + 4.5 * len(bank_lines) + 4

        sheet.begin("payment", height)
        self._section_bar(sheet, "CONDIÇÕES DE PAGAMENTO")
        self._choices(sheet, "payment_mode", PAYMENT_LABELS, payment.mode, MARGIN, 40, sheet.y + 2)
        sheet.y += 8

        if payment.mode == PaymentMode.TERM:
            sheet.add(Text(MARGIN, sheet.y, "MOEDA", 7, bold=True, color=LABEL_GRAY))
            self._choices(sheet, "currency", CURRENCY_LABELS, payment.currency, MARGIN, 35, sheet.y + 4.5)
            self._field(sheet, "VENCIMENTO", payment.due_date, 110, 60)
            sheet.y += 12
        elif payment.mode == PaymentMode.BARTER:
            sheet.add(Text(MARGIN, sheet.y, "TIPO DE TROCA", 7, bold=True, color=LABEL_GRAY))
            self._choices(sheet, "barter_commodity", BARTER_LABELS, payment.barter_commodity, MARGIN, 45, sheet.y + 4.5)
            self._field(sheet, "VALOR", payment.barter_value, 152, 40)
            sheet.y += 12

        sheet.add(Text(MARGIN, sheet.y, "DADOS BANCÁRIOS", 7, bold=True, color=LABEL_GRAY))
        sheet.y += 4
        for line in bank_lines:
            sheet.add(Text(MARGIN, sheet.y, line))
            sheet.y += 4.5
        sheet.y += 4

    def _delivery(self, sheet: _Sheet, order: Order) -> None:
        delivery = order.delivery
        sheet.begin("delivery", 22)
        self._section_bar(sheet, "ENTREGA")
        self._field(sheet, "ARMAZÉM - CIDADE", delivery.warehouse_city, MARGIN, 55)
        self._field(sheet, "UF", delivery.warehouse_state, 75, 14)
        sheet.add(
            Text(95, sheet.y, "CICLO", 7, bold=True, color=LABEL_GRAY),
            Text(145, sheet.y, "FRETE", 7, bold=True, color=LABEL_GRAY),
        )
        self._choices(sheet, "crop_cycle", CYCLE_LABELS, delivery.crop_cycle, 95, 20, sheet.y + 4.5)
        self._choices(sheet, "freight", FREIGHT_LABELS, delivery.freight, 145, 18, sheet.y + 4.5)
        sheet.y += 12

    def _notes(self, sheet: _Sheet, order: Order) -> None:
        if not (order.notes or "").strip():
            return
        max_lines = int((MAX_Y - CONTINUATION_TOP - 14) // 4.5)
        lines = wrap_text(order.notes.strip(), CONTENT_W)
        if len(lines) > max_lines:
            lines = lines[: max_lines - 1] + [fit_text(lines[max_lines - 1] + " ...", CONTENT_W)]

        sheet.begin("notes", 10 + 4.5 * len(lines) + 4)
        self._section_bar(sheet, "OBSERVAÇÕES")
        for line in lines:
            sheet.add(Text(MARGIN, sheet.y, line))
            sheet.y += 4.5
        sheet.y += 4

    def _disclaimer(self, sheet: _Sheet) -> None:
        sheet.begin("disclaimer", 8)
        sheet.add(Text(MARGIN, sheet.y + 4, DISCLAIMER, 6.5, color=LABEL_GRAY))
        sheet.y += 8

    def _signatures(self, sheet: _Sheet) -> None:
        sheet.begin("signatures", 24)
        spans = ((MARGIN, 75.0), (85.0, 140.0), (150.0, PAGE_W - MARGIN))
        for (x1, x2), caption in zip(spans, SIGNATURE_CAPTIONS):
            sheet.add(
                Rule(x1, sheet.y + 15, x2, sheet.y + 15),
                Text((x1 + x2) / 2, sheet.y + 20, caption, 7, color=LABEL_GRAY, align="center"),
            )
        sheet.y += 24

    # ---------- painting ----------

    def paint(self, pages: tuple[Page, ...], title: str = "Pedido de Venda") -> bytes:
        buf = io.BytesIO()
        c = canvas.Canvas(buf, pagesize=A4, invariant=1)
        c.setTitle(title)
        c.setAuthor(self.company.name)
        for page in pages:
            for el in page.elements:
                self._paint_element(c, el)
            c.showPage()
        c.save()
        return buf.getvalue()

    @staticmethod
    def _y(y: float) -> float:
        return (PAGE_H - y) * mm

    def _paint_element(self, c: canvas.Canvas, el: Element) -> None:
        if isinstance(el, Text):
            self._draw_text(c, el.text, el.x, el.y, el.size, el.bold, el.color, el.align)
        elif isinstance(el, Box):
            self._draw_box(c, el.x, el.y, el.w, el.h, el.fill, el.stroke)
        elif isinstance(el, Rule):
            c.saveState()
            c.setStrokeColor(HexColor(el.color))
            c.setLineWidth(el.width)
            c.line(el.x1 * mm, self._y(el.y1), el.x2 * mm, self._y(el.y2))
            c.restoreState()
        elif isinstance(el, Checkbox):
            self._draw_checkbox(c, el)
        elif isinstance(el, Picture):
            c.drawImage(
                el.path, el.x * mm, self._y(el.y + el.h), el.w * mm, el.h * mm,
                preserveAspectRatio=True, mask="auto",
            )
        elif isinstance(el, TableRow):
            self._draw_table_row(c, el)

    def _draw_text(self, c, text, x, y, size, bold=False, color=INK, align="left") -> None:
        c.saveState()
        c.setFont(FONT_BOLD if bold else FONT, size)
        c.setFillColor(HexColor(color))
        if align == "center":
            c.drawCentredString(x * mm, self._y(y), text)
        elif align == "right":
            c.drawRightString(x * mm, self._y(y), text)
        else:
            c.drawString(x * mm, self._y(y), text)
        c.restoreState()

    def _draw_box(self, c, x, y, w, h, fill=None, stroke=None, stroke_w=0.5) -> None:
        c.saveState()
        if fill:
            c.setFillColor(HexColor(fill))
        if stroke:
            c.setStrokeColor(HexColor(stroke))
            c.setLineWidth(stroke_w)
        c.rect(x * mm, self._y(y + h), w * mm, h * mm, fill=1 if fill else 0, stroke=1 if stroke else 0)
        c.restoreState()

    def _draw_checkbox(self, c, box: Checkbox) -> None:
        size = 3.0
        top = box.y - 2.6
        self._draw_box(c, box.x, top, size, size, stroke=INK, stroke_w=0.6)
        if box.checked:
            c.saveState()
            c.setStrokeColor(HexColor(BRAND))
            c.setLineWidth(1)
            c.line(box.x * mm, self._y(top), (box.x + size) * mm, self._y(top + size))
            c.line(box.x * mm, self._y(top + size), (box.x + size) * mm, self._y(top))
            c.restoreState()
        self._draw_text(c, box.label, box.x + size + 1.5, box.y, 8, bold=box.checked)

    def _draw_table_row(self, c, row: TableRow) -> None:
        fill = {"head": BRAND, "alt": ROW_ALT, "total": BRAND_PALE}.get(row.style)
        color = {"head": WHITE, "total": BRAND}.get(row.style, INK)
        bold = row.style in ("head", "total")
        _, default = row_font(row.style)
        sizes = row.sizes or (default,) * len(row.cells)

        x = row.x
        for w, text, align, size in zip(row.widths, row.cells, row.aligns, sizes):
            baseline = row.y + row.height / 2 + size * 0.12
            self._draw_box(c, x, row.y, w, row.height, fill=fill, stroke=RULE_GRAY, stroke_w=0.3)
            if text:
                if align == "right":
                    self._draw_text(c, text, x + w - 2, baseline, size, bold, color, "right")
                else:
                    self._draw_text(c, text, x + 2, baseline, size, bold, color)
            x += w
