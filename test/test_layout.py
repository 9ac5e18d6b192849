from pathlib import Path

from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth

from conftest import make_items, make_order

from aof.domain.models import (
    BarterCommodity,
    Client,
    Currency,
    Order,
    PaymentMode,
    PaymentTerms,
    PersonType,
)
from aof.services.layout_service import (
    DISCLAIMER,
    FONT_BOLD,
    MAX_Y,
    Text,
    Checkbox,
    DocumentLayout,
    Picture,
    TableRow,
)

ALL_SECTIONS = [
    "header",
    "metadata",
    "client",
    "billing_address",
    "shipping_address",
    "items",
    "payment",
    "delivery",
    "disclaimer",
    "signatures",
]


def test_empty_order_renders_every_section_without_errors():
    doc = DocumentLayout().render(Order())

    assert doc.content.startswith(b"%PDF")
    assert doc.page_count == 1
    assert doc.sections() == ALL_SECTIONS
    assert DISCLAIMER in doc.texts()
    assert "Assinatura do Cliente" in doc.texts()


def test_empty_items_render_zero_data_rows_and_zero_total():
    doc = DocumentLayout().render(make_order())

    assert doc.table_rows("body", "alt") == []
    totals = doc.table_rows("total")
    assert len(totals) == 1
    assert totals[0].cells[-1] == "R$ 0,00"


def test_padding_rows_are_blank_when_configured():
    doc = DocumentLayout(min_item_rows=5).render(make_order(items=make_items(("Adubo", "kg", "2", 10.0))))

    assert len(doc.table_rows("body", "alt")) == 1
    blanks = doc.table_rows("blank")
    assert len(blanks) == 4
    assert all(cell == "" for row in blanks for cell in row.cells)


def test_item_rows_follow_insertion_order_and_currency_format():
    items = make_items(("Fertilizer", "kg", "10", 25.5), ("Bioestimulante", "L", "1000", 12.34))
    doc = DocumentLayout().render(make_order(items=items))

    rows = doc.table_rows("body", "alt")
    assert [r.cells[0] for r in rows] == ["Fertilizer", "Bioestimulante"]
    assert rows[0].cells[1:] == ("kg", "10", "R$ 25,50", "R$ 255,00")
    assert rows[1].cells[4] == "R$ 12.340,00"
    assert doc.table_rows("total")[0].cells[-1] == "R$ 12.595,00"


def test_barter_marks_only_barter_and_selected_commodity():
    order = make_order(payment=PaymentTerms(mode=PaymentMode.BARTER, barter_commodity=BarterCommodity.CORN))
    doc = DocumentLayout().render(order)

    assert doc.marked("payment_mode") == ["Troca"]
    assert doc.marked("barter_commodity") == ["Milho em Grãos (ML$)"]
    unmarked = {c.label for c in doc.checkboxes("payment_mode") + doc.checkboxes("barter_commodity") if not c.checked}
    assert unmarked == {"À Vista", "À Prazo", "Bonificação", "Soja em Grãos (SJ$)", "Semente de Soja (SM$)"}
    assert doc.checkboxes("currency") == []


def test_term_shows_currency_and_due_date_only_for_term():
    order = make_order(payment=PaymentTerms(mode=PaymentMode.TERM, currency=Currency.DOLLAR, due_date="30/04/2025"))
    doc = DocumentLayout().render(order)

    assert doc.marked("payment_mode") == ["À Prazo"]
    assert doc.marked("currency") == ["Dólar (US$)"]
    assert "30/04/2025" in doc.texts()
    assert doc.checkboxes("barter_commodity") == []

    cash = DocumentLayout().render(make_order(payment=PaymentTerms(due_date="30/04/2025")))
    assert "30/04/2025" not in cash.texts()
    assert cash.marked("payment_mode") == ["À Vista"]


def test_person_type_and_delivery_indicators():
    order = make_order(client=Client(legal_name="João da Silva", person_type=PersonType.INDIVIDUAL, tax_id="123"))
    doc = DocumentLayout().render(order)

    assert doc.marked("person_type") == ["Física"]
    assert "CPF" in doc.texts()
    assert "CNPJ" not in doc.texts()
    assert doc.marked("crop_cycle") == ["Safra"]
    assert doc.marked("freight") == ["CIF"]


def test_date_is_rendered_in_day_month_year():
    doc = DocumentLayout().render(make_order(date="2024-03-05"))
    assert "05/03/2024" in doc.texts()

    blank = DocumentLayout().render(make_order(date=""))
    assert "05/03/2024" not in blank.texts()
    labels = list(blank.elements(Text))
    idx = next(i for i, t in enumerate(labels) if t.text == "DATA")
    assert labels[idx + 1].text == ""


def test_notes_section_only_when_notes_present():
    without = DocumentLayout().render(make_order(notes="   "))
    with_notes = DocumentLayout().render(make_order(notes="Entregar pela manhã"))

    assert "notes" not in without.sections()
    assert "notes" in with_notes.sections()
    assert "Entregar pela manhã" in with_notes.texts()


def test_render_is_deterministic():
    items = make_items(("Adubo", "kg", "3", 9.9))
    order = make_order(items=items, notes="obs", date="2024-01-02")
    layout = DocumentLayout()

    a = layout.render(order)
    b = layout.render(order)

    assert a.pages == b.pages
    assert a.content == b.content


def test_long_item_list_continues_table_on_next_page():
    items = make_items(*[(f"Produto {i}", "L", "1", 1.0) for i in range(60)])
    doc = DocumentLayout().render(make_order(items=items))

    assert doc.page_count >= 2
    assert doc.sections() == ALL_SECTIONS
    assert len(doc.table_rows("body", "alt")) == 60
    assert doc.table_rows("total")[0].cells[-1] == "R$ 60,00"

    for page in doc.pages:
        for row in (el for el in page.elements if isinstance(el, TableRow)):
            assert row.y + row.height <= MAX_Y
        if page.number > 1 and any(isinstance(el, TableRow) for el in page.elements):
            first_row = next(el for el in page.elements if isinstance(el, TableRow))
            assert first_row.style == "head"


def test_sections_after_table_move_to_new_page_when_they_do_not_fit():
    items = make_items(*[(f"Produto {i}", "L", "1", 1.0) for i in range(25)])
    doc = DocumentLayout().render(make_order(items=items, notes="linha\n" * 10))

    assert doc.page_count == 2
    for name in ("payment", "delivery", "notes", "disclaimer", "signatures"):
        owners = [p.number for p in doc.pages if name in p.sections]
        assert len(owners) == 1


def test_missing_logo_falls_back_to_text(tmp_path: Path):
    doc = DocumentLayout(logo_path=tmp_path / "nope.png").render(make_order())

    assert list(doc.elements(Picture)) == []
    assert doc.texts().count("AGROVITA") == 2
    assert doc.content.startswith(b"%PDF")


def test_unreadable_logo_falls_back_to_text(tmp_path: Path):
    bogus = tmp_path / "logo.png"
    bogus.write_text("not an image", encoding="utf-8")

    doc = DocumentLayout(logo_path=bogus).render(make_order())

    assert list(doc.elements(Picture)) == []
    assert doc.sections() == ALL_SECTIONS


def test_header_carries_order_code_and_salesperson():
    doc = DocumentLayout().render(make_order(salesperson="Ana", order_code="X1"))

    assert "PEDIDO DE VENDA" in doc.texts()
    assert "Código: X1" in doc.texts()
    assert "Vendedor: Ana" in doc.texts()


def test_checkboxes_are_exclusive_per_group():
    doc = DocumentLayout().render(make_order(payment=PaymentTerms(mode=PaymentMode.BONUS)))

    for group in ("person_type", "payment_mode", "crop_cycle", "freight"):
        boxes = doc.checkboxes(group)
        assert boxes and all(isinstance(b, Checkbox) for b in boxes)
        assert sum(b.checked for b in boxes) == 1


def test_long_notes_are_cut_with_ellipsis_on_one_page():
    notes = "\n".join(f"linha {i}" for i in range(100))
    doc = DocumentLayout().render(make_order(notes=notes))

    lines = [t for t in doc.texts() if t.startswith("linha")]
    assert len(lines) == 55
    assert lines[-1].endswith("...")
    assert "linha 99" not in doc.texts()


def test_multi_million_total_fits_its_cell():
    items = make_items(("X", "t", "1000000", 123456.78))
    doc = DocumentLayout().render(make_order(items=items))

    (total,) = doc.table_rows("total")
    assert total.cells[-1] == "R$ 123.456.780.000,00"
    for text, width, size in zip(total.cells, total.widths, total.sizes):
        assert stringWidth(text, FONT_BOLD, size) <= (width - 4) * mm
    assert total.sizes[-1] < 10


def test_small_total_keeps_full_size():
    doc = DocumentLayout().render(make_order(items=make_items(("Adubo", "kg", "3", 9.9))))

    (total,) = doc.table_rows("total")
    assert total.sizes[-1] == 10


def test_text_outside_latin1_renders_without_error():
    order = make_order(notes="日本語 😀", client=Client(legal_name="Fazenda ✓"))
    doc = DocumentLayout().render(order)

    assert doc.content.startswith(b"%PDF")
    assert "日本語 😀" in doc.texts()
