from __future__ import annotations

import math
import re
from datetime import datetime

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_quantity(text: object) -> float:
    """
    Parse a quantity typed by the user.

    Reads the leading numeric prefix ("12.5 kg" -> 12.5). Empty text, text
    without a numeric prefix and non-finite values all parse as 0.
    """
    if text is None:
        return 0.0
    if isinstance(text, (int, float)):
        value = float(text)
        return value if math.isfinite(value) else 0.0

    m = _LEADING_NUMBER.match(str(text))
    if not m:
        return 0.0
    value = float(m.group(0))
    return value if math.isfinite(value) else 0.0


def parse_amount(text: str) -> float:
    """Parse a price typed either as 1234.56 or in pt-BR form (1.234,56)."""
    s = (text or "").strip().replace("R$", "").strip()
    if not s:
        return 0.0
    if "," in s:
        s = s.replace(".", "").replace(",", ".")
    try:
        value = float(s)
    except ValueError:
        raise ValueError(f"Invalid amount: {text!r}")
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"Invalid amount: {text!r}")
    return value


def parse_price(text: str) -> float:
    """Unit price for a line item: text that is not a valid amount counts as 0."""
    try:
        return parse_amount(text)
    except ValueError:
        return 0.0


def format_currency(value: float) -> str:
    # 1234.5 -> "1.234,50"
    raw = f"{round(float(value), 2) + 0.0:,.2f}"
    return raw.replace(",", "_").replace(".", ",").replace("_", ".")


def format_money(value: float) -> str:
    return f"R$ {format_currency(value)}"


def format_date(value: str) -> str:
    s = (value or "").strip()
    if not s:
        return ""
    try:
        return datetime.strptime(s, "%Y-%m-%d").strftime("%d/%m/%Y")
    except ValueError:
        return s
