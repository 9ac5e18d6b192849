import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def make_order(**overrides):
    from aof.domain.models import Order

    base = {"salesperson": "Ana", "order_code": "X1"}
    base.update(overrides)
    return Order(**base)


def make_items(*rows):
    """rows: (description, unit, quantity, unit_price)"""
    from aof.domain.models import UpdateDescription, UpdateQuantity, UpdateUnit, UpdateUnitPrice
    from aof.services.ledger_service import LineItemLedger

    ledger = LineItemLedger()
    for desc, unit, qty, price in rows:
        it = ledger.add_item()
        ledger.update_item(UpdateDescription(it.id, desc))
        ledger.update_item(UpdateUnit(it.id, unit))
        ledger.update_item(UpdateQuantity(it.id, qty))
        ledger.update_item(UpdateUnitPrice(it.id, price))
    return ledger.items
