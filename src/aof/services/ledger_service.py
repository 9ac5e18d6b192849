from __future__ import annotations

from dataclasses import replace
from typing import Iterator, Optional
import logging
import uuid

from aof.domain.formatting import parse_quantity
from aof.domain.models import (
    LineItem,
    LineItemUpdate,
    UpdateDescription,
    UpdateQuantity,
    UpdateUnit,
    UpdateUnitPrice,
)

log = logging.getLogger(__name__)


def new_item_id() -> str:
    return uuid.uuid4().hex


class LineItemLedger:
    """
    Ordered product rows of the order being edited.

    Insertion order is display order. Line totals are recomputed on every
    quantity or unit price edit; the grand total is never cached.
    """

    def __init__(self, id_factory=new_item_id):
        self._items: list[LineItem] = []
        self._new_id = id_factory

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[LineItem]:
        return iter(tuple(self._items))

    @property
    def items(self) -> tuple[LineItem, ...]:
        return tuple(self._items)

    def get(self, item_id: str) -> Optional[LineItem]:
        for it in self._items:
            if it.id == item_id:
                return it
        return None

    def add_item(self) -> LineItem:
        item = LineItem(id=self._new_id())
        self._items.append(item)
        log.debug("item_added id=%s count=%s", item.id, len(self._items))
        return item

    def remove_item(self, item_id: str) -> None:
        self._items = [it for it in self._items if it.id != item_id]

    def update_item(self, command: LineItemUpdate) -> Optional[LineItem]:
        for idx, it in enumerate(self._items):
            if it.id == command.item_id:
                updated = self._apply(it, command)
                self._items[idx] = updated
                return updated
        return None

    @staticmethod
    def _apply(item: LineItem, command: LineItemUpdate) -> LineItem:
        if isinstance(command, UpdateQuantity):
            qty_text = "" if command.value is None else str(command.value)
            return replace(
                item,
                quantity=qty_text,
                line_total=parse_quantity(qty_text) * item.unit_price,
            )
        if isinstance(command, UpdateUnitPrice):
            price = float(command.value)
            return replace(
                item,
                unit_price=price,
                line_total=parse_quantity(item.quantity) * price,
            )
        if isinstance(command, UpdateDescription):
            return replace(item, description=command.value)
        if isinstance(command, UpdateUnit):
            return replace(item, unit=command.value)
        raise TypeError(f"Unsupported line item update: {type(command).__name__}")

    def grand_total(self) -> float:
        return sum((it.line_total for it in self._items), 0.0)
