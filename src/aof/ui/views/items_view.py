from __future__ import annotations

import tkinter as tk
from tkinter import ttk
import logging

from aof.domain.formatting import format_money, parse_amount, parse_price
from aof.domain.models import UpdateDescription, UpdateQuantity, UpdateUnit, UpdateUnitPrice
from aof.services.ledger_service import LineItemLedger


log = logging.getLogger(__name__)


class ItemsView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Products")

        self.ledger = LineItemLedger()
        self.total_var = tk.StringVar(value=f"Order total: {format_money(0)}")

        self.e_desc = tk.StringVar()
        self.e_unit = tk.StringVar()
        self.e_qty = tk.StringVar()
        self.e_price = tk.StringVar()
        self._selected_id: str | None = None
        self._loading = False

        self._build()
        self.refresh()

    def _build(self):
        tab = self.frame

        box = ttk.LabelFrame(tab, text="Product lines")
        box.pack(fill="both", expand=True, padx=10, pady=10)

        cols = ("desc", "unit", "qty", "price", "total")
        self.tree = ttk.Treeview(box, columns=cols, show="headings", height=14, selectmode="browse")
        heads = {"desc": "Description", "unit": "Unit", "qty": "Quantity", "price": "Unit price", "total": "Total"}
        widths = {"desc": 440, "unit": 90, "qty": 100, "price": 140, "total": 160}
        for c in cols:
            self.tree.heading(c, text=heads[c])
            self.tree.column(c, width=widths[c], anchor="e" if c in ("qty", "price", "total") else "w")
        self.tree.pack(fill="both", expand=True, padx=10, pady=10)
        self.tree.bind("<<TreeviewSelect>>", self.on_select)

        btnrow = ttk.Frame(box)
        btnrow.pack(fill="x", padx=10, pady=(0, 10))
        ttk.Button(btnrow, text="Add product", command=self.add_item).pack(side="left")
        ttk.Button(btnrow, text="Remove selected", command=self.remove_selected).pack(side="left", padx=10)
        ttk.Label(btnrow, textvariable=self.total_var, style="Total.TLabel").pack(side="right")

        edit = ttk.LabelFrame(tab, text="Edit selected line")
        edit.pack(fill="x", padx=10, pady=(0, 10))

        fields = (
            ("Description", self.e_desc, 48),
            ("Unit (L, Kg...)", self.e_unit, 10),
            ("Quantity", self.e_qty, 10),
            ("Unit price", self.e_price, 14),
        )
        for col, (label, var, width) in enumerate(fields):
            ttk.Label(edit, text=label).grid(row=0, column=col, sticky="w", padx=10, pady=(8, 2))
            ttk.Entry(edit, textvariable=var, width=width).grid(row=1, column=col, sticky="ew", padx=10, pady=(0, 10))
        edit.columnconfigure(0, weight=1)

        self.e_desc.trace_add("write", lambda *_: self._push(UpdateDescription, self.e_desc.get()))
        self.e_unit.trace_add("write", lambda *_: self._push(UpdateUnit, self.e_unit.get()))
        self.e_qty.trace_add("write", lambda *_: self._push(UpdateQuantity, self.e_qty.get()))
        self.e_price.trace_add("write", lambda *_: self._on_price_change())

    def _push(self, command_type, value):
        if self._loading or self._selected_id is None:
            return
        self.ledger.update_item(command_type(self._selected_id, value))
        self.refresh()

    def _on_price_change(self):
        if self._loading or self._selected_id is None:
            return
        text = self.e_price.get()
        try:
            parse_amount(text)
        except ValueError as e:
            self.app.toast(f"{e}; counted as 0.", kind="warn", ms=1500)
        self._push(UpdateUnitPrice, parse_price(text))

    def refresh(self):
        for row in self.tree.get_children():
            self.tree.delete(row)

        for it in self.ledger:
            self.tree.insert("", "end", iid=it.id, values=(
                it.description, it.unit, it.quantity, format_money(it.unit_price), format_money(it.line_total)
            ))

        if self._selected_id and self.tree.exists(self._selected_id):
            self.tree.selection_set(self._selected_id)

        total = self.ledger.grand_total()
        self.total_var.set(f"Order total: {format_money(total)}")
        self.app.on_items_changed(total)

    def on_select(self, _evt=None):
        sel = self.tree.selection()
        if not sel or sel[0] == self._selected_id:
            return
        self._selected_id = sel[0]
        item = self.ledger.get(self._selected_id)
        if item is None:
            return

        self._loading = True
        try:
            self.e_desc.set(item.description)
            self.e_unit.set(item.unit)
            self.e_qty.set(item.quantity)
            self.e_price.set(f"{item.unit_price:.2f}" if item.unit_price else "")
        finally:
            self._loading = False

    def add_item(self):
        item = self.ledger.add_item()
        self._selected_id = None
        self.refresh()
        self.tree.selection_set(item.id)
        self.tree.see(item.id)

    def remove_selected(self):
        sel = self.tree.selection()
        if not sel:
            return
        self.ledger.remove_item(sel[0])
        self._selected_id = None
        self._loading = True
        try:
            for var in (self.e_desc, self.e_unit, self.e_qty, self.e_price):
                var.set("")
        finally:
            self._loading = False
        self.refresh()
        self.app.toast("Product removed.", kind="info", ms=1500)
