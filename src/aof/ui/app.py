from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
import logging

from aof.domain.errors import ValidationError
from aof.domain.models import Order
from aof.ui.views.items_view import ItemsView
from aof.ui.views.order_view import OrderView

log = logging.getLogger(__name__)


class App(tk.Tk):
    def __init__(
        self,
        export_service,
        dispatch_service,
        logs_dir: str,
        exports_dir: str,
    ):
        super().__init__()
        self.title("Pedido de Venda")
        self.geometry("1180x760")
        self.minsize(1020, 640)

        self.exports = export_service
        self.dispatch = dispatch_service

        self.logs_dir = logs_dir
        self.exports_dir = exports_dir

        self.status_var = tk.StringVar(value="")
        self._toast_after_id = None

        self._build_styles()

        main = ttk.Frame(self)
        main.pack(fill="both", expand=True, padx=12, pady=(10, 8))

        self.nb = ttk.Notebook(main)
        self.nb.pack(fill="both", expand=True)

        self.order_view = OrderView(self.nb, self)
        self.items_view = ItemsView(self.nb, self)

        self._build_status_bar()
        self.toast("Ready.", kind="info", ms=1200)

    def _build_styles(self):
        style = ttk.Style(self)
        try:
            style.configure("Big.TButton", padding=(14, 10))
            style.configure("Title.TLabel", font=("Segoe UI", 12, "bold"))
            style.configure("Total.TLabel", font=("Segoe UI", 11, "bold"))
        except Exception as e:
            log.exception("UI style setup failed: %s", e)

    def _build_status_bar(self):
        bar = ttk.Frame(self)
        bar.pack(fill="x", padx=12, pady=(0, 10))
        ttk.Label(bar, textvariable=self.status_var).pack(side="left")
        ttk.Label(bar, text=f"Exports: {self.exports_dir}").pack(side="right")

    def toast(self, msg: str, kind: str = "info", ms: int = 2500):
        prefix = {"info": "ℹ ", "success": "✅ ", "warn": "⚠ ", "error": "❌ "}.get(kind, "")
        self.status_var.set(prefix + msg)
        if self._toast_after_id is not None:
            try:
                self.after_cancel(self._toast_after_id)
            except tk.TclError:
                pass
        self._toast_after_id = self.after(ms, lambda: self.status_var.set(""))

    def handle_error(self, context: str, exc: Exception, toast_msg: str):
        if isinstance(exc, ValidationError):
            messagebox.showwarning("Validation", str(exc))
            return
        log.exception("%s: %s", context, exc)
        messagebox.showerror("Error", f"{toast_msg}\n\n{exc}")
        self.toast(toast_msg, kind="error")

    def current_order(self) -> Order:
        return self.order_view.collect(items=self.items_view.ledger.items)

    def on_items_changed(self, total: float):
        self.order_view.show_total(total)
