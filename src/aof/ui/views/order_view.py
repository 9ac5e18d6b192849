from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox, filedialog
from datetime import date
import logging

from aof.domain.formatting import format_money
from aof.domain.models import (
    Address,
    BarterCommodity,
    Client,
    CropCycle,
    Currency,
    Delivery,
    FreightPayer,
    LineItem,
    Order,
    PaymentMode,
    PaymentTerms,
    PersonType,
)


log = logging.getLogger(__name__)


class OrderView:
    def __init__(self, notebook: ttk.Notebook, app):
        self.app = app
        self.frame = ttk.Frame(notebook)
        notebook.add(self.frame, text="Order")

        self.v: dict[str, tk.StringVar] = {}
        self.total_var = tk.StringVar(value=f"Order total: {format_money(0)}")

        self.person = tk.StringVar(value=PersonType.COMPANY.value)
        self.payment = tk.StringVar(value=PaymentMode.CASH.value)
        self.currency = tk.StringVar(value=Currency.REAL.value)
        self.barter = tk.StringVar(value=BarterCommodity.SOY.value)
        self.cycle = tk.StringVar(value=CropCycle.MAIN.value)
        self.freight = tk.StringVar(value=FreightPayer.SELLER.value)

        self._build()
        self.var("date").set(date.today().isoformat())

    def var(self, key: str) -> tk.StringVar:
        if key not in self.v:
            self.v[key] = tk.StringVar()
        return self.v[key]

    def _entry(self, parent, label: str, key: str, row: int, col: int, width: int = 22, colspan: int = 1):
        ttk.Label(parent, text=label).grid(row=row, column=col, columnspan=colspan, sticky="w", padx=8, pady=(6, 0))
        e = ttk.Entry(parent, textvariable=self.var(key), width=width)
        e.grid(row=row + 1, column=col, columnspan=colspan, sticky="ew", padx=8, pady=(0, 6))
        return e

    def _radios(self, parent, var: tk.StringVar, options, row: int, col: int, colspan: int = 1):
        box = ttk.Frame(parent)
        box.grid(row=row, column=col, columnspan=colspan, sticky="w", padx=8, pady=(0, 6))
        for value, label in options:
            ttk.Radiobutton(box, text=label, value=value, variable=var).pack(side="left", padx=(0, 10))
        return box

    def _build(self):
        canvas = tk.Canvas(self.frame, highlightthickness=0)
        vsb = ttk.Scrollbar(self.frame, orient="vertical", command=canvas.yview)
        canvas.configure(yscrollcommand=vsb.set)
        vsb.pack(side="right", fill="y")
        canvas.pack(side="left", fill="both", expand=True)

        body = ttk.Frame(canvas)
        body.bind("<Configure>", lambda _e: canvas.configure(scrollregion=canvas.bbox("all")))
        canvas.create_window((0, 0), window=body, anchor="nw")

        ident = ttk.LabelFrame(body, text="Identification")
        ident.pack(fill="x", padx=10, pady=(10, 6))
        self._entry(ident, "Salesperson *", "salesperson", 0, 0)
        self._entry(ident, "Order code *", "order_code", 0, 1)
        self._entry(ident, "Date (YYYY-MM-DD)", "date", 0, 2, width=14)
        self._entry(ident, "Purchase order", "purchase_order_ref", 0, 3)

        client = ttk.LabelFrame(body, text="Client")
        client.pack(fill="x", padx=10, pady=6)
        self._entry(client, "Legal name", "legal_name", 0, 0, width=60, colspan=3)
        ttk.Label(client, text="Person type").grid(row=2, column=0, sticky="w", padx=8, pady=(6, 0))
        self._radios(client, self.person, [
            (PersonType.INDIVIDUAL.value, "Individual (CPF)"),
            (PersonType.COMPANY.value, "Company (CNPJ)"),
        ], 3, 0)
        self._entry(client, "CNPJ / CPF", "tax_id", 2, 1)
        self._entry(client, "State registration / RG", "registration", 2, 2)
        self._entry(client, "Contact", "contact", 4, 0)
        self._entry(client, "Phone", "phone", 4, 1)
        self._entry(client, "E-mail", "email", 4, 2)

        for prefix, title in (("billing", "Billing address"), ("shipping", "Shipping address")):
            box = ttk.LabelFrame(body, text=title)
            box.pack(fill="x", padx=10, pady=6)
            self._entry(box, "Street", f"{prefix}_street", 0, 0, width=40)
            self._entry(box, "Postal code", f"{prefix}_postal_code", 0, 1, width=12)
            self._entry(box, "City", f"{prefix}_city", 0, 2)
            self._entry(box, "District", f"{prefix}_district", 0, 3)
            self._entry(box, "State", f"{prefix}_state", 0, 4, width=4)

        pay = ttk.LabelFrame(body, text="Payment terms")
        pay.pack(fill="x", padx=10, pady=6)
        self._radios(pay, self.payment, [
            (PaymentMode.CASH.value, "Cash"),
            (PaymentMode.TERM.value, "Term"),
            (PaymentMode.BONUS.value, "Bonus in kind"),
            (PaymentMode.BARTER.value, "Barter"),
        ], 0, 0, colspan=3)

        self.term_box = ttk.Frame(pay)
        ttk.Label(self.term_box, text="Currency").grid(row=0, column=0, sticky="w", padx=8, pady=(6, 0))
        self._radios(self.term_box, self.currency, [
            (Currency.REAL.value, "Real (R$)"),
            (Currency.DOLLAR.value, "Dollar (US$)"),
        ], 1, 0)
        self._entry(self.term_box, "Due date (DD/MM/YYYY)", "due_date", 0, 1)

        self.barter_box = ttk.Frame(pay)
        ttk.Label(self.barter_box, text="Barter commodity").grid(row=0, column=0, sticky="w", padx=8, pady=(6, 0))
        self._radios(self.barter_box, self.barter, [
            (BarterCommodity.SOY.value, "Soybean grain"),
            (BarterCommodity.CORN.value, "Corn grain"),
            (BarterCommodity.SEED.value, "Soybean seed"),
        ], 1, 0)
        self._entry(self.barter_box, "Value", "barter_value", 0, 1)

        self._entry(pay, "Bank details", "bank_details", 3, 0, width=60, colspan=3)
        self.payment.trace_add("write", lambda *_: self._sync_payment_details())
        self._sync_payment_details()

        deliv = ttk.LabelFrame(body, text="Delivery")
        deliv.pack(fill="x", padx=10, pady=6)
        self._entry(deliv, "Warehouse city", "warehouse_city", 0, 0)
        self._entry(deliv, "State", "warehouse_state", 0, 1, width=4)
        ttk.Label(deliv, text="Crop cycle").grid(row=0, column=2, sticky="w", padx=8, pady=(6, 0))
        self._radios(deliv, self.cycle, [
            (CropCycle.MAIN.value, "Main season"),
            (CropCycle.SECOND.value, "Second season"),
        ], 1, 2)
        ttk.Label(deliv, text="Freight").grid(row=0, column=3, sticky="w", padx=8, pady=(6, 0))
        self._radios(deliv, self.freight, [
            (FreightPayer.SELLER.value, "CIF"),
            (FreightPayer.BUYER.value, "FOB"),
        ], 1, 3)

        notes = ttk.LabelFrame(body, text="Notes")
        notes.pack(fill="x", padx=10, pady=6)
        self.notes = tk.Text(notes, width=100, height=4)
        self.notes.pack(fill="x", padx=8, pady=8)

        actions = ttk.Frame(body)
        actions.pack(fill="x", padx=10, pady=(6, 12))
        ttk.Label(actions, textvariable=self.total_var, style="Total.TLabel").pack(side="left")
        self.send_btn = ttk.Button(actions, text="Generate PDF and send", style="Big.TButton", command=self.send_order)
        self.send_btn.pack(side="right")
        ttk.Button(actions, text="Download PDF", style="Big.TButton", command=self.download_pdf)\
            .pack(side="right", padx=10)

    def _sync_payment_details(self):
        self.term_box.grid_forget()
        self.barter_box.grid_forget()
        mode = self.payment.get()
        if mode == PaymentMode.TERM.value:
            self.term_box.grid(row=1, column=0, columnspan=3, sticky="w")
        elif mode == PaymentMode.BARTER.value:
            self.barter_box.grid(row=1, column=0, columnspan=3, sticky="w")

    def show_total(self, total: float):
        self.total_var.set(f"Order total: {format_money(total)}")

    def _address(self, prefix: str) -> Address:
        g = lambda k: self.var(f"{prefix}_{k}").get().strip()
        return Address(
            street=g("street"),
            postal_code=g("postal_code"),
            city=g("city"),
            district=g("district"),
            state=g("state").upper(),
        )

    def collect(self, items: tuple[LineItem, ...] = ()) -> Order:
        g = lambda k: self.var(k).get().strip()
        return Order(
            salesperson=g("salesperson"),
            order_code=g("order_code"),
            purchase_order_ref=g("purchase_order_ref"),
            date=g("date"),
            client=Client(
                legal_name=g("legal_name"),
                person_type=PersonType(self.person.get()),
                tax_id=g("tax_id"),
                registration=g("registration"),
                contact=g("contact"),
                phone=g("phone"),
                email=g("email"),
            ),
            billing_address=self._address("billing"),
            shipping_address=self._address("shipping"),
            items=tuple(items),
            payment=PaymentTerms(
                mode=PaymentMode(self.payment.get()),
                currency=Currency(self.currency.get()),
                due_date=g("due_date"),
                barter_commodity=BarterCommodity(self.barter.get()),
                barter_value=g("barter_value"),
                bank_details=g("bank_details"),
            ),
            delivery=Delivery(
                warehouse_city=g("warehouse_city"),
                warehouse_state=g("warehouse_state").upper(),
                crop_cycle=CropCycle(self.cycle.get()),
                freight=FreightPayer(self.freight.get()),
            ),
            notes=self.notes.get("1.0", "end").strip(),
        )

    # ---------- actions ----------
    def download_pdf(self):
        order = self.app.current_order()
        try:
            file_name, document = self.app.exports.build(order)
        except Exception as e:
            self.app.handle_error("PDF export failed", e, "PDF export failed.")
            return

        target = filedialog.asksaveasfilename(
            title="Save order PDF",
            defaultextension=".pdf",
            initialdir=self.app.exports_dir,
            initialfile=file_name,
            filetypes=[("PDF", "*.pdf")],
        )
        if not target:
            return

        try:
            result = self.app.exports.write(file_name, document, target)
        except OSError as e:
            self.app.handle_error("PDF save failed", e, "PDF save failed.")
            return
        self.app.toast(f"PDF generated: {result.path.name}", kind="success")

    def send_order(self):
        order = self.app.current_order()

        self.send_btn.state(["disabled"])
        self.app.config(cursor="watch")
        self.app.update_idletasks()
        try:
            result = self.app.dispatch.submit(order)
        except Exception as e:
            self.app.handle_error("Order submission failed", e, "Order submission failed.")
            return
        finally:
            self.app.config(cursor="")
            self.send_btn.state(["!disabled"])

        if result.delivered:
            messagebox.showinfo("Sent", f"{result.message}\n\nA copy was saved to:\n{result.path}")
            self.app.toast(result.message, kind="success")
        else:
            messagebox.showwarning("Saved locally", f"{result.message}\n\n{result.path}")
            self.app.toast(result.message, kind="warn", ms=4000)
