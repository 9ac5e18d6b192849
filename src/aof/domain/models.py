from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple, Union


class PersonType(str, Enum):
    INDIVIDUAL = "fisica"
    COMPANY = "juridica"


class PaymentMode(str, Enum):
    CASH = "avista"
    TERM = "aprazo"
    BONUS = "bonificacao"
    BARTER = "troca"


class Currency(str, Enum):
    REAL = "real"
    DOLLAR = "dolar"


class BarterCommodity(str, Enum):
    SOY = "soja"
    CORN = "milho"
    SEED = "semente"


class CropCycle(str, Enum):
    MAIN = "safra"
    SECOND = "safrinha"


class FreightPayer(str, Enum):
    SELLER = "cif"
    BUYER = "fob"


@dataclass(frozen=True)
class LineItem:
    id: str
    description: str = ""
    unit: str = ""
    quantity: str = ""
    unit_price: float = 0.0
    line_total: float = 0.0


@dataclass(frozen=True)
class Address:
    street: str = ""
    postal_code: str = ""
    city: str = ""
    district: str = ""
    state: str = ""


@dataclass(frozen=True)
class Client:
    legal_name: str = ""
    person_type: PersonType = PersonType.COMPANY
    tax_id: str = ""
    registration: str = ""
    contact: str = ""
    phone: str = ""
    email: str = ""


@dataclass(frozen=True)
class PaymentTerms:
    mode: PaymentMode = PaymentMode.CASH
    currency: Currency = Currency.REAL
    due_date: str = ""
    barter_commodity: BarterCommodity = BarterCommodity.SOY
    barter_value: str = ""
    bank_details: str = ""


@dataclass(frozen=True)
class Delivery:
    warehouse_city: str = ""
    warehouse_state: str = ""
    crop_cycle: CropCycle = CropCycle.MAIN
    freight: FreightPayer = FreightPayer.SELLER


@dataclass(frozen=True)
class Order:
    salesperson: str = ""
    order_code: str = ""
    purchase_order_ref: str = ""
    date: str = ""
    client: Client = field(default_factory=Client)
    billing_address: Address = field(default_factory=Address)
    shipping_address: Address = field(default_factory=Address)
    items: Tuple[LineItem, ...] = ()
    payment: PaymentTerms = field(default_factory=PaymentTerms)
    delivery: Delivery = field(default_factory=Delivery)
    notes: str = ""

    @property
    def grand_total(self) -> float:
        return sum((it.line_total for it in self.items), 0.0)


# Line-item edits. Each command carries its own recompute rule in the ledger.

@dataclass(frozen=True)
class UpdateDescription:
    item_id: str
    value: str


@dataclass(frozen=True)
class UpdateUnit:
    item_id: str
    value: str


@dataclass(frozen=True)
class UpdateQuantity:
    item_id: str
    value: str


@dataclass(frozen=True)
class UpdateUnitPrice:
    item_id: str
    value: float


LineItemUpdate = Union[UpdateDescription, UpdateUnit, UpdateQuantity, UpdateUnitPrice]
