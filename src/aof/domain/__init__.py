from .models import (
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
    UpdateDescription,
    UpdateQuantity,
    UpdateUnit,
    UpdateUnitPrice,
)
from .errors import AppError, ValidationError, RenderError, SubmissionError

__all__ = [
    "Address",
    "BarterCommodity",
    "Client",
    "CropCycle",
    "Currency",
    "Delivery",
    "FreightPayer",
    "LineItem",
    "Order",
    "PaymentMode",
    "PaymentTerms",
    "PersonType",
    "UpdateDescription",
    "UpdateQuantity",
    "UpdateUnit",
    "UpdateUnitPrice",
    "AppError",
    "ValidationError",
    "RenderError",
    "SubmissionError",
]
