from .order_view import OrderView
from .items_view import ItemsView

__all__ = ["OrderView", "ItemsView"]
