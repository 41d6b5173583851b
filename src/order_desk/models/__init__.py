"""Models package re-exports for easy imports from `order_desk.models`."""
from .models import Base, Customer, Product, PurchaseOrder, OrderDetail, Payment

__all__ = ["Base", "Customer", "Product", "PurchaseOrder", "OrderDetail", "Payment"]
