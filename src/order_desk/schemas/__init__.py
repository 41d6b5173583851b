"""Schemas package re-exports for easy imports from `order_desk.schemas`."""
from .schemas import (
    Customer,
    CustomerBase,
    CustomerCreate,
    Product,
    ProductBase,
    ProductCreate,
    OrderDetail,
    OrderDetailInput,
    PurchaseOrder,
    PurchaseOrderBase,
    PurchaseOrderCreate,
    PurchaseOrderUpdate,
    PurchaseOrderAggregate,
    Payment,
    PaymentBase,
    PaymentCreate,
    load,
)

__all__ = [
    "Customer",
    "CustomerBase",
    "CustomerCreate",
    "Product",
    "ProductBase",
    "ProductCreate",
    "OrderDetail",
    "OrderDetailInput",
    "PurchaseOrder",
    "PurchaseOrderBase",
    "PurchaseOrderCreate",
    "PurchaseOrderUpdate",
    "PurchaseOrderAggregate",
    "Payment",
    "PaymentBase",
    "PaymentCreate",
    "load",
]
