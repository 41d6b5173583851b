"""CRUD package re-exports for easy imports from `order_desk.crud`."""
from .customers import (
    get_customer,
    get_customers,
    create_customer,
    update_customer,
    delete_customer,
)
from .products import (
    get_product,
    get_products,
    create_product,
    update_product,
    delete_product,
)
from .orders import (
    create_order,
    create_order_with_details,
    add_order_detail,
    get_order,
    get_orders,
    get_order_details,
    update_order,
    delete_order,
)
from .payments import (
    payment_exists_for_order,
    get_payment,
    get_payments,
    create_payment,
    update_payment,
    delete_payment,
)
from .transaction import StepResult, run_in_transaction

__all__ = [
    "get_customer",
    "get_customers",
    "create_customer",
    "update_customer",
    "delete_customer",
    "get_product",
    "get_products",
    "create_product",
    "update_product",
    "delete_product",
    "create_order",
    "create_order_with_details",
    "add_order_detail",
    "get_order",
    "get_orders",
    "get_order_details",
    "update_order",
    "delete_order",
    "payment_exists_for_order",
    "get_payment",
    "get_payments",
    "create_payment",
    "update_payment",
    "delete_payment",
    "StepResult",
    "run_in_transaction",
]

# re-export exceptions
from ..errors import OrderDeskError, ValidationError, NotFoundError, ConflictError, StoreError
__all__.extend(["OrderDeskError", "ValidationError", "NotFoundError", "ConflictError", "StoreError"])
