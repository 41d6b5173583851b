"""Purchase orders and their line items, handled as one unit.

Every write below runs through `run_in_transaction`: guards first, then the
statements, and a rollback as soon as any step fails. Line prices are copied
from the product when the line is written and never re-derived afterwards.
"""
import logging
from typing import Iterable, List

from sqlalchemy.orm import Session

from .. import models, schemas, validators
from ..errors import ConflictError, NotFoundError, ValidationError
from .payments import payment_exists_for_order
from .transaction import StepResult, run_or_raise, store_errors

logger = logging.getLogger(__name__)


# Steps. Each returns a StepResult and leaves commit/rollback to the caller.

def _track_number_free(db: Session, track_number: str, exclude_id=None) -> StepResult:
    validators.ensure_unique(
        db,
        models.PurchaseOrder.track_number,
        track_number,
        f"Track number {track_number} already exists.",
        exclude_id,
    )
    return StepResult.success()


def _customer_exists(db: Session, customer_id: int) -> StepResult:
    if db.query(models.Customer.id).filter(models.Customer.id == customer_id).first() is None:
        return StepResult.failure(NotFoundError(f"Customer with ID {customer_id} does not exist."))
    return StepResult.success()


def _order_exists(db: Session, order_id: int) -> StepResult:
    if db.query(models.PurchaseOrder.id).filter(models.PurchaseOrder.id == order_id).first() is None:
        return StepResult.failure(NotFoundError(f"Purchase order with ID {order_id} not found."))
    return StepResult.success()


def _snapshot_price(db: Session, product_id: int) -> StepResult:
    product = db.query(models.Product).filter(models.Product.id == product_id).first()
    if not product:
        return StepResult.failure(NotFoundError(f"Product with ID {product_id} not found."))
    return StepResult.success(product.price)


def _insert_order(db: Session, order: schemas.PurchaseOrderBase) -> StepResult:
    db_order = models.PurchaseOrder(
        date=order.date,
        customer_id=order.customer_id,
        delivery_address=order.delivery_address,
        track_number=order.track_number,
        status=order.status,
    )
    db.add(db_order)
    db.flush()
    return StepResult.success(db_order.id)


def _insert_detail(db: Session, order_id: int, product_id: int, quantity: int) -> StepResult:
    price = _snapshot_price(db, product_id)
    if not price.ok:
        return price
    detail = models.OrderDetail(order_id=order_id, product_id=product_id, quantity=quantity, price=price.value)
    db.add(detail)
    db.flush()
    return StepResult.success(detail.id)


def _replace_detail(db: Session, order_id: int, detail_id: int, product_id: int, quantity: int) -> StepResult:
    price = _snapshot_price(db, product_id)
    if not price.ok:
        return price
    # order_id in the filter keeps a line from being moved to another order
    rows = (
        db.query(models.OrderDetail)
        .filter(models.OrderDetail.id == detail_id, models.OrderDetail.order_id == order_id)
        .update({"product_id": product_id, "quantity": quantity, "price": price.value})
    )
    if rows == 0:
        return StepResult.failure(
            NotFoundError(f"Order detail with ID {detail_id} not found in purchase order {order_id}.")
        )
    return StepResult.success(rows)


def _write_details(db: Session, order_id: int, lines: Iterable[schemas.OrderDetailInput]) -> StepResult:
    written = []
    for line in lines:
        if line.id is None:
            result = _insert_detail(db, order_id, line.product_id, line.quantity)
        else:
            result = _replace_detail(db, order_id, line.id, line.product_id, line.quantity)
        if not result.ok:
            return result
        written.append(result.value)
    return StepResult.success(written)


def _update_scalars(db: Session, order_id: int, order: schemas.PurchaseOrderBase) -> StepResult:
    rows = (
        db.query(models.PurchaseOrder)
        .filter(models.PurchaseOrder.id == order_id)
        .update(
            {
                "date": order.date,
                "customer_id": order.customer_id,
                "delivery_address": order.delivery_address,
                "track_number": order.track_number,
                "status": order.status,
            }
        )
    )
    if rows == 0:
        return StepResult.failure(NotFoundError(f"Purchase order with ID {order_id} not found."))
    return StepResult.success(rows)


def _not_paid(db: Session, order_id: int) -> StepResult:
    if payment_exists_for_order(db, order_id):
        return StepResult.failure(ConflictError(f"Order {order_id} is already paid and cannot be deleted."))
    return StepResult.success()


def _delete_details(db: Session, order_id: int) -> StepResult:
    rows = db.query(models.OrderDetail).filter(models.OrderDetail.order_id == order_id).delete()
    return StepResult.success(rows)


def _delete_order_row(db: Session, order_id: int) -> StepResult:
    rows = db.query(models.PurchaseOrder).filter(models.PurchaseOrder.id == order_id).delete()
    if rows == 0:
        return StepResult.failure(NotFoundError(f"Purchase order with ID {order_id} not found."))
    return StepResult.success(rows)


def _details_of(db: Session, order_id: int) -> List[models.OrderDetail]:
    return (
        db.query(models.OrderDetail)
        .filter(models.OrderDetail.order_id == order_id)
        .order_by(models.OrderDetail.id)
        .all()
    )


# Operations

def create_order(db: Session, order) -> int:
    """Insert a purchase order without lines and return its id.

    Fails with ValidationError for missing fields or a non-numeric customer id,
    ConflictError for a taken track number and NotFoundError for an unknown
    customer. Nothing is written on failure.
    """
    order = schemas.load(schemas.PurchaseOrderCreate, order)
    _, _, order_id = run_or_raise(
        db,
        [
            lambda db: _track_number_free(db, order.track_number),
            lambda db: _customer_exists(db, order.customer_id),
            lambda db: _insert_order(db, order),
        ],
        "create purchase order",
    )
    logger.info("Created purchase order %s", order_id)
    return order_id


def create_order_with_details(db: Session, order, details) -> int:
    """Insert a purchase order and all of its lines in one transaction."""
    order = schemas.load(schemas.PurchaseOrderCreate, order)
    lines = [schemas.load(schemas.OrderDetailInput, d) for d in details or []]
    if any(line.id is not None for line in lines):
        raise ValidationError("Details of a new order cannot reference existing detail ids.")

    def insert_aggregate(db):
        created = _insert_order(db, order)
        if not created.ok:
            return created
        written = _write_details(db, created.value, lines)
        if not written.ok:
            return written
        return created

    _, _, order_id = run_or_raise(
        db,
        [
            lambda db: _track_number_free(db, order.track_number),
            lambda db: _customer_exists(db, order.customer_id),
            insert_aggregate,
        ],
        "create purchase order",
    )
    logger.info("Created purchase order %s with %d detail(s)", order_id, len(lines))
    return order_id


def add_order_detail(db: Session, order_id, product_id, quantity) -> int:
    """Append a line to an existing order in its own transaction; returns the detail id."""
    quantity = validators.positive_int(quantity, "quantity")
    order_id = validators.require_id(order_id, "purchase order id")
    product_id = validators.require_id(product_id, "product_id")
    _, detail_id = run_or_raise(
        db,
        [
            lambda db: _order_exists(db, order_id),
            lambda db: _insert_detail(db, order_id, product_id, quantity),
        ],
        f"add order detail to purchase order {order_id}",
    )
    return detail_id


def get_order(db: Session, order_id) -> schemas.PurchaseOrderAggregate:
    """Return the order with its lines, ordered by detail id."""
    order_id = validators.require_id(order_id, "purchase order id")
    with store_errors(f"retrieve purchase order {order_id}"):
        db_order = db.query(models.PurchaseOrder).filter(models.PurchaseOrder.id == order_id).first()
        if not db_order:
            raise NotFoundError(f"Purchase order with ID {order_id} not found.")
        details = _details_of(db, order_id)
    order = schemas.PurchaseOrder.model_validate(db_order)
    return schemas.PurchaseOrderAggregate(
        **order.model_dump(),
        order_details=[schemas.OrderDetail.model_validate(d) for d in details],
    )


def get_orders(db: Session):
    """All order rows, without lines."""
    with store_errors("retrieve purchase orders"):
        return db.query(models.PurchaseOrder).all()


def get_order_details(db: Session, order_id) -> List[models.OrderDetail]:
    """Lines of an existing order, ordered by id. Unknown orders raise NotFoundError like `get_order`."""
    order_id = validators.require_id(order_id, "purchase order id")
    with store_errors(f"retrieve order details for purchase order {order_id}"):
        exists = _order_exists(db, order_id)
        if not exists.ok:
            raise exists.error
        return _details_of(db, order_id)


def update_order(db: Session, order_id, data) -> int:
    """Update the order fields and apply `data["order_details"]` atomically.

    Lines with an `id` replace that line of this order, lines without one are
    appended. Returns the number of order rows updated (1).
    """
    order_id = validators.require_id(order_id, "purchase order id")
    order = schemas.load(schemas.PurchaseOrderUpdate, data)
    _, _, rows, _ = run_or_raise(
        db,
        [
            lambda db: _track_number_free(db, order.track_number, exclude_id=order_id),
            lambda db: _customer_exists(db, order.customer_id),
            lambda db: _update_scalars(db, order_id, order),
            lambda db: _write_details(db, order_id, order.order_details),
        ],
        f"update purchase order {order_id}",
    )
    logger.info("Updated purchase order %s (%d detail(s) written)", order_id, len(order.order_details))
    return rows


def delete_order(db: Session, order_id) -> int:
    """Delete an unpaid order and its lines. Returns the number of order rows deleted (1)."""
    order_id = validators.require_id(order_id, "purchase order id")
    _, removed_details, rows = run_or_raise(
        db,
        [
            lambda db: _not_paid(db, order_id),
            lambda db: _delete_details(db, order_id),
            lambda db: _delete_order_row(db, order_id),
        ],
        f"delete purchase order {order_id}",
    )
    logger.info("Deleted purchase order %s and %d detail(s)", order_id, removed_details)
    return rows
