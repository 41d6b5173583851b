import logging

from sqlalchemy.orm import Session

from .. import models, schemas, validators
from ..errors import NotFoundError
from .transaction import StepResult, run_or_raise, store_errors

logger = logging.getLogger(__name__)


def payment_exists_for_order(db: Session, order_id) -> bool:
    """True if at least one payment was recorded against the order."""
    order_id = validators.require_id(order_id, "order id")
    return db.query(models.Payment.id).filter(models.Payment.order_id == order_id).first() is not None


def get_payment(db: Session, payment_id):
    payment_id = validators.require_id(payment_id, "payment id")
    with store_errors(f"retrieve payment {payment_id}"):
        payment = db.query(models.Payment).filter(models.Payment.id == payment_id).first()
    if not payment:
        raise NotFoundError(f"Payment with ID {payment_id} not found.")
    return payment


def get_payments(db: Session):
    with store_errors("retrieve payments"):
        return db.query(models.Payment).all()


def _order_exists(db: Session, order_id: int) -> StepResult:
    if db.query(models.PurchaseOrder.id).filter(models.PurchaseOrder.id == order_id).first() is None:
        return StepResult.failure(NotFoundError(f"Order with ID {order_id} does not exist."))
    return StepResult.success()


def create_payment(db: Session, payment) -> int:
    payment = schemas.load(schemas.PaymentCreate, payment)

    def insert(db):
        db_payment = models.Payment(**payment.model_dump())
        db.add(db_payment)
        db.flush()
        return StepResult.success(db_payment.id)

    _, payment_id = run_or_raise(
        db, [lambda db: _order_exists(db, payment.order_id), insert], "create payment"
    )
    logger.info("Recorded payment %s for order %s", payment_id, payment.order_id)
    return payment_id


def update_payment(db: Session, payment_id, payment) -> int:
    payment_id = validators.require_id(payment_id, "payment id")
    payment = schemas.load(schemas.PaymentCreate, payment)

    def apply(db):
        rows = db.query(models.Payment).filter(models.Payment.id == payment_id).update(payment.model_dump())
        if rows == 0:
            return StepResult.failure(NotFoundError(f"Payment with ID {payment_id} not found."))
        return StepResult.success(rows)

    _, rows = run_or_raise(
        db, [lambda db: _order_exists(db, payment.order_id), apply], f"update payment {payment_id}"
    )
    return rows


def delete_payment(db: Session, payment_id) -> int:
    payment_id = validators.require_id(payment_id, "payment id")

    def remove(db):
        rows = db.query(models.Payment).filter(models.Payment.id == payment_id).delete()
        if rows == 0:
            return StepResult.failure(NotFoundError(f"Payment with ID {payment_id} not found."))
        return StepResult.success(rows)

    (rows,) = run_or_raise(db, [remove], f"delete payment {payment_id}")
    return rows
