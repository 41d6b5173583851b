import logging

from sqlalchemy.orm import Session

from .. import models, schemas, validators
from ..errors import ConflictError, NotFoundError
from .transaction import StepResult, run_or_raise, store_errors

logger = logging.getLogger(__name__)


def get_customer(db: Session, customer_id):
    """Return the customer or raise NotFoundError."""
    customer_id = validators.require_id(customer_id, "customer id")
    with store_errors(f"retrieve customer {customer_id}"):
        customer = db.query(models.Customer).filter(models.Customer.id == customer_id).first()
    if not customer:
        raise NotFoundError(f"Customer with ID {customer_id} not found. Please add the customer first.")
    return customer


def get_customers(db: Session):
    with store_errors("retrieve customers"):
        return db.query(models.Customer).all()


def _check_contact_unique(db: Session, customer: schemas.CustomerBase, exclude_id=None) -> StepResult:
    validators.ensure_unique(db, models.Customer.email, customer.email, "Email already exists.", exclude_id)
    validators.ensure_unique(db, models.Customer.phone, customer.phone, "Phone number already exists.", exclude_id)
    return StepResult.success()


def create_customer(db: Session, customer) -> int:
    customer = schemas.load(schemas.CustomerCreate, customer)

    def insert(db):
        db_customer = models.Customer(**customer.model_dump())
        db.add(db_customer)
        db.flush()
        return StepResult.success(db_customer.id)

    _, customer_id = run_or_raise(
        db, [lambda db: _check_contact_unique(db, customer), insert], "create customer"
    )
    logger.info("Created customer %s", customer_id)
    return customer_id


def update_customer(db: Session, customer_id, customer) -> int:
    """Replace all fields of a customer. Returns the number of rows updated."""
    customer_id = validators.require_id(customer_id, "customer id")
    customer = schemas.load(schemas.CustomerCreate, customer)

    def apply(db):
        rows = (
            db.query(models.Customer)
            .filter(models.Customer.id == customer_id)
            .update(customer.model_dump())
        )
        if rows == 0:
            return StepResult.failure(NotFoundError(f"Customer with ID {customer_id} not found. Update failed."))
        return StepResult.success(rows)

    _, rows = run_or_raise(
        db,
        [lambda db: _check_contact_unique(db, customer, exclude_id=customer_id), apply],
        f"update customer {customer_id}",
    )
    return rows


def delete_customer(db: Session, customer_id) -> int:
    """Delete a customer that no purchase order refers to."""
    customer_id = validators.require_id(customer_id, "customer id")

    def not_referenced(db):
        order = db.query(models.PurchaseOrder.id).filter(models.PurchaseOrder.customer_id == customer_id).first()
        if order:
            return StepResult.failure(
                ConflictError(f"Customer with ID {customer_id} has purchase orders and cannot be deleted.")
            )
        return StepResult.success()

    def remove(db):
        rows = db.query(models.Customer).filter(models.Customer.id == customer_id).delete()
        if rows == 0:
            return StepResult.failure(
                NotFoundError(f"Customer with ID {customer_id} not found. Please check the ID and try again.")
            )
        return StepResult.success(rows)

    _, rows = run_or_raise(db, [not_referenced, remove], f"delete customer {customer_id}")
    logger.info("Deleted customer %s", customer_id)
    return rows
