import logging

from sqlalchemy.orm import Session

from .. import models, schemas, validators
from ..errors import ConflictError, NotFoundError
from .transaction import StepResult, run_or_raise, store_errors

logger = logging.getLogger(__name__)

BARCODE_TAKEN = "Barcode already exists. Please use a unique barcode."


def get_product(db: Session, product_id):
    """Return the product or raise NotFoundError."""
    product_id = validators.require_id(product_id, "product id")
    with store_errors(f"retrieve product {product_id}"):
        product = db.query(models.Product).filter(models.Product.id == product_id).first()
    if not product:
        raise NotFoundError(f"Product with ID {product_id} not found.")
    return product


def get_products(db: Session):
    with store_errors("retrieve products"):
        return db.query(models.Product).all()


def create_product(db: Session, product) -> int:
    product = schemas.load(schemas.ProductCreate, product)

    def barcode_free(db):
        validators.ensure_unique(db, models.Product.barcode, product.barcode, BARCODE_TAKEN)
        return StepResult.success()

    def insert(db):
        db_product = models.Product(**product.model_dump())
        db.add(db_product)
        db.flush()
        return StepResult.success(db_product.id)

    _, product_id = run_or_raise(db, [barcode_free, insert], "create product")
    logger.info("Created product %s", product_id)
    return product_id


def update_product(db: Session, product_id, product) -> int:
    """Replace all fields of a product. Existing order lines keep their price."""
    product_id = validators.require_id(product_id, "product id")
    product = schemas.load(schemas.ProductCreate, product)

    def barcode_free(db):
        validators.ensure_unique(db, models.Product.barcode, product.barcode, BARCODE_TAKEN, exclude_id=product_id)
        return StepResult.success()

    def apply(db):
        rows = db.query(models.Product).filter(models.Product.id == product_id).update(product.model_dump())
        if rows == 0:
            return StepResult.failure(NotFoundError(f"Product with ID {product_id} not found."))
        return StepResult.success(rows)

    _, rows = run_or_raise(db, [barcode_free, apply], f"update product {product_id}")
    return rows


def delete_product(db: Session, product_id) -> int:
    """Delete a product that no order line refers to."""
    product_id = validators.require_id(product_id, "product id")

    def not_referenced(db):
        line = db.query(models.OrderDetail.id).filter(models.OrderDetail.product_id == product_id).first()
        if line:
            return StepResult.failure(
                ConflictError(f"Product with ID {product_id} is used by order details and cannot be deleted.")
            )
        return StepResult.success()

    def remove(db):
        rows = db.query(models.Product).filter(models.Product.id == product_id).delete()
        if rows == 0:
            return StepResult.failure(NotFoundError(f"Product with ID {product_id} not found."))
        return StepResult.success(rows)

    _, rows = run_or_raise(db, [not_referenced, remove], f"delete product {product_id}")
    logger.info("Deleted product %s", product_id)
    return rows
