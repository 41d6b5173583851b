from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Date,
    CheckConstraint,
    UniqueConstraint,
    ForeignKey,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Customer(Base):
    __tablename__ = "customers"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    address = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)

    __table_args__ = (
        UniqueConstraint("email", name="uq_customer_email"),
        UniqueConstraint("phone", name="uq_customer_phone"),
    )


class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(255), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    price = Column(Float, nullable=False)
    category = Column(String(100), nullable=False)
    barcode = Column(String(50), nullable=False, index=True)
    status = Column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("barcode", name="uq_product_barcode"),
        CheckConstraint("price >= 0", name="ck_product_price_non_negative"),
        CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
    )


class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"
    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    delivery_address = Column(String(255), nullable=False)
    track_number = Column(String(100), nullable=False, index=True)
    status = Column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("track_number", name="uq_purchase_order_track_number"),
    )


class OrderDetail(Base):
    __tablename__ = "order_details"
    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("purchase_orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    # copied from the product when the line is written, never re-read
    price = Column(Float, nullable=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_detail_quantity_positive"),
    )


class Payment(Base):
    __tablename__ = "payments"
    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False)
    amount = Column(Float, nullable=False)
    payment_method = Column(String(50), nullable=False)
    order_id = Column(Integer, ForeignKey("purchase_orders.id"), nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payment_amount_positive"),
    )
