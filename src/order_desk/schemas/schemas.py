from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from typing import List, Optional
from datetime import date as Date

from .. import validators
from ..errors import ValidationError


class CustomerBase(BaseModel):
    name: str
    address: str
    email: str
    phone: str

    @field_validator("name", "address", "email", "phone", mode="before")
    @classmethod
    def not_empty(cls, v, info):
        return validators.required_text(v, info.field_name)

    @field_validator("name")
    @classmethod
    def alphabetic_name(cls, v):
        return validators.matches(
            v, validators.NAME_RE, "The name must contain only alphabetic characters (no numbers)."
        )

    @field_validator("email")
    @classmethod
    def valid_email(cls, v):
        return validators.matches(v, validators.EMAIL_RE, "Invalid email format.")

    @field_validator("phone")
    @classmethod
    def digits_only_phone(cls, v):
        return validators.matches(
            v, validators.PHONE_RE, "Phone number must contain only digits and be at most 20 characters long."
        )


class CustomerCreate(CustomerBase):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Ada Lovelace",
                "address": "1 Mill Ln",
                "email": "ada@example.com",
                "phone": "5551234",
            }
        }
    )


class Customer(CustomerBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class ProductBase(BaseModel):
    name: str
    description: str
    stock: int
    price: float
    category: str
    barcode: str
    status: str

    @field_validator("name", "description", "stock", "price", "category", "barcode", "status", mode="before")
    @classmethod
    def not_empty(cls, v, info):
        return validators.required_text(v, info.field_name)

    @field_validator("stock", "price")
    @classmethod
    def not_negative(cls, v, info):
        return validators.non_negative(v, info.field_name)


class ProductCreate(ProductBase):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Widget",
                "description": "Standard widget",
                "stock": 10,
                "price": 9.99,
                "category": "Hardware",
                "barcode": "W-1",
                "status": "available",
            }
        }
    )


class Product(ProductBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class OrderDetailInput(BaseModel):
    """A line item as supplied by the caller.

    With an `id` it replaces that existing line; without one it is appended.
    The price is never taken from the caller.
    """
    id: Optional[int] = None
    product_id: int
    quantity: int

    @field_validator("id", mode="before")
    @classmethod
    def valid_detail_id(cls, v):
        if v is None or v == "":
            return None
        return validators.require_id(v, "order detail id")

    @field_validator("product_id", mode="before")
    @classmethod
    def valid_product_id(cls, v):
        return validators.require_id(v, "product_id")

    @field_validator("quantity", mode="before")
    @classmethod
    def valid_quantity(cls, v):
        return validators.positive_int(v, "quantity")


class OrderDetail(BaseModel):
    id: int
    order_id: int
    product_id: int
    quantity: int
    price: float

    model_config = ConfigDict(from_attributes=True)


class PurchaseOrderBase(BaseModel):
    date: Date
    customer_id: int
    delivery_address: str
    track_number: str
    status: str

    @field_validator("date", "delivery_address", "track_number", "status", mode="before")
    @classmethod
    def not_empty(cls, v, info):
        return validators.required_text(v, info.field_name)

    @field_validator("customer_id", mode="before")
    @classmethod
    def numeric_customer_id(cls, v):
        validators.required_text(v, "customer_id")
        return validators.require_id(v, "customer_id")


class PurchaseOrderCreate(PurchaseOrderBase):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "date": "2024-05-01",
                "customer_id": 1,
                "delivery_address": "1 Mill Ln",
                "track_number": "T-1",
                "status": "pending",
            }
        }
    )


class PurchaseOrderUpdate(PurchaseOrderBase):
    order_details: List[OrderDetailInput] = Field(default_factory=list)


class PurchaseOrder(PurchaseOrderBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class PurchaseOrderAggregate(PurchaseOrder):
    order_details: List[OrderDetail] = Field(default_factory=list)


class PaymentBase(BaseModel):
    date: Date
    amount: float
    payment_method: str
    order_id: int

    @field_validator("date", "amount", "payment_method", "order_id", mode="before")
    @classmethod
    def not_empty(cls, v, info):
        return validators.required_text(v, info.field_name)

    @field_validator("order_id", mode="before")
    @classmethod
    def numeric_order_id(cls, v):
        return validators.require_id(v, "order_id")

    @field_validator("amount")
    @classmethod
    def positive_amount(cls, v):
        return validators.positive(v, "amount")


class PaymentCreate(PaymentBase):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {"date": "2024-05-02", "amount": 19.98, "payment_method": "card", "order_id": 1}
        }
    )


class Payment(PaymentBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


def _describe(error: dict) -> str:
    cause = error.get("ctx", {}).get("error")
    if isinstance(cause, ValidationError):
        return str(cause)
    field = ".".join(str(part) for part in error["loc"])
    return f"{field}: {error['msg']}"


def load(schema_cls, data):
    """Validate `data` (a dict or schema instance) into `schema_cls`.

    pydantic failures are re-raised as `ValidationError` carrying readable
    messages, so callers only ever see the application's error kinds.
    """
    if isinstance(data, schema_cls):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump()
    if not isinstance(data, dict):
        raise ValidationError(f"Expected a mapping of fields, got {type(data).__name__}.")
    try:
        return schema_cls.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError("; ".join(_describe(err) for err in e.errors())) from None
