"""Pytest fixtures for unit tests."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from order_desk import crud
from order_desk.models import Base


@pytest.fixture(scope="function")
def db():
    """Create an in-memory SQLite database for unit testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def customer_id(db):
    """A stored customer, id 1."""
    return crud.create_customer(
        db,
        {"name": "Ada Lovelace", "address": "1 Mill Ln", "email": "ada@example.com", "phone": "5551234"},
    )


@pytest.fixture
def product_id(db):
    """A stored product priced 9.99, id 1."""
    return crud.create_product(
        db,
        {
            "name": "Widget",
            "description": "Standard widget",
            "stock": 10,
            "price": 9.99,
            "category": "Hardware",
            "barcode": "W-1",
            "status": "available",
        },
    )
