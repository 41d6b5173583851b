"""Unit tests for the purchase order aggregate (orders + order details)."""
from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from order_desk import models, crud
from order_desk.crud import orders as orders_crud


def order_data(customer_id, track_number="T-1", **overrides):
    data = {
        "date": "2024-05-01",
        "customer_id": customer_id,
        "delivery_address": "1 Mill Ln",
        "track_number": track_number,
        "status": "pending",
    }
    data.update(overrides)
    return data


def second_product(db, price=4.5, barcode="G-1"):
    return crud.create_product(
        db,
        {
            "name": "Gadget",
            "description": "Small gadget",
            "stock": 5,
            "price": price,
            "category": "Hardware",
            "barcode": barcode,
            "status": "available",
        },
    )


class TestCreateOrder:
    """Tests for create_order."""

    def test_create_order_returns_id(self, db, customer_id):
        order_id = crud.create_order(db, order_data(customer_id))
        assert order_id == 1
        stored = db.query(models.PurchaseOrder).one()
        assert stored.track_number == "T-1"
        assert stored.date == date(2024, 5, 1)

    def test_unknown_customer_raises_not_found(self, db):
        """An unknown customer fails and leaves the order table unchanged."""
        with pytest.raises(crud.NotFoundError, match="Customer with ID 99 does not exist"):
            crud.create_order(db, order_data(99))
        assert db.query(models.PurchaseOrder).count() == 0

    def test_non_numeric_customer_id_raises_validation_error(self, db):
        with pytest.raises(crud.ValidationError, match="customer_id"):
            crud.create_order(db, order_data("abc"))

    @pytest.mark.parametrize("field", ["date", "delivery_address", "track_number", "status", "customer_id"])
    def test_empty_field_raises_validation_error(self, db, customer_id, field):
        with pytest.raises(crud.ValidationError, match=field):
            crud.create_order(db, {**order_data(customer_id), field: ""})
        assert db.query(models.PurchaseOrder).count() == 0

    def test_bad_date_raises_validation_error(self, db, customer_id):
        with pytest.raises(crud.ValidationError, match="date"):
            crud.create_order(db, order_data(customer_id, date="01/05/2024"))

    def test_duplicate_track_number_raises_conflict(self, db, customer_id):
        crud.create_order(db, order_data(customer_id))
        with pytest.raises(crud.ConflictError, match="Track number T-1 already exists"):
            crud.create_order(db, order_data(customer_id))
        assert db.query(models.PurchaseOrder).count() == 1

    def test_track_number_checked_before_customer(self, db, customer_id):
        crud.create_order(db, order_data(customer_id))
        with pytest.raises(crud.ConflictError):
            crud.create_order(db, order_data(99))


class TestCreateOrderWithDetails:
    """Tests for the single-call create of an order and its lines."""

    def test_order_and_lines_written_together(self, db, customer_id, product_id):
        gadget = second_product(db)
        order_id = crud.create_order_with_details(
            db,
            order_data(customer_id),
            [{"product_id": product_id, "quantity": 2}, {"product_id": gadget, "quantity": "3"}],
        )
        order = crud.get_order(db, order_id)
        assert [(d.product_id, d.quantity, d.price) for d in order.order_details] == [
            (product_id, 2, 9.99),
            (gadget, 3, 4.5),
        ]

    def test_without_lines(self, db, customer_id):
        order_id = crud.create_order_with_details(db, order_data(customer_id), [])
        assert crud.get_order(db, order_id).order_details == []

    def test_unknown_product_writes_nothing(self, db, customer_id, product_id):
        with pytest.raises(crud.NotFoundError, match="Product with ID 404"):
            crud.create_order_with_details(
                db,
                order_data(customer_id),
                [{"product_id": product_id, "quantity": 1}, {"product_id": 404, "quantity": 1}],
            )
        assert db.query(models.PurchaseOrder).count() == 0
        assert db.query(models.OrderDetail).count() == 0

    def test_bad_quantity_rejected_before_store(self, db, customer_id, product_id):
        with pytest.raises(crud.ValidationError, match="quantity must be a positive integer"):
            crud.create_order_with_details(db, order_data(customer_id), [{"product_id": product_id, "quantity": 0}])
        assert db.query(models.PurchaseOrder).count() == 0

    def test_line_with_id_rejected(self, db, customer_id, product_id):
        with pytest.raises(crud.ValidationError):
            crud.create_order_with_details(
                db, order_data(customer_id), [{"id": 1, "product_id": product_id, "quantity": 1}]
            )


class TestAddOrderDetail:
    """Tests for add_order_detail."""

    def test_price_is_captured_from_product(self, db, customer_id, product_id):
        order_id = crud.create_order(db, order_data(customer_id))
        detail_id = crud.add_order_detail(db, order_id, product_id, 2)
        detail = db.query(models.OrderDetail).filter_by(id=detail_id).one()
        assert detail.order_id == order_id
        assert detail.quantity == 2
        assert detail.price == 9.99

    def test_superscript_quantity_raises_validation_error(self, db, customer_id, product_id):
        order_id = crud.create_order(db, order_data(customer_id))
        with pytest.raises(crud.ValidationError, match="quantity must be a positive integer"):
            crud.add_order_detail(db, order_id, product_id, "²")
        assert db.query(models.OrderDetail).count() == 0

    def test_later_price_change_does_not_touch_existing_line(self, db, customer_id, product_id):
        """Line prices are a snapshot taken at insertion."""
        order_id = crud.create_order(db, order_data(customer_id))
        crud.add_order_detail(db, order_id, product_id, 2)

        product = crud.get_product(db, product_id)
        crud.update_product(
            db,
            product_id,
            {
                "name": product.name,
                "description": product.description,
                "stock": product.stock,
                "price": 12.5,
                "category": product.category,
                "barcode": product.barcode,
                "status": product.status,
            },
        )

        assert [d.price for d in crud.get_order_details(db, order_id)] == [9.99]
        # a line added after the change picks up the new price
        crud.add_order_detail(db, order_id, product_id, 1)
        assert [d.price for d in crud.get_order_details(db, order_id)] == [9.99, 12.5]

    def test_unknown_order_writes_nothing(self, db, product_id):
        with pytest.raises(crud.NotFoundError, match="Purchase order with ID 5 not found"):
            crud.add_order_detail(db, 5, product_id, 1)
        assert db.query(models.OrderDetail).count() == 0

    def test_unknown_product(self, db, customer_id):
        order_id = crud.create_order(db, order_data(customer_id))
        with pytest.raises(crud.NotFoundError, match="Product with ID 8 not found"):
            crud.add_order_detail(db, order_id, 8, 1)

    @pytest.mark.parametrize("quantity", [0, -1, "two", 1.5, ""])
    def test_bad_quantity(self, db, customer_id, product_id, quantity):
        order_id = crud.create_order(db, order_data(customer_id))
        with pytest.raises(crud.ValidationError, match="quantity"):
            crud.add_order_detail(db, order_id, product_id, quantity)
        assert db.query(models.OrderDetail).count() == 0


class TestReadOrder:
    """Tests for get_order, get_orders and get_order_details."""

    def test_get_order_attaches_details_in_insertion_order(self, db, customer_id, product_id):
        gadget = second_product(db)
        order_id = crud.create_order(db, order_data(customer_id))
        first = crud.add_order_detail(db, order_id, gadget, 1)
        second = crud.add_order_detail(db, order_id, product_id, 4)

        order = crud.get_order(db, order_id)
        assert order.id == order_id
        assert order.customer_id == customer_id
        assert [d.id for d in order.order_details] == [first, second]

    def test_get_order_twice_is_identical(self, db, customer_id, product_id):
        order_id = crud.create_order(db, order_data(customer_id))
        crud.add_order_detail(db, order_id, product_id, 2)
        crud.add_order_detail(db, order_id, product_id, 3)

        assert crud.get_order(db, order_id) == crud.get_order(db, order_id)

    def test_get_order_not_found(self, db):
        with pytest.raises(crud.NotFoundError, match="Purchase order with ID 999 not found"):
            crud.get_order(db, 999)

    @pytest.mark.parametrize("order_id", ["abc", "", None, -1, 0, True, "²"])
    def test_get_order_invalid_id(self, db, order_id):
        with pytest.raises(crud.ValidationError):
            crud.get_order(db, order_id)

    def test_get_orders_has_no_details(self, db, customer_id, product_id):
        first = crud.create_order(db, order_data(customer_id, "T-1"))
        second = crud.create_order(db, order_data(customer_id, "T-2"))
        crud.add_order_detail(db, first, product_id, 1)

        orders = crud.get_orders(db)
        assert sorted(o.id for o in orders) == [first, second]
        assert all(isinstance(o, models.PurchaseOrder) for o in orders)

    def test_get_order_details_empty(self, db, customer_id):
        order_id = crud.create_order(db, order_data(customer_id))
        assert crud.get_order_details(db, order_id) == []

    def test_get_order_details_unknown_order(self, db):
        """Consistent with get_order: an unknown order is an error, not an empty list."""
        with pytest.raises(crud.NotFoundError):
            crud.get_order_details(db, 31)


class TestUpdateOrder:
    """Tests for update_order."""

    def test_update_scalars(self, db, customer_id):
        order_id = crud.create_order(db, order_data(customer_id))
        rows = crud.update_order(db, order_id, order_data(customer_id, status="shipped", date="2024-06-01"))
        assert rows == 1
        order = crud.get_order(db, order_id)
        assert order.status == "shipped"
        assert order.date == date(2024, 6, 1)

    def test_reusing_own_track_number_is_allowed(self, db, customer_id):
        order_id = crud.create_order(db, order_data(customer_id, "T-1"))
        assert crud.update_order(db, order_id, order_data(customer_id, "T-1", status="paid")) == 1

    def test_taking_other_orders_track_number_conflicts(self, db, customer_id):
        first = crud.create_order(db, order_data(customer_id, "T-1"))
        crud.create_order(db, order_data(customer_id, "T-2"))

        with pytest.raises(crud.ConflictError, match="Track number T-2 already exists"):
            crud.update_order(db, first, order_data(customer_id, "T-2"))
        assert crud.get_order(db, first).track_number == "T-1"

    def test_unknown_order(self, db, customer_id):
        with pytest.raises(crud.NotFoundError, match="Purchase order with ID 77 not found"):
            crud.update_order(db, 77, order_data(customer_id))

    def test_unknown_customer(self, db, customer_id):
        order_id = crud.create_order(db, order_data(customer_id))
        with pytest.raises(crud.NotFoundError, match="Customer with ID 5"):
            crud.update_order(db, order_id, order_data(5))

    def test_appends_and_replaces_lines(self, db, customer_id, product_id):
        gadget = second_product(db)
        order_id = crud.create_order(db, order_data(customer_id))
        existing = crud.add_order_detail(db, order_id, product_id, 1)

        data = order_data(customer_id)
        data["order_details"] = [
            {"id": existing, "product_id": gadget, "quantity": 6},
            {"product_id": product_id, "quantity": 2},
        ]
        crud.update_order(db, order_id, data)

        details = crud.get_order_details(db, order_id)
        assert [(d.id, d.product_id, d.quantity, d.price) for d in details] == [
            (existing, gadget, 6, 4.5),
            (existing + 1, product_id, 2, 9.99),
        ]

    def test_line_of_another_order_cannot_be_redirected(self, db, customer_id, product_id):
        """A line is only replaced within its own order; everything rolls back otherwise."""
        first = crud.create_order(db, order_data(customer_id, "T-1"))
        second = crud.create_order(db, order_data(customer_id, "T-2"))
        foreign = crud.add_order_detail(db, second, product_id, 1)

        data = order_data(customer_id, "T-1", status="changed")
        data["order_details"] = [
            {"product_id": product_id, "quantity": 3},
            {"id": foreign, "product_id": product_id, "quantity": 9},
        ]
        with pytest.raises(crud.NotFoundError, match=f"Order detail with ID {foreign} not found"):
            crud.update_order(db, first, data)

        assert crud.get_order(db, first).status == "pending"
        assert crud.get_order_details(db, first) == []
        assert [d.quantity for d in crud.get_order_details(db, second)] == [1]

    def test_unknown_product_rolls_back_scalar_changes(self, db, customer_id, product_id):
        order_id = crud.create_order(db, order_data(customer_id))
        data = order_data(customer_id, status="changed")
        data["order_details"] = [{"product_id": 404, "quantity": 1}]

        with pytest.raises(crud.NotFoundError):
            crud.update_order(db, order_id, data)
        assert crud.get_order(db, order_id).status == "pending"

    def test_store_failure_mid_update_rolls_back(self, db, customer_id, product_id, monkeypatch):
        order_id = crud.create_order(db, order_data(customer_id))

        def broken(db, order_id, lines):
            raise OperationalError("INSERT INTO order_details", {}, Exception("disk I/O error"))

        monkeypatch.setattr(orders_crud, "_write_details", broken)
        with pytest.raises(crud.StoreError) as excinfo:
            crud.update_order(db, order_id, order_data(customer_id, status="changed"))

        assert "disk I/O" not in str(excinfo.value)
        assert crud.get_order(db, order_id).status == "pending"

    def test_invalid_id(self, db, customer_id):
        with pytest.raises(crud.ValidationError):
            crud.update_order(db, "x1", order_data(customer_id))


class TestDeleteOrder:
    """Tests for delete_order."""

    def test_delete_removes_order_and_all_lines(self, db, customer_id, product_id):
        keep = crud.create_order(db, order_data(customer_id, "T-keep"))
        crud.add_order_detail(db, keep, product_id, 1)
        order_id = crud.create_order(db, order_data(customer_id))
        for quantity in (1, 2, 3):
            crud.add_order_detail(db, order_id, product_id, quantity)

        assert crud.delete_order(db, order_id) == 1

        assert db.query(models.PurchaseOrder).filter_by(id=order_id).count() == 0
        assert db.query(models.OrderDetail).filter_by(order_id=order_id).count() == 0
        assert db.query(models.OrderDetail).filter_by(order_id=keep).count() == 1

    def test_paid_order_cannot_be_deleted(self, db, customer_id, product_id):
        order_id = crud.create_order(db, order_data(customer_id))
        crud.add_order_detail(db, order_id, product_id, 2)
        crud.create_payment(
            db, {"date": "2024-05-02", "amount": 19.98, "payment_method": "card", "order_id": order_id}
        )

        with pytest.raises(crud.ConflictError, match="already paid"):
            crud.delete_order(db, order_id)

        assert db.query(models.PurchaseOrder).count() == 1
        assert db.query(models.OrderDetail).count() == 1
        assert db.query(models.Payment).count() == 1

    def test_unknown_order(self, db):
        with pytest.raises(crud.NotFoundError, match="Purchase order with ID 12 not found"):
            crud.delete_order(db, 12)

    def test_store_failure_mid_delete_removes_nothing(self, db, customer_id, product_id, monkeypatch):
        order_id = crud.create_order(db, order_data(customer_id))
        crud.add_order_detail(db, order_id, product_id, 1)
        crud.add_order_detail(db, order_id, product_id, 2)

        def broken(db, order_id):
            raise OperationalError("DELETE FROM purchase_orders", {}, Exception("disk I/O error"))

        monkeypatch.setattr(orders_crud, "_delete_order_row", broken)
        with pytest.raises(crud.StoreError, match="Unable to delete purchase order"):
            crud.delete_order(db, order_id)

        assert db.query(models.PurchaseOrder).count() == 1
        assert db.query(models.OrderDetail).filter_by(order_id=order_id).count() == 2

    def test_invalid_id(self, db):
        with pytest.raises(crud.ValidationError):
            crud.delete_order(db, "one")


class TestOrderScenario:
    """Customer, product, order, one line, then delete."""

    def test_full_lifecycle(self, db):
        customer_id = crud.create_customer(
            db, {"name": "Ada Lovelace", "address": "1 Mill Ln", "email": "ada@example.com", "phone": "5551234"}
        )
        product_id = crud.create_product(
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
        order_id = crud.create_order(db, order_data(customer_id, "T-1"))
        assert (customer_id, product_id, order_id) == (1, 1, 1)

        crud.add_order_detail(db, order_id, product_id, 2)
        assert [d.price for d in crud.get_order(db, order_id).order_details] == [9.99]

        assert crud.delete_order(db, order_id) == 1
        with pytest.raises(crud.NotFoundError):
            crud.get_order(db, order_id)
        assert db.query(models.OrderDetail).count() == 0
        assert crud.get_customer(db, customer_id).id == 1
        assert crud.get_product(db, product_id).id == 1
