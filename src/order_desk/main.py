"""Command-line entry point and the interactive menus."""
import logging

import click

from . import crud, database, validators
from .errors import OrderDeskError
from .logging_config import setup_logging

logger = logging.getLogger(__name__)

ORDER_FIELDS = [
    ("date", "Order date (YYYY-MM-DD)"),
    ("customer_id", "Customer ID"),
    ("delivery_address", "Delivery address"),
    ("track_number", "Tracking number"),
    ("status", "Status"),
]


def _ask(label: str) -> str:
    # empty answers are allowed through so validation can report them
    return click.prompt(label, default="", show_default=False)


def _collect(fields):
    return {key: _ask(label) for key, label in fields}


def _menu(title: str, options) -> str:
    click.echo(f"\n--- {title} ---")
    for number, option in enumerate(options, 1):
        click.echo(f"{number}. {option}")
    return _ask("Choose an option").strip()


def _show(row, columns) -> None:
    click.echo("  " + ", ".join(f"{column}={getattr(row, column)}" for column in columns))


class EntityMenu:
    """Add / view all / view one / edit / delete submenu for one entity."""

    title = ""
    noun = ""
    article = "a"
    fields = []
    columns = ()

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def run(self) -> None:
        options = [
            f"Add {self.article} {self.noun}",
            f"View all {self.noun}s",
            f"View {self.article} {self.noun} by ID",
            f"Edit {self.article} {self.noun}",
            f"Delete {self.article} {self.noun}",
            "Return to main menu",
        ]
        actions = {"1": self.add, "2": self.view_all, "3": self.view_one, "4": self.edit, "5": self.remove}
        while True:
            choice = _menu(self.title, options)
            if choice == "6":
                return
            action = actions.get(choice)
            if action is None:
                click.echo("Invalid option. Please try again.")
                continue
            try:
                action()
            except OrderDeskError as e:
                click.echo(f"Error: {e}")

    def add(self) -> None:
        data = _collect(self.fields)
        with database.get_db(self.session_factory) as db:
            new_id = self.create(db, data)
        click.echo(f"{self.noun.capitalize()} successfully added. ID: {new_id}")

    def view_all(self) -> None:
        with database.get_db(self.session_factory) as db:
            rows = self.list_all(db)
            if not rows:
                click.echo(f"No {self.noun}s found.")
            for row in rows:
                _show(row, self.columns)

    def view_one(self) -> None:
        row_id = _ask(f"ID of the {self.noun} to view")
        with database.get_db(self.session_factory) as db:
            _show(self.get_one(db, row_id), self.columns)

    def edit(self) -> None:
        row_id = _ask(f"ID of the {self.noun} to edit")
        data = _collect(self.fields)
        with database.get_db(self.session_factory) as db:
            self.update(db, row_id, data)
        click.echo(f"{self.noun.capitalize()} successfully updated.")

    def remove(self) -> None:
        row_id = _ask(f"ID of the {self.noun} to delete")
        with database.get_db(self.session_factory) as db:
            self.delete(db, row_id)
        click.echo(f"{self.noun.capitalize()} successfully deleted.")


class CustomerMenu(EntityMenu):
    title = "Customer Menu"
    noun = "customer"
    fields = [("name", "Customer name"), ("address", "Address"), ("email", "Email"), ("phone", "Phone")]
    columns = ("id", "name", "address", "email", "phone")
    create = staticmethod(crud.create_customer)
    list_all = staticmethod(crud.get_customers)
    get_one = staticmethod(crud.get_customer)
    update = staticmethod(crud.update_customer)
    delete = staticmethod(crud.delete_customer)


class ProductMenu(EntityMenu):
    title = "Product Menu"
    noun = "product"
    fields = [
        ("name", "Product name"),
        ("description", "Description"),
        ("stock", "Stock"),
        ("price", "Price"),
        ("category", "Category"),
        ("barcode", "Barcode"),
        ("status", "Status"),
    ]
    columns = ("id", "name", "description", "stock", "price", "category", "barcode", "status")
    create = staticmethod(crud.create_product)
    list_all = staticmethod(crud.get_products)
    get_one = staticmethod(crud.get_product)
    update = staticmethod(crud.update_product)
    delete = staticmethod(crud.delete_product)


class PaymentMenu(EntityMenu):
    title = "Payment Menu"
    noun = "payment"
    fields = [
        ("date", "Payment date (YYYY-MM-DD)"),
        ("amount", "Amount"),
        ("payment_method", "Payment method"),
        ("order_id", "Order ID"),
    ]
    columns = ("id", "date", "amount", "payment_method", "order_id")
    create = staticmethod(crud.create_payment)
    list_all = staticmethod(crud.get_payments)
    get_one = staticmethod(crud.get_payment)
    update = staticmethod(crud.update_payment)
    delete = staticmethod(crud.delete_payment)


class OrderMenu(EntityMenu):
    """Orders are edited together with their lines before anything is saved."""

    title = "Order Menu"
    noun = "order"
    article = "an"
    fields = ORDER_FIELDS
    columns = ("id", "date", "customer_id", "delivery_address", "track_number", "status")
    detail_columns = ("id", "product_id", "quantity", "price")
    list_all = staticmethod(crud.get_orders)
    delete = staticmethod(crud.delete_order)

    def _ask_detail(self, with_id: bool = False):
        """Prompt for one line; returns None (after printing why) if it is unusable."""
        detail = {}
        if with_id:
            detail["id"] = _ask("ID of the detail to modify")
        product_id = _ask("Product ID")
        try:
            with database.get_db(self.session_factory) as db:
                product = crud.get_product(db, product_id)
                click.echo(f"Current price: {product.price}")
            quantity = validators.positive_int(_ask("Quantity"), "quantity")
        except OrderDeskError as e:
            click.echo(f"Error: {e}")
            return None
        detail.update(product_id=product_id, quantity=quantity)
        return detail

    def add(self) -> None:
        data = _collect(self.fields)
        with database.get_db(self.session_factory) as db:
            crud.get_customer(db, data["customer_id"])
        click.echo("Order data saved. You can now add details.")

        details = []
        while True:
            choice = _menu("Order Details Menu", ["Add an order detail", "Save and exit", "Exit without saving"])
            if choice == "1":
                detail = self._ask_detail()
                if detail:
                    details.append(detail)
                    click.echo("Order detail added.")
            elif choice == "2":
                with database.get_db(self.session_factory) as db:
                    order_id = crud.create_order_with_details(db, data, details)
                click.echo(f"Order successfully saved. ID: {order_id}")
                return
            elif choice == "3":
                click.echo("Order creation cancelled.")
                return
            else:
                click.echo("Invalid option. Please try again.")

    def view_one(self) -> None:
        order_id = _ask("ID of the order to view")
        with database.get_db(self.session_factory) as db:
            order = crud.get_order(db, order_id)
        _show(order, self.columns)
        if not order.order_details:
            click.echo("  (no order details)")
        for detail in order.order_details:
            _show(detail, self.detail_columns)

    def edit(self) -> None:
        order_id = validators.require_id(_ask("ID of the order to edit"), "purchase order id")
        with database.get_db(self.session_factory) as db:
            crud.get_order(db, order_id)
        data = _collect(self.fields)
        data["order_details"] = []

        while True:
            choice = _menu(
                "Edit Order Details",
                [
                    "View current details",
                    "Add a new order detail",
                    "Edit an existing detail",
                    "Save changes and exit",
                    "Cancel changes and exit",
                ],
            )
            if choice == "1":
                with database.get_db(self.session_factory) as db:
                    for detail in crud.get_order_details(db, order_id):
                        _show(detail, self.detail_columns)
            elif choice in ("2", "3"):
                detail = self._ask_detail(with_id=choice == "3")
                if detail:
                    data["order_details"].append(detail)
                    click.echo("Order detail recorded.")
            elif choice == "4":
                with database.get_db(self.session_factory) as db:
                    crud.update_order(db, order_id, data)
                click.echo("Order updated successfully.")
                return
            elif choice == "5":
                click.echo("Order changes cancelled.")
                return
            else:
                click.echo("Invalid option. Please try again.")


def run_shell(session_factory) -> None:
    menus = {"1": CustomerMenu, "2": ProductMenu, "3": OrderMenu, "4": PaymentMenu}
    while True:
        choice = _menu(
            "Main Menu",
            ["Manage Customers", "Manage Products", "Manage Orders", "Manage Payments", "Exit"],
        )
        if choice == "5":
            click.echo("Exiting the system...")
            return
        menu = menus.get(choice)
        if menu is None:
            click.echo("Invalid option. Please try again.")
            continue
        menu(session_factory).run()


@click.group(invoke_without_command=True)
@click.option("--database-url", envvar="DATABASE_URL", default=None, help="SQLAlchemy database URL.")
@click.option("--log-level", envvar="LOG_LEVEL", default=None, help="Logging level (default WARNING).")
@click.pass_context
def cli(ctx: click.Context, database_url, log_level) -> None:
    """Order Desk: customers, products, purchase orders and payments."""
    setup_logging(log_level)
    if ctx.obj is None:
        engine = database.create_db_engine(database_url)
        database.init_db(engine)
        ctx.obj = {"session_factory": database.make_session_factory(engine)}
    if ctx.invoked_subcommand is None:
        ctx.invoke(shell)


@cli.command()
@click.pass_obj
def shell(obj) -> None:
    """Run the interactive menus."""
    logger.debug("Starting interactive shell")
    run_shell(obj["session_factory"])


if __name__ == "__main__":
    cli()
