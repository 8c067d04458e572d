# Command line front end for the inventory API
import getpass
import logging

import typer
from tabulate import tabulate

import config
from client import (
    ClientError,
    InventoryClient,
    SessionContext,
    analytics_rows,
    analytics_summary,
    filter_products,
    page_range,
    render_bar,
    stock_status,
    total_pages,
    validate_product_form,
    validate_signup_form,
)
from schemas import PRODUCT_TYPES

cli = typer.Typer(help="Inventory management client")

state = {"base_url": config.INVENTORY_API_URL, "session_file": None}


@cli.callback()
def main(
    base_url: str = typer.Option(config.INVENTORY_API_URL, help="API base URL"),
    session_file: str = typer.Option(None, help="Where the login token is kept"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    logging.basicConfig(level=logging.DEBUG if verbose else config.LOG_LEVEL)
    state["base_url"] = base_url
    state["session_file"] = session_file


def _client():
    if state["session_file"]:
        session = SessionContext.load(state["session_file"])
    else:
        session = SessionContext.load()
    return InventoryClient(session, base_url=state["base_url"])


def _fail(message):
    typer.echo(f"❌ {message}", err=True)
    raise typer.Exit(1)


def _show_errors(errors):
    for field, message in errors.items():
        typer.echo(f"  {field}: {message}", err=True)
    raise typer.Exit(1)


# ------------------------------------------------------------
# Auth
# ------------------------------------------------------------

@cli.command()
def signup(username: str, email: str = typer.Option("", help="Optional email address")):
    """Create an account and log in."""
    password = getpass.getpass("Password: ")
    confirm = getpass.getpass("Confirm password: ")
    errors = validate_signup_form(
        {"username": username, "email": email, "password": password, "confirm_password": confirm}
    )
    if errors:
        _show_errors(errors)
    try:
        _client().signup(username, password, email=email or None)
    except ClientError as e:
        _fail(e.message)
    typer.echo("✅ Account created, you are logged in")


@cli.command()
def login(username: str):
    """Log in and remember the token."""
    password = getpass.getpass("Password: ")
    try:
        _client().login(username, password)
    except ClientError as e:
        _fail(e.message)
    typer.echo("✅ Logged in")


@cli.command()
def logout():
    """Forget the stored token."""
    _client().logout()
    typer.echo("👋 Logged out")


# ------------------------------------------------------------
# Products
# ------------------------------------------------------------

@cli.command()
def products(
    page: int = typer.Option(1, min=1),
    limit: int = typer.Option(10, min=1),
    search: str = typer.Option("", help="Filter the current page by name, SKU or type"),
):
    """Show one page of the product table."""
    try:
        data = _client().list_products(page=page, limit=limit)
    except ClientError as e:
        _fail(e.message)

    rows = filter_products(data["products"], search)
    if not rows:
        typer.echo("No products found matching your search." if search else "No products available.")
    else:
        table = [
            [p["id"], p["name"], p["type"], p["sku"], p["quantity"], f"${p['price']:.2f}", stock_status(p["quantity"])]
            for p in rows
        ]
        typer.echo(tabulate(table, headers=["id", "name", "type", "sku", "qty", "price", "status"]))

    first, last = page_range(page, limit, data["total"])
    typer.echo(f"\nShowing {first} to {last} of {data['total']} products (page {page}/{total_pages(data['total'], limit)})")


@cli.command()
def add(
    name: str = typer.Option(..., prompt=True),
    type: str = typer.Option(..., prompt=True, help=", ".join(PRODUCT_TYPES)),
    sku: str = typer.Option(..., prompt=True),
    quantity: int = typer.Option(..., prompt=True),
    price: float = typer.Option(..., prompt=True),
    image_url: str = typer.Option("", help="Optional image URL"),
    description: str = typer.Option("", help="Optional description"),
):
    """Add a product to the catalog."""
    form = {
        "name": name,
        "type": type,
        "sku": sku,
        "quantity": quantity,
        "price": price,
        "image_url": image_url or None,
        "description": description or None,
    }
    errors = validate_product_form(form)
    if errors:
        _show_errors(errors)
    try:
        result = _client().add_product(form)
    except ClientError as e:
        _fail(e.message)
    typer.echo(f"✅ {result['message']} ({result['id']})")


@cli.command("set-quantity")
def set_quantity(product_id: str, quantity: int = typer.Argument(..., min=0)):
    """Replace the stock quantity of a product."""
    try:
        result = _client().update_quantity(product_id, quantity)
    except ClientError as e:
        _fail(e.message)
    product = result["product"]
    typer.echo(f"✅ {product['name']} now has {product['quantity']} ({stock_status(product['quantity'])})")


# ------------------------------------------------------------
# Analytics
# ------------------------------------------------------------

@cli.command()
def analytics(bar_width: int = typer.Option(30, min=5)):
    """Most added products, ranked."""
    try:
        records = _client().most_added()
    except ClientError as e:
        _fail(e.message)

    summary = analytics_summary(records)
    typer.echo(
        f"Products: {summary['distinct_products']}  "
        f"Entries: {summary['total_entries']}  "
        f"Top: {summary['top_product']}\n"
    )
    if not records:
        typer.echo("No analytics data yet.")
        return

    table = [
        [r["rank"], r["name"], r["sku"], r["count"], f"{r['percentage']}%", render_bar(r["percentage"], bar_width)]
        for r in analytics_rows(records)
    ]
    typer.echo(tabulate(table, headers=["#", "name", "sku", "count", "share", ""]))


if __name__ == "__main__":
    cli()
