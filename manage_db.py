# Database maintenance: create users directly and seed sample data
import getpass
import logging

import typer
from tabulate import tabulate

import config
from catalog import create_product
from errors import InventoryError
from models_mongo import get_mongo_collections
from schemas import ProductCreate
from sessions import ROLES, create_user

logger = logging.getLogger(__name__)

cli = typer.Typer(help="Inventory database management")

SAMPLE_USERS = [
    {"username": "admin", "password": "admin123", "email": "admin@example.com", "role": "admin"},
    {"username": "demo", "password": "demo123", "email": "demo@example.com", "role": "user"},
]

SAMPLE_PRODUCTS = [
    {
        "name": "Laptop Dell XPS 13",
        "type": "Electronics",
        "sku": "LAP-DELL-XPS13-001",
        "image_url": "https://example.com/laptop.jpg",
        "description": "High-performance laptop with Intel i7 processor",
        "quantity": 15,
        "price": 1299.99,
    },
    {
        "name": "Wireless Mouse Logitech MX Master",
        "type": "Electronics",
        "sku": "MOU-LOG-MX-001",
        "image_url": "https://example.com/mouse.jpg",
        "description": "Premium wireless mouse with ergonomic design",
        "quantity": 25,
        "price": 79.99,
    },
    {
        "name": "Office Chair Ergonomic",
        "type": "Home & Garden",
        "sku": "CHA-OFF-ERG-001",
        "image_url": "https://example.com/chair.jpg",
        "description": "Comfortable office chair with lumbar support",
        "quantity": 8,
        "price": 299.99,
    },
    {
        "name": "Coffee Maker Bialetti",
        "type": "Home & Garden",
        "sku": "COF-BIA-001",
        "image_url": "https://example.com/coffee-maker.jpg",
        "description": "Italian stovetop coffee maker",
        "quantity": 12,
        "price": 45.99,
    },
    {
        "name": "Running Shoes Nike Air Max",
        "type": "Sports",
        "sku": "SHO-NIK-AIR-001",
        "image_url": "https://example.com/shoes.jpg",
        "description": "Comfortable running shoes with air cushioning",
        "quantity": 20,
        "price": 129.99,
    },
]


def seed(collections, clear=True):
    """Load the sample users and products; returns ``(users, products)`` created."""
    if clear:
        collections.users.delete_many({})
        collections.products.delete_many({})
        logger.info("Existing data cleared")

    users = 0
    for user in SAMPLE_USERS:
        try:
            create_user(collections.users, user["username"], user["password"], email=user["email"], role=user["role"])
            users += 1
        except InventoryError as e:
            logger.warning("Skipping user %s: %s", user["username"], e.message)

    products = 0
    for product in SAMPLE_PRODUCTS:
        try:
            create_product(collections.products, ProductCreate(**product))
            products += 1
        except InventoryError as e:
            logger.warning("Skipping product %s: %s", product["sku"], e.message)

    return users, products


@cli.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v")):
    logging.basicConfig(level=logging.DEBUG if verbose else config.LOG_LEVEL)


@cli.command("create-user")
def add_user(
    username: str = typer.Argument(...),
    role: str = typer.Option("user", help="user or admin"),
    email: str = typer.Option("", help="Optional email address"),
):
    """Add a user straight to the database."""
    if role not in ROLES:
        typer.echo(f"❌ Role must be one of: {', '.join(ROLES)}"); raise typer.Exit(1)
    pwd = getpass.getpass("Password: ")
    try:
        create_user(get_mongo_collections().users, username, pwd, email=email or None, role=role)
    except InventoryError as e:
        typer.echo(f"❌ {e.message}"); raise typer.Exit(1)
    typer.echo(f"✅ User created: {username}")


@cli.command("init-db")
def init_db(keep: bool = typer.Option(False, help="Keep existing users and products")):
    """Create indexes and load the sample users and products."""
    collections = get_mongo_collections()
    users, products = seed(collections, clear=not keep)
    typer.echo(tabulate([["users", users], ["products", products]], headers=["created", "count"]))
    typer.echo("\nDefault logins: admin / admin123, demo / demo123")


if __name__ == "__main__":
    cli()
