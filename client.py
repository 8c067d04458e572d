"""Client side of the inventory API.

``SessionContext`` owns the token and persists it to a small JSON file so a
login survives between runs. ``InventoryClient`` wraps the HTTP calls, and the
helpers below it (validation, page filtering, stock status, analytics rows)
are the pure view logic the CLI renders.
"""
import json
import logging
import math
import os
import re

import requests

import config
from schemas import PRODUCT_TYPES

logger = logging.getLogger(__name__)

DEFAULT_SESSION_FILE = os.path.join(os.path.expanduser("~"), ".inventory_session.json")
NETWORK_ERROR = "Network error. Please try again."
LOW_STOCK_THRESHOLD = 10


class ClientError(Exception):
    def __init__(self, message, status_code=None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


# ------------------------------------------------------------
# Session context
# ------------------------------------------------------------

class SessionContext:
    """Holds the current token; ``load``/``save``/``clear`` are the only disk access."""

    def __init__(self, token=None, path=DEFAULT_SESSION_FILE):
        self.token = token
        self.path = path

    @classmethod
    def load(cls, path=DEFAULT_SESSION_FILE):
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return cls(path=path)
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable session file %s", path)
            return cls(path=path)
        return cls(token=data.get("token") or None, path=path)

    @property
    def logged_in(self):
        return bool(self.token)

    def save(self):
        # owner read/write only, the file holds a bearer token
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        os.chmod(self.path, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump({"token": self.token}, f)

    def clear(self):
        self.token = None
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass


# ------------------------------------------------------------
# API client
# ------------------------------------------------------------

class InventoryClient:
    def __init__(self, session_context, base_url=None, http=None):
        self.session = session_context
        self.base_url = (base_url or config.INVENTORY_API_URL).rstrip("/")
        # anything with a requests-style request() works here, e.g. a test client
        self.http = http or requests.Session()

    def _request(self, method, path, auth=True, **kwargs):
        headers = kwargs.pop("headers", {})
        if auth:
            if not self.session.logged_in:
                raise ClientError("Please log in first", 401)
            headers["Authorization"] = f"Bearer {self.session.token}"

        try:
            response = self.http.request(method, self.base_url + path, headers=headers, **kwargs)
        except requests.RequestException:
            raise ClientError(NETWORK_ERROR)

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code >= 400:
            raise ClientError(data.get("message") or f"Request failed ({response.status_code})", response.status_code)
        return data

    def _store_token(self, data):
        token = data.get("token")
        if not token:
            raise ClientError("No token in server response")
        self.session.token = token
        self.session.save()
        return token

    def signup(self, username, password, email=None):
        body = {"username": username, "password": password}
        if email:
            body["email"] = email
        return self._store_token(self._request("POST", "/auth/signup", auth=False, json=body))

    def login(self, username, password):
        body = {"username": username, "password": password}
        return self._store_token(self._request("POST", "/auth/login", auth=False, json=body))

    def logout(self):
        self.session.clear()

    def list_products(self, page=1, limit=10):
        return self._request("GET", "/products", params={"page": page, "limit": limit})

    def add_product(self, fields):
        return self._request("POST", "/products", json=fields)

    def update_quantity(self, product_id, quantity):
        return self._request("PUT", f"/products/{product_id}/quantity", json={"quantity": quantity})

    def most_added(self):
        return self._request("GET", "/analytics/most-added")["products"]


# ------------------------------------------------------------
# Form validation
# ------------------------------------------------------------

def _to_number(value, kind):
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    if kind is int:
        # 3.7 is not a quantity, 3.0 is
        return int(number) if number.is_integer() else None
    return number


def validate_product_form(form):
    """Return ``{field: message}``; an empty dict means the form can be sent."""
    errors = {}

    name = (form.get("name") or "").strip()
    if not name:
        errors["name"] = "Product name is required"
    elif len(name) < 3:
        errors["name"] = "Product name must be at least 3 characters"

    if not form.get("type"):
        errors["type"] = "Product type is required"
    elif form["type"] not in PRODUCT_TYPES:
        errors["type"] = "Unknown product type"

    if not (form.get("sku") or "").strip():
        errors["sku"] = "SKU is required"

    quantity = _to_number(form.get("quantity"), int)
    if quantity is None or quantity < 0:
        errors["quantity"] = "Valid quantity is required"

    price = _to_number(form.get("price"), float)
    if price is None or price <= 0:
        errors["price"] = "Valid price is required"

    return errors


def validate_signup_form(form):
    errors = {}

    username = (form.get("username") or "").strip()
    if not username:
        errors["username"] = "Username is required"
    elif len(username) < 3:
        errors["username"] = "Username must be at least 3 characters"

    email = form.get("email")
    if email and not re.match(r"\S+@\S+\.\S+", email):
        errors["email"] = "Please enter a valid email address"

    password = form.get("password") or ""
    if not password:
        errors["password"] = "Password is required"
    elif len(password) < 6:
        errors["password"] = "Password must be at least 6 characters"

    if password != form.get("confirm_password", password):
        errors["confirm_password"] = "Passwords do not match"

    return errors


# ------------------------------------------------------------
# Product table helpers
# ------------------------------------------------------------

def stock_status(quantity):
    if quantity == 0:
        return "Out of Stock"
    if quantity < LOW_STOCK_THRESHOLD:
        return "Low Stock"
    return "In Stock"


def filter_products(products, term):
    # searches the loaded page only, the server has no search endpoint
    term = (term or "").strip().lower()
    if not term:
        return list(products)
    return [
        p for p in products
        if term in p["name"].lower() or term in p["sku"].lower() or term in p["type"].lower()
    ]


def total_pages(total, limit):
    return max(1, -(-total // limit))


def page_range(page, limit, total):
    """First and last row number shown on ``page``, 1-based."""
    if total == 0:
        return 0, 0
    return (page - 1) * limit + 1, min(page * limit, total)


# ------------------------------------------------------------
# Analytics helpers
# ------------------------------------------------------------

def analytics_rows(records):
    total = sum(r["count"] for r in records)
    rows = []
    for rank, record in enumerate(records, start=1):
        percentage = round(record["count"] / total * 100, 1) if total else 0.0
        rows.append({
            "rank": rank,
            "name": record["_id"]["name"],
            "sku": record["_id"]["sku"],
            "count": record["count"],
            "percentage": percentage,
        })
    return rows


def analytics_summary(records):
    return {
        "distinct_products": len(records),
        "total_entries": sum(r["count"] for r in records),
        "top_product": records[0]["_id"]["name"] if records else "N/A",
    }


def render_bar(percentage, width=30):
    filled = int(round(percentage / 100 * width))
    filled = max(0, min(width, filled))
    return "#" * filled + "." * (width - filled)
