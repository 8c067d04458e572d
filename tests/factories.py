"""
Test utilities and factories for creating test data
"""
import random
import string
import unittest

import mongomock
from fastapi.testclient import TestClient

import catalog
from app import app, get_collections
from models_mongo import get_mongo_collections
from schemas import ProductCreate


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=8):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))

    @staticmethod
    def collections():
        """Fresh in-memory users/products collections with the real indexes"""
        db_name = f"inventory_test_{TestDataFactory.random_string()}"
        return get_mongo_collections(client=mongomock.MongoClient(), db_name=db_name)

    @staticmethod
    def product_fields(**overrides):
        """Valid product body with a unique SKU"""
        fields = {
            "name": "Wireless Mouse",
            "type": "Electronics",
            "sku": f"SKU-{TestDataFactory.random_string()}",
            "description": "Ergonomic mouse",
            "quantity": 25,
            "price": 79.99,
        }
        fields.update(overrides)
        return fields

    @staticmethod
    def create_product(products, **overrides):
        """Insert a product through the catalog"""
        return catalog.create_product(products, ProductCreate(**TestDataFactory.product_fields(**overrides)))


class APITestCase(unittest.TestCase):
    """Runs the FastAPI app against in-memory collections"""

    password = "secret123"

    def setUp(self):
        self.db = TestDataFactory.collections()
        app.dependency_overrides[get_collections] = lambda: self.db
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def signup(self, username=None, password=None):
        username = username or f"user_{TestDataFactory.random_string(6).lower()}"
        response = self.client.post(
            "/auth/signup",
            json={"username": username, "password": password or self.password},
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["token"]

    def auth_headers(self, token=None):
        return {"Authorization": f"Bearer {token or self.signup()}"}
