import logging

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from errors import DuplicateSku, NotFound, ValidationError
from models_mongo import serialize_product
from schemas import MAX_QUANTITY

logger = logging.getLogger(__name__)

MOST_ADDED_LIMIT = 10


def _object_id(product_id):
    try:
        return ObjectId(product_id)
    except (InvalidId, TypeError):
        raise NotFound("Product not found")


def _sku_taken(sku):
    return DuplicateSku(f"Product with SKU '{sku}' already exists")


# ------------------------------------------------------------
# Products
# ------------------------------------------------------------

def create_product(products, product):
    """Insert a validated ``ProductCreate`` and return it in API shape."""
    if products.find_one({"sku": product.sku}):
        raise _sku_taken(product.sku)

    doc = product.model_dump()
    try:
        result = products.insert_one(doc)
    except DuplicateKeyError:
        raise _sku_taken(product.sku)

    doc["_id"] = result.inserted_id
    logger.info("Product created: %s (%s)", product.sku, result.inserted_id)
    return serialize_product(doc)


def get_product(products, product_id):
    doc = products.find_one({"_id": _object_id(product_id)})
    if not doc:
        raise NotFound("Product not found")
    return serialize_product(doc)


def list_products(products, page=1, limit=10):
    """Return one page of products in insertion order plus the overall count."""
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be at least 1")

    skip = (page - 1) * limit
    cursor = products.find().sort("_id", ASCENDING).skip(skip).limit(limit)
    items = [serialize_product(doc) for doc in cursor]
    total = products.count_documents({})
    return items, total


def update_quantity(products, product_id, quantity):
    # bool is an int subclass, reject it explicitly
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("Quantity must be an integer")
    if quantity < 0:
        raise ValidationError("Quantity cannot be negative")
    if quantity > MAX_QUANTITY:
        raise ValidationError("Quantity is too large")

    doc = products.find_one_and_update(
        {"_id": _object_id(product_id)},
        {"$set": {"quantity": quantity}},
        return_document=ReturnDocument.AFTER,
    )
    if not doc:
        raise NotFound("Product not found")
    return serialize_product(doc)


# ------------------------------------------------------------
# Analytics
# ------------------------------------------------------------

def most_added(products, limit=MOST_ADDED_LIMIT):
    # ties in count come back in whatever order the server groups them
    pipeline = [
        {"$group": {"_id": {"name": "$name", "sku": "$sku"}, "count": {"$sum": 1}}},
        {"$sort": {"count": -1}},
        {"$limit": limit},
    ]
    return list(products.aggregate(pipeline))
