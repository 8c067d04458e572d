# ----------------------------
# MongoDB Setup
# ----------------------------

from collections import namedtuple

from pymongo import ASCENDING, MongoClient

import config

Collections = namedtuple("Collections", ["users", "products"])


def create_indexes(users, products):
    # MongoDB skips index creation if the index already exists
    users.create_index([("username", ASCENDING)], unique=True)
    users.create_index("email")

    products.create_index([("sku", ASCENDING)], unique=True)
    products.create_index("name")
    products.create_index("type")
    products.create_index("quantity")


def get_mongo_collections(client=None, db_name=None):
    # Returns the users and products collections of the inventory database, indexes included
    client = client or MongoClient(config.MONGODB_URI)
    db = client[db_name or config.MONGODB_DB]
    users = db["users"] # user collection
    products = db["products"] # product collection

    create_indexes(users, products)

    return Collections(users=users, products=products)


def serialize_product(doc):
    # convert the MongoDB document into the API shape, _id becomes a string id
    return {
        "id": str(doc["_id"]),
        "name": doc["name"],
        "type": doc["type"],
        "sku": doc["sku"],
        "image_url": doc.get("image_url"),
        "description": doc.get("description"),
        "quantity": doc["quantity"],
        "price": doc["price"],
    }


"""

Terminal code MongoDB:
mongosh
    use inventory
    show collections
    db.products.find()             shows all the products
    db.users.getIndexes()
    db.products.getIndexes()
exit

"""
