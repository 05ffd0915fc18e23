import pymongo

from .. import mongo


def init_collections():
    """Create the collections with their unique and sort indexes."""
    current = mongo.db.list_collection_names()
    indexes = {
        "users": {"unique": ["email"], "sort": ["name", "created_at", "updated_at"]},
        "products": {"unique": ["sku"], "sort": ["name", "price", "created_at", "updated_at", "created_by"]},
    }
    to_create = set(indexes).difference(current)
    for collection in to_create:
        mongo.db.create_collection(collection)
    for collection, spec in indexes.items():
        for attr in spec["unique"]:
            mongo.db[collection].create_index([(attr, pymongo.ASCENDING)], unique=True)
        for attr in spec["sort"]:
            mongo.db[collection].create_index([(attr, pymongo.ASCENDING)])
    return to_create, current
