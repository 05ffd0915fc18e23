from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from .. import mongo


def price_to_cents(price: str) -> int:
    """Convert a validated price like ``"12.5"`` to cents."""
    return int(Decimal(price) * 100)


def format_price(cents: int) -> str:
    return f"{cents // 100}.{cents % 100:02d}"


class Product:
    #: Attributes stored in the products collection, the price is stored in cents.
    FIELDS = (
        "_id",
        "name",
        "description",
        "price",
        "sku",
        "active",
        "created_at",
        "updated_at",
        "created_by",
        "updated_by",
    )

    def __init__(
        self,
        id: str,
        name: str,
        price: int,
        sku: str,
        description: Optional[str] = None,
        active: bool = True,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        created_by: Optional[str] = None,
        updated_by: Optional[str] = None,
    ):
        self.id = id
        self.name = name
        self.price = price
        self.sku = sku
        self.description = description
        self.active = active
        self.created_at = created_at
        self.updated_at = updated_at
        self.created_by = created_by
        self.updated_by = updated_by

    @property
    def dict(self):
        return {
            "_id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "sku": self.sku,
            "active": self.active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
        }

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": format_price(self.price),
            "sku": self.sku,
            "active": self.active,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "createdBy": self.created_by,
            "updatedBy": self.updated_by,
        }

    @staticmethod
    def from_doc(doc) -> "Product":
        return Product(
            doc["_id"],
            doc["name"],
            doc["price"],
            doc["sku"],
            doc.get("description"),
            doc.get("active", True),
            doc.get("created_at"),
            doc.get("updated_at"),
            doc.get("created_by"),
            doc.get("updated_by"),
        )

    def save(self):
        mongo.db.products.replace_one({"_id": self.id}, self.dict, upsert=True)

    @staticmethod
    def get(id):
        doc = mongo.db.products.find_one({"_id": id})
        if not doc:
            return None
        return Product.from_doc(doc)

    @staticmethod
    def get_by_sku(sku):
        doc = mongo.db.products.find_one({"sku": sku})
        if not doc:
            return None
        return Product.from_doc(doc)


def serialize_product(doc) -> dict[str, Any]:
    return Product.from_doc(doc).to_json()
