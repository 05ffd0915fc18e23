import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import sentry_sdk
from pymongo.errors import DuplicateKeyError
from werkzeug.datastructures import MultiDict

from .. import cache, mongo
from ..common.errors import AuthenticationError, ListingFetchError, RecordNotFoundError, UniquenessConflictError
from ..common.forms import make_form, validate_form
from ..common.ids import generate_id
from ..common.results import action
from ..filters.fetch import ListingCache
from ..filters.listing import Listing
from ..filters.schema import derive_query_schema
from .filters import SEARCH_FIELDS, products_filter_config
from .forms import ProductForm, ProductUpdateForm
from .models import Product, price_to_cents, serialize_product

logger = logging.getLogger(__name__)

products_cache = ListingCache(cache, "products")


def _require_actor(actor_id: Optional[str]) -> str:
    if not actor_id:
        raise AuthenticationError("Unauthorized - Please sign in")
    return actor_id


def _get(product_id: str) -> Product:
    with sentry_sdk.start_span(op="mongo", description="Find product"):
        product = Product.get(product_id)
    if product is None:
        raise RecordNotFoundError("Product not found")
    return product


def get_products(params: Mapping[str, Any]) -> dict[str, Any]:
    """List products, returns the ``{data, pagination}`` envelope.

    :raises QueryValidationError: If the parameters do not pass the query schema.
    :raises ListingFetchError: If the listing could not be fetched.
    """
    validated = derive_query_schema(products_filter_config).validate(params)
    listing = Listing(mongo.db.products, products_filter_config, SEARCH_FIELDS, serialize_product)
    try:
        return products_cache.get_or_fetch(validated, lambda: listing.page(validated).to_dict())
    except Exception as e:
        logger.exception("Error fetching products.")
        raise ListingFetchError("Failed to fetch products") from e


@action("Failed to fetch product")
def get_product(product_id: str):
    return _get(product_id).to_json()


@action("Failed to create product", status_code=201)
def create_product(form_data: MultiDict, actor_id: Optional[str]):
    actor_id = _require_actor(actor_id)
    data = validate_form(make_form(ProductForm, form_data))

    if Product.get_by_sku(data["sku"]):
        raise UniquenessConflictError("Product with this SKU already exists")

    now = datetime.now(timezone.utc)
    product = Product(
        id=generate_id("product"),
        name=data["name"],
        price=price_to_cents(data["price"]),
        sku=data["sku"],
        description=data["description"] or None,
        active=data["active"] if "active" in form_data else True,
        created_at=now,
        updated_at=now,
        created_by=actor_id,
        updated_by=actor_id,
    )
    try:
        with sentry_sdk.start_span(op="mongo", description="Insert product"):
            mongo.db.products.insert_one(product.dict)
    except DuplicateKeyError as e:
        raise UniquenessConflictError("Product with this SKU already exists") from e
    products_cache.invalidate()
    logger.info(f"Created product {product.id} by {actor_id}.")
    return product.to_json()


@action("Failed to update product")
def update_product(product_id: str, form_data: MultiDict, actor_id: Optional[str]):
    actor_id = _require_actor(actor_id)
    data = validate_form(make_form(ProductUpdateForm, form_data), submitted=form_data)
    product = _get(product_id)

    sku = data.get("sku")
    if sku and sku != product.sku and Product.get_by_sku(sku):
        raise UniquenessConflictError("SKU already exists")

    if data.get("name"):
        product.name = data["name"]
    if "description" in data:
        product.description = data["description"] or None
    if data.get("price"):
        product.price = price_to_cents(data["price"])
    if sku:
        product.sku = sku
    if "active" in data:
        product.active = data["active"]
    product.updated_by = actor_id
    product.updated_at = datetime.now(timezone.utc)
    try:
        with sentry_sdk.start_span(op="mongo", description="Update product"):
            product.save()
    except DuplicateKeyError as e:
        raise UniquenessConflictError("SKU already exists") from e
    products_cache.invalidate()
    logger.info(f"Updated product {product.id} by {actor_id}.")
    return product.to_json()


@action("Failed to delete product")
def delete_product(product_id: str, actor_id: Optional[str]):
    actor_id = _require_actor(actor_id)
    product = _get(product_id)
    with sentry_sdk.start_span(op="mongo", description="Delete product"):
        mongo.db.products.delete_one({"_id": product.id})
    products_cache.invalidate()
    logger.info(f"Deleted product {product.id} by {actor_id}.")


@action("Failed to update product status")
def toggle_product_active(product_id: str, active: bool, actor_id: Optional[str]):
    actor_id = _require_actor(actor_id)
    with sentry_sdk.start_span(op="mongo", description="Update product status"):
        res = mongo.db.products.update_one(
            {"_id": product_id},
            {"$set": {"active": active, "updated_by": actor_id, "updated_at": datetime.now(timezone.utc)}},
        )
    if not res.matched_count:
        raise RecordNotFoundError("Product not found")
    products_cache.invalidate()
