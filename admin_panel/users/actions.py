import logging
import mimetypes
from datetime import datetime, timezone
from typing import Any, Mapping

import sentry_sdk
from flask import current_app
from google.api_core.exceptions import GoogleAPIError, NotFound
from pymongo.errors import DuplicateKeyError
from werkzeug.datastructures import FileStorage, MultiDict

from .. import cache, mongo
from ..common.errors import (
    FieldError,
    ListingFetchError,
    RecordInUseError,
    RecordNotFoundError,
    RecordValidationError,
    UniquenessConflictError,
)
from ..common.forms import make_form, validate_form
from ..common.ids import generate_id
from ..common.results import action
from ..common.storage import BlobStore
from ..filters.fetch import ListingCache
from ..filters.listing import Listing
from ..filters.schema import derive_query_schema
from .filters import SEARCH_FIELDS, users_filter_config
from .forms import UserForm, UserUpdateForm
from .models import User, serialize_user

logger = logging.getLogger(__name__)

users_cache = ListingCache(cache, "users")


def _get(user_id: str) -> User:
    with sentry_sdk.start_span(op="mongo", description="Find user"):
        user = User.get(user_id)
    if user is None:
        raise RecordNotFoundError("User not found")
    return user


def get_users(params: Mapping[str, Any]) -> dict[str, Any]:
    """List users, returns the ``{data, pagination}`` envelope.

    :raises QueryValidationError: If the parameters do not pass the query schema.
    :raises ListingFetchError: If the listing could not be fetched.
    """
    validated = derive_query_schema(users_filter_config).validate(params)
    listing = Listing(mongo.db.users, users_filter_config, SEARCH_FIELDS, serialize_user)
    try:
        return users_cache.get_or_fetch(validated, lambda: listing.page(validated).to_dict())
    except Exception as e:
        logger.exception("Error fetching users.")
        raise ListingFetchError("Failed to fetch users") from e


@action("Failed to fetch user")
def get_user(user_id: str):
    return _get(user_id).to_json()


@action("Failed to create user", status_code=201)
def create_user(form_data: MultiDict):
    data = validate_form(make_form(UserForm, form_data))
    if User.get_by_email(data["email"]):
        raise UniquenessConflictError("User with this email already exists")

    now = datetime.now(timezone.utc)
    user = User(
        id=generate_id("user"),
        name=data["name"],
        email=data["email"],
        email_verified=False,
        image=data["image"] or None,
        created_at=now,
        updated_at=now,
    )
    try:
        with sentry_sdk.start_span(op="mongo", description="Insert user"):
            mongo.db.users.insert_one(user.dict)
    except DuplicateKeyError as e:
        raise UniquenessConflictError("User with this email already exists") from e
    users_cache.invalidate()
    logger.info(f"Created user {user.id}.")
    return user.to_json()


@action("Failed to update user")
def update_user(user_id: str, form_data: MultiDict):
    data = validate_form(make_form(UserUpdateForm, form_data), submitted=form_data)
    user = _get(user_id)

    email = data.get("email")
    if email and email != user.email and User.get_by_email(email):
        raise UniquenessConflictError("Email already exists")

    if data.get("name"):
        user.name = data["name"]
    if email:
        user.email = email
    if "image" in data:
        user.image = data["image"] or None
    if "emailVerified" in data:
        user.email_verified = data["emailVerified"]
    user.updated_at = datetime.now(timezone.utc)
    try:
        with sentry_sdk.start_span(op="mongo", description="Update user"):
            user.save()
    except DuplicateKeyError as e:
        raise UniquenessConflictError("Email already exists") from e
    users_cache.invalidate()
    logger.info(f"Updated user {user.id}.")
    return user.to_json()


@action("Failed to delete user")
def delete_user(user_id: str):
    user = _get(user_id)
    references = mongo.db.products.count_documents({"$or": [{"created_by": user.id}, {"updated_by": user.id}]})
    if references:
        raise RecordInUseError(f"User is referenced by {references} product(s) and cannot be deleted")
    with sentry_sdk.start_span(op="mongo", description="Delete user"):
        mongo.db.users.delete_one({"_id": user.id})
    users_cache.invalidate()
    logger.info(f"Deleted user {user.id}.")


@action("Failed to update user verification")
def toggle_user_verified(user_id: str, verified: bool):
    with sentry_sdk.start_span(op="mongo", description="Update user verification"):
        res = mongo.db.users.update_one(
            {"_id": user_id},
            {"$set": {"email_verified": verified, "updated_at": datetime.now(timezone.utc)}},
        )
    if not res.matched_count:
        raise RecordNotFoundError("User not found")
    users_cache.invalidate()


@action("Failed to upload user image")
def upload_user_image(user_id: str, file: FileStorage):
    """Upload a new profile image to the object storage and replace the old one."""
    store = BlobStore.from_config()
    user = _get(user_id)

    content_type = file.mimetype
    if content_type not in current_app.config["ALLOWED_IMAGE_TYPES"]:
        raise RecordValidationError([FieldError("file", "Unsupported image type")])
    extension = mimetypes.guess_extension(content_type) or ""
    name = f"{current_app.config['GCS_IMAGE_PREFIX']}{user.id}/{generate_id('image')}{extension}"
    url = store.upload(file.read(), name, content_type)

    previous = store.blob_name(user.image)
    user.image = url
    user.updated_at = datetime.now(timezone.utc)
    user.save()
    users_cache.invalidate()

    if previous:
        try:
            store.delete(previous)
        except NotFound:
            logger.warning(f"Previous image {previous} of user {user.id} was already gone.")
        except GoogleAPIError as e:
            logger.warning(f"Could not delete previous image {previous} of user {user.id}: {e}")
    return user.to_json()
