from flask import jsonify, request
from flask_login import current_user

from ..common.forms import make_form, validate_form
from ..common.permissions import admin_required
from ..common.views import action_response, listing_response
from . import products
from .actions import (
    create_product,
    delete_product,
    get_product,
    get_products,
    toggle_product_active,
    update_product,
)
from .filters import products_filter_config
from .forms import ActiveForm


@products.route("/")
@admin_required
def index():
    return listing_response(products_filter_config, get_products)


@products.route("/filters")
@admin_required
def filters():
    return jsonify(products_filter_config.to_dict())


@products.route("/", methods=["POST"])
@admin_required
def create():
    return action_response(create_product(request.form, current_user.id))


@products.route("/<string:product_id>")
@admin_required
def entry(product_id):
    return action_response(get_product(product_id))


@products.route("/<string:product_id>", methods=["POST", "PUT"])
@admin_required
def update(product_id):
    return action_response(update_product(product_id, request.form, current_user.id))


@products.route("/<string:product_id>", methods=["DELETE"])
@admin_required
def delete(product_id):
    return action_response(delete_product(product_id, current_user.id))


@products.route("/<string:product_id>/active", methods=["POST"])
@admin_required
def active(product_id):
    data = validate_form(make_form(ActiveForm, request.form))
    return action_response(toggle_product_active(product_id, data["active"], current_user.id))
