from flask import jsonify, request
from werkzeug.datastructures import CombinedMultiDict

from ..common.forms import make_form, validate_form
from ..common.permissions import admin_required
from ..common.views import action_response, listing_response
from . import users
from .actions import (
    create_user,
    delete_user,
    get_user,
    get_users,
    toggle_user_verified,
    update_user,
    upload_user_image,
)
from .filters import users_filter_config
from .forms import ImageForm, VerifiedForm


@users.route("/")
@admin_required
def index():
    return listing_response(users_filter_config, get_users)


@users.route("/filters")
@admin_required
def filters():
    return jsonify(users_filter_config.to_dict())


@users.route("/", methods=["POST"])
@admin_required
def create():
    return action_response(create_user(request.form))


@users.route("/<string:user_id>")
@admin_required
def entry(user_id):
    return action_response(get_user(user_id))


@users.route("/<string:user_id>", methods=["POST", "PUT"])
@admin_required
def update(user_id):
    return action_response(update_user(user_id, request.form))


@users.route("/<string:user_id>", methods=["DELETE"])
@admin_required
def delete(user_id):
    return action_response(delete_user(user_id))


@users.route("/<string:user_id>/verified", methods=["POST"])
@admin_required
def verified(user_id):
    data = validate_form(make_form(VerifiedForm, request.form))
    return action_response(toggle_user_verified(user_id, data["verified"]))


@users.route("/<string:user_id>/image", methods=["POST"])
@admin_required
def image(user_id):
    form = make_form(ImageForm, CombinedMultiDict((request.files, request.form)))
    data = validate_form(form)
    return action_response(upload_user_image(user_id, data["file"]))
