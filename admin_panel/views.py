from flask import jsonify
from flask_principal import PermissionDenied
from werkzeug.exceptions import HTTPException

from . import app, login
from .common.errors import ListingFetchError, QueryValidationError, RecordValidationError
from .common.results import failure


@app.route("/")
def index():
    return jsonify({"name": "admin-panel", "areas": ["auth", "products", "users"]})


@login.unauthorized_handler
def unauthorized():
    return jsonify({"error": "Unauthorized - Please sign in", "code": "UNAUTHORIZED"}), 401


@app.errorhandler(PermissionDenied)
def forbidden(e):
    return jsonify({"error": "Forbidden - Insufficient permissions", "code": "FORBIDDEN"}), 403


@app.errorhandler(RecordValidationError)
def invalid_record(e):
    return jsonify(failure(e.message, 400, e.errors).to_dict()), 400


@app.errorhandler(QueryValidationError)
def invalid_query(e):
    return jsonify({"error": e.message, "errors": e.error_dicts()}), 400


@app.errorhandler(ListingFetchError)
def listing_failed(e):
    return jsonify({"error": str(e)}), 500


@app.errorhandler(HTTPException)
def error(e):
    return jsonify({"error": e.description, "code": e.name.upper().replace(" ", "_")}), e.code
