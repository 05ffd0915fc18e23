from flask import Blueprint

users: Blueprint = Blueprint("users", __name__, url_prefix="/users")

from .views import *
