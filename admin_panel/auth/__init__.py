from flask import Blueprint

auth: Blueprint = Blueprint("auth", __name__, url_prefix="/auth")

from .views import *
