from flask import Blueprint

products: Blueprint = Blueprint("products", __name__, url_prefix="/products")

from .views import *
