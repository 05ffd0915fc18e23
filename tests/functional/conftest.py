from datetime import datetime, timedelta, timezone
from typing import Any, Generator

import pytest
from flask.testing import FlaskClient

from admin_panel import cache, mongo
from admin_panel.common.ids import generate_id
from admin_panel.products.models import Product
from admin_panel.users.models import User, hash_password


@pytest.fixture(autouse=True)
def clean_mongo(app):
    with app.app_context():
        yield
        mongo.db.products.delete_many({})
        mongo.db.users.delete_many({})
        cache.clear()


def make_user(name, email, roles=(), password=None, email_verified=False, created_at=None) -> User:
    created_at = created_at or datetime.now(timezone.utc)
    user = User(
        generate_id("user"),
        name,
        email,
        email_verified=email_verified,
        roles=list(roles),
        pwhash=hash_password(password) if password else None,
        created_at=created_at,
        updated_at=created_at,
    )
    mongo.db.users.insert_one(user.dict)
    return user


def make_product(name, sku, price=1000, active=True, description=None, actor=None, created_at=None) -> Product:
    created_at = created_at or datetime.now(timezone.utc)
    product = Product(
        generate_id("product"),
        name,
        price,
        sku,
        description=description,
        active=active,
        created_at=created_at,
        updated_at=created_at,
        created_by=actor,
        updated_by=actor,
    )
    mongo.db.products.insert_one(product.dict)
    return product


@pytest.fixture
def admin(app) -> tuple[User, str]:
    password = "password"
    user = make_user("Admin", "admin@example.com", roles=["admin"], password=password, email_verified=True)
    return user, password


@pytest.fixture
def plain_user(app) -> tuple[User, str]:
    password = "password"
    user = make_user("Plain", "plain@example.com", password=password)
    return user, password


@pytest.fixture
def logged_in(client: FlaskClient, admin, mocker) -> Generator[FlaskClient, Any, None]:
    user, password = admin
    mocker.patch("flask_wtf.csrf.validate_csrf")
    resp = client.post("/auth/login", data={"email": user.email, "password": password, "remember_me": "y"})
    assert resp.status_code == 200
    yield client


@pytest.fixture
def widgets(admin) -> list[Product]:
    user, _ = admin
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    products = []
    for i in range(23):
        products.append(
            make_product(
                f"Gadget {i:02d}",
                f"SKU-{i:03d}",
                price=100 * (i + 1),
                active=i % 2 == 0,
                actor=user.id,
                created_at=start + timedelta(days=i),
            )
        )
    return products


@pytest.fixture
def user_factory(app):
    return make_user


@pytest.fixture
def product_factory(app):
    return make_product
