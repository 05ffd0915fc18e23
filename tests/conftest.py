import os
from typing import Any, Generator

os.environ.setdefault("TESTING", "1")

import mongomock
import pytest
from flask import Flask
from flask.testing import FlaskClient

from admin_panel import app as admin_panel_app
from admin_panel import mongo
from admin_panel.common.mongo import init_collections


@pytest.fixture(scope="session")
def app() -> Generator[Flask, Any, None]:
    # mongomock stands in for the MongoDB server
    mongo.cx = mongomock.MongoClient()
    mongo.db = mongo.cx["admin_panel"]
    with admin_panel_app.app_context():
        init_collections()
    yield admin_panel_app


@pytest.fixture(scope="function")
def client(app: Flask) -> Generator[FlaskClient, Any, None]:
    with app.app_context(), app.test_client() as testing_client:
        yield testing_client
