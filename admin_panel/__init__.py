import os
from pathlib import Path

import sentry_sdk
from flask import Flask
from flask_caching import Cache
from flask_login import LoginManager
from flask_principal import Principal
from flask_pymongo import PyMongo
from flask_wtf import CSRFProtect
from public import public
from sentry_sdk.integrations.flask import FlaskIntegration

if instance_path := os.environ.get("INSTANCE_PATH", None):
    instance_path = instance_path.replace("%pkg%", str(Path(__file__).absolute().parent))
app: Flask = Flask(__name__, instance_path=instance_path, instance_relative_config=True)
app.config.from_object("admin_panel.default_config")
app.config.from_pyfile("config.py", silent=True)
# The object storage credentials are usually injected by the deployment.
for key in ("GCS_PROJECT_ID", "GCS_BUCKET", "GCS_SERVICE_ACCOUNT_JSON"):
    if key in os.environ:
        app.config[key] = os.environ[key]
public(app=app)

if os.environ.get("TESTING", False):
    app.testing = True

if not app.testing and app.config["SENTRY_INGEST"]:  # pragma: no cover
    sentry_sdk.init(
        dsn=app.config["SENTRY_INGEST"],
        integrations=[FlaskIntegration()],
        environment=app.config["SENTRY_ENV"],
        sample_rate=app.config["SENTRY_ERROR_SAMPLE_RATE"],
        traces_sample_rate=app.config["SENTRY_TRACES_SAMPLE_RATE"],
        send_default_pii=True,
        enable_tracing=True,
    )

mongo: PyMongo = PyMongo(app)
public(mongo=mongo)

login: LoginManager = LoginManager(app)
public(login=login)

principal: Principal = Principal(app)
public(principal=principal)

cache: Cache = Cache(app)
public(cache=cache)

csrf: CSRFProtect = CSRFProtect(app)
public(csrf=csrf)

from .auth import auth as auth_bp
from .products import products as products_bp
from .users import users as users_bp

with app.app_context():
    app.register_blueprint(auth_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(users_bp)

from .commands import *
from .views import *
