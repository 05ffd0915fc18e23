import logging
from datetime import datetime, timezone

from flask import current_app, jsonify, session
from flask_login import current_user, login_required, login_user, logout_user
from flask_principal import AnonymousIdentity, Identity, identity_changed
from flask_wtf.csrf import generate_csrf

from ..common.forms import form_errors
from ..users.models import User
from . import auth
from .forms import LoginForm

logger = logging.getLogger(__name__)

EXPIRES_AT = "expires_at"


def _clear_session():
    logout_user()
    for key in ("identity.name", "identity.auth_type", EXPIRES_AT):
        session.pop(key, None)
    identity_changed.send(current_app._get_current_object(), identity=AnonymousIdentity())


@auth.before_app_request
def check_session_expiry():
    """Log out users whose session outlived PERMANENT_SESSION_LIFETIME."""
    expires_at = session.get(EXPIRES_AT)
    if expires_at is None or not current_user.is_authenticated:
        return None
    if datetime.now(timezone.utc).timestamp() < expires_at:
        return None
    logger.info(f"Session of {current_user.id} expired.")
    _clear_session()
    return jsonify({"error": "Session expired - Please sign in again", "code": "SESSION_EXPIRED"}), 401


@auth.route("/login", methods=["POST"])
def login():
    form = LoginForm()
    if not form.validate():
        errors = [error.to_dict() for error in form_errors(form)]
        return jsonify({"success": False, "error": "Invalid login", "errors": errors}), 400
    user = User.get_by_email(form.email.data)
    if not user or not user.check_password(form.password.data):
        logger.info(f"Failed login for {form.email.data}.")
        return jsonify({"success": False, "error": "Invalid email or password"}), 401
    login_user(user, form.remember_me.data)
    session.permanent = True
    lifetime = current_app.permanent_session_lifetime
    session[EXPIRES_AT] = (datetime.now(timezone.utc) + lifetime).timestamp()
    identity_changed.send(current_app._get_current_object(), identity=Identity(user.id))
    return jsonify({"success": True, "data": user.to_json()})


@auth.route("/logout", methods=["POST"])
@login_required
def logout():
    _clear_session()
    return jsonify({"success": True})


@auth.route("/session")
def session_info():
    user = current_user.to_json() if current_user.is_authenticated else None
    return jsonify({"user": user, "expiresAt": session.get(EXPIRES_AT), "csrfToken": generate_csrf()})
