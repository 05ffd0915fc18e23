from functools import wraps

from flask_login import login_required
from flask_principal import Permission, RoleNeed

admin_permission = Permission(RoleNeed("admin"))


def admin_required(f):
    """Require a logged in user with the admin role, anonymous users get a 401, others a 403."""

    @wraps(f)
    @login_required
    def wrapper(*args, **kwargs):
        with admin_permission.require():
            return f(*args, **kwargs)

    return wrapper
