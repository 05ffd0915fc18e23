from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from flask_login import UserMixin, current_user
from flask_principal import RoleNeed, UserNeed, identity_loaded
from werkzeug.security import check_password_hash, generate_password_hash

from .. import app, login, mongo


def hash_password(password):
    return generate_password_hash(password, method="pbkdf2:sha256:1000")


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class User(UserMixin):
    """A dashboard user, also the account that logs into the dashboard."""

    ROLES = ["admin"]
    #: Attributes stored in the users collection.
    FIELDS = ("_id", "name", "email", "email_verified", "image", "roles", "pwhash", "created_at", "updated_at")

    def __init__(
        self,
        id: str,
        name: str,
        email: str,
        email_verified: bool = False,
        image: Optional[str] = None,
        roles: Optional[List[str]] = None,
        pwhash: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.id = id
        self.name = name
        self.email = email
        self.email_verified = email_verified
        self.image = image
        self.roles = roles if roles is not None else []
        self.pwhash = pwhash
        self.created_at = created_at
        self.updated_at = updated_at

    def check_password(self, password):
        if not self.pwhash:
            return False
        return check_password_hash(self.pwhash, password)

    @property
    def dict(self):
        return {
            "_id": self.id,
            "name": self.name,
            "email": self.email,
            "email_verified": self.email_verified,
            "image": self.image,
            "roles": self.roles,
            "pwhash": self.pwhash,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "emailVerified": self.email_verified,
            "image": self.image,
            "roles": self.roles,
            "createdAt": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
        }

    @staticmethod
    def from_doc(doc) -> "User":
        return User(
            doc["_id"],
            doc["name"],
            doc["email"],
            doc.get("email_verified", False),
            doc.get("image"),
            doc.get("roles", []),
            doc.get("pwhash"),
            doc.get("created_at"),
            doc.get("updated_at"),
        )

    def save(self):
        """Save or update user in database"""
        mongo.db.users.replace_one({"_id": self.id}, self.dict, upsert=True)

    def set_password(self, password):
        self.pwhash = hash_password(password)
        self.updated_at = datetime.now(timezone.utc)
        self.save()

    @staticmethod
    def get(id):
        doc = mongo.db.users.find_one({"_id": id})
        if not doc:
            return None
        return User.from_doc(doc)

    @staticmethod
    def get_by_email(email):
        doc = mongo.db.users.find_one({"email": email})
        if not doc:
            return None
        return User.from_doc(doc)


def serialize_user(doc) -> dict[str, Any]:
    return User.from_doc(doc).to_json()


login.user_loader(User.get)


@identity_loaded.connect_via(app)
def on_identity_loaded(sender, identity):
    identity.user = current_user

    if hasattr(current_user, "id"):
        identity.provides.add(UserNeed(current_user.id))

    if hasattr(current_user, "roles"):
        for role in current_user.roles:
            identity.provides.add(RoleNeed(role))
