import io
from datetime import datetime, timedelta, timezone

import pytest
from flask.testing import FlaskClient
from google.api_core.exceptions import Forbidden, NotFound

from admin_panel import app as admin_panel_app
from admin_panel import mongo
from admin_panel.common.storage import BlobStore

GCS_CONFIG = {
    "GCS_PROJECT_ID": "admin-panel",
    "GCS_BUCKET": "admin-panel-images",
    "GCS_SERVICE_ACCOUNT_JSON": '{"type": "service_account"}',
}


@pytest.fixture
def people(admin, user_factory):
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        user_factory("Alice Smith", "alice@example.com", email_verified=True, created_at=start),
        user_factory("Bob Jones", "bob@example.org", created_at=start + timedelta(days=1)),
        user_factory("Carol Smith", "carol@example.net", created_at=start + timedelta(days=2)),
    ]


@pytest.fixture
def gcs_config(mocker):
    mocker.patch.dict(admin_panel_app.config, GCS_CONFIG)


@pytest.fixture
def bucket(mocker, gcs_config):
    bucket = mocker.MagicMock()
    bucket.blob.return_value.public_url = "https://storage.googleapis.com/admin-panel-images/users/images/new.png"
    mocker.patch.object(BlobStore, "bucket", new_callable=mocker.PropertyMock, return_value=bucket)
    return bucket


class TestListing:
    def test_listing(self, logged_in: FlaskClient, people):
        # Act
        resp = logged_in.get("/users/?sortField=createdAt&sortDirection=asc")

        # Assert
        assert resp.status_code == 200
        assert resp.json["pagination"] == {"page": 1, "pageSize": 10, "total": 4, "totalPages": 1}
        emails = [row["email"] for row in resp.json["data"]]
        assert emails == ["alice@example.com", "bob@example.org", "carol@example.net", "admin@example.com"]
        assert all("pwhash" not in row for row in resp.json["data"])

    def test_search_name_or_email(self, logged_in: FlaskClient, people):
        # Act
        by_name = logged_in.get("/users/?search=smith").json["data"]
        by_email = logged_in.get("/users/?search=EXAMPLE.ORG").json["data"]

        # Assert
        assert sorted(row["name"] for row in by_name) == ["Alice Smith", "Carol Smith"]
        assert [row["name"] for row in by_email] == ["Bob Jones"]

    def test_verified_filter(self, logged_in: FlaskClient, people):
        # Act
        resp = logged_in.get("/users/?emailVerified=false")

        # Assert
        assert sorted(row["name"] for row in resp.json["data"]) == ["Bob Jones", "Carol Smith"]
        assert resp.json["query"] == "emailVerified=false"

    def test_sort_by_email(self, logged_in: FlaskClient, people):
        emails = [row["email"] for row in logged_in.get("/users/?sortField=email&sortDirection=asc").json["data"]]
        assert emails == sorted(emails)

    def test_invalid_sort_field(self, logged_in: FlaskClient):
        resp = logged_in.get("/users/?sortField=pwhash")
        assert resp.status_code == 400

    def test_filters_config(self, logged_in: FlaskClient):
        # Act
        resp = logged_in.get("/users/filters")

        # Assert
        verified = resp.json["filters"]["emailVerified"]
        assert verified["type"] == "boolean"
        assert verified["defaultValue"] == "all"
        assert [option["label"] for option in verified["options"]] == ["All Users", "Verified", "Unverified"]


class TestCreate:
    def test_create(self, logged_in: FlaskClient):
        # Act
        resp = logged_in.post("/users/", data={"name": "Dave", "email": "dave@example.com"})

        # Assert
        assert resp.status_code == 201
        data = resp.json["data"]
        assert data["id"].startswith("user_")
        assert data["emailVerified"] is False
        assert data["image"] is None
        assert mongo.db.users.count_documents({"email": "dave@example.com"}) == 1

    def test_duplicate_email(self, logged_in: FlaskClient, people):
        # Act
        resp = logged_in.post("/users/", data={"name": "Alice Again", "email": "alice@example.com"})

        # Assert
        assert resp.status_code == 409
        assert resp.json == {"success": False, "error": "User with this email already exists"}
        assert mongo.db.users.count_documents({"email": "alice@example.com"}) == 1

    def test_validation_errors(self, logged_in: FlaskClient):
        # Act
        resp = logged_in.post("/users/", data={"email": "not-an-email", "image": "nope"})

        # Assert
        assert resp.status_code == 400
        errors = {error["field"]: error["message"] for error in resp.json["errors"]}
        assert errors == {
            "name": "Name is required",
            "email": "Invalid email address",
            "image": "Image must be a valid URL",
        }

    def test_missing_email(self, logged_in: FlaskClient):
        resp = logged_in.post("/users/", data={"name": "Dave"})
        assert resp.json["errors"] == [{"field": "email", "message": "Email is required"}]


class TestEntry:
    def test_get(self, logged_in: FlaskClient, people):
        resp = logged_in.get(f"/users/{people[0].id}")
        assert resp.status_code == 200
        assert resp.json["data"]["name"] == "Alice Smith"

    def test_get_missing(self, logged_in: FlaskClient):
        resp = logged_in.get("/users/user_0_missing")
        assert resp.status_code == 404
        assert resp.json["error"] == "User not found"

    def test_update(self, logged_in: FlaskClient, people):
        # Arrange
        alice = people[0]

        # Act
        resp = logged_in.put(f"/users/{alice.id}", data={"name": "Alice Cooper", "emailVerified": "false"})

        # Assert
        assert resp.status_code == 200
        data = resp.json["data"]
        assert data["name"] == "Alice Cooper"
        assert data["email"] == alice.email
        assert data["emailVerified"] is False

    def test_update_keeps_password(self, logged_in: FlaskClient, admin):
        # Arrange
        user, _ = admin

        # Act
        logged_in.put(f"/users/{user.id}", data={"name": "Root"})

        # Assert
        assert mongo.db.users.find_one({"_id": user.id})["pwhash"] == user.pwhash

    def test_update_email_conflict(self, logged_in: FlaskClient, people):
        # Act
        resp = logged_in.put(f"/users/{people[0].id}", data={"email": people[1].email})

        # Assert
        assert resp.status_code == 409
        assert resp.json["error"] == "Email already exists"
        assert mongo.db.users.find_one({"_id": people[0].id})["email"] == people[0].email

    def test_update_invalid_email(self, logged_in: FlaskClient, people):
        resp = logged_in.put(f"/users/{people[0].id}", data={"email": "nope"})
        assert resp.status_code == 400
        assert resp.json["errors"] == [{"field": "email", "message": "Invalid email address"}]

    def test_delete(self, logged_in: FlaskClient, people):
        # Act
        resp = logged_in.delete(f"/users/{people[1].id}")

        # Assert
        assert resp.status_code == 200
        assert resp.json == {"success": True}
        assert mongo.db.users.find_one({"_id": people[1].id}) is None

    def test_delete_referenced(self, logged_in: FlaskClient, people, product_factory):
        """Users that created or updated products are kept."""
        # Arrange
        product_factory("Widget", "W-1", actor=people[1].id)

        # Act
        resp = logged_in.delete(f"/users/{people[1].id}")

        # Assert
        assert resp.status_code == 409
        assert resp.json["error"] == "User is referenced by 1 product(s) and cannot be deleted"
        assert mongo.db.users.find_one({"_id": people[1].id}) is not None

    def test_toggle_verified(self, logged_in: FlaskClient, people):
        # Act
        resp = logged_in.post(f"/users/{people[1].id}/verified", data={"verified": "true"})

        # Assert
        assert resp.status_code == 200
        assert resp.json == {"success": True}
        assert mongo.db.users.find_one({"_id": people[1].id})["email_verified"] is True

    def test_toggle_verified_missing(self, logged_in: FlaskClient):
        resp = logged_in.post("/users/user_0_missing/verified", data={"verified": "true"})
        assert resp.status_code == 404


class TestImage:
    """Tests for the profile image upload."""

    def upload(self, client, user_id, content_type="image/png"):
        data = {"file": (io.BytesIO(b"\x89PNG image"), "avatar.png", content_type)}
        return client.post(f"/users/{user_id}/image", data=data, content_type="multipart/form-data")

    def test_not_configured(self, logged_in: FlaskClient, people):
        # Act
        resp = self.upload(logged_in, people[0].id)

        # Assert
        assert resp.status_code == 503
        assert resp.json["success"] is False
        assert "GCS_BUCKET" in resp.json["error"]

    def test_upload(self, logged_in: FlaskClient, people, bucket):
        # Act
        resp = self.upload(logged_in, people[0].id)

        # Assert
        assert resp.status_code == 200
        url = "https://storage.googleapis.com/admin-panel-images/users/images/new.png"
        assert resp.json["data"]["image"] == url
        assert mongo.db.users.find_one({"_id": people[0].id})["image"] == url
        (name,) = bucket.blob.call_args.args
        assert name.startswith(f"users/images/{people[0].id}/image_")
        assert name.endswith(".png")
        bucket.blob.return_value.upload_from_string.assert_called_once_with(b"\x89PNG image", content_type="image/png")
        bucket.blob.return_value.delete.assert_not_called()

    def test_upload_replaces_previous(self, logged_in: FlaskClient, people, bucket):
        # Arrange
        mongo.db.users.update_one(
            {"_id": people[0].id},
            {"$set": {"image": "https://storage.googleapis.com/admin-panel-images/users/images/old.png"}},
        )

        # Act
        resp = self.upload(logged_in, people[0].id)

        # Assert
        assert resp.status_code == 200
        assert bucket.blob.call_args_list[-1].args == ("users/images/old.png",)
        bucket.blob.return_value.delete.assert_called_once_with()

    def test_previous_already_gone(self, logged_in: FlaskClient, people, bucket):
        # Arrange
        mongo.db.users.update_one(
            {"_id": people[0].id},
            {"$set": {"image": "https://storage.googleapis.com/admin-panel-images/users/images/old.png"}},
        )
        bucket.blob.return_value.delete.side_effect = NotFound("gone")

        # Act
        resp = self.upload(logged_in, people[0].id)

        # Assert
        assert resp.status_code == 200

    def test_previous_not_deletable(self, logged_in: FlaskClient, people, bucket):
        """The new image is kept when the old one cannot be removed."""
        # Arrange
        mongo.db.users.update_one(
            {"_id": people[0].id},
            {"$set": {"image": "https://storage.googleapis.com/admin-panel-images/users/images/old.png"}},
        )
        bucket.blob.return_value.delete.side_effect = Forbidden("denied")

        # Act
        resp = self.upload(logged_in, people[0].id)

        # Assert
        assert resp.status_code == 200
        assert resp.json["success"] is True
        url = "https://storage.googleapis.com/admin-panel-images/users/images/new.png"
        assert mongo.db.users.find_one({"_id": people[0].id})["image"] == url

    def test_foreign_image_not_deleted(self, logged_in: FlaskClient, people, bucket):
        # Arrange
        mongo.db.users.update_one({"_id": people[0].id}, {"$set": {"image": "https://example.com/me.png"}})

        # Act
        self.upload(logged_in, people[0].id)

        # Assert
        bucket.blob.return_value.delete.assert_not_called()

    def test_unsupported_type(self, logged_in: FlaskClient, people, bucket):
        # Act
        resp = self.upload(logged_in, people[0].id, content_type="text/plain")

        # Assert
        assert resp.status_code == 400
        assert resp.json["errors"] == [{"field": "file", "message": "Unsupported image type"}]
        bucket.blob.assert_not_called()

    def test_missing_file(self, logged_in: FlaskClient, people, gcs_config):
        resp = logged_in.post(f"/users/{people[0].id}/image", data={}, content_type="multipart/form-data")
        assert resp.status_code == 400
        assert resp.json["errors"] == [{"field": "file", "message": "An image file is required"}]

    def test_missing_user(self, logged_in: FlaskClient, bucket):
        resp = self.upload(logged_in, "user_0_missing")
        assert resp.status_code == 404
