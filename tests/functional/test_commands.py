from admin_panel import mongo
from admin_panel.users.models import User


def test_user_add(app):
    # Arrange
    runner = app.test_cli_runner()

    # Act
    result = runner.invoke(
        args=["user", "add", "-e", "new@example.com", "-n", "New", "--password", "secret", "-r", "admin"]
    )

    # Assert
    assert result.exit_code == 0
    assert "User added" in result.output
    user = User.get_by_email("new@example.com")
    assert user.roles == ["admin"]
    assert user.check_password("secret")


def test_user_add_existing(app, admin):
    user, _ = admin
    result = app.test_cli_runner().invoke(
        args=["user", "add", "-e", user.email, "-n", "Again", "--password", "secret"]
    )
    assert "User already exists." in result.output
    assert mongo.db.users.count_documents({"email": user.email}) == 1


def test_user_passwd(app, admin):
    # Arrange
    user, _ = admin

    # Act
    result = app.test_cli_runner().invoke(args=["user", "passwd", "-e", user.email, "--password", "changed"])

    # Assert
    assert result.exit_code == 0
    assert User.get(user.id).check_password("changed")


def test_user_list(app, admin):
    result = app.test_cli_runner().invoke(args=["user", "list"])
    assert "admin@example.com" in result.output
    assert "pwhash" not in result.output


def test_init_collections(app):
    result = app.test_cli_runner().invoke(args=["init-collections"])
    assert result.exit_code == 0
    assert "Collections already present: products, users" in result.output
