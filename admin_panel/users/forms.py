from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileRequired
from wtforms import BooleanField, EmailField, StringField, URLField, validators


class UserForm(FlaskForm):
    name = StringField("name", [validators.InputRequired(message="Name is required"), validators.Length(max=255)])
    email = EmailField(
        "email",
        [validators.InputRequired(message="Email is required"), validators.Email(message="Invalid email address")],
    )
    image = URLField("image", [validators.Optional(), validators.URL(message="Image must be a valid URL")])


class UserUpdateForm(FlaskForm):
    name = StringField("name", [validators.Optional(), validators.Length(min=1, max=255)])
    email = EmailField("email", [validators.Optional(), validators.Email(message="Invalid email address")])
    image = URLField("image", [validators.Optional(), validators.URL(message="Image must be a valid URL")])
    email_verified = BooleanField("emailVerified", name="emailVerified", false_values=("false", "", "0"))


class VerifiedForm(FlaskForm):
    verified = BooleanField("verified", false_values=("false", "", "0"))


class ImageForm(FlaskForm):
    file = FileField("file", [FileRequired(message="An image file is required")])
