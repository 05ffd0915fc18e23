from flask_wtf import FlaskForm
from wtforms import BooleanField, EmailField, PasswordField, validators


class LoginForm(FlaskForm):
    email = EmailField("email", [validators.DataRequired(), validators.Email()])
    password = PasswordField("password", [validators.DataRequired()])
    remember_me = BooleanField("remember_me", default=True)
