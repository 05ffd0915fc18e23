from flask_wtf import FlaskForm
from wtforms import BooleanField, StringField, TextAreaField, validators

PRICE_PATTERN = r"^\d+(\.\d{1,2})?$"


class ProductForm(FlaskForm):
    name = StringField("name", [validators.InputRequired(message="Name is required"), validators.Length(max=255)])
    description = TextAreaField("description", [validators.Optional(), validators.Length(max=5000)])
    price = StringField(
        "price",
        [
            validators.InputRequired(message="Price is required"),
            validators.Regexp(PRICE_PATTERN, message="Price must be a valid number"),
        ],
    )
    sku = StringField("sku", [validators.InputRequired(message="SKU is required"), validators.Length(max=100)])
    active = BooleanField("active", false_values=("false", "", "0"))


class ProductUpdateForm(FlaskForm):
    name = StringField("name", [validators.Optional(), validators.Length(min=1, max=255)])
    description = TextAreaField("description", [validators.Optional(), validators.Length(max=5000)])
    price = StringField(
        "price", [validators.Optional(), validators.Regexp(PRICE_PATTERN, message="Price must be a valid number")]
    )
    sku = StringField("sku", [validators.Optional(), validators.Length(min=1, max=100)])
    active = BooleanField("active", false_values=("false", "", "0"))


class ActiveForm(FlaskForm):
    active = BooleanField("active", false_values=("false", "", "0"))
