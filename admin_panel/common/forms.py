from typing import Any

from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import Field

from .errors import FieldError, RecordValidationError


class FieldBinding:
    """Explicit binding of one form field: its value, a setter and its validation error."""

    def __init__(self, field: Field):
        self._field = field

    @property
    def name(self) -> str:
        return self._field.name

    @property
    def value(self) -> Any:
        return self._field.data

    def set_value(self, value: Any) -> None:
        self._field.data = value

    @property
    def error(self) -> str | None:
        return self._field.errors[0] if self._field.errors else None

    def to_dict(self):
        return {"name": self.name, "value": self.value, "error": self.error}


def bind_form(form: FlaskForm) -> dict[str, FieldBinding]:
    """Bind every data field of the form (the CSRF token excluded) by its name."""
    return {field.name: FieldBinding(field) for field in form if field.type != "CSRFTokenField"}


def make_form(form_class: type[FlaskForm], formdata: MultiDict) -> FlaskForm:
    """Instantiate a form over an explicit submission, CSRF is checked at the request level."""
    return form_class(formdata=formdata, meta={"csrf": False})


def form_errors(form: FlaskForm) -> list[FieldError]:
    return [FieldError(name, binding.error) for name, binding in bind_form(form).items() if binding.error]


def validate_form(form: FlaskForm, submitted: MultiDict | None = None) -> dict[str, Any]:
    """Validate a form and return its data.

    :param form: A form made by :func:`make_form`.
    :param submitted: If given, only the fields present in it are returned.
    :raises RecordValidationError: Listing the first error of every invalid field.
    """
    if not form.validate():
        raise RecordValidationError(form_errors(form))
    bindings = bind_form(form)
    if submitted is not None:
        return {name: binding.value for name, binding in bindings.items() if name in submitted}
    return {name: binding.value for name, binding in bindings.items()}
