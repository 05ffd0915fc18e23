from dataclasses import dataclass
from typing import Iterable, List


class AdminPanelError(Exception):
    """Base class of all the errors raised by the dashboard."""

    pass


class FilterConfigError(AdminPanelError, ValueError):
    """Raised when a FilterConfig (or something derived from it) is malformed."""

    pass


class UnknownFilterError(AdminPanelError, KeyError):
    """Raised when a filter key is not declared in the bound FilterConfig."""

    pass


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self):
        return {"field": self.field, "message": self.message}


class FieldErrorsMixin:
    errors: List[FieldError]

    def error_dicts(self):
        return [error.to_dict() for error in self.errors]


class RecordValidationError(FieldErrorsMixin, AdminPanelError):
    """Raised when a submitted record fails validation, carries per-field errors."""

    def __init__(self, errors: Iterable[FieldError], message: str = "Validation failed"):
        super().__init__(message)
        self.message = message
        self.errors = list(errors)


class QueryValidationError(FieldErrorsMixin, AdminPanelError):
    """Raised when listing parameters fail the query schema."""

    def __init__(self, errors: Iterable[FieldError], message: str = "Invalid query parameters"):
        super().__init__(message)
        self.message = message
        self.errors = list(errors)


class RecordNotFoundError(AdminPanelError):
    pass


class UniquenessConflictError(AdminPanelError):
    pass


class RecordInUseError(AdminPanelError):
    """Raised when deleting a record other records still reference."""

    pass


class AuthenticationError(AdminPanelError):
    pass


class ListingFetchError(AdminPanelError):
    pass


class StorageNotConfiguredError(AdminPanelError):
    """Raised when the object storage is used without its configuration."""

    pass
