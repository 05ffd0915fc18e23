import logging
from dataclasses import dataclass, field
from functools import wraps
from typing import Any, Callable

from .errors import (
    AuthenticationError,
    FieldError,
    RecordInUseError,
    RecordNotFoundError,
    RecordValidationError,
    StorageNotConfiguredError,
    UniquenessConflictError,
)

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    """Outcome of a record mutation, rendered as ``{success, data}`` or ``{success, error}``."""

    success: bool
    data: Any = None
    error: str | None = None
    errors: list[FieldError] = field(default_factory=list)
    status_code: int = 200

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            if self.data is None:
                return {"success": True}
            return {"success": True, "data": self.data}
        result: dict[str, Any] = {"success": False, "error": self.error}
        if self.errors:
            result["errors"] = [error.to_dict() for error in self.errors]
        return result


def success(data: Any = None, status_code: int = 200) -> ActionResult:
    return ActionResult(True, data=data, status_code=status_code)


def failure(error: str, status_code: int = 400, errors: list[FieldError] | None = None) -> ActionResult:
    return ActionResult(False, error=error, errors=errors or [], status_code=status_code)


def action(failure_message: str, status_code: int = 200) -> Callable:
    """Turn a record mutation into one that always returns an :class:`ActionResult`.

    The typed dashboard errors keep their message, anything else is logged and
    reported as `failure_message`.
    """

    def deco(f):
        @wraps(f)
        def wrapper(*args, **kwargs) -> ActionResult:
            try:
                return success(f(*args, **kwargs), status_code)
            except RecordValidationError as e:
                return failure(e.message, 400, e.errors)
            except RecordNotFoundError as e:
                return failure(str(e), 404)
            except (UniquenessConflictError, RecordInUseError) as e:
                return failure(str(e), 409)
            except AuthenticationError as e:
                return failure(str(e), 401)
            except StorageNotConfiguredError as e:
                logger.error(f"{failure_message}: {e}")
                return failure(str(e), 503)
            except Exception:
                logger.exception(f"{failure_message}.")
                return failure(failure_message, 500)

        return wrapper

    return deco
