import re
from typing import Any, Iterable

import pymongo

from .types import ALL, MAX_LIST_LENGTH, MAX_VALUE_LENGTH, FilterConfig, FilterDefinition, FilterKind

# DoS prevention limits
_MAX_STRING_VALUE_LENGTH = MAX_VALUE_LENGTH
_MAX_ARRAY_LENGTH = MAX_LIST_LENGTH


class FieldValidationError(ValueError):
    """Raised when a field name fails validation."""

    pass


class ValueValidationError(ValueError):
    """Raised when a filter value fails validation."""

    pass


def _validate_field_name(field: str, allowed_fields: Iterable[str]) -> str:
    """Validate a field name against the whitelist.

    The whitelist is derived from the FilterConfig and the search fields of the
    listing. This prevents NoSQL injection via field names.

    :param field: Field name to validate
    :param allowed_fields: The whitelist
    :return: Validated field name
    :raises FieldValidationError: If field name is invalid or not whitelisted
    """
    if not field:
        raise FieldValidationError("Field name cannot be empty")

    if not isinstance(field, str):
        raise FieldValidationError(f"Field name must be a string, got {type(field).__name__}")

    if field not in allowed_fields:
        raise FieldValidationError(f"Field '{field}' is not in the allowed fields whitelist")

    return field


def _check_length(value: str) -> str:
    if len(value) > _MAX_STRING_VALUE_LENGTH:
        raise ValueValidationError(f"String value exceeds maximum length of {_MAX_STRING_VALUE_LENGTH}")
    return value


def _sanitize_string_value(value: str) -> str:
    """Sanitize a string value for use in equality queries.

    :param value: String value to sanitize
    :return: Sanitized string value
    :raises ValueValidationError: If value exceeds limits or contains dangerous patterns
    """
    _check_length(value)

    if value.startswith("$"):
        raise ValueValidationError("String values cannot start with '$' (MongoDB operator prefix)")

    return value


def _validate_filter_value(value: Any) -> Any:
    """Validate and sanitize a scalar or array filter value.

    Allow other primitive types (int, float, bool, datetime) as-is, but
    recursively validate arrays and sanitize strings.

    :param value: Value to validate
    :return: Validated value
    :raises ValueValidationError: If value is invalid
    """
    if value is None:
        return None

    if isinstance(value, str):
        return _sanitize_string_value(value)

    if isinstance(value, (list, tuple)):
        if len(value) > _MAX_ARRAY_LENGTH:
            raise ValueValidationError(f"Array value exceeds maximum length of {_MAX_ARRAY_LENGTH}")
        return [_validate_filter_value(v) for v in value]

    if isinstance(value, dict):
        raise ValueValidationError("Dictionary values are not allowed in filters (potential operator injection)")

    return value


def _coerce_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value in ("true", "false"):
        return value == "true"
    raise ValueValidationError(f"Expected a boolean, got {value!r}")


class QueryBuilder:
    """Builds MongoDB queries from sanitized listing parameters.

    Each filter added creates a query fragment, the fragments are combined
    with ``$and``. The search filter matches any of the search fields.
    """

    def __init__(self, config: FilterConfig, search_fields: Iterable[str] = ()):
        """Initialize query builder.

        :param config: The FilterConfig of the listed record type
        :param search_fields: Text attributes the search filter matches
        """
        self.config = config
        self.search_fields = tuple(search_fields)
        self.allowed_fields = config.fields.union(self.search_fields)
        self._query_fragments: list[dict[str, Any]] = []

    def add_filter(self, key: str, value: Any) -> "QueryBuilder":
        """Add a filter to the query.

        :param key: Filter key (must be declared in the FilterConfig)
        :param value: Sanitized filter value
        :return: Self for method chaining
        :raises FieldValidationError: If the key is not declared
        """
        definition = self.config.filters.get(key)
        if definition is None:
            raise FieldValidationError(f"Unknown filter key: {key}")

        query_fragment = self._build_query_fragment(key, definition, value)
        if query_fragment:
            self._query_fragments.append(query_fragment)

        return self

    def add_filters(self, filters: dict[str, Any]) -> "QueryBuilder":
        """Add multiple filters at once.

        :param filters: Dictionary mapping filter keys to their values
        :return: Self for method chaining
        """
        for key, value in filters.items():
            self.add_filter(key, value)
        return self

    def build(self) -> dict[str, Any]:
        """Build the final MongoDB query.

        :return: MongoDB query dictionary, empty if no filters were added
        """
        if not self._query_fragments:
            return {}

        if len(self._query_fragments) == 1:
            return self._query_fragments[0]

        return {"$and": self._query_fragments}

    def sort(self, sort_key: str, direction: str) -> list[tuple[str, int]]:
        """Build the MongoDB sort specification of a sort key.

        :raises FieldValidationError: If the sort key is not declared
        """
        sort = self.config.sorting.get(sort_key)
        if sort is None:
            raise FieldValidationError(f"Unknown sort key: {sort_key}")
        field = _validate_field_name(sort.field, self.allowed_fields)
        return [(field, pymongo.ASCENDING if direction == "asc" else pymongo.DESCENDING)]

    def _build_query_fragment(self, key: str, definition: FilterDefinition, value: Any) -> dict[str, Any] | None:
        """Build MongoDB query fragment from a filter definition and value.

        Only builds a fragment if the value is meaningful (not None, empty string,
        empty list, or the "all" sentinel).

        :raises FieldValidationError: If the field is not whitelisted
        :raises ValueValidationError: If value contains dangerous patterns
        """
        if value is None:
            return None
        if isinstance(value, str) and (not value.strip() or value == ALL):
            return None
        if isinstance(value, (list, tuple, dict)) and not value:
            return None

        if definition.kind == FilterKind.SEARCH:
            return self._search_fragment(definition, value)

        field = _validate_field_name(self.config.filter_field(key), self.allowed_fields)

        if definition.kind == FilterKind.DATERANGE:
            return self._daterange_fragment(field, definition, value)

        if definition.kind == FilterKind.BOOLEAN:
            value = _coerce_boolean(value)

        validated_value = _validate_filter_value(value)
        transformed_value = definition.transform(validated_value) if definition.transform else validated_value

        if definition.kind == FilterKind.MULTISELECT:
            if isinstance(transformed_value, (list, tuple)):
                array_value = list(transformed_value)
            else:
                array_value = [transformed_value]
            return {field: {"$in": array_value}}
        return {field: transformed_value}

    def _search_fragment(self, definition: FilterDefinition, value: Any) -> dict[str, Any] | None:
        if not isinstance(value, str):
            raise ValueValidationError("Search values must be strings")
        if not self.search_fields:
            raise FieldValidationError("The search filter needs at least one search field")
        value = _check_length(value)
        value = definition.transform(value) if definition.transform else value
        pattern = re.escape(value)
        clauses = [
            {_validate_field_name(field, self.allowed_fields): {"$regex": pattern, "$options": "i"}}
            for field in self.search_fields
        ]
        if len(clauses) == 1:
            return clauses[0]
        return {"$or": clauses}

    @staticmethod
    def _daterange_fragment(field: str, definition: FilterDefinition, value: Any) -> dict[str, Any] | None:
        if not isinstance(value, dict) or set(value).difference({"from", "to"}):
            raise ValueValidationError("Date ranges may only have 'from' and 'to' bounds")
        condition = {}
        for bound, operator in (("from", "$gte"), ("to", "$lte")):
            bound_value = value.get(bound)
            if bound_value is None or bound_value == "":
                continue
            bound_value = _validate_filter_value(bound_value)
            condition[operator] = definition.transform(bound_value) if definition.transform else bound_value
        if not condition:
            return None
        return {field: condition}
