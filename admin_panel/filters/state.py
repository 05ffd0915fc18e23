from typing import Any, Callable, Iterable, Mapping

from ..common.errors import UnknownFilterError
from .schema import QuerySchema, derive_query_schema
from .types import ALL, FilterConfig, FilterDefinition, FilterKind, is_blank, same_value
from .urlstate import decode_state, encode_state

Listener = Callable[["QueryFilterState"], None]


def sanitize_value(definition: FilterDefinition, value: Any) -> Any:
    """Turn a raw filter value into a query value, None meaning "no constraint"."""
    if is_blank(value) or value == ALL:
        return None
    if definition.kind == FilterKind.BOOLEAN and isinstance(value, str):
        if value == "true":
            return True
        if value == "false":
            return False
    if definition.kind == FilterKind.MULTISELECT and isinstance(value, str):
        return [value]
    if definition.kind == FilterKind.DATERANGE and isinstance(value, Mapping):
        bounds = {bound: value[bound] for bound in ("from", "to") if not is_blank(value.get(bound))}
        return bounds or None
    return value


class QueryFilterState:
    """The live filter, sort and page selection of one listing view.

    Every mutation goes through :meth:`_commit`, which notifies the listeners
    registered by :meth:`on_change`. Any change to what the result set contains
    (or how dense it is) moves the view back to the first page.
    """

    def __init__(self, config: FilterConfig, schema: QuerySchema | None = None):
        self.config = config
        self.schema = schema if schema is not None else derive_query_schema(config)
        self.filters: dict[str, Any] = {key: definition.initial_value for key, definition in config.filters.items()}
        self.page: int = 1
        self.page_size: int = config.default_page_size
        self.sort_field: str | None = config.default_sort_key
        self.sort_direction: str = "desc"
        self._listeners: list[Listener] = []

    @classmethod
    def from_query_string(cls, config: FilterConfig, query) -> "QueryFilterState":
        """Restore a state from its query string mirror (a string or a MultiDict)."""
        state = cls(config)
        decoded = decode_state(config, query)
        state.filters.update(decoded.pop("filters"))
        for attr, value in decoded.items():
            setattr(state, attr, value)
        return state

    def on_change(self, listener: Listener) -> Callable[[], None]:
        """Register a listener, returns a function that unregisters it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _commit(self, filters: Mapping[str, Any] | None = None, **attrs: Any) -> None:
        if filters:
            self.filters.update(filters)
        for attr, value in attrs.items():
            setattr(self, attr, value)
        for listener in list(self._listeners):
            listener(self)

    def _check_keys(self, keys: Iterable[str]) -> None:
        unknown = [key for key in keys if key not in self.config.filters]
        if unknown:
            raise UnknownFilterError(f"Unknown filter keys: {', '.join(unknown)}")

    def update_filter(self, key: str, value: Any) -> None:
        self._check_keys([key])
        self._commit({key: value}, page=1)

    def update_filters(self, partial: Mapping[str, Any]) -> None:
        self._check_keys(partial)
        self._commit(partial, page=1)

    def clear_filters(self) -> None:
        """Reset filters and page size, the sort is kept."""
        cleared = {key: definition.cleared_value for key, definition in self.config.filters.items()}
        self._commit(cleared, page=1, page_size=self.config.default_page_size)

    def set_page(self, page: int) -> None:
        self._commit(page=page)

    def set_page_size(self, size: int) -> None:
        self._commit(page_size=size, page=1)

    def set_sorting(self, field: str, direction: str) -> None:
        self._commit(sort_field=field, sort_direction=direction, page=1)

    def get_query_params(self) -> dict[str, Any]:
        """Build the sanitized parameters for the query executor.

        Filters without a meaningful value are left out entirely.
        """
        params: dict[str, Any] = {}
        for key, definition in self.config.filters.items():
            value = sanitize_value(definition, self.filters.get(key))
            if value is not None:
                params[key] = value
        params["page"] = self.page
        params["pageSize"] = self.page_size
        params["sortField"] = self.sort_field or self.config.default_sort_key
        params["sortDirection"] = self.sort_direction or "desc"
        return params

    def validated_params(self) -> dict[str, Any]:
        """:meth:`get_query_params` checked against the derived schema."""
        return self.schema.validate(self.get_query_params())

    def has_active_filters(self) -> bool:
        return any(
            not same_value(self.filters.get(key), definition.cleared_value)
            for key, definition in self.config.filters.items()
        )

    def to_query_string(self) -> str:
        return encode_state(self)

    def view(self) -> dict[str, Any]:
        return {
            "filters": dict(self.filters),
            "page": self.page,
            "pageSize": self.page_size,
            "sortField": self.sort_field,
            "sortDirection": self.sort_direction,
            "hasActiveFilters": self.has_active_filters(),
        }
