"""Query string mirror of a :class:`~admin_panel.filters.state.QueryFilterState`.

Values equal to their defaults are left out, multiselect values repeat their
key and date ranges use ``<key>.from`` and ``<key>.to``. A multiselect or date
range emptied against a non-blank default is written as an empty value. Parsing
is lenient, strict checking is left to the derived query schema.
"""

from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl, urlencode

from werkzeug.datastructures import MultiDict

from .types import FilterConfig, FilterKind, is_blank, same_value

if TYPE_CHECKING:
    from .state import QueryFilterState


def _encode_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_state(state: "QueryFilterState") -> str:
    config = state.config
    pairs: list[tuple[str, str]] = []
    for key, definition in config.filters.items():
        value = state.filters.get(key)
        if same_value(value, definition.initial_value):
            continue
        if definition.kind == FilterKind.MULTISELECT:
            items = [value] if isinstance(value, str) else (value or [])
            pairs.extend((key, _encode_scalar(item)) for item in items)
            if not items:
                # emptied on purpose, not defaulted
                pairs.append((key, ""))
        elif definition.kind == FilterKind.DATERANGE:
            bounds = [(bound, value[bound]) for bound in ("from", "to") if value and not is_blank(value.get(bound))]
            pairs.extend((f"{key}.{bound}", _encode_scalar(bound_value)) for bound, bound_value in bounds)
            if not bounds:
                pairs.append((f"{key}.from", ""))
        elif value is not None:
            pairs.append((key, _encode_scalar(value)))

    if state.page != 1:
        pairs.append(("page", str(state.page)))
    if state.page_size != config.default_page_size:
        pairs.append(("pageSize", str(state.page_size)))
    if state.sort_field != config.default_sort_key:
        pairs.append(("sortField", str(state.sort_field)))
    if state.sort_direction != "desc":
        pairs.append(("sortDirection", state.sort_direction))
    return urlencode(pairs)


def _parse_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _decode_boolean(value: str) -> Any:
    if value == "true":
        return True
    if value == "false":
        return False
    return value


def decode_state(config: FilterConfig, query) -> dict[str, Any]:
    """Parse a query string (or a MultiDict such as ``request.args``).

    :return: A dict with ``filters`` (only the filters present in the query),
        ``page``, ``page_size``, ``sort_field`` and ``sort_direction``.
    """
    if isinstance(query, MultiDict):
        args = query
    else:
        args = MultiDict(parse_qsl(query or "", keep_blank_values=True))

    filters: dict[str, Any] = {}
    for key, definition in config.filters.items():
        if definition.kind == FilterKind.MULTISELECT:
            if key in args:
                filters[key] = [item for item in args.getlist(key) if item != ""]
        elif definition.kind == FilterKind.DATERANGE:
            bounds = {bound: args[f"{key}.{bound}"] for bound in ("from", "to") if f"{key}.{bound}" in args}
            if bounds:
                filters[key] = {bound: value for bound, value in bounds.items() if value != ""}
        elif key in args:
            value = args[key]
            filters[key] = _decode_boolean(value) if definition.kind == FilterKind.BOOLEAN else value

    return {
        "filters": filters,
        "page": _parse_int(args.get("page"), 1),
        "page_size": _parse_int(args.get("pageSize"), config.default_page_size),
        "sort_field": args.get("sortField") or config.default_sort_key,
        "sort_direction": args.get("sortDirection") or "desc",
    }
