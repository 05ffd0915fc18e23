from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from ..common.errors import FilterConfigError

#: Select value meaning "no filter applied".
ALL = "all"

#: Keys always present in the query parameters, not available as filter keys.
RESERVED_KEYS = frozenset({"page", "pageSize", "sortField", "sortDirection"})

SORT_DIRECTIONS = ("asc", "desc")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

#: Bounds on filter values, shared by the query schema and the query builder.
MAX_VALUE_LENGTH = 1000
MAX_LIST_LENGTH = 100


class FilterKind(str, Enum):
    """Kinds of filter controls, each with its own validation and query semantics."""

    SEARCH = "search"
    SELECT = "select"
    MULTISELECT = "multiselect"
    DATERANGE = "daterange"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class FilterOption:
    value: str
    label: str

    def to_dict(self):
        return {"value": self.value, "label": self.label}


@dataclass(frozen=True)
class FilterDefinition:
    """Description of one filterable attribute.

    :param kind: The kind of the filter.
    :param label: Human readable label of the control.
    :param placeholder: Placeholder of the control.
    :param options: Ordered value/label pairs, required for select and multiselect.
    :param default_value: The initial value of the filter.
    :param field: Storage attribute the filter applies to, defaults to the filter key.
    :param transform: Applied to a value before it reaches the storage query.
    """

    kind: FilterKind
    label: str
    placeholder: str | None = None
    options: tuple[FilterOption, ...] = ()
    default_value: Any = None
    field: str | None = None
    transform: Callable[[Any], Any] | None = None

    def __post_init__(self):
        object.__setattr__(self, "kind", FilterKind(self.kind))
        object.__setattr__(self, "options", tuple(self.options))
        if self.kind in (FilterKind.SELECT, FilterKind.MULTISELECT) and not self.options:
            raise FilterConfigError(f"A {self.kind.value} filter needs at least one option.")
        values = [option.value for option in self.options]
        if len(values) != len(set(values)):
            raise FilterConfigError(f"Option values of filter '{self.label}' are not unique.")

    @property
    def empty_value(self) -> Any:
        if self.kind in (FilterKind.SEARCH, FilterKind.SELECT):
            return ""
        if self.kind == FilterKind.BOOLEAN:
            return False
        return None

    @property
    def initial_value(self) -> Any:
        if self.default_value is not None:
            return self.default_value
        return self.empty_value

    @property
    def cleared_value(self) -> Any:
        """The value the filter takes after clearing all filters."""
        return self.default_value or (False if self.kind == FilterKind.BOOLEAN else "")

    def option_values(self, include_all: bool = False) -> tuple[str, ...]:
        return tuple(option.value for option in self.options if include_all or option.value != ALL)

    def to_dict(self):
        return {
            "type": self.kind.value,
            "label": self.label,
            "placeholder": self.placeholder,
            "options": [option.to_dict() for option in self.options],
            "defaultValue": self.default_value,
        }


@dataclass(frozen=True)
class SortDefinition:
    label: str
    field: str

    def to_dict(self):
        return {"label": self.label, "field": self.field}


@dataclass(frozen=True)
class PaginationConfig:
    default_page_size: int = DEFAULT_PAGE_SIZE
    page_sizes: tuple[int, ...] = (10, 25, 50)

    def __post_init__(self):
        object.__setattr__(self, "page_sizes", tuple(self.page_sizes))
        if self.default_page_size < 1:
            raise FilterConfigError("The default page size must be positive.")
        if any(size < 1 for size in self.page_sizes):
            raise FilterConfigError("Page sizes must be positive.")
        if any(a >= b for a, b in zip(self.page_sizes, self.page_sizes[1:])):
            raise FilterConfigError("Page sizes must be in ascending order.")

    def to_dict(self):
        return {"defaultPageSize": self.default_page_size, "pageSizes": list(self.page_sizes)}


@dataclass(frozen=True, eq=False)
class FilterConfig:
    """Declarative description of the filters, sorts and pagination of one record type.

    Immutable after construction, compared by identity.
    """

    filters: Mapping[str, FilterDefinition]
    sorting: Mapping[str, SortDefinition]
    pagination: PaginationConfig | None = None

    def __post_init__(self):
        object.__setattr__(self, "filters", MappingProxyType(dict(self.filters)))
        object.__setattr__(self, "sorting", MappingProxyType(dict(self.sorting)))
        reserved = RESERVED_KEYS.intersection(self.filters)
        if reserved:
            raise FilterConfigError(f"Reserved names used as filter keys: {', '.join(sorted(reserved))}")

    @property
    def default_page_size(self) -> int:
        if self.pagination is None:
            return DEFAULT_PAGE_SIZE
        return self.pagination.default_page_size

    @property
    def default_sort_key(self) -> str | None:
        return next(iter(self.sorting), None)

    def filter_field(self, key: str) -> str:
        definition = self.filters[key]
        return definition.field or key

    @property
    def fields(self) -> frozenset[str]:
        """Storage attributes referenced by the filters and sorts."""
        fields = {self.filter_field(key) for key, d in self.filters.items() if d.kind != FilterKind.SEARCH}
        fields.update(sort.field for sort in self.sorting.values())
        return frozenset(fields)

    def check_fields(self, attributes: Iterable[str]) -> None:
        """Check that every filter and sort field is a real attribute of the record type."""
        missing = self.fields.difference(attributes)
        if missing:
            raise FilterConfigError(f"Unknown record attributes: {', '.join(sorted(missing))}")

    def to_dict(self):
        return {
            "filters": {key: definition.to_dict() for key, definition in self.filters.items()},
            "sorting": {key: sort.to_dict() for key, sort in self.sorting.items()},
            "pagination": self.pagination.to_dict() if self.pagination else None,
        }


def is_blank(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def same_value(a: Any, b: Any) -> bool:
    """Compare two filter values, all the blank values are considered equal."""
    if is_blank(a) and is_blank(b):
        return True
    return a == b
