"""Query parameter schemas derived from a FilterConfig.

The derived schema is shared by the listing views (to validate what comes in
through the query string) and by the data layer (to validate what it is about
to run), so both agree on what values are legal.
"""

import logging
from functools import lru_cache
from typing import Annotated, Any, Literal, Mapping, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictBool,
    StringConstraints,
    ValidationError,
    conlist,
    create_model,
)

from ..common.errors import FieldError, FilterConfigError, QueryValidationError
from .types import (
    ALL,
    MAX_LIST_LENGTH,
    MAX_PAGE_SIZE,
    MAX_VALUE_LENGTH,
    SORT_DIRECTIONS,
    FilterConfig,
    FilterDefinition,
    FilterKind,
)

logger = logging.getLogger(__name__)


def _blank_to_none(value: Any) -> Any:
    if value is None or value == "" or value == ALL:
        return None
    return value


def _search_value(value: Any) -> Any:
    if value == "":
        return None
    return value


def _boolean_value(value: Any) -> Any:
    value = _blank_to_none(value)
    if isinstance(value, str):
        if value == "true":
            return True
        if value == "false":
            return False
        raise ValueError("Expected true or false")
    return value


def _list_value(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return [value]
    return value


def _no_operator(value: str) -> str:
    if value.startswith("$"):
        raise ValueError("Values cannot start with '$'")
    return value


SearchText = Annotated[str, StringConstraints(max_length=MAX_VALUE_LENGTH)]
#: A value compared for equality in the storage query.
FilterValue = Annotated[str, StringConstraints(max_length=MAX_VALUE_LENGTH), AfterValidator(_no_operator)]


class DateRange(BaseModel):
    model_config = ConfigDict(extra="forbid")

    from_: Optional[FilterValue] = Field(default=None, alias="from")
    to: Optional[FilterValue] = None


def _filter_field(definition: FilterDefinition) -> tuple[Any, Any] | None:
    if definition.kind == FilterKind.SEARCH:
        return Annotated[Optional[SearchText], BeforeValidator(_search_value)], None
    if definition.kind == FilterKind.BOOLEAN:
        return Annotated[Optional[StrictBool], BeforeValidator(_boolean_value)], None
    if definition.kind == FilterKind.SELECT:
        values = definition.option_values()
        if not values:
            return None
        return Annotated[Optional[Literal[values]], BeforeValidator(_blank_to_none)], None  # type: ignore
    if definition.kind == FilterKind.MULTISELECT:
        items = conlist(FilterValue, max_length=MAX_LIST_LENGTH)
        return Annotated[Optional[items], BeforeValidator(_list_value)], None  # type: ignore
    if definition.kind == FilterKind.DATERANGE:
        return Optional[DateRange], None
    raise FilterConfigError(f"Unsupported filter kind: {definition.kind}")  # pragma: no cover


class QuerySchema:
    """Validator of raw listing parameters for one FilterConfig."""

    def __init__(self, config: FilterConfig, model: type[BaseModel]):
        self.config = config
        self.model = model

    def validate(self, raw: Mapping[str, Any]) -> dict[str, Any]:
        """Validate and normalize raw parameters.

        Absent filters are omitted from the result, the paging and sorting keys
        are always present.

        :param raw: Mapping of parameter names to raw values.
        :return: The normalized parameters.
        :raises QueryValidationError: Listing every offending field.
        """
        try:
            parsed = self.model.model_validate(dict(raw))
        except ValidationError as e:
            errors = [
                FieldError(".".join(str(part) for part in error["loc"]) or "unknown", error["msg"])
                for error in e.errors()
            ]
            logger.info(f"Rejected query parameters: {errors}")
            raise QueryValidationError(errors) from e
        params = parsed.model_dump(by_alias=True, exclude_none=True)
        return {key: value for key, value in params.items() if value != {} and value != []}


@lru_cache(maxsize=None)
def derive_query_schema(config: FilterConfig) -> QuerySchema:
    """Derive the query parameter schema of a FilterConfig.

    :raises FilterConfigError: If the config declares no sort keys.
    """
    if not config.sorting:
        raise FilterConfigError("A FilterConfig needs at least one sort key to establish a default sortField.")

    fields: dict[str, Any] = {}
    for index, (key, definition) in enumerate(config.filters.items()):
        spec = _filter_field(definition)
        if spec is None:
            continue
        annotation, default = spec
        fields[f"filter_{index}"] = (annotation, Field(default=default, alias=key))

    sort_keys = tuple(config.sorting)
    fields["page"] = (int, Field(default=1, ge=1))
    fields["page_size"] = (int, Field(default=config.default_page_size, ge=1, le=MAX_PAGE_SIZE, alias="pageSize"))
    fields["sort_field"] = (Literal[sort_keys], Field(default=sort_keys[0], alias="sortField"))  # type: ignore
    fields["sort_direction"] = (Literal[SORT_DIRECTIONS], Field(default="desc", alias="sortDirection"))  # type: ignore

    model = create_model(
        "QueryParams",
        __config__=ConfigDict(extra="ignore"),
        **fields,
    )
    return QuerySchema(config, model)
