import math
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

import sentry_sdk
from pymongo.collection import Collection

from .query_builder import QueryBuilder
from .types import FilterConfig


@dataclass
class ListingResult:
    rows: list[dict[str, Any]]
    total_count: int


@dataclass
class ListingPage:
    """One page of a listing together with its pagination metadata."""

    rows: list[Any]
    page: int
    page_size: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self.rows,
            "pagination": {
                "page": self.page,
                "pageSize": self.page_size,
                "total": self.total,
                "totalPages": self.total_pages,
            },
        }


class Listing:
    """Query executor over a MongoDB collection.

    Takes the validated parameters of a :class:`~admin_panel.filters.schema.QuerySchema`
    and returns one page of matching documents plus the number of all matching documents.
    """

    def __init__(
        self,
        collection: Collection,
        config: FilterConfig,
        search_fields: Iterable[str] = (),
        serialize: Callable[[dict], Any] | None = None,
    ):
        self.collection = collection
        self.config = config
        self.search_fields = tuple(search_fields)
        self.serialize = serialize

    def fetch(self, params: Mapping[str, Any]) -> ListingResult:
        builder = QueryBuilder(self.config, self.search_fields)
        builder.add_filters({key: value for key, value in params.items() if key in self.config.filters})
        query = builder.build()
        sort = builder.sort(params["sortField"], params["sortDirection"])
        page = params["page"]
        page_size = params["pageSize"]

        with sentry_sdk.start_span(op="mongo", description=f"Count {self.collection.name}"):
            total_count = self.collection.count_documents(query)
        with sentry_sdk.start_span(op="mongo", description=f"Find {self.collection.name}"):
            cursor = self.collection.find(query).sort(sort).skip((page - 1) * page_size).limit(page_size)
            rows = list(cursor)
        if self.serialize is not None:
            rows = [self.serialize(row) for row in rows]
        return ListingResult(rows, total_count)

    def page(self, params: Mapping[str, Any]) -> ListingPage:
        result = self.fetch(params)
        return ListingPage(result.rows, params["page"], params["pageSize"], result.total_count)
