"""Conftest for unit tests that don't require the application database."""

import pytest

from admin_panel.filters.types import (
    FilterConfig,
    FilterDefinition,
    FilterKind,
    FilterOption,
    PaginationConfig,
    SortDefinition,
)

STATUS_OPTIONS = (
    FilterOption("all", "All Items"),
    FilterOption("true", "Active"),
    FilterOption("false", "Inactive"),
)


@pytest.fixture
def config() -> FilterConfig:
    """A FilterConfig with every kind of filter."""
    return FilterConfig(
        filters={
            "search": FilterDefinition(FilterKind.SEARCH, "Search", placeholder="Search items..."),
            "active": FilterDefinition(FilterKind.BOOLEAN, "Status", options=STATUS_OPTIONS, default_value="all"),
            "category": FilterDefinition(
                FilterKind.SELECT,
                "Category",
                options=(FilterOption("all", "All"), FilterOption("tools", "Tools"), FilterOption("toys", "Toys")),
                default_value="all",
            ),
            "tags": FilterDefinition(
                FilterKind.MULTISELECT,
                "Tags",
                options=(FilterOption("red", "Red"), FilterOption("blue", "Blue"), FilterOption("green", "Green")),
            ),
            "created": FilterDefinition(FilterKind.DATERANGE, "Created", field="created_at"),
        },
        sorting={
            "name": SortDefinition("Name", "name"),
            "price": SortDefinition("Price", "price"),
            "createdAt": SortDefinition("Created Date", "created_at"),
        },
        pagination=PaginationConfig(default_page_size=10, page_sizes=(10, 25, 50)),
    )


@pytest.fixture
def product_config() -> FilterConfig:
    return FilterConfig(
        filters={
            "search": FilterDefinition(FilterKind.SEARCH, "Search"),
            "active": FilterDefinition(FilterKind.BOOLEAN, "Status", options=STATUS_OPTIONS, default_value="all"),
        },
        sorting={
            "name": SortDefinition("Name", "name"),
            "price": SortDefinition("Price", "price"),
            "createdAt": SortDefinition("Created Date", "created_at"),
        },
        pagination=PaginationConfig(default_page_size=10, page_sizes=(10, 25, 50)),
    )
