from ..filters.types import (
    FilterConfig,
    FilterDefinition,
    FilterKind,
    FilterOption,
    PaginationConfig,
    SortDefinition,
)
from .models import Product

SEARCH_FIELDS = ("name", "sku", "description")

products_filter_config = FilterConfig(
    filters={
        "search": FilterDefinition(
            FilterKind.SEARCH, "Search", placeholder="Search products by name, SKU, or description..."
        ),
        "active": FilterDefinition(
            FilterKind.BOOLEAN,
            "Status",
            options=(
                FilterOption("all", "All Products"),
                FilterOption("true", "Active"),
                FilterOption("false", "Inactive"),
            ),
            default_value="all",
        ),
    },
    sorting={
        "name": SortDefinition("Name", "name"),
        "sku": SortDefinition("SKU", "sku"),
        "price": SortDefinition("Price", "price"),
        "createdAt": SortDefinition("Created Date", "created_at"),
        "updatedAt": SortDefinition("Last Updated", "updated_at"),
    },
    pagination=PaginationConfig(default_page_size=10, page_sizes=(10, 25, 50)),
)
products_filter_config.check_fields(Product.FIELDS)
