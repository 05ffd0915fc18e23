from ..filters.types import (
    FilterConfig,
    FilterDefinition,
    FilterKind,
    FilterOption,
    PaginationConfig,
    SortDefinition,
)
from .models import User

SEARCH_FIELDS = ("name", "email")

users_filter_config = FilterConfig(
    filters={
        "search": FilterDefinition(FilterKind.SEARCH, "Search", placeholder="Search users by name or email..."),
        "emailVerified": FilterDefinition(
            FilterKind.BOOLEAN,
            "Verification Status",
            options=(
                FilterOption("all", "All Users"),
                FilterOption("true", "Verified"),
                FilterOption("false", "Unverified"),
            ),
            default_value="all",
            field="email_verified",
        ),
    },
    sorting={
        "name": SortDefinition("Name", "name"),
        "email": SortDefinition("Email", "email"),
        "createdAt": SortDefinition("Created Date", "created_at"),
        "updatedAt": SortDefinition("Last Updated", "updated_at"),
    },
    pagination=PaginationConfig(default_page_size=10, page_sizes=(10, 25, 50)),
)
users_filter_config.check_fields(User.FIELDS)
