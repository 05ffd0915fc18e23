from typing import Any, Callable

from flask import jsonify, request

from ..filters.state import QueryFilterState
from ..filters.types import FilterConfig
from .results import ActionResult


def action_response(result: ActionResult):
    return jsonify(result.to_dict()), result.status_code


def listing_response(config: FilterConfig, fetch: Callable[[dict[str, Any]], dict[str, Any]]):
    """Render a listing for the query string of the current request.

    The response carries the listing envelope, the state of the filter controls
    and the canonical query string of that state.

    :raises QueryValidationError: If the query string does not pass the query schema.
    :raises ListingFetchError: If the listing could not be fetched.
    """
    state = QueryFilterState.from_query_string(config, request.args)
    params = state.validated_params()
    envelope = fetch(params)
    return jsonify({**envelope, "filters": state.view(), "query": state.to_query_string()})
