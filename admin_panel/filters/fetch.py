import hashlib
import json
import logging
from secrets import token_hex
from typing import Any, Callable, Mapping, TypeVar

from flask import current_app
from flask_caching import Cache

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ListingCache:
    """Cache of listing results keyed by the full parameter object.

    Each namespace has a generation token which is part of every key,
    :meth:`invalidate` replaces the token so that all the earlier results
    become unreachable. A fetch that finishes after an invalidation is not
    stored, it is run again under the new generation so the last write wins.
    """

    max_attempts = 3

    def __init__(self, cache: Cache, namespace: str, timeout: int | None = None):
        self.cache = cache
        self.namespace = namespace
        self._timeout = timeout

    @property
    def timeout(self) -> int:
        if self._timeout is not None:
            return self._timeout
        return current_app.config["LISTING_CACHE_TIMEOUT"]

    @property
    def generation_key(self) -> str:
        return f"listing/{self.namespace}/generation"

    def generation(self) -> str:
        token = self.cache.get(self.generation_key)
        if token is None:
            token = token_hex(8)
            self.cache.set(self.generation_key, token, timeout=0)
        return token

    def key(self, params: Mapping[str, Any], generation: str) -> str:
        digest = hashlib.sha256(json.dumps(params, sort_keys=True, default=str).encode("utf-8")).hexdigest()
        return f"listing/{self.namespace}/{generation}/{digest}"

    def get_or_fetch(self, params: Mapping[str, Any], fetch: Callable[[], T]) -> T:
        result = None
        for _ in range(self.max_attempts):
            generation = self.generation()
            key = self.key(params, generation)
            cached = self.cache.get(key)
            if cached is not None:
                return cached
            result = fetch()
            if self.generation() == generation:
                self.cache.set(key, result, timeout=self.timeout)
                return result
            logger.debug(f"Listing {self.namespace} changed during fetch, refetching.")
        return result

    def invalidate(self) -> None:
        self.cache.set(self.generation_key, token_hex(8), timeout=0)
