"""
Cache key derivation.

Key: SHA-256(normalized_query + "|model:<m>" + "|temp:<t>")

Only options that are present (not None) are encoded. A temperature of
0 counts as present.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass

from frugal.common.errors import InvalidInputError

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class QueryOptions:
    """Call options that change the completion and therefore the key."""

    model: str | None = None
    temperature: float | None = None

    def with_defaults(
        self, model: str | None = None, temperature: float | None = None
    ) -> QueryOptions:
        """Fill absent fields so an explicit default and an omission hash alike."""
        return QueryOptions(
            model=self.model if self.model is not None else model,
            temperature=self.temperature if self.temperature is not None else temperature,
        )


def normalize_query(query: str) -> str:
    """Lower-case, collapse whitespace runs, trim."""
    if not isinstance(query, str):
        raise InvalidInputError(
            "Query must be a string", details={"received": type(query).__name__}
        )
    return _WHITESPACE.sub(" ", query.lower()).strip()


def _format_temperature(value: float) -> str:
    # 0.7 and 0.70 must produce the same key; ints render without ".0"
    as_float = float(value)
    if as_float.is_integer():
        return str(int(as_float))
    return repr(as_float)


def build_key_source(query: str, options: QueryOptions | None = None) -> str:
    options = options or QueryOptions()
    source = normalize_query(query)
    if options.model is not None:
        source += f"|model:{options.model}"
    if options.temperature is not None:
        source += f"|temp:{_format_temperature(options.temperature)}"
    return source


def compute_key(query: str, options: QueryOptions | None = None) -> str:
    """Compute the SHA-256 cache key for a query and its options."""
    return hashlib.sha256(build_key_source(query, options).encode("utf-8")).hexdigest()
