"""
Query classification for TTL selection.

Factual questions ("capital of France") go stale slowly and get a long
TTL; everything else is treated as conversational and expires quickly.
A misclassification only affects freshness, never correctness.
"""

from __future__ import annotations

import enum
import re


class QueryClass(str, enum.Enum):
    FACTUAL = "factual"
    CONVERSATIONAL = "conversational"


FACTUAL_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p)
    for p in (
        r"^who (is|was|are) ",
        r"^what (is|are|was) ",
        r"^when (is|was|are) ",
        r"^where (is|was|are) ",
        r"^which (is|was|are) ",
        r"^how (many|much|old) ",
        r"capital of ",
        r"population of ",
        r"founded in ",
        r"born in ",
        r"died in ",
        r"inventor of ",
        r"discovery of ",
        r"definition of ",
        r"meaning of ",
    )
)


def classify_query(query: str) -> QueryClass:
    normalized = query.lower().strip()
    if any(p.search(normalized) for p in FACTUAL_PATTERNS):
        return QueryClass.FACTUAL
    return QueryClass.CONVERSATIONAL
