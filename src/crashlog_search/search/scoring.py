"""Field-weighted relevance scoring.

A flat heuristic over the postings of one document: no inverse document
frequency and no length normalization.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from crashlog_search.search.models import Posting


FIELD_BOOSTS: Mapping[str, float] = MappingProxyType(
    {
        "errorMessage": 3.0,
        "errorType": 2.5,
        "stackTrace": 2.0,
        "title": 1.5,
        "description": 1.2,
        "files": 1.0,
    }
)
DEFAULT_FIELD_BOOST = 1.0
FIELD_MATCH_POINTS = 10.0


def field_boost(field_name: str, boosts: Mapping[str, float] | None = None) -> float:
    table = FIELD_BOOSTS if boosts is None else boosts
    return table.get(field_name, DEFAULT_FIELD_BOOST)


def score_postings(
    postings: Iterable[Posting],
    query_term_count: int,
    *,
    boosts: Mapping[str, float] | None = None,
) -> float:
    """Score one candidate document from its contributing postings.

    Each distinct field earns ``FIELD_MATCH_POINTS`` once, every posting adds
    its field boost times its occurrence count, and the total is multiplied
    by ``1 + matched_fields / query_term_count``.
    """

    score = 0.0
    matched_fields: set[str] = set()

    for posting in postings:
        if posting.field not in matched_fields:
            matched_fields.add(posting.field)
            score += FIELD_MATCH_POINTS
        score += field_boost(posting.field, boosts) * posting.frequency

    if not matched_fields or query_term_count <= 0:
        return score

    coverage = len(matched_fields) / query_term_count
    return score * (1 + coverage)
