"""Fuzzy matching for typo-tolerant crash log search.

Query terms are expanded against the indexed vocabulary by a linear scan with
classic Levenshtein distance (unit cost insert/delete/substitute). There is no
approximate index structure: every candidate must exist literally in the
vocabulary, and the scan costs O(vocabulary * term length^2).
"""

from __future__ import annotations

from collections.abc import Iterable


DEFAULT_MAX_DISTANCE = 2


def levenshtein_distance(source: str, target: str, max_distance: int | None = None) -> int:
    """Edit distance between ``source`` and ``target``.

    With ``max_distance`` set the computation stops as soon as the bound is
    certain to be exceeded and ``max_distance + 1`` is returned instead of the
    exact distance.

        >>> levenshtein_distance("nullpointerexception", "nullpointerexcpetion")
        2
        >>> levenshtein_distance("", "jei")
        3
    """
    short, long_ = sorted((source, target), key=len)
    limit = max_distance + 1 if max_distance is not None else None

    if limit is not None and len(long_) - len(short) >= limit:
        return limit
    if not short:
        return len(long_)

    # previous[i]: distance between short[:i] and the prefix of long_ seen so far
    previous = list(range(len(short) + 1))
    for row, long_char in enumerate(long_, start=1):
        current = [row]
        for col, short_char in enumerate(short, start=1):
            current.append(
                min(
                    previous[col] + 1,
                    current[col - 1] + 1,
                    previous[col - 1] + (short_char != long_char),
                )
            )
        if limit is not None and min(current) >= limit:
            return limit
        previous = current

    distance = previous[-1]
    if limit is not None:
        return min(distance, limit)
    return distance


def find_fuzzy_matches(
    query_term: str,
    vocabulary: Iterable[str],
    max_distance: int = DEFAULT_MAX_DISTANCE,
) -> list[tuple[str, int]]:
    """Vocabulary terms within ``max_distance`` edits of ``query_term``.

    Both sides are compared verbatim, so the vocabulary and the query must
    come from the same tokenizer. Results are ``(term, distance)`` pairs,
    closest first and alphabetical within a distance; an exact hit has
    distance 0.
    """
    if not query_term or max_distance < 0:
        return []

    query_length = len(query_term)
    candidates = (term for term in vocabulary if abs(len(term) - query_length) <= max_distance)
    scored = ((term, levenshtein_distance(query_term, term, max_distance)) for term in candidates)
    return sorted(
        ((term, distance) for term, distance in scored if distance <= max_distance),
        key=lambda pair: (pair[1], pair[0]),
    )
