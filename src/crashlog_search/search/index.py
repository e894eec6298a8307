"""In-memory document store and inverted index."""

from __future__ import annotations

from array import array
from collections.abc import Iterator, KeysView

from crashlog_search.search.models import Posting, StoredDocument


def find_occurrences(haystack: str, needle: str) -> array[int]:
    """Return every offset where ``needle`` occurs in ``haystack``.

    Overlapping occurrences count: the scan resumes one character after each
    hit. This is a plain substring scan, so a term is also found inside
    larger words.
    """

    positions = array("I")
    if not needle:
        return positions
    start = 0
    while True:
        pos = haystack.find(needle, start)
        if pos == -1:
            return positions
        positions.append(pos)
        start = pos + 1


class DocumentStore:
    """Field text per document id, in indexing order."""

    def __init__(self) -> None:
        self._documents: dict[str, StoredDocument] = {}

    def put(self, document: StoredDocument) -> None:
        # Pop first so an overwrite moves the id to the end of the order
        self._documents.pop(document.doc_id, None)
        self._documents[document.doc_id] = document

    def get(self, doc_id: str) -> StoredDocument | None:
        return self._documents.get(doc_id)

    def remove(self, doc_id: str) -> bool:
        return self._documents.pop(doc_id, None) is not None

    def ids(self) -> list[str]:
        """Document ids, oldest first."""
        return list(self._documents)

    def clear(self) -> None:
        self._documents.clear()

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._documents

    def __iter__(self) -> Iterator[StoredDocument]:
        return iter(self._documents.values())

    def __len__(self) -> int:
        return len(self._documents)


class InvertedIndex:
    """Term -> postings map.

    A term is present only while it has at least one posting.
    """

    def __init__(self) -> None:
        self._postings: dict[str, list[Posting]] = {}

    def add(self, term: str, posting: Posting) -> None:
        self._postings.setdefault(term, []).append(posting)

    def postings(self, term: str) -> list[Posting]:
        return list(self._postings.get(term, ()))

    def remove_document(self, doc_id: str) -> int:
        """Drop every posting for ``doc_id``; return how many were removed."""

        removed = 0
        empty_terms: list[str] = []
        for term, entries in self._postings.items():
            kept = [entry for entry in entries if entry.doc_id != doc_id]
            if len(kept) == len(entries):
                continue
            removed += len(entries) - len(kept)
            if kept:
                self._postings[term] = kept
            else:
                empty_terms.append(term)

        for term in empty_terms:
            del self._postings[term]
        return removed

    def vocabulary(self) -> KeysView[str]:
        return self._postings.keys()

    def clear(self) -> None:
        self._postings.clear()

    def __contains__(self, term: object) -> bool:
        return term in self._postings

    def __len__(self) -> int:
        return len(self._postings)
