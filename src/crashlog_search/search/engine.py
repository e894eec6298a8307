"""In-memory full-text search over crash logs.

``CrashLogSearchEngine`` owns the document store and the inverted index and
exposes the whole search surface: index, remove, search, stats and clear.
It is synchronous and unlocked; callers sharing one instance across threads
must serialize access (``SearchService`` does).
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
import time

from crashlog_search.domain.model import CrashLogDocument
from crashlog_search.search.fuzzy import DEFAULT_MAX_DISTANCE, find_fuzzy_matches
from crashlog_search.search.index import DocumentStore, InvertedIndex, find_occurrences
from crashlog_search.search.models import (
    IndexStats,
    Posting,
    SearchMatch,
    SearchOptions,
    SearchResult,
    StoredDocument,
)
from crashlog_search.search.scoring import score_postings
from crashlog_search.search.snippet import extract_context
from crashlog_search.search.tokenizer import LogTokenizer


logger = logging.getLogger(__name__)


class CrashLogSearchEngine:
    """Inverted-index search engine with phrase, fuzzy and field-boosted scoring."""

    def __init__(
        self,
        *,
        tokenizer: LogTokenizer | None = None,
        field_boosts: Mapping[str, float] | None = None,
    ) -> None:
        self.tokenizer = tokenizer or LogTokenizer()
        self.field_boosts = dict(field_boosts) if field_boosts is not None else None
        self._documents = DocumentStore()
        self._index = InvertedIndex()

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------

    def index_crash_log(self, document: CrashLogDocument) -> None:
        """Index ``document`` under its id, replacing any previous version."""

        self.index_fields(document.id, document.search_fields())

    def index_fields(self, doc_id: str, fields: Mapping[str, str]) -> None:
        """Index raw field text under ``doc_id``.

        Any earlier version of the document is removed first so no postings
        outlive the text they were built from.
        """

        if doc_id in self._documents:
            self.remove_from_index(doc_id)

        stored = StoredDocument.from_fields(doc_id, dict(fields))
        self._documents.put(stored)

        postings_added = 0
        for field_name, text in stored.fields.items():
            if not text:
                continue
            lowered = text.lower()
            for term in self.tokenizer.tokenize(text):
                positions = find_occurrences(lowered, term)
                if not positions:
                    continue
                self._index.add(
                    term,
                    Posting(doc_id=doc_id, field=field_name, positions=positions, field_length=len(text)),
                )
                postings_added += 1

        logger.debug(
            "Indexed crash log %s with %d fields (%d postings)",
            doc_id,
            len(stored.fields),
            postings_added,
        )

    def remove_from_index(self, doc_id: str) -> None:
        """Forget ``doc_id``. Unknown ids are ignored."""

        was_stored = self._documents.remove(doc_id)
        removed = self._index.remove_document(doc_id)
        if was_stored or removed:
            logger.debug("Removed crash log %s (%d postings)", doc_id, removed)

    def clear(self) -> None:
        self._index.clear()
        self._documents.clear()
        logger.debug("Search index cleared")

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def search(self, query: str, options: SearchOptions | None = None) -> list[SearchResult]:
        """Return documents matching ``query``, best first."""

        opts = options or SearchOptions()
        if opts.max_results <= 0:
            return []
        if not query.strip():
            return self._list_filtered(opts)

        started = time.perf_counter()
        if opts.phrase:
            candidates = self._collect_phrase(query)
            query_term_count = 1
        else:
            query_terms = self.tokenizer.tokenize(query)
            candidates = self._collect_terms(query_terms, opts)
            query_term_count = len(query_terms)

        results: list[SearchResult] = []
        for doc_id, postings in candidates.items():
            document = self._documents.get(doc_id)
            if document is None or not opts.filters.accepts(document.fields):
                continue
            score = score_postings(postings, query_term_count, boosts=self.field_boosts)
            if score < opts.min_score:
                continue
            matches = tuple(
                SearchMatch(
                    field=posting.field,
                    context=extract_context(
                        document.fields.get(posting.field, ""),
                        posting.first_position,
                        opts.context_chars,
                    ),
                    position=posting.first_position,
                )
                for posting in postings
            )
            results.append(SearchResult(doc_id=doc_id, score=score, matches=matches))

        results.sort(key=lambda result: result.score, reverse=True)
        start = max(opts.offset, 0)
        results = results[start : start + opts.max_results]

        logger.debug(
            "Search %r (phrase=%s fuzzy=%s) -> %d candidates, %d results in %.2fms",
            query,
            opts.phrase,
            opts.fuzzy,
            len(candidates),
            len(results),
            (time.perf_counter() - started) * 1000,
        )
        return results

    def _list_filtered(self, opts: SearchOptions) -> list[SearchResult]:
        """Newest documents passing ``opts.filters``, unscored; nothing without filters."""

        if opts.filters.is_empty():
            return []
        accepted = [doc for doc in reversed(list(self._documents)) if opts.filters.accepts(doc.fields)]
        start = max(opts.offset, 0)
        return [SearchResult(doc_id=doc.doc_id, score=0.0) for doc in accepted[start : start + opts.max_results]]

    def fuzzy_match(self, term: str, max_distance: int = DEFAULT_MAX_DISTANCE) -> list[str]:
        """Return indexed terms within ``max_distance`` edits of ``term``."""

        return [match for match, _distance in find_fuzzy_matches(term, self._index.vocabulary(), max_distance)]

    def expand_terms(self, query_terms: set[str], options: SearchOptions) -> list[str]:
        """Query terms plus their fuzzy expansions, in a stable order."""

        active = set(query_terms)
        if options.fuzzy:
            for term in query_terms:
                active.update(self.fuzzy_match(term, options.fuzzy_distance))
        return sorted(active)

    def _collect_terms(self, query_terms: set[str], options: SearchOptions) -> dict[str, list[Posting]]:
        candidates: dict[str, list[Posting]] = {}
        for term in self.expand_terms(query_terms, options):
            for posting in self._index.postings(term):
                candidates.setdefault(posting.doc_id, []).append(posting)
        return candidates

    def _collect_phrase(self, phrase: str) -> dict[str, list[Posting]]:
        needle = phrase.lower()
        candidates: dict[str, list[Posting]] = {}
        for document in self._documents:
            for field_name, text in document.fields.items():
                positions = find_occurrences(text.lower(), needle)
                if positions:
                    candidates.setdefault(document.doc_id, []).append(
                        Posting(
                            doc_id=document.doc_id,
                            field=field_name,
                            positions=positions,
                            field_length=len(text),
                        )
                    )
        return candidates

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_stats(self) -> IndexStats:
        return IndexStats(total_documents=len(self._documents), total_terms=len(self._index))

    def document_ids(self) -> list[str]:
        """Indexed document ids, oldest first."""
        return self._documents.ids()

    def vocabulary(self) -> list[str]:
        return sorted(self._index.vocabulary())

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._documents

    def __len__(self) -> int:
        return len(self._documents)
