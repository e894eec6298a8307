"""Search service orchestration layer.

Owns the process-wide ``CrashLogSearchEngine`` and is the only object the
rest of the application talks to. It adds what the engine deliberately
leaves out:

- one re-entrant lock serializing every engine call
- query length validation before a query reaches the fuzzy scan
- the retention cap (oldest crash logs are evicted first)
- lifecycle hooks for the persistence layer (deleted/expired records)
- metrics, spans and log correlation
"""

from __future__ import annotations

from collections.abc import Iterable
import logging
import threading

from crashlog_search.config import Settings
from crashlog_search.domain.model import CrashLogDocument
from crashlog_search.observability.context import operation_context
from crashlog_search.observability.metrics import (
    INDEX_DOC_COUNT,
    INDEX_OPERATIONS,
    INDEX_TERM_COUNT,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    search_mode,
    track_latency,
)
from crashlog_search.observability.tracing import create_span
from crashlog_search.search.engine import CrashLogSearchEngine
from crashlog_search.search.models import IndexStats, SearchFilters, SearchResult


logger = logging.getLogger(__name__)


class QueryTooLongError(ValueError):
    """Raised when a query exceeds ``Settings.max_query_length``."""

    def __init__(self, length: int, limit: int) -> None:
        super().__init__(f"Query is {length} characters long; the limit is {limit}")
        self.length = length
        self.limit = limit


class SearchService:
    """Thread-safe facade over a single search engine instance."""

    def __init__(
        self,
        engine: CrashLogSearchEngine | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.engine = engine or CrashLogSearchEngine()
        self.settings = settings or Settings()
        self._lock = threading.RLock()

    def index(self, document: CrashLogDocument) -> None:
        """Index (or re-index) a crash log."""

        with self._lock, operation_context("index", doc_id=document.id):
            with create_span("crashlog.index", attributes={"crashlog.id": document.id}):
                self.engine.index_crash_log(document)
            INDEX_OPERATIONS.labels(operation="index").inc()
            self._enforce_retention(self.engine)
            self._publish_gauges()

    def remove(self, doc_id: str) -> None:
        """Drop a crash log from the index; unknown ids are ignored."""

        with self._lock, operation_context("remove", doc_id=doc_id):
            if doc_id not in self.engine:
                logger.debug("Remove requested for unknown crash log %s", doc_id)
                return
            with create_span("crashlog.remove", attributes={"crashlog.id": doc_id}):
                self.engine.remove_from_index(doc_id)
            INDEX_OPERATIONS.labels(operation="remove").inc()
            self._publish_gauges()

    def on_deleted(self, doc_id: str) -> None:
        """Persistence hook: a crash log record was deleted."""

        self.remove(doc_id)

    def on_expired(self, doc_ids: Iterable[str]) -> int:
        """Persistence hook: records expired; returns how many were indexed."""

        removed = 0
        with self._lock:
            for doc_id in doc_ids:
                if doc_id in self.engine:
                    removed += 1
                self.remove(doc_id)
        if removed:
            logger.info("Removed %d expired crash logs from the search index", removed)
        return removed

    def search(
        self,
        query: str,
        *,
        fuzzy: bool = False,
        phrase: bool = False,
        max_results: int | None = None,
        min_score: float | None = None,
        offset: int = 0,
        minecraft_version: str | None = None,
        mod_loader: str | None = None,
        error_type: str | None = None,
        mod: str | None = None,
    ) -> list[SearchResult]:
        """Run a query with configured defaults for unset options.

        ``minecraft_version``, ``mod_loader`` and ``error_type`` must equal the
        parsed field; ``mod`` must be in the mod list. ``offset`` and
        ``max_results`` page through the ranked results. A blank query with at
        least one filter lists the newest matching crash logs unscored.

        Raises:
            QueryTooLongError: if ``query`` exceeds ``max_query_length``.
        """

        mode = search_mode(phrase=phrase, fuzzy=fuzzy)
        limit = self.settings.max_query_length
        if len(query) > limit:
            SEARCH_REQUESTS.labels(mode=mode, status="rejected").inc()
            logger.warning("Rejected %s query of %d characters (limit %d)", mode, len(query), limit)
            raise QueryTooLongError(len(query), limit)

        options = self.settings.search_options(
            fuzzy=fuzzy,
            phrase=phrase,
            max_results=max_results,
            min_score=min_score,
            offset=max(offset, 0),
            filters=SearchFilters(
                minecraft_version=minecraft_version,
                mod_loader=mod_loader,
                error_type=error_type,
                mod=mod,
            ),
        )
        with self._lock, operation_context("search", mode=mode):
            with (
                create_span("crashlog.search", attributes={"search.mode": mode, "search.query_length": len(query)}),
                track_latency(SEARCH_LATENCY, mode=mode),
            ):
                results = self.engine.search(query, options)

        SEARCH_REQUESTS.labels(mode=mode, status="hit" if results else "miss").inc()
        return results

    def stats(self) -> IndexStats:
        with self._lock:
            return self.engine.get_stats()

    def rebuild(self, documents: Iterable[CrashLogDocument]) -> int:
        """Replace the index contents with ``documents``; returns how many were indexed.

        Used at process start to rehydrate the index from durable storage. The
        new index is built on the side and swapped in only once ``documents``
        is exhausted, so an error from the source leaves the current index
        untouched.
        """

        fresh = CrashLogSearchEngine(tokenizer=self.engine.tokenizer, field_boosts=self.engine.field_boosts)
        count = 0
        with self._lock, operation_context("rebuild"):
            with create_span("crashlog.rebuild") as span:
                for document in documents:
                    fresh.index_crash_log(document)
                    count += 1
                self._enforce_retention(fresh)
                span.set_attribute("crashlog.documents", count)
            self.engine = fresh
            INDEX_OPERATIONS.labels(operation="rebuild").inc()
            self._publish_gauges()
            stats = self.engine.get_stats()
        logger.info(
            "Search index rebuilt: %d documents, %d terms",
            stats.total_documents,
            stats.total_terms,
        )
        return count

    def clear(self) -> None:
        with self._lock:
            self.engine.clear()
            INDEX_OPERATIONS.labels(operation="clear").inc()
            self._publish_gauges()

    def _enforce_retention(self, engine: CrashLogSearchEngine) -> None:
        if not self.settings.has_retention_cap():
            return
        document_ids = engine.document_ids()
        overflow = len(document_ids) - self.settings.max_documents
        for doc_id in document_ids[: max(overflow, 0)]:
            engine.remove_from_index(doc_id)
            INDEX_OPERATIONS.labels(operation="evict").inc()
            logger.info("Evicted crash log %s to honor the retention cap", doc_id)

    def _publish_gauges(self) -> None:
        stats = self.engine.get_stats()
        INDEX_DOC_COUNT.labels().set(stats.total_documents)
        INDEX_TERM_COUNT.labels().set(stats.total_terms)


def create_search_service(settings: Settings | None = None) -> SearchService:
    """Composition root: build the single engine and the service that owns it."""

    resolved = settings or Settings()
    return SearchService(CrashLogSearchEngine(), resolved)
