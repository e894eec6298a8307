"""Domain layer - crash log documents as seen by the search index."""

from crashlog_search.domain.model import CrashLogDocument, CrashLogFile


__all__ = ["CrashLogDocument", "CrashLogFile"]
