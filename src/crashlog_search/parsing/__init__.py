"""Extraction of structured fields from raw crash log text."""

from crashlog_search.parsing.crash_parser import ParsedCrashData, parse_crash_log


__all__ = ["ParsedCrashData", "parse_crash_log"]
