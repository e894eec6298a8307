"""Index crash log files and query them from the command line.

Each PATH is parsed as one crash log (its path is the document id); the query
runs against the resulting in-memory index and results are printed as JSON.
"""

# ruff: noqa: T201  # CLI intentionally prints results

from __future__ import annotations

import argparse
from collections.abc import Iterator, Sequence
import logging
from pathlib import Path
import sys
import textwrap

import orjson

from crashlog_search.config import Settings
from crashlog_search.domain.model import CrashLogDocument, CrashLogFile
from crashlog_search.observability.logging import configure_logging
from crashlog_search.observability.metrics import init_metrics
from crashlog_search.observability.tracing import init_tracing
from crashlog_search.service_layer.search_service import QueryTooLongError, create_search_service


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID_QUERY = 2


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crashlog-search",
        description="Search crash log files with the in-memory crash log index",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent(
            """
            Examples:
              crashlog-search logs/*.log --query NullPointerException
              crashlog-search logs/ --query "nullpointerexcpetion" --fuzzy
              crashlog-search crash.txt --query "Mixin apply for mod" --phrase --max-results 5
            """
        ).strip(),
    )
    parser.add_argument("paths", nargs="+", type=Path, metavar="PATH", help="Crash log files or directories")
    parser.add_argument("--query", "-q", required=True, help="Search query")
    parser.add_argument("--fuzzy", action="store_true", help="Expand query terms by edit distance")
    parser.add_argument("--phrase", action="store_true", help="Match the query as a literal substring")
    parser.add_argument("--max-results", type=int, default=None, help="Maximum results (default from settings)")
    parser.add_argument("--min-score", type=float, default=None, help="Minimum score (default from settings)")
    parser.add_argument("--offset", type=int, default=0, help="Skip this many ranked results")
    parser.add_argument("--minecraft-version", default=None, help="Only crash logs for this Minecraft version")
    parser.add_argument("--mod-loader", default=None, help="Only crash logs for this mod loader")
    parser.add_argument("--error-type", default=None, help="Only crash logs with this error type")
    parser.add_argument("--mod", default=None, help="Only crash logs listing this mod id")
    parser.add_argument("--stats", action="store_true", help="Include index statistics in the output")
    parser.add_argument("--json-logs", action="store_true", help="Force JSON logs on stderr")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser


def iter_log_files(paths: Sequence[Path]) -> list[Path]:
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(sorted(p for p in path.rglob("*") if p.is_file()))
        elif path.is_file():
            files.append(path)
        else:
            logger.warning("Skipping missing path %s", path)
    return files


def load_document(path: Path) -> CrashLogDocument:
    content = path.read_text(encoding="utf-8", errors="replace")
    return CrashLogDocument.from_upload(
        str(path),
        [CrashLogFile(name=path.name, content=content)],
        title=path.name,
    )


def load_documents(paths: Sequence[Path]) -> Iterator[CrashLogDocument]:
    """Yield a document per readable log file; unreadable files are logged and skipped."""
    for path in iter_log_files(paths):
        try:
            yield load_document(path)
        except OSError as exc:
            logger.warning("Skipping unreadable crash log %s: %s", path, exc)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_argument_parser().parse_args(argv)
    settings = Settings()
    configure_logging(args.log_level or settings.log_level, json_output=args.json_logs or settings.log_json)
    init_tracing(settings.service_name)
    init_metrics(settings.service_name)

    service = create_search_service(settings)
    indexed = service.rebuild(load_documents(args.paths))
    logger.info("Indexed %d crash log files", indexed)

    try:
        results = service.search(
            args.query,
            fuzzy=args.fuzzy,
            phrase=args.phrase,
            max_results=args.max_results,
            min_score=args.min_score,
            offset=args.offset,
            minecraft_version=args.minecraft_version,
            mod_loader=args.mod_loader,
            error_type=args.error_type,
            mod=args.mod,
        )
    except QueryTooLongError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_INVALID_QUERY

    payload: dict[str, object] = {
        "query": args.query,
        "results": [result.to_dict() for result in results],
    }
    if args.stats:
        payload["stats"] = service.stats().to_dict()
    sys.stdout.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode("utf-8") + "\n")
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
