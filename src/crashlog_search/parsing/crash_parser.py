"""Regex-based extraction of structured fields from raw crash logs.

The parser is best-effort: every field is optional and a log that matches
nothing yields an empty ``ParsedCrashData``. It recognizes the common shapes
of vanilla, Forge, NeoForge, Fabric and Quilt crash reports and launcher logs.
"""

from __future__ import annotations

import logging
import re

from pydantic import BaseModel, ConfigDict, Field


logger = logging.getLogger(__name__)

MAX_MODS = 50
MAX_STACK_LINES = 50

_MC_VERSION_PATTERN = re.compile(
    r"Loading Minecraft ([0-9.]+)|Minecraft Version: ([0-9.]+)|minecraft (\d+\.\d+\.?\d*)",
    re.IGNORECASE,
)

# Evaluated in order; a later match overrides an earlier one so that
# NeoForge logs (which also mention Forge) end up as neoforge.
_LOADER_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("forge", re.compile(r"Forge Version: ([0-9.-]+)|MinecraftForge (\S+)", re.IGNORECASE)),
    (
        "fabric",
        re.compile(r"with Fabric Loader ([0-9.]+)|Fabric Loader (\S+)|fabric-loader (\S+)", re.IGNORECASE),
    ),
    ("quilt", re.compile(r"Quilt Loader (\S+)", re.IGNORECASE)),
    ("neoforge", re.compile(r"NeoForge (\S+)", re.IGNORECASE)),
)

_FABRIC_MOD_SECTION = re.compile(r"Loading \d+ mods:([\s\S]*?)(?=\[|\Z)", re.IGNORECASE)
_FABRIC_MOD_LINE = re.compile(r"^\s*- (\w+)\s+[0-9]")
_FABRIC_SKIP = frozenset({"minecraft", "java", "fabricloader"})
_MOD_MENTION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"Loaded mod (\w+)"),
    re.compile(r"Mod (\w+) version", re.IGNORECASE),
    re.compile(r"from mod (\w+)", re.IGNORECASE),
)
_FORGE_MOD_SECTION = re.compile(r"-- Mod List --[\s\S]*?(?=--|\n\n|\Z)", re.IGNORECASE)
_FORGE_MOD_ROW = re.compile(r"(\w+)\s*\|")

_MIXIN_APPLY = re.compile(r"Mixin apply for mod (\w+) failed.*?:.*?(\w+Exception|Error):(.*?)$", re.MULTILINE)
_MIXIN_TRANSFORM = re.compile(r"Mixin transformation of ([\w.]+) failed")
_MOD_ERROR = re.compile(r"from mod (\w+).*?(Exception|Error)", re.IGNORECASE)
_JAVA_EXCEPTION = re.compile(r"(java\.lang\.\w+Exception|Exception in thread.*?):(.*?)$", re.MULTILINE)

_EXCEPTION_START = re.compile(r"java\.lang\.|Exception|Error")
_FRAME_LINE = re.compile(r"^\s*(?:at\s+|\.\.\.\s+\d+\s+more)")
_BARE_FRAME = re.compile(r"at\s+[\w.$]+")
_CAUSED_BY = re.compile(r"Caused by: (.*)")

KNOWN_CRASH_TYPES: tuple[str, ...] = (
    "InvalidMixinException",
    "MixinApplyError",
    "NullPointerException",
    "ClassNotFoundException",
    "NoSuchMethodError",
    "OutOfMemoryError",
    "ConcurrentModificationException",
    "IllegalStateException",
    "FormattedException",
)

COMMON_WORDS = frozenset(
    {
        "the", "and", "for", "are", "but", "not", "you", "all", "can", "had",
        "her", "was", "one", "our", "out", "day", "get", "has", "him", "his",
        "how", "man", "new", "now", "old", "see", "two", "who", "boy", "did",
        "its", "let", "put", "say", "she", "too", "use",
    }
)  # fmt: skip


class ParsedCrashData(BaseModel):
    """Fields extracted from a crash log; anything not found stays None."""

    model_config = ConfigDict(frozen=True)

    minecraft_version: str | None = None
    mod_loader: str | None = None
    mod_loader_version: str | None = None
    mod_list: list[str] = Field(default_factory=list)
    error_type: str | None = None
    error_message: str | None = None
    stack_trace: str | None = None
    culprit_mod: str | None = None


class _ErrorInfo(BaseModel):
    error_type: str | None = None
    error_message: str | None = None
    stack_trace: str | None = None
    culprit_mod: str | None = None


def parse_crash_log(content: str) -> ParsedCrashData:
    """Extract version, loader, mods and error details from ``content``."""

    if not content:
        return ParsedCrashData()

    loader, loader_version = _extract_mod_loader(content)
    error = _extract_error_info(content)
    parsed = ParsedCrashData(
        minecraft_version=_extract_minecraft_version(content),
        mod_loader=loader,
        mod_loader_version=loader_version,
        mod_list=extract_mod_list(content),
        error_type=error.error_type,
        error_message=error.error_message,
        stack_trace=error.stack_trace,
        culprit_mod=error.culprit_mod,
    )
    logger.debug(
        "Parsed crash log: version=%s loader=%s mods=%d error_type=%s culprit=%s",
        parsed.minecraft_version,
        parsed.mod_loader,
        len(parsed.mod_list),
        parsed.error_type,
        parsed.culprit_mod,
    )
    return parsed


def is_common_word(word: str) -> bool:
    return word.lower() in COMMON_WORDS


def _first_group(match: re.Match[str] | None) -> str | None:
    if match is None:
        return None
    return next((group for group in match.groups() if group), None)


def _extract_minecraft_version(content: str) -> str | None:
    return _first_group(_MC_VERSION_PATTERN.search(content))


def _extract_mod_loader(content: str) -> tuple[str | None, str | None]:
    loader: str | None = None
    version: str | None = None
    for name, pattern in _LOADER_PATTERNS:
        match = pattern.search(content)
        if match:
            loader = name
            version = _first_group(match)
    return loader, version


def extract_mod_list(content: str) -> list[str]:
    """Collect mod ids from Fabric/Forge mod listings and log mentions."""

    mods: dict[str, None] = {}

    fabric_section = _FABRIC_MOD_SECTION.search(content)
    if fabric_section:
        for line in fabric_section.group(1).split("\n"):
            match = _FABRIC_MOD_LINE.match(line)
            if not match:
                continue
            mod_name = match.group(1).lower()
            if not is_common_word(mod_name) and mod_name not in _FABRIC_SKIP:
                mods[mod_name] = None

    for pattern in _MOD_MENTION_PATTERNS:
        for match in pattern.finditer(content):
            mod_name = match.group(1).lower()
            if len(mod_name) > 2 and not is_common_word(mod_name):
                mods[mod_name] = None

    forge_section = _FORGE_MOD_SECTION.search(content)
    if forge_section:
        for line in forge_section.group(0).split("\n"):
            match = _FORGE_MOD_ROW.search(line)
            if match:
                mods[match.group(1).lower()] = None

    return list(mods)[:MAX_MODS]


def _extract_error_info(content: str) -> _ErrorInfo:
    info = _ErrorInfo()

    mixin_apply = _MIXIN_APPLY.search(content)
    if mixin_apply:
        info.error_type = "MixinApplyError"
        info.error_message = f"Mixin failure in mod '{mixin_apply.group(1)}': {mixin_apply.group(3).strip()}"
        info.culprit_mod = mixin_apply.group(1)

    mixin_transform = _MIXIN_TRANSFORM.search(content)
    if mixin_transform:
        class_path = mixin_transform.group(1)
        info.error_type = "MixinTransformationError"
        info.error_message = f"Mixin transformation failed for {class_path}"
        owner = re.search(rf"from mod (\w+).*{re.escape(class_path)}", content, re.IGNORECASE)
        if owner:
            info.culprit_mod = owner.group(1)

    if not info.culprit_mod:
        mod_error = _MOD_ERROR.search(content)
        if mod_error:
            info.culprit_mod = mod_error.group(1)

    if not info.error_type:
        exception = _JAVA_EXCEPTION.search(content)
        if exception:
            info.error_type = exception.group(1).split(".")[-1]
            info.error_message = exception.group(2).strip()

    info.stack_trace = extract_stack_trace(content)

    if not info.error_type:
        info.error_type = next((name for name in KNOWN_CRASH_TYPES if name in content), None)

    return info


def extract_stack_trace(content: str) -> str | None:
    """Return the first exception block plus every ``Caused by:`` block.

    A block is the exception line followed by its ``at ...`` frames and stops
    at a blank line, a ``-- `` section header or any other non-frame line.
    The result is capped at ``MAX_STACK_LINES`` lines.
    """

    lines = content.splitlines()

    caused_by: list[str] = []
    nested: set[int] = set()
    for index, line in enumerate(lines):
        match = _CAUSED_BY.search(line)
        if match is None:
            continue
        frames = _collect_frames(lines, index + 1)
        caused_by.extend([f"Caused by: {match.group(1).strip()}", *frames])
        nested.update(range(index, index + len(frames) + 1))

    trace_lines = [*_first_block(lines, nested), *caused_by]
    if not trace_lines:
        return None
    return "\n".join(trace_lines[:MAX_STACK_LINES])


def _first_block(lines: list[str], skip: set[int]) -> list[str]:
    # Exception lines win over bare frames; Caused-by blocks are not candidates
    for pattern in (_EXCEPTION_START, _BARE_FRAME):
        for index, line in enumerate(lines):
            if index in skip:
                continue
            match = pattern.search(line)
            if match:
                return [line[match.start() :].rstrip(), *_collect_frames(lines, index + 1)]
    return []


def _collect_frames(lines: list[str], start: int) -> list[str]:
    frames: list[str] = []
    for line in lines[start:]:
        if not line.strip() or line.startswith("-- ") or not _FRAME_LINE.match(line):
            break
        frames.append(line)
    return frames
