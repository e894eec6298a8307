"""Domain model for crash log documents handed to the search index.

The index never sees the persistence layer's records directly; ingestion
builds a ``CrashLogDocument`` (usually via ``from_upload``) and the index only
reads the text produced by ``search_fields``.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field

from crashlog_search.parsing.crash_parser import parse_crash_log


FILES_FIELD = "files"

# Index field name -> model attribute, in the order fields are stored
SCALAR_FIELDS: tuple[tuple[str, str], ...] = (
    ("title", "title"),
    ("description", "description"),
    ("errorMessage", "error_message"),
    ("stackTrace", "stack_trace"),
    ("errorType", "error_type"),
    ("culpritMod", "culprit_mod"),
    ("minecraftVersion", "minecraft_version"),
    ("modLoader", "mod_loader"),
)
LIST_FIELDS: tuple[tuple[str, str], ...] = (
    ("modList", "mod_list"),
    ("tags", "tags"),
)


class CrashLogFile(BaseModel):
    """One uploaded file of a crash log paste."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    content: str = ""


class CrashLogDocument(BaseModel):
    """Searchable view of a stored crash log."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    files: list[CrashLogFile] = Field(default_factory=list)
    title: str | None = None
    description: str | None = None
    error_message: str | None = None
    stack_trace: str | None = None
    error_type: str | None = None
    culprit_mod: str | None = None
    minecraft_version: str | None = None
    mod_loader: str | None = None
    mod_loader_version: str | None = None
    mod_list: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_upload(
        cls,
        doc_id: str,
        files: Sequence[CrashLogFile],
        *,
        title: str | None = None,
        description: str | None = None,
        tags: Sequence[str] = (),
    ) -> CrashLogDocument:
        """Build a document from raw uploaded files, deriving the parsed fields."""

        combined = "\n\n".join(f.content for f in files)
        parsed = parse_crash_log(combined)
        return cls(
            id=doc_id,
            files=list(files),
            title=title,
            description=description,
            error_message=parsed.error_message,
            stack_trace=parsed.stack_trace,
            error_type=parsed.error_type,
            culprit_mod=parsed.culprit_mod,
            minecraft_version=parsed.minecraft_version,
            mod_loader=parsed.mod_loader,
            mod_loader_version=parsed.mod_loader_version,
            mod_list=parsed.mod_list,
            tags=list(tags),
        )

    def search_fields(self) -> dict[str, str]:
        """Return index field name -> text.

        File contents are always present (joined by blank lines, possibly
        empty); other attributes only when non-empty. List attributes are
        joined with spaces.
        """

        fields = {FILES_FIELD: "\n\n".join(f.content for f in self.files)}
        for field_name, attribute in SCALAR_FIELDS:
            value = getattr(self, attribute)
            if value:
                fields[field_name] = value
        for field_name, attribute in LIST_FIELDS:
            values = getattr(self, attribute)
            if values:
                fields[field_name] = " ".join(values)
        return fields
