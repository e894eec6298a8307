"""Search data models."""

from __future__ import annotations

from array import array
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Posting:
    """Occurrences of one term inside one field of one document."""

    doc_id: str
    field: str
    positions: array[int] = field(default_factory=lambda: array("I"))
    field_length: int = 0

    @property
    def frequency(self) -> int:
        return len(self.positions)

    @property
    def first_position(self) -> int:
        return self.positions[0] if self.positions else 0


@dataclass(frozen=True)
class StoredDocument:
    """Field text kept for a document so phrase search and contexts can read it."""

    doc_id: str
    fields: dict[str, str]
    content: str

    @classmethod
    def from_fields(cls, doc_id: str, fields: dict[str, str]) -> StoredDocument:
        return cls(doc_id=doc_id, fields=dict(fields), content="\n".join(fields.values()))


@dataclass(frozen=True)
class SearchFilters:
    """Exact-match constraints on parsed crash log fields.

    Unset (or empty) values do not constrain; ``mod`` matches when it is one of
    the document's mod ids.
    """

    minecraft_version: str | None = None
    mod_loader: str | None = None
    error_type: str | None = None
    mod: str | None = None

    def is_empty(self) -> bool:
        return not (self.minecraft_version or self.mod_loader or self.error_type or self.mod)

    def accepts(self, fields: Mapping[str, str]) -> bool:
        exact = (
            ("minecraftVersion", self.minecraft_version),
            ("modLoader", self.mod_loader),
            ("errorType", self.error_type),
        )
        if any(expected and fields.get(name) != expected for name, expected in exact):
            return False
        return not self.mod or self.mod in fields.get("modList", "").split()


@dataclass(frozen=True)
class SearchOptions:
    """Per-query switches.

    ``phrase`` treats the whole query as a literal substring and bypasses the
    tokenizer; ``fuzzy`` expands query terms to indexed terms within
    ``fuzzy_distance`` edits. ``filters`` narrow the candidates before scoring
    and ``offset`` skips that many ranked results.
    """

    fuzzy: bool = False
    phrase: bool = False
    max_results: int = 50
    min_score: float = 1.0
    fuzzy_distance: int = 2
    context_chars: int = 100
    offset: int = 0
    filters: SearchFilters = field(default_factory=SearchFilters)


@dataclass(frozen=True)
class SearchMatch:
    field: str
    context: str
    position: int

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "context": self.context, "position": self.position}


@dataclass(frozen=True)
class SearchResult:
    """A scored document with the postings that made it match."""

    doc_id: str
    score: float
    matches: tuple[SearchMatch, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "doc_id": self.doc_id,
            "score": self.score,
            "matches": [match.to_dict() for match in self.matches],
        }


@dataclass(frozen=True)
class IndexStats:
    total_documents: int
    total_terms: int

    @property
    def average_terms_per_document(self) -> float:
        return self.total_terms / max(1, self.total_documents)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_documents": self.total_documents,
            "total_terms": self.total_terms,
            "average_terms_per_document": self.average_terms_per_document,
        }
