"""Tokenizer tuned for semi-structured crash log text.

Crash logs mix prose with Java identifiers, version strings and stack frames.
Tokenization runs in two passes:

- compound pass: fixed pattern classes pull whole identifiers out verbatim
- word pass: split on whitespace/punctuation, drop stopwords, and expand
  dotted words into their segments so partial package names still match

The result is an unordered set of lowercase terms. Positions are not tracked
here; the index computes occurrence offsets per field.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import re


DEFAULT_STOPWORDS = [
    "the",
    "and",
    "or",
    "but",
    "in",
    "on",
    "at",
    "to",
    "for",
    "of",
    "with",
    "by",
    "from",
    "up",
    "about",
    "into",
    "through",
    "during",
    "before",
    "after",
    "above",
    "below",
    "between",
    "among",
    "is",
    "was",
    "are",
    "were",
    "be",
    "been",
    "being",
    "have",
    "has",
    "had",
    "do",
    "does",
    "did",
    "will",
    "would",
    "could",
    "should",
]

DOMAIN_KEYWORDS: tuple[str, ...] = (
    "minecraft",
    "forge",
    "fabric",
    "quilt",
    "neoforge",
    "optifine",
    "jei",
    "create",
    "thermal",
    "mekanism",
    "buildcraft",
)

# Patterns run against already-lowercased text.
COMPOUND_PATTERNS: tuple[re.Pattern[str], ...] = (
    # package.Class$Inner
    re.compile(r"\b[a-z][a-z0-9]*(?:\.[a-z][a-z0-9_$]*)+(?:\$[a-z0-9_$]+)*\b"),
    # NullPointerException, NoSuchMethodError
    re.compile(r"\b[a-z][a-z0-9]*(?:exception|error)\b"),
    # method(args)
    re.compile(r"\b[a-z_][a-z0-9_]*\([^)]*\)"),
    # jar/java/class/log files
    re.compile(r"\b[\w.-]+\.(?:jar|java|class|log)\b"),
    # 1.20.1, 0.15.11+1.20.4, 47.2.0-beta
    re.compile(r"\b\d+\.\d+(?:\.\d+)*(?:[+-][a-z0-9_.-]+)?\b"),
    re.compile(r"\b0x[a-f0-9]+\b"),
    re.compile(r"\b(?:" + "|".join(DOMAIN_KEYWORDS) + r")\b"),
)

WORD_SPLIT_PATTERN = re.compile(r"[\s,;!?\[\]{}()]+")


class LogTokenizer:
    """Turn raw crash log text into a set of normalized search terms."""

    def __init__(
        self,
        *,
        stopwords: Sequence[str] | None = None,
        patterns: Iterable[re.Pattern[str]] | None = None,
    ) -> None:
        vocab = stopwords if stopwords is not None else DEFAULT_STOPWORDS
        self.stopwords = frozenset(word.lower() for word in vocab)
        self.patterns = tuple(patterns) if patterns is not None else COMPOUND_PATTERNS

    def __call__(self, text: str) -> set[str]:
        return self.tokenize(text)

    def tokenize(self, text: str) -> set[str]:
        if not text:
            return set()

        lowered = text.lower()
        terms = self.compound_terms(lowered)

        for word in WORD_SPLIT_PATTERN.split(lowered):
            if not self._keep(word):
                continue
            terms.add(word)
            if "." in word:
                terms.update(part for part in word.split(".") if self._keep(part))

        return terms

    def compound_terms(self, lowered: str) -> set[str]:
        """Return verbatim matches of every compound pattern class."""

        terms: set[str] = set()
        for pattern in self.patterns:
            terms.update(match.group(0) for match in pattern.finditer(lowered))
        return terms

    def is_stopword(self, word: str) -> bool:
        return word.lower() in self.stopwords

    def _keep(self, word: str) -> bool:
        return len(word) > 1 and word not in self.stopwords


_DEFAULT_TOKENIZER = LogTokenizer()


def tokenize(text: str) -> set[str]:
    """Tokenize ``text`` with the default stopwords and pattern classes."""

    return _DEFAULT_TOKENIZER.tokenize(text)
