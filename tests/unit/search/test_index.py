"""Unit tests for the document store and inverted index."""

from array import array

import pytest

from crashlog_search.search.index import DocumentStore, InvertedIndex, find_occurrences
from crashlog_search.search.models import Posting, StoredDocument


def _posting(doc_id: str, field: str = "files", *positions: int) -> Posting:
    return Posting(doc_id=doc_id, field=field, positions=array("I", positions or (0,)), field_length=10)


@pytest.mark.unit
class TestFindOccurrences:
    """Test the substring occurrence scan."""

    def test_all_offsets(self):
        """Test every occurrence offset is reported."""
        assert list(find_occurrences("mod a mod b mod", "mod")) == [0, 6, 12]

    def test_matches_inside_larger_words(self):
        """Test occurrences inside longer words count."""
        assert list(find_occurrences("init initialize reinit", "init")) == [0, 5, 18]

    def test_overlapping_occurrences(self):
        """Test overlapping occurrences count."""
        assert list(find_occurrences("aaaa", "aa")) == [0, 1, 2]

    def test_no_match_or_empty_needle(self):
        """Test a missing or empty needle yields no offsets."""
        assert list(find_occurrences("forge", "fabric")) == []
        assert list(find_occurrences("forge", "")) == []


@pytest.mark.unit
class TestDocumentStore:
    """Test DocumentStore."""

    def test_put_get_remove(self):
        """Test storing, reading and removing a document."""
        store = DocumentStore()
        store.put(StoredDocument.from_fields("a", {"files": "x"}))

        assert "a" in store
        assert store.get("a").fields == {"files": "x"}
        assert store.remove("a") is True
        assert store.remove("a") is False
        assert store.get("a") is None

    def test_overwrite_moves_to_end(self):
        """Test overwriting a document makes it the newest."""
        store = DocumentStore()
        for doc_id in ("a", "b", "c"):
            store.put(StoredDocument.from_fields(doc_id, {"files": doc_id}))
        store.put(StoredDocument.from_fields("a", {"files": "again"}))

        assert store.ids() == ["b", "c", "a"]
        assert len(store) == 3

    def test_full_content_joins_fields(self):
        """Test content joins field texts with newlines."""
        document = StoredDocument.from_fields("a", {"files": "body", "title": "head"})

        assert document.content == "body\nhead"


@pytest.mark.unit
class TestInvertedIndex:
    """Test InvertedIndex."""

    def test_add_and_lookup(self):
        """Test postings are returned in insertion order."""
        index = InvertedIndex()
        index.add("forge", _posting("a"))
        index.add("forge", _posting("b"))

        assert [p.doc_id for p in index.postings("forge")] == ["a", "b"]
        assert index.postings("fabric") == []
        assert "forge" in index
        assert len(index) == 1

    def test_remove_document_drops_empty_terms(self):
        """Test removing a document deletes terms left without postings."""
        index = InvertedIndex()
        index.add("forge", _posting("a"))
        index.add("forge", _posting("b"))
        index.add("sodium", _posting("a"))

        removed = index.remove_document("a")

        assert removed == 2
        assert "sodium" not in index
        assert [p.doc_id for p in index.postings("forge")] == ["b"]

    def test_remove_unknown_document_is_noop(self):
        """Test removing an unknown document changes nothing."""
        index = InvertedIndex()
        index.add("forge", _posting("a"))

        assert index.remove_document("missing") == 0
        assert list(index.vocabulary()) == ["forge"]

    def test_postings_returns_copy(self):
        """Test callers cannot mutate the stored posting list."""
        index = InvertedIndex()
        index.add("forge", _posting("a"))

        index.postings("forge").clear()

        assert len(index.postings("forge")) == 1

    def test_clear(self):
        """Test clear empties the index."""
        index = InvertedIndex()
        index.add("forge", _posting("a"))
        index.clear()

        assert len(index) == 0
