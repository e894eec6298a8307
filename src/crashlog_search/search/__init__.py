"""
Crash log search package.

This package provides the in-memory search stack:
- tokenizer: Log-aware tokenization (compound identifiers, versions, stopwords)
- index: Document store and inverted index
- fuzzy: Levenshtein-based term expansion
- scoring: Field-boosted relevance heuristic
- snippet: Match context windows
- engine: Query execution over the index
"""
