"""FAQ assistant retrieval platform.

TF‑IDF retrieval over a pre-indexed FAQ corpus: tokenisation, sparse
cosine similarity, query vectorisation against an averaged corpus IDF
and top-k ranking, plus the indexer, corpus loading, benchmark and CLI
that sit around that core.
"""

from .similarity import EPSILON, cosine_similarity
from .tfidf import (
    DEFAULT_TOP_K,
    TIE_BREAK_CORPUS_ORDER,
    CorpusIndex,
    build_query_vector,
    default_unseen_idf,
    effective_idf,
    search,
    term_frequencies,
)
from .tokenizer import tokenize

__all__ = [
    "DEFAULT_TOP_K",
    "EPSILON",
    "TIE_BREAK_CORPUS_ORDER",
    "CorpusIndex",
    "build_query_vector",
    "cosine_similarity",
    "default_unseen_idf",
    "effective_idf",
    "search",
    "term_frequencies",
    "tokenize",
]
