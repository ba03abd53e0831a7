"""Builds pre-indexed documents from raw FAQ texts.

The output is exactly what ``tfidf.search`` consumes. Each document gets
its own TF‑IDF vector and a copy of the corpus IDF table as its ``idf``
contribution, so averaging the contributions at query time reproduces
the corpus IDF.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from typing import Any, Dict, List, Sequence

from .tfidf import term_frequencies
from .tokenizer import tokenize

logger = logging.getLogger("faq_platform.indexer")


def corpus_idf(token_lists: Sequence[Sequence[str]]) -> Dict[str, float]:
    """Smoothed IDF: ``ln((N + 1) / (df + 1)) + 1``."""

    n = len(token_lists)
    doc_freq: Counter[str] = Counter()
    for tokens in token_lists:
        doc_freq.update(set(tokens))
    return {token: math.log((n + 1) / (df + 1)) + 1 for token, df in doc_freq.items()}


def index_texts(texts: Sequence[str], *, ids: Sequence[Any] | None = None) -> List[Dict[str, Any]]:
    if ids is not None and len(ids) != len(texts):
        raise ValueError(f"Got {len(ids)} ids for {len(texts)} texts")

    token_lists = [tokenize(text) for text in texts]
    idf = corpus_idf(token_lists)

    documents: List[Dict[str, Any]] = []
    for idx, (text, tokens) in enumerate(zip(texts, token_lists)):
        tf = term_frequencies(tokens)
        documents.append(
            {
                "id": ids[idx] if ids is not None else idx,
                "text": text,
                "tfidf": {token: freq * idf[token] for token, freq in tf.items()},
                "idf": dict(idf),
            }
        )

    logger.info("corpus_indexed", extra={"fields": {"documents": len(documents), "vocabulary": len(idf)}})
    return documents
