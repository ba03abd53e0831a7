"""Retriever service wrapper.

Wraps a ``CorpusIndex`` for callers that serve many queries against a
corpus that is occasionally replaced. Each call is logged as a single
structured line and recorded in the Prometheus metrics.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import List, Sequence

from .logging_utils import get_query_id, log_retrieval, query_id_scope
from .metrics import observe_query, set_corpus_size
from .tfidf import DEFAULT_TOP_K, CorpusIndex, Document, ScoredDocument, UnseenIdf, default_unseen_idf

logger = logging.getLogger("faq_platform.retriever")


class Retriever:
    def __init__(self, corpus: Sequence[Document] = (), *, unseen_idf: UnseenIdf = default_unseen_idf) -> None:
        self._lock = threading.Lock()
        self._unseen_idf = unseen_idf
        self._index = CorpusIndex.build(corpus, unseen_idf=unseen_idf)
        set_corpus_size(len(self._index))

    @property
    def index(self) -> CorpusIndex:
        with self._lock:
            return self._index

    def __len__(self) -> int:
        return len(self.index)

    def reload(self, corpus: Sequence[Document]) -> None:
        """Swap in a fresh index; in-flight queries finish on the old one."""

        index = CorpusIndex.build(corpus, unseen_idf=self._unseen_idf)
        with self._lock:
            self._index = index
        set_corpus_size(len(index))
        logger.info("corpus_reloaded", extra={"fields": {"documents": len(index), "vocabulary": len(index.idf)}})

    def retrieve(self, query: str | None, top_k: int = DEFAULT_TOP_K) -> List[ScoredDocument]:
        index = self.index
        with query_id_scope(get_query_id()):
            start = time.perf_counter()
            results = index.search(query, top_k)
            duration = time.perf_counter() - start
            observe_query(duration_seconds=duration)
            log_retrieval(
                logger=logger,
                corpus_size=len(index),
                top_k=top_k,
                hits=len(results),
                top_score=results[0]["score"] if results else None,
                duration_ms=duration * 1000.0,
            )
        return results
