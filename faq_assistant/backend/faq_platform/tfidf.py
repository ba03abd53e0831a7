"""TF‑IDF query scoring over a pre-indexed corpus.

Documents arrive already indexed: each may carry its own ``tfidf`` vector
and an ``idf`` map holding its contribution to the corpus-wide IDF. A
query is vectorised against the mean of those contributions and every
document is ranked by sparse cosine similarity.

Vectors are plain ``dict[str, float]`` keyed by token; tokens absent from
a vector are simply missing rather than stored as zero.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence, Tuple

from .similarity import cosine_similarity
from .tokenizer import tokenize

Document = Mapping[str, Any]
ScoredDocument = Dict[str, Any]
UnseenIdf = Callable[[int], float]

DEFAULT_TOP_K = 3


def default_unseen_idf(corpus_size: int) -> float:
    """IDF given to query tokens no document contributed: ``ln(1 + N)``."""

    return math.log1p(corpus_size)


def is_corpus(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _sparse_field(document: Any, name: str) -> Mapping[str, float] | None:
    if not isinstance(document, Mapping):
        return None
    value = document.get(name)
    return value if isinstance(value, Mapping) else None


def term_frequencies(tokens: Sequence[str]) -> Dict[str, float]:
    """Relative frequency of each token; an empty sequence gives ``{}``."""

    if not tokens:
        return {}
    total = len(tokens)
    return {token: count / total for token, count in Counter(tokens).items()}


def effective_idf(corpus: Iterable[Document]) -> Dict[str, float]:
    """Mean IDF per token over the documents that carry an ``idf`` map.

    The denominator counts every document with an ``idf`` map, whether or
    not that map mentions the token. Documents without one are skipped.
    """

    totals: Dict[str, float] = {}
    contributors = 0
    for document in corpus:
        idf = _sparse_field(document, "idf")
        if idf is None:
            continue
        contributors += 1
        for token, value in idf.items():
            totals[token] = totals.get(token, 0.0) + value
    if contributors == 0:
        return {}
    return {token: total / contributors for token, total in totals.items()}


def weight_terms(
    tf: Mapping[str, float],
    idf: Mapping[str, float],
    *,
    unseen_value: float,
) -> Dict[str, float]:
    vec: Dict[str, float] = {}
    for token, freq in tf.items():
        token_idf = idf.get(token)
        if token_idf is None:
            token_idf = unseen_value
        vec[token] = freq * token_idf
    return vec


def build_query_vector(
    query_text: str | None,
    corpus: Sequence[Document],
    *,
    unseen_idf: UnseenIdf = default_unseen_idf,
) -> Dict[str, float]:
    """TF‑IDF vector of ``query_text`` against ``corpus``.

    Recomputes the corpus IDF on every call; use ``CorpusIndex`` to pay
    that cost once per corpus.
    """

    documents = corpus if is_corpus(corpus) else ()
    tf = term_frequencies(tokenize(query_text))
    if not tf:
        return {}
    return weight_terms(tf, effective_idf(documents), unseen_value=unseen_idf(len(documents)))


def ranking_key(entry: Tuple[int, ScoredDocument]) -> Tuple[float, int]:
    """Highest score first; equal scores keep their corpus position."""

    position, scored = entry
    return (-scored["score"], position)


# Ties are broken by corpus position, carried explicitly in the sort key.
TIE_BREAK_CORPUS_ORDER = ranking_key


def rank(scored: Sequence[ScoredDocument], top_k: int) -> List[ScoredDocument]:
    limit = max(0, int(top_k))
    if limit == 0:
        return []
    ordered = sorted(enumerate(scored), key=TIE_BREAK_CORPUS_ORDER)
    return [doc for _position, doc in ordered[:limit]]


def score_documents(query_vector: Mapping[str, float], corpus: Iterable[Document]) -> List[ScoredDocument]:
    scored: List[ScoredDocument] = []
    for document in corpus:
        record: ScoredDocument = dict(document) if isinstance(document, Mapping) else {}
        record["score"] = cosine_similarity(query_vector, _sparse_field(document, "tfidf") or {})
        scored.append(record)
    return scored


@dataclass(frozen=True)
class CorpusIndex:
    """An immutable snapshot of a corpus with its effective IDF precomputed.

    Build a new index whenever the underlying corpus changes; the
    snapshot holds references to the caller's documents and never copies
    or mutates them.
    """

    documents: Tuple[Document, ...]
    idf: Mapping[str, float]
    unseen_value: float

    @classmethod
    def build(cls, corpus: Sequence[Document], *, unseen_idf: UnseenIdf = default_unseen_idf) -> "CorpusIndex":
        documents: Tuple[Document, ...] = tuple(corpus) if is_corpus(corpus) else ()
        return cls(
            documents=documents,
            idf=MappingProxyType(effective_idf(documents)),
            unseen_value=unseen_idf(len(documents)),
        )

    def __len__(self) -> int:
        return len(self.documents)

    def query_vector(self, query_text: str | None) -> Dict[str, float]:
        tf = term_frequencies(tokenize(query_text))
        if not tf:
            return {}
        return weight_terms(tf, self.idf, unseen_value=self.unseen_value)

    def search(self, query_text: str | None, top_k: int = DEFAULT_TOP_K) -> List[ScoredDocument]:
        if not self.documents:
            return []
        scored = score_documents(self.query_vector(query_text), self.documents)
        return rank(scored, top_k)


def search(
    query_text: str | None,
    corpus: Sequence[Document],
    top_k: int = DEFAULT_TOP_K,
    *,
    unseen_idf: UnseenIdf = default_unseen_idf,
) -> List[ScoredDocument]:
    """Rank ``corpus`` against ``query_text`` and return the best ``top_k``.

    Every result is a new dict holding the document's own fields plus
    ``score``. An empty or non-sequence corpus gives ``[]``.
    """

    if not is_corpus(corpus) or len(corpus) == 0:
        return []
    return CorpusIndex.build(corpus, unseen_idf=unseen_idf).search(query_text, top_k)
