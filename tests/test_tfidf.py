"""Tests for query vectorisation, ranking and the corpus index."""

import copy
import math

import pytest

from faq_platform.tfidf import (
    TIE_BREAK_CORPUS_ORDER,
    CorpusIndex,
    build_query_vector,
    default_unseen_idf,
    effective_idf,
    rank,
    ranking_key,
    search,
    term_frequencies,
)


# ============================================================================
# Term frequencies / effective IDF
# ============================================================================

def test_term_frequencies_are_relative():
    tf = term_frequencies(["a", "b", "a", "c"])
    assert tf == {"a": 0.5, "b": 0.25, "c": 0.25}
    assert sum(tf.values()) == pytest.approx(1.0)


def test_term_frequencies_empty():
    assert term_frequencies([]) == {}


def test_effective_idf_averages_over_contributing_documents():
    corpus = [
        {"idf": {"a": 2.0, "b": 1.0}},
        {"idf": {"a": 4.0}},
        {"tfidf": {"a": 1.0}},  # no idf map: not part of the denominator
    ]
    idf = effective_idf(corpus)
    assert idf["a"] == pytest.approx(3.0)
    # 'b' is only in one map but the denominator still counts both contributors.
    assert idf["b"] == pytest.approx(0.5)


def test_effective_idf_without_contributors():
    assert effective_idf([{"tfidf": {"a": 1.0}}, {}]) == {}


def test_effective_idf_counts_empty_idf_maps():
    idf = effective_idf([{"idf": {"a": 2.0}}, {"idf": {}}])
    assert idf == {"a": pytest.approx(1.0)}


def test_default_unseen_idf_is_natural_log():
    assert default_unseen_idf(4) == pytest.approx(math.log(5))
    assert default_unseen_idf(0) == 0.0


# ============================================================================
# Query vector
# ============================================================================

def test_build_query_vector_uses_effective_idf(tiny_corpus):
    vec = build_query_vector("a a b", tiny_corpus)
    assert vec["a"] == pytest.approx((2 / 3) * 2.0)
    assert vec["b"] == pytest.approx((1 / 3) * 0.1)


def test_build_query_vector_unseen_token_fallback(tiny_corpus):
    vec = build_query_vector("zebra", tiny_corpus)
    assert vec == {"zebra": pytest.approx(math.log(1 + len(tiny_corpus)))}


def test_build_query_vector_custom_unseen_idf(tiny_corpus):
    vec = build_query_vector("zebra a", tiny_corpus, unseen_idf=lambda n: 10.0)
    assert vec["zebra"] == pytest.approx(5.0)
    assert vec["a"] == pytest.approx(1.0)


def test_build_query_vector_empty_query(tiny_corpus):
    assert build_query_vector("", tiny_corpus) == {}
    assert build_query_vector(None, tiny_corpus) == {}
    assert build_query_vector("!!!", tiny_corpus) == {}


def test_build_query_vector_only_query_tokens(tiny_corpus):
    assert set(build_query_vector("a", tiny_corpus)) == {"a"}


def test_build_query_vector_zero_idf_is_kept():
    # A token every document carries has idf 0, which is not the unseen fallback.
    corpus = [{"tfidf": {"a": 1.0}, "idf": {"a": 0.0}}]
    assert build_query_vector("a", corpus) == {"a": 0.0}
    assert CorpusIndex.build(corpus).query_vector("a") == {"a": 0.0}


# ============================================================================
# search()
# ============================================================================

def test_search_empty_or_invalid_corpus():
    assert search("anything", []) == []
    assert search("anything", None) == []
    assert search("anything", "not a corpus") == []
    assert search("anything", {"tfidf": {"a": 1.0}}) == []


def test_search_top_k_zero(faq_corpus):
    assert search("password", faq_corpus, 0) == []


def test_search_negative_top_k_is_empty(faq_corpus):
    assert search("password", faq_corpus, -2) == []


def test_search_default_top_k_is_three(faq_corpus):
    assert len(search("password", faq_corpus)) == 3


def test_search_top_k_larger_than_corpus(faq_corpus):
    results = search("refund order", faq_corpus, 50)
    assert len(results) == len(faq_corpus)
    scores = [r["score"] for r in results]
    assert scores == sorted(scores, reverse=True)


def test_search_pure_term_ranks_first(tiny_corpus):
    results = search("a", tiny_corpus, 2)
    assert [r["id"] for r in results] == ["pure-a", "mixed"]
    assert results[0]["score"] >= results[1]["score"]
    assert results[0]["score"] == pytest.approx(1.0)


def test_search_copies_fields_and_adds_score(tiny_corpus):
    results = search("a", tiny_corpus, 1)
    top = results[0]
    assert top["tfidf"] == {"a": 1.0}
    assert top["idf"] == {"a": 2.0, "b": 0.1}
    assert "score" in top
    assert "score" not in tiny_corpus[0]


def test_search_does_not_mutate_corpus(faq_corpus):
    before = copy.deepcopy(faq_corpus)
    search("reset password", faq_corpus, 4)
    assert faq_corpus == before


def test_search_finds_relevant_faq(faq_corpus):
    assert search("How can I reset my password?", faq_corpus, 1)[0]["id"] == "password"
    assert search("refund for my order", faq_corpus, 1)[0]["id"] == "refund"
    assert search("what are the office hours", faq_corpus, 1)[0]["id"] == "hours"


def test_search_empty_query_scores_all_zero(faq_corpus):
    results = search("", faq_corpus, 10)
    assert [r["score"] for r in results] == [0.0] * len(faq_corpus)
    # Nothing to rank by, so corpus order is kept.
    assert [r["id"] for r in results] == [d["id"] for d in faq_corpus]


def test_search_ties_keep_corpus_order():
    corpus = [
        {"id": 1, "tfidf": {"b": 1.0}},
        {"id": 2, "tfidf": {"a": 1.0}},
        {"id": 3, "tfidf": {"b": 2.0}},
        {"id": 4, "tfidf": {"a": 1.0}},
    ]
    results = search("a", corpus, 4)
    assert [r["id"] for r in results] == [2, 4, 1, 3]


def test_search_document_without_vectors_scores_zero():
    corpus = [{"id": "bare"}, {"id": "full", "tfidf": {"a": 1.0}, "idf": {"a": 1.0}}]
    results = search("a", corpus, 2)
    assert [r["id"] for r in results] == ["full", "bare"]
    assert results[1]["score"] == 0.0


def test_search_non_mapping_document_is_tolerated():
    results = search("a", [None, {"id": "doc", "tfidf": {"a": 1.0}}], 5)
    assert results[0]["id"] == "doc"
    assert results[1] == {"score": 0.0}


def test_search_is_idempotent(faq_corpus):
    first = search("assistant data pipelines", faq_corpus, 4)
    second = search("assistant data pipelines", faq_corpus, 4)
    assert first == second


def test_search_accepts_tuple_corpus(tiny_corpus):
    assert [r["id"] for r in search("a", tuple(tiny_corpus), 2)] == ["pure-a", "mixed"]


# ============================================================================
# rank() / CorpusIndex
# ============================================================================

def test_rank_sorts_descending_stable():
    scored = [{"n": 0, "score": 0.2}, {"n": 1, "score": 0.9}, {"n": 2, "score": 0.2}]
    assert [d["n"] for d in rank(scored, 3)] == [1, 0, 2]
    assert [d["n"] for d in rank(scored, 1)] == [1]


def test_tie_break_sorts_by_score_then_corpus_position():
    assert TIE_BREAK_CORPUS_ORDER is ranking_key
    entries = [(2, {"score": 0.5}), (0, {"score": 0.5}), (1, {"score": 0.7})]
    ordered = sorted(entries, key=TIE_BREAK_CORPUS_ORDER)
    assert [position for position, _doc in ordered] == [1, 0, 2]


def test_corpus_index_matches_stateless_search(faq_corpus):
    index = CorpusIndex.build(faq_corpus)
    for query in ["reset password", "office monday", "nothing matches here", ""]:
        assert index.search(query, 4) == search(query, faq_corpus, 4)
        assert index.query_vector(query) == build_query_vector(query, faq_corpus)


def test_corpus_index_is_a_snapshot(tiny_corpus):
    index = CorpusIndex.build(tiny_corpus)
    tiny_corpus.append({"id": "late", "tfidf": {"a": 1.0}})
    assert len(index) == 2
    assert [r["id"] for r in index.search("a", 5)] == ["pure-a", "mixed"]


def test_corpus_index_idf_is_read_only(tiny_corpus):
    index = CorpusIndex.build(tiny_corpus)
    with pytest.raises(TypeError):
        index.idf["a"] = 0.0  # type: ignore[index]


def test_corpus_index_empty():
    index = CorpusIndex.build([])
    assert len(index) == 0
    assert index.search("a") == []
