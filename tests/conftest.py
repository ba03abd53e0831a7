"""Shared fixtures for retrieval tests."""

import logging

import pytest

from faq_platform.indexer import index_texts


FAQ_TEXTS = [
    "How do I reset my password? Open settings and choose reset password.",
    "Office hours are Monday to Friday, 9am to 5pm.",
    "To request a refund, contact billing with your order number.",
    "The DI assistant answers questions about data integration pipelines.",
]


@pytest.fixture
def faq_texts():
    return list(FAQ_TEXTS)


@pytest.fixture
def faq_corpus():
    """FAQ texts indexed into the document format the retriever consumes."""
    return index_texts(FAQ_TEXTS, ids=["password", "hours", "refund", "assistant"])


@pytest.fixture
def tiny_corpus():
    """Two hand-built documents; 'a' dominates the idf contributions."""
    return [
        {"id": "pure-a", "tfidf": {"a": 1.0}, "idf": {"a": 2.0, "b": 0.1}},
        {"id": "mixed", "tfidf": {"a": 0.5, "b": 0.5}, "idf": {"a": 2.0, "b": 0.1}},
    ]


@pytest.fixture
def restore_root_logging():
    """Undo the handler swap done by configure_json_logging."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
