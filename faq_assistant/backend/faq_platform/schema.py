"""Boundary validation for corpora handed to the retriever.

The scoring core accepts any mapping-shaped document and never raises.
Corpora read from disk or received from callers go through
``validate_corpus`` first so contract violations surface as a single,
descriptive ``CorpusValidationError`` instead of silently scoring zero.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator


class CorpusValidationError(ValueError):
    def __init__(self, message: str, *, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index


class DocumentRecord(BaseModel):
    """A pre-indexed document.

    Unknown keys (answers, titles, tags...) are kept as-is and come back
    on every scored result.
    """

    model_config = ConfigDict(extra="allow")

    id: Any = None
    text: str | None = None
    tfidf: dict[str, float] | None = None
    idf: dict[str, float] | None = None

    @field_validator("tfidf", "idf")
    @classmethod
    def _finite_weights(cls, value: dict[str, float] | None) -> dict[str, float] | None:
        if value is None:
            return value
        for token, weight in value.items():
            if not math.isfinite(weight):
                raise ValueError(f"weight for token {token!r} must be finite, got {weight!r}")
        return value


def validate_corpus(raw: Any) -> list[dict[str, Any]]:
    """Validate a decoded JSON corpus and return it as plain dicts.

    Keys the input did not set are left out, so a document without an
    ``idf`` map stays without one and is excluded from the IDF average.
    """

    if not isinstance(raw, list):
        raise CorpusValidationError(f"Corpus must be a JSON array of documents, got {type(raw).__name__}")

    documents: list[dict[str, Any]] = []
    for idx, item in enumerate(raw):
        try:
            record = DocumentRecord.model_validate(item)
        except ValidationError as e:
            raise CorpusValidationError(f"Invalid document at index {idx}: {e}", index=idx) from e
        documents.append(record.model_dump(exclude_unset=True))
    return documents
