from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Literal

from .schema import CorpusValidationError
from .settings import ConfigError

ErrorStage = Literal["config", "load", "index", "query", "benchmark", "unknown"]


class EmptyQueryError(ValueError):
    """Raised at the CLI boundary when the query has no searchable tokens."""


@dataclass(frozen=True)
class CodedError:
    code: str
    stage: ErrorStage
    message: str
    detail: dict[str, Any] | None = None

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)


def _name(e: BaseException) -> str:
    return type(e).__name__


def classify_error(*, e: BaseException, stage: ErrorStage) -> CodedError:
    msg = str(e) if str(e) else _name(e)

    if isinstance(e, FileNotFoundError) or "Corpus path does not exist" in msg:
        return CodedError(code="CORPUS_NOT_FOUND", stage=stage, message=msg)

    # JSONDecodeError subclasses ValueError, so check it before the generic validation case.
    if isinstance(e, json.JSONDecodeError):
        return CodedError(
            code="CORPUS_INVALID_JSON",
            stage=stage,
            message=msg,
            detail={"line": e.lineno, "column": e.colno},
        )

    if isinstance(e, CorpusValidationError):
        detail = None if e.index is None else {"index": e.index}
        return CodedError(code="CORPUS_INVALID_DOCUMENT", stage=stage, message=msg, detail=detail)

    if isinstance(e, ConfigError):
        return CodedError(code="CONFIG_INVALID", stage=stage, message=msg)

    if isinstance(e, EmptyQueryError):
        return CodedError(code="QUERY_EMPTY", stage=stage, message=msg)

    return CodedError(code="UNCLASSIFIED", stage=stage, message=msg, detail={"type": _name(e)})
