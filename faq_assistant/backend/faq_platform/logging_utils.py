from __future__ import annotations

import contextlib
import json
import logging
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Iterator

query_id_var: ContextVar[str | None] = ContextVar("query_id", default=None)


def new_query_id() -> str:
    return str(uuid.uuid4())


def set_query_id(qid: str | None) -> None:
    """Bind ``qid`` for the rest of the current context; blank clears it."""

    query_id_var.set((qid or "").strip() or None)


def get_query_id() -> str | None:
    qid = query_id_var.get()
    return (qid or "").strip() or None


@contextlib.contextmanager
def query_id_scope(qid: str | None = None) -> Iterator[str]:
    """Bind a query id for the duration of the block, minting one if needed."""

    token = query_id_var.set((qid or "").strip() or new_query_id())
    try:
        yield query_id_var.get() or ""
    finally:
        query_id_var.reset(token)


def _event_time(record: logging.LogRecord) -> str:
    ts = datetime.fromtimestamp(record.created, tz=timezone.utc).replace(microsecond=0)
    return ts.isoformat().replace("+00:00", "Z")


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    Structured values passed as ``extra={"fields": {...}}`` are merged into
    the top level but never shadow the core keys.
    """

    def _core(self, record: logging.LogRecord) -> dict[str, Any]:
        core: dict[str, Any] = {
            "ts": _event_time(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        qid = get_query_id()
        if qid:
            core["query_id"] = qid
        if record.exc_info:
            core["exc"] = self.formatException(record.exc_info)
        return core

    def format(self, record: logging.LogRecord) -> str:
        payload = self._core(record)
        fields = getattr(record, "fields", None)
        if isinstance(fields, dict):
            payload = {**fields, **payload}
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_json_logging(*, level: int | str = logging.INFO) -> None:
    """Configure process-wide JSON logging on stderr.

    A single StreamHandler with JsonFormatter; stdout stays free for CLI output.
    """

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    handler.setLevel(level)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]


def log_retrieval(
    *,
    logger: logging.Logger,
    corpus_size: int,
    top_k: int,
    hits: int,
    top_score: float | None,
    duration_ms: float,
) -> None:
    logger.info(
        "retrieval_query",
        extra={
            "fields": {
                "corpus_size": int(corpus_size),
                "top_k": int(top_k),
                "hits": int(hits),
                "top_score": None if top_score is None else float(top_score),
                "duration_ms": float(duration_ms),
            }
        },
    )
