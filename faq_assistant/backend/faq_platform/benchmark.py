from __future__ import annotations

import json
import random
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

from .tokenizer import tokenize


@dataclass(frozen=True)
class QAItem:
    qid: int
    question: str
    gold_id: Any
    kind: str = "keyword"
    template: str | None = None


TEMPLATES: tuple[str, ...] = (
    "What is {p}?",
    "Tell me about {p}.",
    "How does {p} work?",
    "Where can I find information on {p}?",
    "Can you explain {p} briefly?",
)


def with_ids(corpus: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Copy of ``corpus`` where documents lacking an ``id`` get their position."""

    return [{**doc, "id": doc.get("id", idx)} for idx, doc in enumerate(corpus)]


def _key_phrases(document: Mapping[str, Any], *, limit: int = 3) -> list[str]:
    """Highest-weighted tokens of a document, falling back to its text."""

    tfidf = document.get("tfidf")
    if isinstance(tfidf, Mapping) and tfidf:
        ranked = sorted(tfidf.items(), key=lambda kv: (-kv[1], kv[0]))
        candidates = [token for token, _w in ranked]
    else:
        candidates = tokenize(document.get("text"))

    phrases: list[str] = []
    for token in candidates:
        if len(token) < 3 or token.isdigit() or token in phrases:
            continue
        phrases.append(token)
        if len(phrases) >= limit:
            break
    return phrases


def generate_questions(
    documents: Sequence[Mapping[str, Any]],
    *,
    n_questions: int = 100,
    seed: int = 42,
) -> list[QAItem]:
    """Deterministic keyword questions, each anchored to one gold document."""

    rng = random.Random(seed)

    candidates: list[tuple[Any, str]] = []
    for idx, doc in enumerate(documents):
        gold_id = doc.get("id", idx)
        for phrase in _key_phrases(doc):
            candidates.append((gold_id, phrase))
    rng.shuffle(candidates)

    items: list[QAItem] = []
    seen_questions: set[str] = set()
    # Each (document, phrase) pair can be asked with every template before giving up.
    attempts = 0
    max_attempts = len(candidates) * len(TEMPLATES)
    while len(items) < n_questions and attempts < max_attempts:
        gold_id, phrase = candidates[attempts % len(candidates)]
        attempts += 1
        tmpl = rng.choice(TEMPLATES)
        question = tmpl.format(p=phrase)
        if question in seen_questions:
            continue
        seen_questions.add(question)
        items.append(QAItem(qid=len(items), question=question, gold_id=gold_id, template=tmpl))

    return items


def evaluate_retriever(
    *,
    questions: list[QAItem],
    retrieve_fn: Callable[[str, int], list[dict[str, Any]]],
    top_k: int = 3,
) -> dict[str, Any]:
    latencies_ms: list[float] = []
    hits = 0
    mrr_total = 0.0
    failures = 0

    t_all0 = time.perf_counter()

    for item in questions:
        t0 = time.perf_counter()
        try:
            ranked = retrieve_fn(item.question, top_k)
            dt = (time.perf_counter() - t0) * 1000.0
            latencies_ms.append(dt)
        except Exception:
            dt = (time.perf_counter() - t0) * 1000.0
            latencies_ms.append(dt)
            failures += 1
            continue

        ids = [doc.get("id") for doc in ranked]
        if item.gold_id in ids:
            hits += 1
            rank = ids.index(item.gold_id) + 1
            mrr_total += 1.0 / rank

    latencies_ms.sort()

    def p(pct: float) -> float:
        if not latencies_ms:
            return 0.0
        k = int(round((pct / 100.0) * (len(latencies_ms) - 1)))
        return float(latencies_ms[max(0, min(k, len(latencies_ms) - 1))])

    t_all = max(1e-9, time.perf_counter() - t_all0)
    n = max(1, len(questions))
    return {
        "n": len(questions),
        "top_k": top_k,
        "recall_at_k": hits / n,
        "mrr": mrr_total / n,
        "failures": failures,
        "error_rate": failures / n,
        "qps": len(questions) / t_all,
        "latency_ms": {
            "p50": p(50),
            "p90": p(90),
            "p95": p(95),
            "p99": p(99),
            "mean": sum(latencies_ms) / len(latencies_ms) if latencies_ms else 0.0,
        },
    }


def write_report(report_dir: str, *, payload: dict[str, Any], report_id: str | None = None) -> str:
    Path(report_dir).mkdir(parents=True, exist_ok=True)
    report_id = report_id or datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    path = Path(report_dir) / f"benchmark_{report_id}.json"
    payload = dict(payload)
    payload.setdefault("report_id", report_id)
    payload.setdefault("created_at", datetime.now(timezone.utc).isoformat())
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2, default=str), encoding="utf-8")
    return str(path)
