"""Command line entry point: ``faq-retrieval search|index|benchmark``."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from .benchmark import evaluate_retriever, generate_questions, with_ids, write_report
from .error_codes import EmptyQueryError, ErrorStage, classify_error
from .indexer import index_texts
from .loaders import load_corpus, load_source_texts
from .logging_utils import configure_json_logging, query_id_scope
from .metrics import inc_error
from .retriever import Retriever
from .settings import ConfigError, RetrievalSettings
from .tokenizer import tokenize

logger = logging.getLogger("faq_platform.cli")


def _non_negative_int(raw: str) -> int:
    value = int(raw)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {value}")
    return value


def _summarise(doc: dict[str, Any]) -> dict[str, Any]:
    return {"id": doc.get("id"), "score": doc["score"], "text": doc.get("text")}


def _cmd_search(args: argparse.Namespace) -> int:
    if not tokenize(args.query):
        raise EmptyQueryError("Query has no searchable words")
    retriever = Retriever(load_corpus(args.corpus))
    with query_id_scope(args.query_id):
        results = retriever.retrieve(args.query, args.top_k)
    print(json.dumps([_summarise(d) for d in results], ensure_ascii=False, indent=2))
    return 0


def _cmd_index(args: argparse.Namespace) -> int:
    sources = load_source_texts(args.input)
    documents = index_texts([s.text for s in sources], ids=[s.doc_id for s in sources])
    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(documents, ensure_ascii=False, indent=2), encoding="utf-8")
    print(json.dumps({"documents": len(documents), "out": str(out)}))
    return 0


def _cmd_benchmark(args: argparse.Namespace) -> int:
    corpus = with_ids(load_corpus(args.corpus))
    retriever = Retriever(corpus)
    questions = generate_questions(corpus, n_questions=args.n_questions, seed=args.seed)
    result = evaluate_retriever(questions=questions, retrieve_fn=retriever.retrieve, top_k=args.top_k)
    payload: dict[str, Any] = {"corpus": str(args.corpus), "seed": args.seed, "metrics": result}
    if args.report_dir:
        payload["report_path"] = write_report(args.report_dir, payload=payload)
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


_STAGES: dict[str, ErrorStage] = {"search": "query", "index": "index", "benchmark": "benchmark"}


def build_parser(settings: RetrievalSettings) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="faq-retrieval", description="TF-IDF retrieval over a pre-indexed FAQ corpus.")
    sub = ap.add_subparsers(dest="command", required=True)

    sp = sub.add_parser("search", help="Rank corpus documents against a query")
    sp.add_argument("query")
    sp.add_argument("--corpus", default=settings.corpus_path, help="Pre-indexed corpus (.json or .jsonl)")
    sp.add_argument("--top-k", type=_non_negative_int, default=settings.top_k)
    sp.add_argument("--query-id", default=None, help="Correlation id for log lines")
    sp.set_defaults(func=_cmd_search)

    ip = sub.add_parser("index", help="Build a pre-indexed corpus from raw texts")
    ip.add_argument("input", help="Directory of .txt/.md files or JSON array of texts")
    ip.add_argument("--out", required=True, help="Where to write the indexed corpus (.json)")
    ip.set_defaults(func=_cmd_index)

    bp = sub.add_parser("benchmark", help="Recall/MRR/latency on generated keyword questions")
    bp.add_argument("--corpus", default=settings.corpus_path)
    bp.add_argument("--n-questions", type=_non_negative_int, default=100)
    bp.add_argument("--top-k", type=_non_negative_int, default=settings.top_k)
    bp.add_argument("--seed", type=int, default=42)
    bp.add_argument("--report-dir", default=None, help="Also write a JSON report here")
    bp.set_defaults(func=_cmd_benchmark)

    return ap


def _report(e: BaseException, *, stage: ErrorStage, command: str | None) -> int:
    coded = classify_error(e=e, stage=stage)
    inc_error(stage=coded.stage, code=coded.code)
    logger.error("command_failed", extra={"fields": {"command": command, "code": coded.code}})
    print(coded.to_json(), file=sys.stderr)
    return 2


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = RetrievalSettings.from_env()
    except ConfigError as e:
        return _report(e, stage="config", command=None)
    configure_json_logging(level=settings.log_level)
    args = build_parser(settings).parse_args(argv)

    try:
        return int(args.func(args))
    except (OSError, ValueError) as e:
        return _report(e, stage=_STAGES.get(args.command, "unknown"), command=args.command)


if __name__ == "__main__":
    raise SystemExit(main())
