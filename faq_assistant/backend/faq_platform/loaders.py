from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Protocol

from .schema import CorpusValidationError, validate_corpus


@dataclass(frozen=True)
class SourceText:
    doc_id: Any
    text: str


class Loader(Protocol):
    def can_load(self, path: Path) -> bool: ...

    def load_text(self, path: Path) -> str: ...


class TextLoader:
    def can_load(self, path: Path) -> bool:
        return path.suffix.lower() in {".txt", ".md", ".markdown"}

    def load_text(self, path: Path) -> str:
        return path.read_text(encoding="utf-8", errors="ignore").strip()


def iter_supported_files(root: Path, loader: Loader) -> Iterable[Path]:
    for p in sorted(root.rglob("*")):
        if not p.is_file():
            continue
        if p.name.startswith("~$") or p.name.startswith("."):
            continue
        if loader.can_load(p):
            yield p


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _read_jsonl(path: Path) -> list[Any]:
    records: list[Any] = []
    with path.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise json.JSONDecodeError(f"{e.msg} (line {lineno})", e.doc, e.pos) from e
    return records


def load_corpus(path: str | Path) -> list[dict[str, Any]]:
    """Read a pre-indexed corpus from ``.json`` (array) or ``.jsonl`` and validate it."""

    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Corpus path does not exist: {p}")
    raw = _read_jsonl(p) if p.suffix.lower() == ".jsonl" else _read_json(p)
    return validate_corpus(raw)


def load_source_texts(path: str | Path, *, loader: Loader | None = None) -> list[SourceText]:
    """Raw texts to index.

    ``path`` is either a directory of text/markdown files (one document per
    file, id = relative path) or a JSON array of strings or ``{"id", "text"}``
    objects.
    """

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Corpus path does not exist: {p}")

    if p.is_dir():
        loader = loader or TextLoader()
        return [
            SourceText(doc_id=f.relative_to(p).as_posix(), text=loader.load_text(f))
            for f in iter_supported_files(p, loader)
        ]

    raw = _read_json(p)
    if not isinstance(raw, list):
        raise CorpusValidationError(f"Source file must hold a JSON array, got {type(raw).__name__}")

    sources: list[SourceText] = []
    for idx, item in enumerate(raw):
        if isinstance(item, str):
            sources.append(SourceText(doc_id=idx, text=item))
        elif isinstance(item, dict) and isinstance(item.get("text"), str):
            sources.append(SourceText(doc_id=item.get("id", idx), text=item["text"]))
        else:
            raise CorpusValidationError(f"Source entry at index {idx} has no text", index=idx)
    return sources
