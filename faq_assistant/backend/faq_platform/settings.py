from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from .tfidf import DEFAULT_TOP_K


class ConfigError(ValueError):
    """An environment variable holds a value the CLI cannot use."""


def _env_str(env: Mapping[str, str], name: str, default: str) -> str:
    return (env.get(name) or "").strip() or default


def _env_int(env: Mapping[str, str], name: str, default: int, *, minimum: int = 0) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class RetrievalSettings:
    corpus_path: str = "data/corpus.json"
    top_k: int = DEFAULT_TOP_K
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "RetrievalSettings":
        env = os.environ if env is None else env
        log_level = _env_str(env, "FAQ_LOG_LEVEL", cls.log_level).upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigError(f"FAQ_LOG_LEVEL must be a logging level name, got {log_level!r}")
        return cls(
            corpus_path=_env_str(env, "FAQ_CORPUS_PATH", cls.corpus_path),
            top_k=_env_int(env, "FAQ_TOP_K", cls.top_k),
            log_level=log_level,
        )
