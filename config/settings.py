from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


TOKENIZER_POLICIES = ("strict", "compat")


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


def _as_bool(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    log_level: str
    run_env: str

    # Tree / aggregation
    tree_max_companies: int
    tree_root_label: str

    # Parsing
    csv_tokenizer: str  # strict | compat

    # Insight prompt sizing
    insight_sample_size: int
    insight_top_companies: int

    openai_api_key: str | None
    openai_model: str | None

    # AI gating
    ai_enabled: bool
    ai_provider: str  # stub | openai

    # Logging/tracing
    llm_trace: bool = False
    llm_log_path: str = "logs/llm_calls.jsonl"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    ai_enabled = _as_bool(os.getenv("AI_ENABLED", "false"))
    ai_provider = os.getenv("AI_PROVIDER", "stub")
    openai_api_key = os.getenv("OPENAI_API_KEY")

    if ai_enabled and ai_provider == "openai" and not openai_api_key:
        raise RuntimeError(
            "OPENAI_API_KEY required when AI_PROVIDER=openai and AI_ENABLED=true"
        )

    csv_tokenizer = os.getenv("CSV_TOKENIZER", "strict").strip().lower()
    if csv_tokenizer not in TOKENIZER_POLICIES:
        raise ValueError(
            f"CSV_TOKENIZER must be one of {', '.join(TOKENIZER_POLICIES)}, got {csv_tokenizer!r}"
        )

    return Settings(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        run_env=os.getenv("RUN_ENV", "local"),
        tree_max_companies=int(os.getenv("TREE_MAX_COMPANIES", "50")),
        tree_root_label=os.getenv("TREE_ROOT_LABEL", "My Network"),
        csv_tokenizer=csv_tokenizer,
        insight_sample_size=int(os.getenv("INSIGHT_SAMPLE_SIZE", "50")),
        insight_top_companies=int(os.getenv("INSIGHT_TOP_COMPANIES", "10")),
        openai_api_key=openai_api_key,
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        ai_enabled=ai_enabled,
        ai_provider=ai_provider,
        llm_trace=_as_bool(os.getenv("LLM_TRACE", "false")),
        llm_log_path=os.getenv("LLM_LOG_PATH", "logs/llm_calls.jsonl"),
    )
