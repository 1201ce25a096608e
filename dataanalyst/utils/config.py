"""Configuration for the EDA engine, the LLM backend and file ingestion.

Values come from dataclass defaults, overridden by environment variables
(a local `.env` file is honoured) when built through `load_cfg()`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv


@dataclass
class EDAConfig:
    sample_rows: int = 10
    sample_values: int = 5
    # a column is numeric/datetime when more than this share of values parses
    type_threshold: float = 0.8
    boolean_tokens: Tuple[str, ...] = ("true", "false", "1", "0", "yes", "no")
    outlier_iqr_multiplier: float = 1.5
    stats_precision: int = 2
    correlation_precision: int = 3
    # display-only knobs used when picking correlation pairs to highlight
    correlation_threshold: float = 0.3
    max_correlation_pairs: int = 5


@dataclass
class LLMConfig:
    api_key: Optional[str] = None
    base_url: str = "https://api.groq.com/openai/v1"
    model: str = "meta-llama/llama-4-scout-17b-16e-instruct"
    timeout: float = 30.0


@dataclass
class IngestConfig:
    max_file_size_mb: float = 50.0
    supported_extensions: Tuple[str, ...] = (".csv", ".xlsx")


@dataclass
class Config:
    eda: EDAConfig = field(default_factory=EDAConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    ingest: IngestConfig = field(default_factory=IngestConfig)


def load_cfg() -> Config:
    load_dotenv()
    cfg = Config()
    cfg.llm.api_key = os.getenv("GROQ_API_KEY") or None
    cfg.llm.base_url = os.getenv("GROQ_BASE_URL", cfg.llm.base_url)
    cfg.llm.model = os.getenv("GROQ_MODEL", cfg.llm.model)
    cfg.llm.timeout = float(os.getenv("LLM_TIMEOUT_SECONDS", cfg.llm.timeout))
    return cfg
