"""Exploratory data analysis engine for a conversational data explorer."""

from .insights import GroqInsightGenerator
from .utils.config import Config, EDAConfig, IngestConfig, LLMConfig, load_cfg
from .utils.eda import compute_eda_result, perform_eda
from .utils.errors import DegenerateColumnWarning, EmptyDatasetError, InsightGenerationError
from .utils.ingest import load_rows
from .utils.recommendations import RuleBasedInsightGenerator
from .utils.types import ColumnType, EDAResult

__version__ = "0.1.0"

__all__ = [
    "ColumnType",
    "Config",
    "DegenerateColumnWarning",
    "EDAConfig",
    "EDAResult",
    "EmptyDatasetError",
    "GroqInsightGenerator",
    "IngestConfig",
    "InsightGenerationError",
    "LLMConfig",
    "RuleBasedInsightGenerator",
    "compute_eda_result",
    "load_cfg",
    "load_rows",
    "perform_eda",
]
