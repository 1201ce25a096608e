"""Load uploaded CSV / Excel files into rows for the EDA engine."""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from .config import IngestConfig
from .types import Scalar

logger = logging.getLogger("dataanalyst")


def load_rows(path, cfg: Optional[IngestConfig] = None) -> Tuple[List[Dict[str, Scalar]], str]:
    """
    Read a dataset file and return (rows, display file name).

    CSV cells stay strings exactly as written (blank lines skipped, empty
    cells become ""); Excel cells keep the types the first sheet stores,
    except dates, which become ISO strings; empty cells become None.
    """
    cfg = cfg or IngestConfig()
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    extension = path.suffix.lower()
    if extension not in cfg.supported_extensions:
        raise ValueError(f"Unsupported file format: {extension}")

    file_size_mb = path.stat().st_size / (1024 * 1024)
    if file_size_mb > cfg.max_file_size_mb:
        raise ValueError(f"File too large: {file_size_mb:.1f}MB > {cfg.max_file_size_mb:g}MB")

    if extension == ".csv":
        df = pd.read_csv(path, dtype=str, keep_default_na=False, skip_blank_lines=True)
    else:
        df = pd.read_excel(path, sheet_name=0)

    rows = [
        {str(k): _clean_cell(v) for k, v in rec.items()}
        for rec in df.to_dict("records")
    ]
    logger.info(f"Loaded {len(rows)} rows x {df.shape[1]} columns from {path.name}")
    return rows, path.name


def _clean_cell(v: Any) -> Scalar:
    if v is None:
        return None
    if isinstance(v, float) and math.isnan(v):
        return None
    if v is pd.NaT:
        return None
    # Excel date and time cells travel as ISO text
    if isinstance(v, (datetime, date, time)):
        return v.isoformat()
    # numpy scalars from Excel columns
    if hasattr(v, "item"):
        return v.item()
    return v
