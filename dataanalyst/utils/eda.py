"""Deterministic EDA engine behind the conversational data explorer.

Produces, for one uploaded dataset snapshot:
- Per-column metadata (inferred type, nulls, uniqueness, sample values).
- Numeric summaries (mean, population std, nearest-rank quartiles).
- Categorical frequency distributions with first-seen mode tie-breaking.
- A Pearson correlation matrix over the numeric columns.
- IQR-fence outlier reports.

Everything here is a pure function of the rows it is given. The only
non-deterministic step, the free-text recommendations, lives behind an
insight generator that `perform_eda` awaits once and replaces with the
rule-based fallback when it fails.
"""

from __future__ import annotations

import asyncio
import logging
import math
import warnings
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .config import Config, EDAConfig
from .errors import DegenerateColumnWarning, EmptyDatasetError
from .recommendations import InsightGenerator, RuleBasedInsightGenerator
from .types import (
    CategoricalStats,
    ColumnInfo,
    ColumnType,
    CorrelationMatrix,
    DataRow,
    DatasetInfo,
    EDAResult,
    MissingValue,
    NumericStats,
    OutlierReport,
    Scalar,
)

logger = logging.getLogger("dataanalyst")


# -----------------------
# Public entry points
# -----------------------

async def perform_eda(
    rows: Union[Sequence[DataRow], pd.DataFrame],
    file_name: str,
    insight_generator: Optional[InsightGenerator] = None,
    cfg: Optional[Config] = None,
) -> EDAResult:
    """
    Run the full analysis and attach recommendations.

    The insight generator is awaited once, bounded by cfg.llm.timeout. Any
    failure (exception, timeout, empty answer) is logged and replaced by the
    rule-based recommendations; nothing from that call escapes.

    Raises:
        EmptyDatasetError: when `rows` is empty.
    """
    cfg = cfg or Config()
    result = compute_eda_result(rows, file_name, cfg.eda)
    sample_rows = list(result.dataset_info.sample_data)
    fallback = RuleBasedInsightGenerator()

    recommendations: List[str] = []
    if insight_generator is not None:
        try:
            recommendations = list(await asyncio.wait_for(
                insight_generator.generate_insights(result, sample_rows),
                timeout=cfg.llm.timeout,
            ))
            if not recommendations:
                logger.info("Insight generator returned nothing; using rule-based recommendations")
        except Exception as e:
            logger.warning(f"Insight generation failed, using rule-based recommendations: {e!r}")
            recommendations = []

    if not recommendations:
        recommendations = await fallback.generate_insights(result, sample_rows)

    result.recommendations = recommendations
    return result


def compute_eda_result(
    rows: Union[Sequence[DataRow], pd.DataFrame],
    file_name: str,
    cfg: Optional[EDAConfig] = None,
) -> EDAResult:
    """Compute every deterministic part of the EDA result (recommendations left empty)."""
    cfg = cfg or EDAConfig()
    df = rows if isinstance(rows, pd.DataFrame) else to_frame(rows)
    logger.info(f"Analyzing '{file_name}': {df.shape[0]} rows x {df.shape[1]} columns")

    dataset_info = analyze_dataset(df, file_name, cfg)
    numeric_cols = dataset_info.names_of_type(ColumnType.NUMERIC)
    categorical_cols = dataset_info.names_of_type(ColumnType.CATEGORICAL)

    numeric_stats = []
    for c in numeric_cols:
        stats = calculate_numeric_stats(df, c, cfg)
        if stats is not None:
            numeric_stats.append(stats)

    categorical_stats = [calculate_categorical_stats(df, c) for c in categorical_cols]
    missing_values = summarize_missing_values(dataset_info)
    correlations = calculate_correlations(df, numeric_cols, cfg)

    outliers = []
    for c in numeric_cols:
        report = detect_outliers(df, c, cfg)
        if report is not None and report.outlier_count > 0:
            outliers.append(report)

    logger.info(
        f"Analysis of '{file_name}' done: {len(numeric_stats)} numeric, "
        f"{len(categorical_stats)} categorical, {len(outliers)} columns with outliers"
    )
    return EDAResult(
        dataset_info=dataset_info,
        numeric_stats=numeric_stats,
        categorical_stats=categorical_stats,
        missing_values=missing_values,
        correlations=correlations,
        outliers=outliers,
    )


def to_frame(rows: Sequence[DataRow]) -> pd.DataFrame:
    """
    Lay rows out as an object-dtype frame without touching cell values.

    Column order is the key order of the first row; a key missing from a later
    row becomes None. The index is the row position.
    """
    if len(rows) == 0:
        return pd.DataFrame()
    keys = list(rows[0].keys())
    records = [[row.get(k) for k in keys] for row in rows]
    return pd.DataFrame(records, columns=[str(k) for k in keys], dtype=object)


def infer_column_type(values: Iterable[Scalar], cfg: Optional[EDAConfig] = None) -> ColumnType:
    """Classify a column; boolean wins over numeric, numeric over datetime."""
    cfg = cfg or EDAConfig()
    non_null = [v for v in values if not _is_null(v)]
    if not non_null:
        return ColumnType.CATEGORICAL

    lowered = {_stringify(v).lower() for v in non_null}
    if len(lowered) <= 2 and lowered <= set(cfg.boolean_tokens):
        return ColumnType.BOOLEAN

    n = len(non_null)
    numeric_count = sum(1 for v in non_null if not math.isnan(_coerce_number(v)))
    if numeric_count / n > cfg.type_threshold:
        return ColumnType.NUMERIC

    if _count_dates(non_null) / n > cfg.type_threshold:
        return ColumnType.DATETIME

    return ColumnType.CATEGORICAL


def analyze_dataset(df: pd.DataFrame, file_name: str, cfg: Optional[EDAConfig] = None) -> DatasetInfo:
    """
    Profile every column of `df` in a single scan per column.

    Raises:
        EmptyDatasetError: when `df` has no rows.
    """
    cfg = cfg or EDAConfig()
    total_rows = int(df.shape[0])
    if total_rows == 0:
        raise EmptyDatasetError("Dataset is empty")

    columns: List[ColumnInfo] = []
    for name in df.columns:
        non_null = [v for v in df[name].tolist() if not _is_null(v)]
        null_count = total_rows - len(non_null)
        uniques = _unique_in_order(non_null)
        columns.append(ColumnInfo(
            name=str(name),
            inferred_type=infer_column_type(non_null, cfg),
            null_count=null_count,
            null_percentage=null_count / total_rows * 100,
            unique_count=len(uniques),
            sample_values=tuple(uniques[: cfg.sample_values]),
        ))

    sample_data = tuple(
        {str(k): _sample_cell(v) for k, v in rec.items()}
        for rec in df.head(cfg.sample_rows).to_dict("records")
    )
    return DatasetInfo(
        total_rows=total_rows,
        total_columns=len(columns),
        columns=tuple(columns),
        sample_data=sample_data,
        file_name=file_name,
    )


def calculate_numeric_stats(df: pd.DataFrame, column: str, cfg: Optional[EDAConfig] = None) -> Optional[NumericStats]:
    """
    Mean, population std and floor-indexed quartiles of a numeric column.

    Returns None (with a DegenerateColumnWarning) when nothing in the column
    coerces to a finite number.
    """
    cfg = cfg or EDAConfig()
    values = _sorted_numeric(df, column).to_numpy(dtype=float)
    count = len(values)
    if count == 0:
        msg = f"Column '{column}' is typed numeric but has no numeric values; skipping numeric stats"
        logger.warning(msg)
        warnings.warn(msg, DegenerateColumnWarning, stacklevel=2)
        return None

    mean = float(values.mean())
    std = float(values.std())  # ddof=0
    return NumericStats(
        column=column,
        count=count,
        mean=round(mean, cfg.stats_precision),
        std=round(std, cfg.stats_precision),
        min=float(values[0]),
        q25=_floor_quantile(values, 0.25),
        median=_floor_quantile(values, 0.5),
        q75=_floor_quantile(values, 0.75),
        max=float(values[-1]),
    )


def calculate_categorical_stats(df: pd.DataFrame, column: str) -> CategoricalStats:
    values = [_stringify(v) for v in df[column].tolist() if not _is_null(v)]
    distribution = Counter(values)
    # most_common keeps first-encountered order among equal counts
    top, freq = distribution.most_common(1)[0] if distribution else ("", 0)
    return CategoricalStats(
        column=column,
        count=len(values),
        unique=len(distribution),
        top=top,
        freq=int(freq),
        distribution=dict(distribution),
    )


def calculate_correlations(
    df: pd.DataFrame,
    numeric_columns: Sequence[str],
    cfg: Optional[EDAConfig] = None,
) -> CorrelationMatrix:
    """Pearson r for every ordered pair of numeric columns, rows paired by position."""
    cfg = cfg or EDAConfig()
    coerced = {c: _coerce_column(df, c).to_numpy(dtype=float) for c in numeric_columns}
    correlations: CorrelationMatrix = {}
    for a in numeric_columns:
        correlations[a] = {}
        for b in numeric_columns:
            correlations[a][b] = _pearson(coerced[a], coerced[b], cfg.correlation_precision)
    return correlations


def detect_outliers(df: pd.DataFrame, column: str, cfg: Optional[EDAConfig] = None) -> Optional[OutlierReport]:
    """
    Flag values strictly outside [Q1 - k*IQR, Q3 + k*IQR].

    Quartiles come from the same coercion and floor indexing as the numeric
    stats. Returns None when the column has no numeric values at all.
    """
    cfg = cfg or EDAConfig()
    values = _sorted_numeric(df, column)
    if values.empty:
        return None

    arr = values.to_numpy(dtype=float)
    q1 = _floor_quantile(arr, 0.25)
    q3 = _floor_quantile(arr, 0.75)
    iqr = q3 - q1
    lower = q1 - cfg.outlier_iqr_multiplier * iqr
    upper = q3 + cfg.outlier_iqr_multiplier * iqr

    flagged = values[(values < lower) | (values > upper)]
    indices = tuple(sorted(int(i) for i in flagged.index))
    return OutlierReport(
        column=column,
        outlier_count=len(indices),
        outlier_indices=indices,
        lower_bound=float(lower),
        upper_bound=float(upper),
    )


def summarize_missing_values(dataset_info: DatasetInfo) -> List[MissingValue]:
    return [
        MissingValue(column=c.name, count=c.null_count, percentage=round(c.null_percentage, 1))
        for c in dataset_info.columns
        if c.null_count > 0
    ]


def top_correlations(correlations: CorrelationMatrix, cfg: Optional[EDAConfig] = None) -> List[Tuple[str, str, float]]:
    """
    Off-diagonal pairs worth highlighting, strongest |r| first.

    Each unordered pair appears once, in column order; ties keep that order.
    """
    cfg = cfg or EDAConfig()
    names = list(correlations.keys())
    pairs = []
    for i, a in enumerate(names):
        for b in names[i + 1:]:
            r = correlations[a].get(b, 0.0)
            if abs(r) > cfg.correlation_threshold:
                pairs.append((a, b, r))
    pairs.sort(key=lambda p: -abs(p[2]))
    return pairs[: cfg.max_correlation_pairs]


# -----------------------
# Internal helpers
# -----------------------

def _is_null(v: Any) -> bool:
    if isinstance(v, str):
        return v == ""
    try:
        return bool(pd.isna(v))
    except (TypeError, ValueError):
        return False


def _coerce_number(v: Any) -> float:
    """Finite float for a cell, NaN when it is not a number."""
    if isinstance(v, (bool, np.bool_)):
        return 1.0 if v else 0.0
    if isinstance(v, (int, float, np.integer, np.floating)):
        try:
            f = float(v)
        except OverflowError:
            return math.nan
    elif isinstance(v, str):
        s = v.strip()
        if not s or "_" in s:
            return math.nan
        try:
            f = float(s)
        except ValueError:
            return math.nan
    else:
        return math.nan
    return f if math.isfinite(f) else math.nan


def _sample_cell(v: Any) -> Scalar:
    if _is_null(v):
        return None
    if isinstance(v, np.generic):
        return v.item()
    return v


def _stringify(v: Any) -> str:
    if isinstance(v, (bool, np.bool_)):
        return "true" if v else "false"
    if isinstance(v, (float, np.floating)) and math.isfinite(v) and float(v).is_integer():
        return str(int(v))
    return str(v)


def _value_kind(v: Any) -> str:
    if isinstance(v, (bool, np.bool_)):
        return "bool"
    if isinstance(v, str):
        return "str"
    if isinstance(v, (int, float, np.integer, np.floating)):
        return "num"
    return type(v).__name__


def _unique_in_order(values: Iterable[Scalar]) -> List[Scalar]:
    # keyed by kind so that 1, True and "1" stay distinct
    seen: Dict[Tuple[str, Any], Scalar] = {}
    for v in values:
        seen.setdefault((_value_kind(v), v), v)
    return list(seen.values())


def _count_dates(values: List[Scalar]) -> int:
    strings = pd.Series([_stringify(v) for v in values], dtype=object)
    parsed = pd.to_datetime(strings, errors="coerce", utc=True, format="mixed")
    return int(parsed.notna().sum())


def _coerce_column(df: pd.DataFrame, column: str) -> pd.Series:
    """Column as floats (NaN where not numeric), indexed by row position."""
    return df[column].map(_coerce_number).astype(float).reset_index(drop=True)


def _sorted_numeric(df: pd.DataFrame, column: str) -> pd.Series:
    # stable sort keeps row order among equal values
    return _coerce_column(df, column).dropna().sort_values(kind="mergesort")


def _floor_quantile(sorted_values: np.ndarray, p: float) -> float:
    return float(sorted_values[int(math.floor(len(sorted_values) * p))])


def _pearson(x: np.ndarray, y: np.ndarray, precision: int) -> float:
    mask = np.isfinite(x) & np.isfinite(y)
    xs, ys = x[mask], y[mask]
    if len(xs) == 0:
        return 0.0
    dx = xs - xs.mean()
    dy = ys - ys.mean()
    denominator = math.sqrt(float((dx * dx).sum()) * float((dy * dy).sum()))
    if denominator == 0:
        return 0.0
    return round(float((dx * dy).sum()) / denominator, precision)
