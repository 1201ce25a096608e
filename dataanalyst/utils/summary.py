"""Plain-text and JSON renderings of an EDAResult.

The text form is what the LLM prompts embed; it is plain text on purpose
since the model is asked not to answer in markdown either.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

from .config import EDAConfig
from .eda import top_correlations
from .types import EDAResult


def pack_compact_summary(result: EDAResult, cfg: Optional[EDAConfig] = None, detailed: bool = False) -> str:
    """
    Render the result section by section.

    With `detailed`, column lines carry sample values, numeric lines carry
    all quartiles, categorical lines carry the head of the distribution and
    a correlation section is added.
    """
    cfg = cfg or EDAConfig()
    parts: List[str] = [
        _overview(result),
        _column_info(result, detailed),
        _numeric_stats(result, detailed),
        _categorical_stats(result, detailed),
        _missing_values(result),
    ]
    if detailed:
        parts.append(_correlations(result, cfg))
    parts.append(_outliers(result))
    return "\n\n".join(parts)


def dump_result(result: EDAResult, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, indent=2, sort_keys=True, ensure_ascii=False, allow_nan=False, default=str)
    return path


def _overview(result: EDAResult) -> str:
    info = result.dataset_info
    return "\n".join([
        f"Dataset: {info.file_name}",
        f"Rows: {info.total_rows}",
        f"Columns: {info.total_columns}",
    ])


def _column_info(result: EDAResult, detailed: bool) -> str:
    lines = ["Column Information:"]
    for col in result.dataset_info.columns:
        line = (
            f"- {col.name} ({col.inferred_type.value}): {col.null_count} missing values "
            f"({col.null_percentage:.1f}%), {col.unique_count} unique values"
        )
        if detailed:
            line += f", sample values: [{', '.join(str(v) for v in col.sample_values)}]"
        lines.append(line)
    return "\n".join(lines)


def _numeric_stats(result: EDAResult, detailed: bool) -> str:
    lines = ["Numeric Statistics:"]
    for s in result.numeric_stats:
        if detailed:
            lines.append(
                f"- {s.column}: count={s.count}, mean={s.mean}, std={s.std}, min={s.min}, "
                f"Q1={s.q25}, median={s.median}, Q3={s.q75}, max={s.max}"
            )
        else:
            lines.append(f"- {s.column}: mean={s.mean}, std={s.std}, range=[{s.min}, {s.max}]")
    return "\n".join(lines)


def _categorical_stats(result: EDAResult, detailed: bool) -> str:
    lines = ["Categorical Statistics:"]
    for s in result.categorical_stats:
        line = f"- {s.column}: {s.unique} unique values, most frequent=\"{s.top}\" ({s.freq} times)"
        if detailed:
            head = list(s.distribution.items())[:5]
            line += f", distribution: {json.dumps(head, ensure_ascii=False)}"
        lines.append(line)
    return "\n".join(lines)


def _missing_values(result: EDAResult) -> str:
    lines = ["Missing Values:"]
    for mv in result.missing_values:
        lines.append(f"- {mv.column}: {mv.count} missing ({mv.percentage:g}%)")
    return "\n".join(lines)


def _correlations(result: EDAResult, cfg: EDAConfig) -> str:
    lines = ["Correlations (top correlations):"]
    for a, b, r in top_correlations(result.correlations, cfg):
        lines.append(f"- {a} <-> {b}: {r:.3f}")
    return "\n".join(lines)


def _outliers(result: EDAResult) -> str:
    lines = ["Outliers Detected:"]
    for ol in result.outliers:
        lines.append(f"- {ol.column}: {ol.outlier_count} potential outliers")
    return "\n".join(lines)
