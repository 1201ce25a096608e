"""Rule-based recommendations and the insight generator interface."""

from __future__ import annotations

from typing import List, Protocol, Sequence

from .types import ColumnType, DataRow, DatasetInfo, EDAResult, MissingValue, OutlierReport

CLEAN_DATASET_MESSAGE = "Dataset looks clean! Ready for analysis and modeling."

DROP_MISSING_PCT = 50
IMPUTE_MISSING_PCT = 10
OUTLIER_ROW_SHARE = 0.05
SMALL_DATASET_ROWS = 100
HIGH_CARDINALITY_SHARE = 0.5


class InsightGenerator(Protocol):
    async def generate_insights(self, result: EDAResult, sample_rows: Sequence[DataRow]) -> List[str]:
        ...


class RuleBasedInsightGenerator:
    """Deterministic stand-in used whenever the LLM service cannot answer."""

    async def generate_insights(self, result: EDAResult, sample_rows: Sequence[DataRow]) -> List[str]:
        return generate_recommendations(result.dataset_info, result.missing_values, result.outliers)


def generate_recommendations(
    dataset_info: DatasetInfo,
    missing_values: Sequence[MissingValue],
    outliers: Sequence[OutlierReport],
) -> List[str]:
    recommendations: List[str] = []

    # percentages here are the rounded ones shown to the user
    for mv in missing_values:
        if mv.percentage > DROP_MISSING_PCT:
            recommendations.append(
                f"Consider dropping column '{mv.column}' - it has {mv.percentage:g}% missing values"
            )
        elif mv.percentage > IMPUTE_MISSING_PCT:
            recommendations.append(
                f"Address missing values in '{mv.column}' ({mv.percentage:g}%) - consider imputation or removal"
            )

    for ol in outliers:
        if ol.outlier_count > dataset_info.total_rows * OUTLIER_ROW_SHARE:
            recommendations.append(
                f"Review outliers in '{ol.column}' - {ol.outlier_count} potential outliers detected"
            )

    if dataset_info.total_rows < SMALL_DATASET_ROWS:
        recommendations.append("Small dataset - consider gathering more data for robust analysis")

    for col in dataset_info.columns:
        if col.inferred_type == ColumnType.CATEGORICAL and col.unique_count > dataset_info.total_rows * HIGH_CARDINALITY_SHARE:
            recommendations.append(
                f"Column '{col.name}' has high cardinality - consider grouping or encoding strategies"
            )

    if not recommendations:
        recommendations.append(CLEAN_DATASET_MESSAGE)
    return recommendations
