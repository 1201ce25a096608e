"""Result types produced by the EDA engine.

All of these are built once per analysis pass and never mutated afterwards.
`to_dict()` gives the plain JSON form handed to the chat/UI layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

# A single cell as delivered by ingestion. None stands for an absent value.
Scalar = Union[str, int, float, bool, None]
DataRow = Mapping[str, Scalar]

CorrelationMatrix = Dict[str, Dict[str, float]]


class ColumnType(str, Enum):
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    DATETIME = "datetime"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class ColumnInfo:
    name: str
    inferred_type: ColumnType
    null_count: int
    null_percentage: float
    unique_count: int
    sample_values: Tuple[Scalar, ...] = ()

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.inferred_type.value,
            "null_count": self.null_count,
            "null_percentage": self.null_percentage,
            "unique_count": self.unique_count,
            "sample_values": list(self.sample_values),
        }


@dataclass(frozen=True)
class DatasetInfo:
    total_rows: int
    total_columns: int
    columns: Tuple[ColumnInfo, ...]
    sample_data: Tuple[Dict[str, Scalar], ...]
    file_name: str

    def column(self, name: str) -> Optional[ColumnInfo]:
        for c in self.columns:
            if c.name == name:
                return c
        return None

    def names_of_type(self, col_type: ColumnType) -> List[str]:
        return [c.name for c in self.columns if c.inferred_type == col_type]

    def to_dict(self) -> dict:
        return {
            "total_rows": self.total_rows,
            "total_columns": self.total_columns,
            "columns": [c.to_dict() for c in self.columns],
            "sample_data": [dict(r) for r in self.sample_data],
            "file_name": self.file_name,
        }


@dataclass(frozen=True)
class NumericStats:
    column: str
    count: int
    mean: float
    std: float
    min: float
    q25: float
    median: float
    q75: float
    max: float

    def to_dict(self) -> dict:
        return {
            "column": self.column,
            "count": self.count,
            "mean": self.mean,
            "std": self.std,
            "min": self.min,
            "q25": self.q25,
            "median": self.median,
            "q75": self.q75,
            "max": self.max,
        }


@dataclass(frozen=True)
class CategoricalStats:
    column: str
    count: int
    unique: int
    top: str
    freq: int
    # insertion order is first-seen order
    distribution: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "column": self.column,
            "count": self.count,
            "unique": self.unique,
            "top": self.top,
            "freq": self.freq,
            "distribution": dict(self.distribution),
        }


@dataclass(frozen=True)
class MissingValue:
    column: str
    count: int
    percentage: float

    def to_dict(self) -> dict:
        return {"column": self.column, "count": self.count, "percentage": self.percentage}


@dataclass(frozen=True)
class OutlierReport:
    column: str
    outlier_count: int
    outlier_indices: Tuple[int, ...]
    lower_bound: float
    upper_bound: float

    def to_dict(self) -> dict:
        return {
            "column": self.column,
            "outlier_count": self.outlier_count,
            "outlier_indices": list(self.outlier_indices),
            "lower_bound": self.lower_bound,
            "upper_bound": self.upper_bound,
        }


@dataclass
class EDAResult:
    """Everything one analysis pass knows about a dataset.

    `recommendations` is the only field filled after the deterministic part
    of the pass, by whichever insight generator answered.
    """

    dataset_info: DatasetInfo
    numeric_stats: List[NumericStats]
    categorical_stats: List[CategoricalStats]
    missing_values: List[MissingValue]
    correlations: CorrelationMatrix
    outliers: List[OutlierReport]
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dataset_info": self.dataset_info.to_dict(),
            "numeric_stats": [s.to_dict() for s in self.numeric_stats],
            "categorical_stats": [s.to_dict() for s in self.categorical_stats],
            "missing_values": [m.to_dict() for m in self.missing_values],
            "correlations": {a: dict(row) for a, row in self.correlations.items()},
            "outliers": [o.to_dict() for o in self.outliers],
            "recommendations": list(self.recommendations),
        }
