from dataanalyst.utils.eda import compute_eda_result
from dataanalyst.utils.recommendations import (
    CLEAN_DATASET_MESSAGE,
    generate_recommendations,
)


def _recommend(rows):
    result = compute_eda_result(rows, "data.csv")
    return generate_recommendations(result.dataset_info, result.missing_values, result.outliers)


def test_clean_dataset():
    rows = [{"n": str(i), "kind": ["alpha", "beta", "gamma"][i % 3]} for i in range(100)]
    assert _recommend(rows) == [CLEAN_DATASET_MESSAGE]


def test_missing_value_rules():
    rows = []
    for i in range(200):
        rows.append({
            "mostly_empty": "" if i < 120 else str(i),
            "some_empty": "" if i < 30 else str(i),
            "few_empty": "" if i < 10 else str(i),
        })
    recs = _recommend(rows)
    assert "Consider dropping column 'mostly_empty' - it has 60% missing values" in recs
    assert "Address missing values in 'some_empty' (15%) - consider imputation or removal" in recs
    assert not any("few_empty" in r for r in recs)


def test_outlier_rule():
    values = [str(i) for i in range(1, 91)] + ["1000"] * 10
    recs = _recommend([{"v": v} for v in values])
    assert recs == ["Review outliers in 'v' - 10 potential outliers detected"]


def test_small_dataset_rule():
    recs = _recommend([{"n": str(i)} for i in range(20)])
    assert recs == ["Small dataset - consider gathering more data for robust analysis"]


def test_high_cardinality_rule():
    rows = [{"id": f"id-{i}", "n": str(i)} for i in range(100)]
    recs = _recommend(rows)
    assert recs == ["Column 'id' has high cardinality - consider grouping or encoding strategies"]
