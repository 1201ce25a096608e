import json
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from dataanalyst.backend import backend_groq
from dataanalyst.insights import (
    DEFAULT_INSIGHTS,
    QA_FALLBACK,
    GroqInsightGenerator,
    build_insights_prompt,
    build_qa_prompt,
    build_welcome_prompt,
    parse_insights,
)
from dataanalyst.utils.config import Config, LLMConfig, load_cfg
from dataanalyst.utils.eda import compute_eda_result, perform_eda
from dataanalyst.utils.errors import InsightGenerationError
from dataanalyst.utils.summary import dump_result, pack_compact_summary


def _make_result():
    rows = []
    for i in range(30):
        rows.append({
            "height": str(150 + i),
            "weight": str(50 + 2 * i) if i % 5 else "",
            "team": ["red", "blue"][i % 2] + "-squad",
        })
    return compute_eda_result(rows, "players.csv")


def _fake_query(reply):
    calls = []

    def query(system_message, user_message, cfg, **kwargs):
        calls.append(user_message)
        return reply, 0.01, 100, 20, {}

    return query, calls


def _failing_query(system_message, user_message, cfg, **kwargs):
    raise InsightGenerationError("Groq API error: 503")


def test_parse_insights():
    text = "Here you go:\n• Height is tightly spread\n  •  Weight has gaps  \n•\nplain line"
    assert parse_insights(text) == ["Height is tightly spread", "Weight has gaps"]


def test_parse_insights_defaults_when_no_bullets():
    assert parse_insights("No bullets at all") == DEFAULT_INSIGHTS


def test_insights_prompt_contents():
    result = _make_result()
    prompt = build_insights_prompt(result, result.dataset_info.sample_data)
    assert "Dataset: players.csv" in prompt
    assert "- height (numeric): 0 missing values (0.0%), 30 unique values" in prompt
    assert "- weight: 6 missing (20%)" in prompt
    assert 'most frequent="red-squad" (15 times)' in prompt
    assert '"height": "150"' in prompt
    assert '"height": "153"' not in prompt


def test_qa_and_welcome_prompts():
    result = _make_result()
    qa = build_qa_prompt("Is height related to weight?", result, result.dataset_info.sample_data)
    assert 'User Question: "Is height related to weight?"' in qa
    assert "- height <-> weight: 1.000" in qa
    assert "Q1=" in qa

    welcome = build_welcome_prompt(result)
    assert "Key columns: height (numeric), weight (numeric), team (categorical)" in welcome
    assert "- 1 columns have missing values" in welcome


@pytest.mark.asyncio
async def test_generate_insights_parses_reply(monkeypatch):
    query, calls = _fake_query("• Heights grow steadily\n• Weight is missing for every fifth player")
    monkeypatch.setattr(backend_groq, "query", query)
    result = _make_result()

    insights = await GroqInsightGenerator().generate_insights(result, result.dataset_info.sample_data)
    assert insights == ["Heights grow steadily", "Weight is missing for every fifth player"]
    assert len(calls) == 1
    assert "players.csv" in calls[0]


@pytest.mark.asyncio
async def test_perform_eda_with_failing_service(monkeypatch):
    monkeypatch.setattr(backend_groq, "query", _failing_query)
    rows = [{"x": str(i)} for i in range(10)]
    result = await perform_eda(rows, "tiny.csv", GroqInsightGenerator())
    assert result.recommendations == ["Small dataset - consider gathering more data for robust analysis"]


@pytest.mark.asyncio
async def test_chat_helpers_fall_back(monkeypatch):
    monkeypatch.setattr(backend_groq, "query", _failing_query)
    result = _make_result()
    gen = GroqInsightGenerator()

    answer = await gen.answer_question("What is the mean height?", result, result.dataset_info.sample_data)
    assert answer == QA_FALLBACK

    welcome = await gen.welcome_message(result)
    assert '"players.csv" with 30 rows and 3 columns' in welcome


@pytest.mark.asyncio
async def test_chat_helpers_return_model_text(monkeypatch):
    query, _ = _fake_query("Average height is 164.5.")
    monkeypatch.setattr(backend_groq, "query", query)
    result = _make_result()
    answer = await GroqInsightGenerator().answer_question("Mean height?", result, result.dataset_info.sample_data)
    assert answer == "Average height is 164.5."


def test_query_requires_api_key():
    with pytest.raises(InsightGenerationError, match="GROQ_API_KEY"):
        backend_groq.query(None, "hello", LLMConfig(api_key=None))


def test_load_cfg_from_env(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "test-key")
    monkeypatch.setenv("GROQ_MODEL", "llama-test")
    monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "5")
    cfg = load_cfg()
    assert cfg.llm.api_key == "test-key"
    assert cfg.llm.model == "llama-test"
    assert cfg.llm.timeout == 5.0
    assert cfg.eda.sample_rows == Config().eda.sample_rows


def test_compact_summary_sections():
    text = pack_compact_summary(_make_result())
    for header in ["Column Information:", "Numeric Statistics:", "Categorical Statistics:",
                   "Missing Values:", "Outliers Detected:"]:
        assert header in text
    assert "Correlations" not in text


def test_dump_result(tmp_path: Path):
    result = _make_result()
    path = dump_result(result, tmp_path / "out" / "summary.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["dataset_info"]["file_name"] == "players.csv"
    assert data["dataset_info"]["columns"][0]["type"] == "numeric"
    assert data["correlations"]["height"]["weight"] == 1.0
    assert set(data) == {
        "dataset_info", "numeric_stats", "categorical_stats", "missing_values",
        "correlations", "outliers", "recommendations",
    }


def _reject_constant(token):
    raise ValueError(f"non-JSON constant {token}")


def test_dataframe_input_dumps_strict_json(tmp_path: Path):
    df = pd.DataFrame({
        "a": [1.0, np.nan, 3.0, 4.0],
        "b": ["x", None, "y", "x"],
    })
    result = compute_eda_result(df, "frame.csv")
    assert result.dataset_info.sample_data[1] == {"a": None, "b": None}

    path = dump_result(result, tmp_path / "summary.json")
    data = json.loads(path.read_text(encoding="utf-8"), parse_constant=_reject_constant)
    assert data["dataset_info"]["sample_data"][1]["a"] is None
    assert data["dataset_info"]["sample_data"][0]["a"] == 1.0


def test_generator_reads_key_from_env(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "env-key")
    gen = GroqInsightGenerator()
    assert gen.cfg.llm.api_key == "env-key"
