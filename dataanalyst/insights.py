"""LLM-backed insights, question answering and welcome messages.

`GroqInsightGenerator` is built once per process and shared: it only holds
configuration. `generate_insights` raises on failure so that `perform_eda`
can substitute the rule-based recommendations; the chat helpers answer with
a fixed friendly message instead.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import List, Optional, Sequence

from dataanalyst.backend import backend_groq
from dataanalyst.utils.config import Config, load_cfg
from dataanalyst.utils.errors import InsightGenerationError
from dataanalyst.utils.summary import pack_compact_summary
from dataanalyst.utils.types import DataRow, EDAResult

logger = logging.getLogger("dataanalyst")

BULLET = "•"

DEFAULT_INSIGHTS = [
    "Dataset appears to be well-structured for analysis",
    "Consider exploring relationships between numeric variables",
    "Review data quality and handle missing values appropriately",
]

QA_FALLBACK = (
    "I'm having trouble processing your question right now. Please try rephrasing it "
    "or ask about specific columns or statistics from your dataset."
)


def build_insights_prompt(result: EDAResult, sample_rows: Sequence[DataRow], cfg: Optional[Config] = None) -> str:
    cfg = cfg or Config()
    return f"""As a professional data analyst, analyze this dataset and provide 5-7 specific, actionable insights and recommendations. Use the actual column names and data patterns from the analysis below.

{pack_compact_summary(result, cfg.eda)}

Sample Data (first few rows):
{_rows_json(sample_rows, 3)}

Please provide specific, actionable insights that:
1. Reference actual column names from the dataset
2. Highlight interesting patterns or anomalies
3. Suggest data cleaning steps if needed
4. Recommend further analysis directions
5. Point out potential data quality issues
6. Suggest business insights if patterns are evident

Format as a simple list of 4-6 concise insights, each on a new line starting with "{BULLET}".
Keep each insight to 1-2 sentences maximum. Do not use markdown formatting like ** or *.
"""


def build_qa_prompt(question: str, result: EDAResult, sample_rows: Sequence[DataRow], cfg: Optional[Config] = None) -> str:
    cfg = cfg or Config()
    return f"""You are a professional data analyst assistant. Answer the user's question about their dataset using only the information provided below. Be conversational, helpful, and specific.

User Question: "{question}"

{pack_compact_summary(result, cfg.eda, detailed=True)}

Sample Data:
{_rows_json(sample_rows, 5)}

Instructions:
- Answer based ONLY on the data provided above
- Use specific column names and values from the dataset
- Be conversational, helpful, and concise (2-4 sentences maximum)
- If the question cannot be answered with the available data, politely explain what's missing
- Provide actionable insights when possible
- Do not use markdown formatting like ** or *. Use plain text only
- End with a follow-up suggestion or question when appropriate

Answer:
"""


def build_welcome_prompt(result: EDAResult) -> str:
    info = result.dataset_info
    key_columns = ", ".join(f"{c.name} ({c.inferred_type.value})" for c in info.columns[:5])
    return f"""Create a friendly, professional welcome message for a user who just uploaded a dataset. Summarize the key findings and suggest 3-4 specific questions they could ask.

Dataset: {info.file_name}
Rows: {info.total_rows}
Columns: {info.total_columns}

Key columns: {key_columns}

Notable findings:
- {len(result.missing_values)} columns have missing values
- {len(result.numeric_stats)} numeric columns for statistical analysis
- {len(result.categorical_stats)} categorical columns for distribution analysis
- {len(result.outliers)} columns have potential outliers

Keep it conversational and concise (2-3 sentences max), highlight the most interesting aspects, and suggest 2-3 specific questions using actual column names.
Do not use markdown formatting like ** or *. Use plain text only.
"""


def parse_insights(text: str) -> List[str]:
    """Bulleted lines of a model reply, bullets removed; defaults when there are none."""
    insights = [
        line.strip()[len(BULLET):].strip()
        for line in text.split("\n")
        if line.strip().startswith(BULLET)
    ]
    insights = [i for i in insights if i]
    return insights if insights else list(DEFAULT_INSIGHTS)


class GroqInsightGenerator:
    def __init__(self, cfg: Optional[Config] = None):
        self.cfg = cfg or load_cfg()

    async def generate_insights(self, result: EDAResult, sample_rows: Sequence[DataRow]) -> List[str]:
        prompt = build_insights_prompt(result, sample_rows, self.cfg)
        text = await self._complete(prompt)
        return parse_insights(text)

    async def answer_question(self, question: str, result: EDAResult, sample_rows: Sequence[DataRow]) -> str:
        prompt = build_qa_prompt(question, result, sample_rows, self.cfg)
        try:
            return await self._complete(prompt)
        except InsightGenerationError as e:
            logger.warning(f"Error answering question: {e}")
            return QA_FALLBACK

    async def welcome_message(self, result: EDAResult) -> str:
        try:
            return await self._complete(build_welcome_prompt(result))
        except InsightGenerationError as e:
            logger.warning(f"Error generating welcome message: {e}")
            info = result.dataset_info
            return (
                f"Hi! I've analyzed your dataset \"{info.file_name}\" with {info.total_rows:,} rows "
                f"and {info.total_columns} columns. Feel free to ask me anything about your data!"
            )

    async def _complete(self, prompt: str) -> str:
        output, req_time, in_tokens, out_tokens, _ = await asyncio.to_thread(
            backend_groq.query, None, prompt, self.cfg.llm
        )
        logger.info(f"Groq completion in {req_time:.2f}s ({in_tokens} in / {out_tokens} out tokens)")
        return output


def _rows_json(rows: Sequence[DataRow], n: int) -> str:
    return json.dumps([dict(r) for r in list(rows)[:n]], indent=2, ensure_ascii=False, default=str)
