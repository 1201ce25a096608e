"""Backend for the Groq chat-completions API (OpenAI-compatible)"""

import logging
import time

from funcy import memoize, notnone, select_values
import openai

from dataanalyst.backend.utils import opt_messages_to_list
from dataanalyst.utils.config import LLMConfig
from dataanalyst.utils.errors import InsightGenerationError

logger = logging.getLogger("dataanalyst")


@memoize
def _get_client(api_key: str, base_url: str, timeout: float) -> openai.OpenAI:
    # one attempt per call; callers fall back locally instead of retrying
    return openai.OpenAI(
        base_url=base_url,
        api_key=api_key,
        timeout=timeout,
        max_retries=0,
    )


def query(
    system_message: str | None,
    user_message: str | None,
    cfg: LLMConfig,
    convert_system_to_user: bool = False,
    **model_kwargs,
) -> tuple[str, float, int, int, dict]:
    """
    Single chat completion.

    Returns (text, request seconds, prompt tokens, completion tokens, info).
    Raises InsightGenerationError on a missing key or any API failure.
    """
    if not cfg.api_key:
        raise InsightGenerationError(
            "Groq API key is not configured. Please set GROQ_API_KEY in your environment variables."
        )
    client = _get_client(cfg.api_key, cfg.base_url, cfg.timeout)
    filtered_kwargs: dict = select_values(notnone, model_kwargs)  # type: ignore
    filtered_kwargs.setdefault("model", cfg.model)

    messages = opt_messages_to_list(
        system_message, user_message, convert_system_to_user=convert_system_to_user
    )

    t0 = time.time()
    try:
        completion = client.chat.completions.create(messages=messages, **filtered_kwargs)
    except openai.OpenAIError as e:
        logger.error(f"Groq request failed: {e}")
        raise InsightGenerationError(f"Groq API error: {e}") from e
    req_time = time.time() - t0

    if not completion.choices:
        raise InsightGenerationError("Groq API returned no choices")
    output = completion.choices[0].message.content or ""

    usage = completion.usage
    in_tokens = usage.prompt_tokens if usage is not None else 0
    out_tokens = usage.completion_tokens if usage is not None else 0

    info = {
        "system_fingerprint": completion.system_fingerprint,
        "model": completion.model,
        "created": completion.created,
    }

    return output, req_time, in_tokens, out_tokens, info
