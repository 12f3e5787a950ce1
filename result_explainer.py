# Natural language narration of an executed query's result
# This does NOT touch the database

import logging

from errors import LLMError, NarrationError
from explanation_prompt import NARRATION_SYSTEM_PROMPT, build_narration_prompt
from models import QueryResult

logger = logging.getLogger(__name__)

FALLBACK_NARRATION = "Sorry, I was not able to describe the result."


def explain_result(llm, sql: str, result: QueryResult) -> str:
    """
    Generates a short explanation of the rows returned by `sql`.
    Only called for successful executions. The ~100 word limit is a prompt
    instruction; the returned text is not truncated.
    """
    messages = [
        {"role": "system", "content": NARRATION_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": build_narration_prompt(
                sql=sql,
                rows=result.rows,
                row_count=result.row_count,
                truncated=result.truncated,
            )
        }
    ]

    try:
        explanation = llm.chat(messages, json_mode=False)
    except LLMError as e:
        raise NarrationError(f"Narration failed: {e.message}") from e

    return explanation.strip() or FALLBACK_NARRATION
