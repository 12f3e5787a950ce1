# NL → SQL generation: one model call, one JSON answer, one statement

import json
import logging
import re

import sqlparse

from errors import GenerationError, LLMError
from models import GeneratedQuery, SchemaSnapshot
from prompt_templates import SQL_SYSTEM_PROMPT, build_user_prompt
from sql_guardrails import validate_identifiers

logger = logging.getLogger(__name__)


def _extract_json_object(resp: str) -> str:
    """Strip Markdown code fences and surrounding chatter, keep the outermost {...}."""
    s = (resp or "").strip()

    m = re.search(r"```(?:json|sql)?\s*\n?([\s\S]*?)```", s, flags=re.IGNORECASE)
    if m:
        s = m.group(1).strip()

    start, end = s.find("{"), s.rfind("}")
    if start == -1 or end < start:
        return s
    return s[start:end + 1]


def _single_statement(sql: str, raw: str) -> str:
    # A trailing comment would otherwise split off as a second statement
    sql = sqlparse.format(sql, strip_comments=True)
    statements = [s.strip() for s in sqlparse.split(sql) if s.strip()]
    if len(statements) != 1:
        raise GenerationError(
            f"Expected exactly one SQL statement, got {len(statements)}", raw_response=raw
        )
    statement = statements[0].rstrip(";").strip()
    if not statement:
        raise GenerationError("Model returned an empty statement", raw_response=raw)
    return statement


def parse_model_response(resp: str) -> GeneratedQuery:
    """Turn the model's JSON answer into a GeneratedQuery, or raise GenerationError."""
    try:
        data = json.loads(_extract_json_object(resp))
    except json.JSONDecodeError as e:
        raise GenerationError(f"Model response is not valid JSON: {e}", raw_response=resp) from e

    if not isinstance(data, dict):
        raise GenerationError("Model response is not a JSON object", raw_response=resp)

    query = data.get("query")
    if isinstance(query, str) and query.strip():
        return GeneratedQuery(sql_text=_single_statement(query, resp))

    clarification = data.get("clarification")
    if isinstance(clarification, str) and clarification.strip():
        return GeneratedQuery(clarification=clarification.strip())

    raise GenerationError("Model response does not contain a query", raw_response=resp)


def generate_query(llm, schema_context: str, user_request: str,
                   schema: SchemaSnapshot = None, strict_identifiers: bool = False) -> GeneratedQuery:
    """Ask the model for a single SQL statement answering `user_request`.

    The prompt asks for quoted, schema-only identifiers but nothing here enforces it
    unless `strict_identifiers` is set and a `schema` is given. Never retries.
    """
    messages = [
        {"role": "system", "content": SQL_SYSTEM_PROMPT},
        {"role": "user", "content": build_user_prompt(user_request, schema_context)}
    ]

    try:
        response = llm.chat(messages, json_mode=True)
    except LLMError as e:
        raise GenerationError(f"Query generation failed: {e.message}") from e

    generated = parse_model_response(response)

    if strict_identifiers and schema is not None and not generated.is_clarification:
        try:
            validate_identifiers(generated.sql_text, schema)
        except ValueError as e:
            raise GenerationError(str(e), raw_response=response) from e

    logger.debug("Generated SQL: %s", generated.sql_text or generated.clarification)
    return generated
