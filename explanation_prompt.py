# Prompt template for narrating SQL results
# Narration is grounded ONLY in the executed SQL and its rows

import json

NARRATION_SYSTEM_PROMPT = """
You explain database query results to a colleague.

RULES:
- Describe ONLY what the query returned.
- Be specific about the numbers and values found.
- DO NOT speculate about missing data or invent causes.
- If the result is empty, say that no matching records were found.
- Keep it under 100 words.

OUTPUT FORMAT:
- Plain conversational English
- No markdown
"""

EXAMPLES = """
Examples:
- "I found 25 customers in the database"
- "Your total revenue for 2023 is $45,230"
- "There are 3 products with low inventory"
"""


def build_narration_prompt(sql: str, rows: list, row_count: int, truncated: bool = False) -> str:
    note = f"\n(Only the first {len(rows)} rows are shown.)" if truncated else ""
    return f"""
EXECUTED POSTGRESQL QUERY:
{sql}

RESULT ({row_count} rows):
{json.dumps(rows, default=str)}{note}
{EXAMPLES}
Explain the result in natural language.
"""
