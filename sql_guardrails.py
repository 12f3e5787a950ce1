# Pre-execution identifier check against the fetched schema.
# Optional (STRICT_IDENTIFIER_CHECK): without it, unknown identifiers are only
# caught by the database at execution time.

import sqlparse
from sqlparse import tokens as T

from models import SchemaSnapshot


def _unquote(value: str) -> str:
    return value[1:-1].replace('""', '"')


def _is_quoted_identifier(token) -> bool:
    value = token.value
    return len(value) >= 2 and value.startswith('"') and value.endswith('"')


def quoted_identifiers(sql: str):
    """Return (identifiers, aliases) found in double quotes.

    An alias is a quoted name that follows AS, or that directly follows a quoted
    table name as in `from "orders" "o"`.
    """
    identifiers, aliases = [], set()
    for statement in sqlparse.parse(sql):
        previous = None
        for token in statement.flatten():
            if token.is_whitespace or token.ttype in T.Comment:
                continue
            if _is_quoted_identifier(token):
                name = _unquote(token.value)
                if previous is not None and (
                    (previous.ttype in T.Keyword and previous.normalized == "AS")
                    or _is_quoted_identifier(previous)
                ):
                    aliases.add(name)
                else:
                    identifiers.append(name)
            previous = token
    return identifiers, aliases


def find_unknown_identifiers(sql: str, schema: SchemaSnapshot) -> list[str]:
    allowed = set(schema.table_names())
    for table in schema.tables:
        allowed.update(table.column_names())

    identifiers, aliases = quoted_identifiers(sql)
    unknown = []
    for name in identifiers:
        if name in allowed or name in aliases or name in unknown:
            continue
        unknown.append(name)
    return unknown


def validate_identifiers(sql: str, schema: SchemaSnapshot):
    """Raise ValueError if the statement quotes a name the schema does not have."""
    unknown = find_unknown_identifiers(sql, schema)
    if unknown:
        raise ValueError(f"Identifiers not in schema: {', '.join(unknown)}")
    return True
