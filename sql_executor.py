# SQL execution layer for PostgreSQL
# Runs the generated statement as-is and classifies failures.
# No pre-validation and no retry: a failed execution ends the turn.

import logging

import psycopg2

from errors import DatabaseConnectionError, ExecutionError, OtherExecutionError, SQLSyntaxError, UnknownRelationError
from models import GeneratedQuery, QueryResult

logger = logging.getLogger(__name__)

# SQLSTATE -> error class. Primary classification path.
SQLSTATE_ERRORS = {
    "42P01": UnknownRelationError,   # undefined_table
    "42703": UnknownRelationError,   # undefined_column
    "42883": UnknownRelationError,   # undefined_function
    "3F000": UnknownRelationError,   # invalid_schema_name
    "42601": SQLSyntaxError,         # syntax_error
}


def classify_error(message: str, sqlstate: str = None) -> ExecutionError:
    """Map a database error to the execution taxonomy.

    The SQLSTATE code wins when the driver supplies one; otherwise fall back to
    the PostgreSQL message text, which depends on server locale and version.
    """
    message = message or "Unknown database error"

    if sqlstate:
        error_cls = SQLSTATE_ERRORS.get(sqlstate, OtherExecutionError)
    else:
        lowered = message.lower()
        if "does not exist" in lowered and ("relation" in lowered or "column" in lowered):
            error_cls = UnknownRelationError
        elif "syntax error" in lowered:
            error_cls = SQLSyntaxError
        else:
            error_cls = OtherExecutionError

    return error_cls(message, sqlstate=sqlstate)


def execute_sql(db, query: GeneratedQuery) -> QueryResult:
    """
    Executes the generated statement against `db`.
    Returns rows as a list of dictionaries, or a QueryResult carrying the error.
    """
    sql = query.sql_text
    try:
        columns, rows, rowcount, truncated = db.execute(sql)
    except psycopg2.Error as e:
        message = (getattr(e, "pgerror", None) or str(e)).strip()
        error = classify_error(message, getattr(e, "pgcode", None))
        logger.warning("Execution failed (%s): %s", type(error).__name__, message)
        return QueryResult(error=error)
    except DatabaseConnectionError as e:
        logger.warning("Execution failed, database unreachable: %s", e.message)
        return QueryResult(error=OtherExecutionError(e.message))

    return QueryResult(
        columns=columns,
        rows=rows,
        row_count=rowcount,
        truncated=truncated,
    )
