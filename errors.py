# errors.py
# Failure taxonomy of the NL → SQL pipeline.
# Every stage either returns a value or raises / returns one of these;
# the orchestrator is the only place that turns them into transcript entries.


class NLSQLError(Exception):
    """Base class for every pipeline failure."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DatabaseConnectionError(NLSQLError):
    """Profile invalid or database unreachable. Fatal to the session."""


class IntrospectionError(NLSQLError):
    """Catalog read failed. Retryable by fetching the schema again."""


class LLMError(NLSQLError):
    """The language-model backend could not produce a response."""


class GenerationError(NLSQLError):
    """The model's answer could not be turned into a single SQL statement."""

    def __init__(self, message: str, raw_response: str = None):
        super().__init__(message)
        self.raw_response = raw_response


class NarrationError(NLSQLError):
    """The narration call failed after a successful execution."""


class ExecutionError(NLSQLError):
    """Base for failures reported by the database while running a statement."""

    def __init__(self, message: str, sqlstate: str = None):
        super().__init__(message)
        self.sqlstate = sqlstate


class UnknownRelationError(ExecutionError):
    """A referenced table or column does not exist."""


class SQLSyntaxError(ExecutionError):
    """The statement is malformed."""


class OtherExecutionError(ExecutionError):
    """Constraint violation, type mismatch, timeout, lost connection..."""
