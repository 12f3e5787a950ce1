# NL → SQL → Execution → Narration pipeline, one orchestrator per session
# The schema is fetched once and reused; each turn runs the stages strictly in order.

import enum
import logging

import config
from db import Database
from errors import (
    DatabaseConnectionError,
    GenerationError,
    IntrospectionError,
    NarrationError,
)
from extract_schema import extract_schema
from models import ConnectionProfile, ConversationTurn, SchemaSnapshot
from result_explainer import explain_result
from schema_formatter import format_schema
from sql_executor import execute_sql
from sql_generator import generate_query
from transcript import Transcript

logger = logging.getLogger(__name__)


class TurnState(enum.Enum):
    IDLE = "idle"
    SCHEMA_READY = "schema_ready"
    GENERATING = "generating"
    EXECUTING = "executing"
    NARRATING = "narrating"
    COMPLETE = "complete"
    ERRORED = "errored"


class NLToSQLSession:
    """Stateful orchestrator for a single user session.

    Owns the session's SchemaSnapshot and Transcript. Construct one per session
    and close() it on disconnect; it is not shared between users or threads.
    One turn at a time: the caller must not call ask() while a turn is in flight.
    """

    def __init__(self, profile: ConnectionProfile, llm, database=None,
                 namespace: str = None, strict_identifiers: bool = None,
                 transcript: Transcript = None):
        self.profile = profile
        self.llm = llm
        self.namespace = namespace or config.DB_SCHEMA
        self.strict_identifiers = (
            config.STRICT_IDENTIFIER_CHECK if strict_identifiers is None else strict_identifiers
        )
        self.transcript = transcript or Transcript()

        self._database = database
        self.schema: SchemaSnapshot | None = None
        self.schema_text: str | None = None

        self.state = TurnState.IDLE
        self.turn_states: list[TurnState] = []

    # -------------------------------
    # Session boundary
    # -------------------------------
    @property
    def database(self):
        if self._database is None:
            self._database = Database(self.profile)
        return self._database

    def connect(self):
        """Check that the profile reaches the database. Raises DatabaseConnectionError."""
        self.database.ping()
        return True

    def fetch_schema(self, force: bool = False) -> SchemaSnapshot:
        """Introspect once per session; later calls reuse the snapshot unless forced."""
        if self.schema is not None and not force:
            return self.schema

        snapshot = extract_schema(self.database, self.namespace)
        self.schema = snapshot
        self.schema_text = format_schema(snapshot)
        self.state = TurnState.SCHEMA_READY
        return snapshot

    def close(self):
        if self._database is not None:
            self._database.close()
            self._database = None

    # -------------------------------
    # One conversation turn
    # -------------------------------
    def _enter(self, state: TurnState):
        self.state = state
        self.turn_states.append(state)

    def _finish(self, turn: ConversationTurn, state: TurnState) -> ConversationTurn:
        self._enter(state)
        self._enter(TurnState.SCHEMA_READY)
        return turn

    def ask(self, text: str) -> ConversationTurn:
        """Run one turn and return the assistant's transcript entry.

        Failures never escape: each one becomes an assistant turn with error_type set.
        """
        self.turn_states = []
        self.transcript.add_user(text)

        if self.schema is None:
            try:
                self.fetch_schema()
            except (DatabaseConnectionError, IntrospectionError) as e:
                logger.error("Schema unavailable: %s", e.message)
                self.state = TurnState.IDLE
                return self.transcript.add_error(e)

        # SchemaReady -> Generating
        self._enter(TurnState.GENERATING)
        try:
            query = generate_query(
                self.llm,
                self.schema_text,
                text,
                schema=self.schema,
                strict_identifiers=self.strict_identifiers,
            )
        except GenerationError as e:
            logger.warning("Generation failed: %s", e.message)
            return self._finish(self.transcript.add_error(e), TurnState.ERRORED)

        if query.is_clarification:
            turn = self.transcript.add_assistant(query.clarification)
            return self._finish(turn, TurnState.COMPLETE)

        # Generating -> Executing
        self._enter(TurnState.EXECUTING)
        result = execute_sql(self.database, query)
        if not result.ok:
            turn = self.transcript.add_error(result.error, sql=query.sql_text)
            return self._finish(turn, TurnState.ERRORED)

        # Executing -> Narrating
        self._enter(TurnState.NARRATING)
        try:
            narration = explain_result(self.llm, query.sql_text, result)
        except NarrationError as e:
            logger.warning("Narration failed: %s", e.message)
            turn = self.transcript.add_error(e, sql=query.sql_text, rows=result.rows)
            return self._finish(turn, TurnState.ERRORED)

        turn = self.transcript.add_assistant(narration, sql=query.sql_text)
        return self._finish(turn, TurnState.COMPLETE)
