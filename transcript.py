# Append-only conversation transcript owned by one session.
# The caller may persist dump() and hand it back through restore().

from models import ConversationTurn


class Transcript:
    def __init__(self, turns=None):
        self._turns: list[ConversationTurn] = list(turns or [])

    def __len__(self):
        return len(self._turns)

    def __iter__(self):
        return iter(self._turns)

    @property
    def turns(self) -> tuple:
        return tuple(self._turns)

    def last(self) -> ConversationTurn | None:
        return self._turns[-1] if self._turns else None

    def append(self, turn: ConversationTurn) -> ConversationTurn:
        self._turns.append(turn)
        return turn

    def add_user(self, text: str) -> ConversationTurn:
        return self.append(ConversationTurn(role="user", text=text))

    def add_assistant(self, text: str, sql: str = None) -> ConversationTurn:
        return self.append(ConversationTurn(role="assistant", text=text, sql=sql))

    def add_error(self, error: Exception, sql: str = None, rows: list = None) -> ConversationTurn:
        message = getattr(error, "message", None) or str(error)
        return self.append(ConversationTurn(
            role="assistant",
            text=f"Error: {message}",
            sql=sql,
            error_type=type(error).__name__,
            rows=rows,
        ))

    def dump(self) -> list[dict]:
        return [turn.model_dump(mode="json") for turn in self._turns]

    @classmethod
    def restore(cls, items) -> "Transcript":
        return cls(ConversationTurn.model_validate(item) for item in items or [])
