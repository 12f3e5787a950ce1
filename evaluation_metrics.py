# Computes evaluation metrics for NL → SQL turns


def turn_outcome(turn) -> str:
    """complete | clarification | error, from an assistant ConversationTurn."""
    if turn.is_error:
        return "error"
    if turn.sql is None:
        return "clarification"
    return "complete"


class EvaluationMetrics:
    def __init__(self):
        self.total = 0
        self.complete = 0
        self.clarification = 0
        self.errors = 0
        self.matched = 0
        self.error_types = {}

    def update(self, turn, expected: str = None):
        self.total += 1
        outcome = turn_outcome(turn)

        if outcome == "complete":
            self.complete += 1
        elif outcome == "clarification":
            self.clarification += 1
        else:
            self.errors += 1
            self.error_types[turn.error_type] = self.error_types.get(turn.error_type, 0) + 1

        if expected is not None and expected == outcome:
            self.matched += 1
        return outcome

    def report(self):
        if not self.total:
            return {"total_tests": 0}
        return {
            "total_tests": self.total,
            "success_rate": round(self.complete / self.total, 2),
            "clarification_rate": round(self.clarification / self.total, 2),
            "error_rate": round(self.errors / self.total, 2),
            "expectation_match_rate": round(self.matched / self.total, 2),
            "errors_by_type": dict(self.error_types),
        }
