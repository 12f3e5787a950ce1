# Automated evaluation runner for NL → SQL system
# Each golden case runs in a fresh session so transcripts do not leak between cases

import config
from evaluation_metrics import EvaluationMetrics
from golden_cases import GOLDEN_CASES
from llm_client import build_llm_client
from models import ConnectionProfile
from nl_to_sql_pipeline import NLToSQLSession


def run_case(session: NLToSQLSession, case: dict):
    turns = case.get("conversation") or [case["input"]]
    response = None
    for text in turns:
        response = session.ask(text)
    return response


def run_tests(cases=None, profile: ConnectionProfile = None, llm=None, session_factory=NLToSQLSession):
    cases = cases if cases is not None else GOLDEN_CASES
    profile = profile or ConnectionProfile.from_env()
    llm = llm or build_llm_client()
    metrics = EvaluationMetrics()

    for case in cases:
        print(f"\nRunning test: {case['name']}")
        session = session_factory(profile, llm)
        try:
            response = run_case(session, case)
        finally:
            session.close()

        outcome = metrics.update(response, case.get("expected_outcome"))
        print("Expected:", case.get("expected_outcome"))
        print("Got:", outcome, "|", response.sql or response.text)

    print("\n--- FINAL EVALUATION REPORT ---")
    print(metrics.report())
    return metrics


if __name__ == "__main__":
    config.configure_logging("WARNING")
    run_tests()
