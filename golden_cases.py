# Golden questions for the seeded demo database (see seed.py)
# Replayed by run_evaluation.py against a live session

GOLDEN_CASES = [
    {
        "name": "Simple count",
        "input": "How many orders are there?",
        "expected_outcome": "complete",
    },
    {
        "name": "Aggregation per city",
        "input": "Show total order value per store city",
        "expected_outcome": "complete",
    },
    {
        "name": "Join through foreign key",
        "input": "Which customer placed the most orders?",
        "expected_outcome": "complete",
    },
    {
        "name": "Follow-up in the same session",
        "conversation": [
            "How many customers live in Mumbai?",
            "And how many of their orders were returned?",
        ],
        "expected_outcome": "complete",
    },
    {
        "name": "Data the schema does not hold",
        "input": "What is the profit margin per product?",
        "expected_outcome": "clarification",
    },
]
