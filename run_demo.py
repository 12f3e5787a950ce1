# Terminal chat against the database described by DB_* environment variables

import sys

import config
from errors import DatabaseConnectionError, IntrospectionError
from llm_client import build_llm_client
from models import ConnectionProfile
from nl_to_sql_pipeline import NLToSQLSession


def print_turn(turn):
    if turn.sql:
        print(f"\n  SQL: {turn.sql}")
    print(f"\n{turn.text}\n")
    if turn.rows:
        print(f"  ({len(turn.rows)} rows returned)")


def main():
    config.configure_logging("WARNING")
    session = NLToSQLSession(ConnectionProfile.from_env(), build_llm_client())

    try:
        session.connect()
        session.fetch_schema()
    except (DatabaseConnectionError, IntrospectionError) as e:
        print("Could not load the database schema:", e, file=sys.stderr)
        session.close()
        sys.exit(2)

    print(f"Connected. {len(session.schema.tables)} tables in '{session.namespace}'. Empty line to quit.")
    try:
        while True:
            question = input("> ").strip()
            if not question:
                break
            print_turn(session.ask(question))
    except (KeyboardInterrupt, EOFError):
        print()
    finally:
        session.close()


if __name__ == "__main__":
    main()
