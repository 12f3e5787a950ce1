"""Generate SQL from a saved schema snapshot (no database required).

Usage examples:

# Snapshot written by `python extract_schema.py --out schema.json`
python run_with_schema.py --query "How many orders are there" --schema-file schema.json

# Local Transformers model instead of the HTTP server
python run_with_schema.py --backend transformers --query "..." --schema-file schema.json
"""
import argparse
import json
import sys

import config
from errors import GenerationError
from llm_client import build_llm_client
from models import SchemaSnapshot
from schema_formatter import format_schema
from sql_generator import generate_query


def load_schema(path: str) -> SchemaSnapshot:
    try:
        with open(path, "r") as f:
            return SchemaSnapshot.model_validate(json.load(f))
    except (OSError, ValueError) as e:
        raise RuntimeError(f"Failed to load schema from {path}: {e}") from e


def main():
    parser = argparse.ArgumentParser(description="Run NL->SQL generation against a schema file")
    parser.add_argument("--schema-file", default="schema.json", help="Path to schema JSON file")
    parser.add_argument("--query", required=True, help="Natural language question to convert to SQL")
    parser.add_argument("--backend", choices=["http", "transformers"], default=config.LLM_BACKEND,
                        help="Which model backend to use")
    parser.add_argument("--strict", action="store_true", help="Reject identifiers missing from the schema")
    parser.add_argument("--save-to", default=None, help="Save generated SQL to file")
    args = parser.parse_args()

    try:
        schema = load_schema(args.schema_file)
    except RuntimeError as e:
        print("Error loading schema:", e, file=sys.stderr)
        sys.exit(2)

    try:
        generated = generate_query(
            build_llm_client(args.backend),
            format_schema(schema),
            args.query,
            schema=schema,
            strict_identifiers=args.strict,
        )
    except GenerationError as e:
        print("Generation failed:", e, file=sys.stderr)
        if e.raw_response:
            print("Model answered:", e.raw_response, file=sys.stderr)
        sys.exit(3)
    except KeyboardInterrupt:
        print("Interrupted by user", file=sys.stderr)
        sys.exit(1)

    if generated.is_clarification:
        print("\nThe model asks:", generated.clarification)
        return

    print("\nGenerated SQL:\n")
    print(generated.sql_text)

    if args.save_to:
        with open(args.save_to, "w") as f:
            f.write(generated.sql_text)
        print(f"\nSaved SQL to {args.save_to}")


if __name__ == "__main__":
    main()
