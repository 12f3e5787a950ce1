import json
import logging

import psycopg2

import config
from errors import DatabaseConnectionError, IntrospectionError
from models import ColumnDescriptor, SchemaSnapshot, TableDescriptor

logger = logging.getLogger(__name__)


TABLES_SQL = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = %s
      AND table_type = 'BASE TABLE'
    ORDER BY table_name
"""

COLUMNS_SQL = """
    SELECT column_name, data_type, is_nullable
    FROM information_schema.columns
    WHERE table_schema = %s AND table_name = %s
    ORDER BY ordinal_position
"""

# Pairwise per constraint: the n-th column of conkey references the n-th of confkey.
FOREIGN_KEYS_SQL = """
    SELECT
        src.relname AS table_name,
        src_att.attname AS column_name,
        ref.relname AS referenced_table,
        ref_att.attname AS referenced_column
    FROM pg_constraint con
    JOIN pg_class src ON src.oid = con.conrelid
    JOIN pg_namespace ns ON ns.oid = src.relnamespace
    JOIN pg_class ref ON ref.oid = con.confrelid
    CROSS JOIN LATERAL unnest(con.conkey, con.confkey)
        WITH ORDINALITY AS k(src_attnum, ref_attnum, position)
    JOIN pg_attribute src_att
      ON src_att.attrelid = con.conrelid AND src_att.attnum = k.src_attnum
    JOIN pg_attribute ref_att
      ON ref_att.attrelid = con.confrelid AND ref_att.attnum = k.ref_attnum
    WHERE con.contype = 'f'
      AND ns.nspname = %s
    ORDER BY src.relname, src_att.attname, con.conname, k.position
"""


def _foreign_key_map(rows) -> dict:
    """(table, column) -> "referenced_table.referenced_column".

    A column covered by several foreign keys keeps the one whose constraint
    name sorts first.
    """
    fks = {}
    for row in rows:
        key = (row["table_name"], row["column_name"])
        fks.setdefault(key, f"{row['referenced_table']}.{row['referenced_column']}")
    return fks


def extract_schema(db, namespace: str = None) -> SchemaSnapshot:
    namespace = namespace or config.DB_SCHEMA

    try:
        # -------------------------------
        # 1. Base tables of the namespace
        # -------------------------------
        table_names = [row["table_name"] for row in db.fetch_all(TABLES_SQL, (namespace,))]

        # -------------------------------
        # 2. Foreign keys, fetched once
        # -------------------------------
        fks = _foreign_key_map(db.fetch_all(FOREIGN_KEYS_SQL, (namespace,)))

        # -------------------------------
        # 3. Columns in ordinal order
        # -------------------------------
        tables = []
        for table in table_names:
            columns = [
                ColumnDescriptor(
                    name=row["column_name"],
                    data_type=row["data_type"],
                    nullable=row["is_nullable"] == "YES",
                    foreign_key=fks.get((table, row["column_name"])),
                )
                for row in db.fetch_all(COLUMNS_SQL, (namespace, table))
            ]
            tables.append(TableDescriptor(table_name=table, columns=columns))

    except DatabaseConnectionError:
        raise
    except (psycopg2.OperationalError, psycopg2.InterfaceError) as e:
        raise DatabaseConnectionError(f"Database connection failed: {e}") from e
    except psycopg2.Error as e:
        raise IntrospectionError(f"Failed to read schema of '{namespace}': {e}") from e

    logger.info("Fetched schema of '%s': %d tables", namespace, len(tables))
    return SchemaSnapshot(namespace=namespace, tables=tables)


if __name__ == "__main__":
    import argparse

    from db import Database
    from models import ConnectionProfile
    from schema_formatter import format_schema

    parser = argparse.ArgumentParser(description="Extract the DB schema described by DB_* environment variables")
    parser.add_argument("--namespace", default=config.DB_SCHEMA, help="Schema namespace to introspect")
    parser.add_argument("--out", default="schema.json", help="Where to save the snapshot")
    parser.add_argument("--print", dest="show", action="store_true", help="Also print the prompt-formatted schema")
    args = parser.parse_args()

    config.configure_logging()
    database = Database(ConnectionProfile.from_env())
    try:
        snapshot = extract_schema(database, args.namespace)
    finally:
        database.close()

    with open(args.out, "w") as f:
        json.dump(snapshot.model_dump(), f, indent=2)

    if args.show:
        print(format_schema(snapshot))

    print(f"✅ Schema extracted and saved to {args.out}")
