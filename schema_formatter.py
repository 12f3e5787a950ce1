# schema_formatter.py
# Renders a SchemaSnapshot as the compact text embedded in generation prompts

from models import ColumnDescriptor, SchemaSnapshot, TableDescriptor


def format_column(column: ColumnDescriptor) -> str:
    desc = f"{column.name} ({column.data_type})"
    if column.foreign_key:
        desc += f" [FK {column.foreign_key}]"
    return desc


def format_table(table: TableDescriptor) -> str:
    columns = ", ".join(format_column(c) for c in table.columns)
    return f"Table: {table.table_name}\nColumns: {columns}"


def format_schema(snapshot: SchemaSnapshot) -> str:
    """Deterministic: same snapshot in, byte-identical text out. Empty snapshot gives ""."""
    return "\n\n".join(format_table(t) for t in snapshot.tables)
