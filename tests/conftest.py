import pytest

from errors import DatabaseConnectionError
from extract_schema import COLUMNS_SQL, FOREIGN_KEYS_SQL, TABLES_SQL
from models import ColumnDescriptor, ConnectionProfile, SchemaSnapshot, TableDescriptor


class FakeChatClient:
    """Returns queued responses in order; an Exception in the queue is raised instead."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def chat(self, messages, json_mode=False):
        self.calls.append({"messages": messages, "json_mode": json_mode})
        if not self.responses:
            raise AssertionError("Unexpected model call")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def prompt(self, index=-1) -> str:
        return "\n".join(m["content"] for m in self.calls[index]["messages"])


class FakeDatabase:
    """In-memory stand-in for db.Database.

    tables: {table: [(column, data_type, nullable), ...]} in ordinal order
    foreign_keys: [(table, column, referenced_table, referenced_column), ...]
    results: queued return values (or exceptions) for execute()
    """

    def __init__(self, tables=None, foreign_keys=None, results=None):
        self.tables = tables or {}
        self.foreign_keys = foreign_keys or []
        self.results = list(results or [])
        self.executed = []
        self.catalog_queries = []
        self.fail_catalog_with = None
        self.unreachable = False
        self.closed = False

    def ping(self):
        if self.unreachable:
            raise DatabaseConnectionError("Database connection failed: could not connect to server")

    def fetch_all(self, sql, params=None):
        self.catalog_queries.append((sql, params))
        if self.fail_catalog_with is not None:
            raise self.fail_catalog_with
        if sql == TABLES_SQL:
            return [{"table_name": name} for name in sorted(self.tables)]
        if sql == FOREIGN_KEYS_SQL:
            return [
                {"table_name": t, "column_name": c, "referenced_table": rt, "referenced_column": rc}
                for t, c, rt, rc in self.foreign_keys
            ]
        if sql == COLUMNS_SQL:
            _, table = params
            return [
                {"column_name": name, "data_type": data_type, "is_nullable": "YES" if nullable else "NO"}
                for name, data_type, nullable in self.tables[table]
            ]
        raise AssertionError(f"Unexpected catalog query: {sql}")

    def execute(self, sql):
        self.executed.append(sql)
        if not self.results:
            raise AssertionError("Unexpected execution")
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        self.closed = True


ORDERS_TABLES = {"orders": [("id", "integer", False), ("total", "numeric", True)]}

SHOP_TABLES = {
    "customers": [("id", "integer", False), ("name", "text", False)],
    "orders": [("id", "integer", False), ("customer_id", "integer", False), ("total", "numeric", True)],
}
SHOP_FKS = [("orders", "customer_id", "customers", "id")]


@pytest.fixture
def profile():
    return ConnectionProfile(host="localhost", port=5432, user="app", password="secret", database="shop")


@pytest.fixture
def orders_db():
    return FakeDatabase(tables=dict(ORDERS_TABLES))


@pytest.fixture
def shop_db():
    return FakeDatabase(tables=dict(SHOP_TABLES), foreign_keys=list(SHOP_FKS))


@pytest.fixture
def orders_schema():
    return SchemaSnapshot(tables=[
        TableDescriptor(table_name="orders", columns=[
            ColumnDescriptor(name="id", data_type="integer", nullable=False),
            ColumnDescriptor(name="total", data_type="numeric", nullable=True),
        ])
    ])


@pytest.fixture
def shop_schema():
    return SchemaSnapshot(tables=[
        TableDescriptor(table_name="customers", columns=[
            ColumnDescriptor(name="id", data_type="integer", nullable=False),
            ColumnDescriptor(name="name", data_type="text", nullable=False),
        ]),
        TableDescriptor(table_name="orders", columns=[
            ColumnDescriptor(name="id", data_type="integer", nullable=False),
            ColumnDescriptor(name="customer_id", data_type="integer", nullable=False,
                             foreign_key="customers.id"),
            ColumnDescriptor(name="total", data_type="numeric", nullable=True),
        ]),
    ])
