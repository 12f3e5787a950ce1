# models.py
# Data model shared by every stage of the pipeline

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

import config
from errors import ExecutionError


class ConnectionProfile(BaseModel):
    host: str = Field(min_length=1)
    port: int
    user: str = Field(min_length=1)
    password: str = Field(min_length=1)
    database: str = Field(min_length=1)

    @classmethod
    def from_env(cls) -> "ConnectionProfile":
        return cls(
            host=config.DB_HOST or "",
            port=config.DB_PORT,
            user=config.DB_USER or "",
            password=config.DB_PASSWORD or "",
            database=config.DB_NAME or "",
        )


class ColumnDescriptor(BaseModel):
    name: str
    data_type: str
    nullable: bool
    foreign_key: str | None = None   # "table.column" of the referenced column


class TableDescriptor(BaseModel):
    table_name: str
    columns: list[ColumnDescriptor] = []

    @field_validator("columns")
    @classmethod
    def _unique_column_names(cls, columns):
        seen = set()
        for col in columns:
            if col.name in seen:
                raise ValueError(f"Duplicate column name: {col.name}")
            seen.add(col.name)
        return columns

    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]


class SchemaSnapshot(BaseModel):
    """Catalog state of one namespace at fetch time. Not kept in sync afterwards."""

    namespace: str = "public"
    tables: list[TableDescriptor] = []

    def table_names(self) -> list[str]:
        return [t.table_name for t in self.tables]

    def get_table(self, name: str) -> TableDescriptor | None:
        for table in self.tables:
            if table.table_name == name:
                return table
        return None

    def is_empty(self) -> bool:
        return not self.tables


class GeneratedQuery(BaseModel):
    sql_text: str | None = None
    clarification: str | None = None

    @model_validator(mode="after")
    def _exactly_one(self):
        if bool(self.sql_text) == bool(self.clarification):
            raise ValueError("GeneratedQuery needs exactly one of sql_text or clarification")
        return self

    @property
    def is_clarification(self) -> bool:
        return self.clarification is not None


@dataclass
class QueryResult:
    columns: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0
    truncated: bool = False
    error: ExecutionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _now():
    return datetime.now(timezone.utc)


class ConversationTurn(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Literal["user", "assistant"]
    text: str
    sql: str | None = None
    timestamp: datetime = Field(default_factory=_now)
    error_type: str | None = None
    rows: list[dict[str, Any]] | None = None

    @property
    def is_error(self) -> bool:
        return self.error_type is not None
