# config.py
# Runtime configuration, read once from environment variables

import logging
import os


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _optional_int(name: str):
    value = os.getenv(name)
    return int(value) if value else None


# ---- Database ----
DB_HOST = os.getenv("DB_HOST")
DB_PORT = int(os.getenv("DB_PORT", 5432))
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_NAME = os.getenv("DB_NAME")

DB_SSLMODE = os.getenv("DB_SSLMODE", "require")
DB_SCHEMA = os.getenv("DB_SCHEMA", "public")
DB_POOL_MIN = int(os.getenv("DB_POOL_MIN", 0))
DB_POOL_MAX = int(os.getenv("DB_POOL_MAX", 10))

QUERY_TIMEOUT_MS = _optional_int("QUERY_TIMEOUT_MS")   # unset = no server-side timeout
MAX_ROWS = int(os.getenv("MAX_ROWS", 1000))            # hard limit on rows fetched

# ---- Language model ----
LLM_BACKEND = os.getenv("LLM_BACKEND", "http")         # http | transformers
LLM_API_BASE = os.getenv("LLM_API_BASE") or os.getenv("QWEN_LOCAL_API_BASE") or "http://localhost:8000/v1"
LLM_API_KEY = os.getenv("LLM_API_KEY")
LLM_MODEL = os.getenv("LLM_MODEL", "qwen-2.5-32b")
LLM_LOCAL_MODEL = os.getenv("LLM_LOCAL_MODEL", "Qwen/Qwen2.5-0.5B-Instruct")
LLM_TIMEOUT = int(os.getenv("LLM_TIMEOUT", 60))

# STRICT_IDENTIFIER_CHECK: when enabled, generated SQL is checked against the
# fetched schema before it is sent to the database.
STRICT_IDENTIFIER_CHECK = _flag("STRICT_IDENTIFIER_CHECK")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def configure_logging(level: str = None):
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
