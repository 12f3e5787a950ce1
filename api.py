# FastAPI backend for the NL → SQL chat
# Stateless per request: the client keeps its ConnectionProfile and transcript
# and sends them with every call.

import logging

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from errors import DatabaseConnectionError, IntrospectionError
from llm_client import build_llm_client
from models import ConnectionProfile, ConversationTurn, TableDescriptor
from nl_to_sql_pipeline import NLToSQLSession
from transcript import Transcript

logger = logging.getLogger(__name__)

app = FastAPI(title="NL → SQL Chat API")


class ConnectResponse(BaseModel):
    success: bool
    data: ConnectionProfile


class SchemaResponse(BaseModel):
    namespace: str
    tables: list[TableDescriptor]
    schema_context: str


class QueryRequest(BaseModel):
    profile: ConnectionProfile
    question: str
    transcript: list[ConversationTurn] = []


class QueryResponse(BaseModel):
    turn: ConversationTurn
    transcript: list[ConversationTurn]


def get_llm_client():
    return build_llm_client()


def get_session_factory():
    return NLToSQLSession


def _fail(status_code: int, error: Exception):
    message = getattr(error, "message", None) or str(error)
    logger.error("%s: %s", type(error).__name__, message)
    raise HTTPException(status_code=status_code, detail=message)


@app.post("/connect", response_model=ConnectResponse)
def connect(profile: ConnectionProfile, session_factory=Depends(get_session_factory)):
    session = session_factory(profile, llm=None)
    try:
        session.connect()
    except DatabaseConnectionError as e:
        _fail(500, e)
    finally:
        session.close()
    return {"success": True, "data": profile}


@app.post("/schema", response_model=SchemaResponse)
def schema(profile: ConnectionProfile, session_factory=Depends(get_session_factory)):
    session = session_factory(profile, llm=None)
    try:
        snapshot = session.fetch_schema()
    except (DatabaseConnectionError, IntrospectionError) as e:
        _fail(500, e)
    finally:
        session.close()
    return {
        "namespace": snapshot.namespace,
        "tables": snapshot.tables,
        "schema_context": session.schema_text,
    }


@app.post("/query", response_model=QueryResponse)
def query(req: QueryRequest, llm=Depends(get_llm_client), session_factory=Depends(get_session_factory)):
    session = session_factory(req.profile, llm=llm, transcript=Transcript(req.transcript))
    try:
        turn = session.ask(req.question)
    finally:
        session.close()
    return {"turn": turn, "transcript": list(session.transcript)}
