"""HTTP API exposing retrieval and index status.

Why: Chat pipelines and health checks consume the retriever over HTTP;
this layer only converts between pydantic models and use-case DTOs.
"""

import dataclasses
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from kb_retriever.application.use_cases.retrieve_knowledge import RetrieveKnowledge


# Pydantic models for request/response validation
class RetrieveRequestModel(BaseModel):
    """Request model for /v1/knowledge/retrieve."""

    query: str


class MatchModel(BaseModel):
    source: str
    text: str
    score: float
    metrics: dict[str, float]


class CitationModel(BaseModel):
    source: str


class RetrieveResponseModel(BaseModel):
    """Response model for /v1/knowledge/retrieve."""

    matches: list[MatchModel]
    citations: list[CitationModel]
    context_message: str | None = None


class StatusResponseModel(BaseModel):
    """Response model for /v1/knowledge/status."""

    enabled: bool
    retriever: str
    knowledge_dir: str
    files: int
    chunks: int
    average_chunk_tokens: float
    top_k: int
    min_score: float
    mmr_lambda: float
    last_error: str | None = None
    loaded_at: str | None = None


# Global state (initialized on startup)
app = FastAPI(title="Knowledge Retriever API", version="1.0.0")
retriever: RetrieveKnowledge | None = None


@app.on_event("startup")
async def startup_event() -> None:
    """Wire the retriever via the composition root (settings from env)."""
    global retriever

    if retriever is None:
        from kb_retriever.config.composition import build_retriever

        retriever = build_retriever()


def _require_retriever() -> RetrieveKnowledge:
    if retriever is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return retriever


@app.post("/v1/knowledge/retrieve", response_model=RetrieveResponseModel)
def retrieve(req: RetrieveRequestModel) -> RetrieveResponseModel:
    """Rank knowledge snippets for one query.

    Example:
        POST /v1/knowledge/retrieve
        {"query": "how many weeks notice for vacation"}
    """
    result = _require_retriever().retrieve(req.query)
    payload: dict[str, Any] = {
        "matches": [
            MatchModel(source=m.source, text=m.text, score=m.score, metrics=m.metrics.as_dict())
            for m in result.matches
        ],
        "citations": [CitationModel(source=c.source) for c in result.citations],
        "context_message": result.context_message,
    }
    return RetrieveResponseModel(**payload)


@app.get("/v1/knowledge/status", response_model=StatusResponseModel)
def status() -> StatusResponseModel:
    """Index health: file/chunk counts, tunables and the last rebuild error."""
    return StatusResponseModel(**dataclasses.asdict(_require_retriever().status()))
