# app.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from llm.base import LLM
from llm.factory import make_llm_from_config
from llm.prompt import answer_question
from local_rag_corpus.app import retrieve_context
from local_rag_corpus.index.corpus import CorpusContext

logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    # the mobile client posts {"Question": "..."}
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field("", alias="Question")


class ContextRequest(ChatRequest):
    top_n: Optional[int] = Field(None, ge=1)
    max_chars: Optional[int] = Field(None, ge=1)


def _require_question(q: str) -> str:
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Question cannot be empty.")
    return q.strip()


def create_app(context: CorpusContext, cfg: dict, llm: Optional[LLM] = None) -> FastAPI:
    """
    HTTP glue around an already-loaded corpus. The corpus is loaded once by
    the caller and only read here; the LLM backend builds from config unless
    one is passed in.
    """
    app = FastAPI(title="Local RAG corpus", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"], allow_credentials=True,
        allow_methods=["*"], allow_headers=["*"],
    )
    app.state.corpus = context
    app.state.cfg = cfg
    app.state.llm = llm if llm is not None else make_llm_from_config(cfg)
    system_prompt = str((cfg.get("llm") or {}).get("system_prompt", ""))

    @app.get("/health")
    def health():
        return {"ok": True, "chunks": len(app.state.corpus)}

    @app.post("/api/context")
    def context_route(req: ContextRequest):
        q = _require_question(req.question)
        ctx = retrieve_context(q, app.state.corpus, app.state.cfg, top_n=req.top_n, max_chars=req.max_chars)
        return {"context": ctx}

    @app.post("/api/chat")
    def chat(req: ChatRequest):
        q = _require_question(req.question)
        ctx = retrieve_context(q, app.state.corpus, app.state.cfg)
        logger.debug("chat: %d context chars for %r", len(ctx), q)
        return {"answer": answer_question(app.state.llm, q, ctx, system_prompt)}

    return app
