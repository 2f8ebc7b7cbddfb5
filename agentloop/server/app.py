import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from agentloop.agent import Conversation
from agentloop.errors import EmbeddingError, ProviderError
from agentloop.memory import VectorMemoryStore

logger = logging.getLogger("agentloop.server")


# ============================================================
# Models
# ============================================================

class ChatRequest(BaseModel):
    message: str = Field(min_length=1)

class ChatResponse(BaseModel):
    status: str
    text: Optional[str]
    payload: Optional[Any]
    iterations: int
    error: Optional[str]

class MemoryRequest(BaseModel):
    content: str = Field(min_length=1)

class MemoryResponse(BaseModel):
    id: str
    content: str
    token_count: int
    created_at: str
    updated_at: str

class MemoryHit(MemoryResponse):
    similarity: float

class SearchResponse(BaseModel):
    query: str
    hits: List[MemoryHit]


# ============================================================
# App Factory
# ============================================================

def create_app(conversation: Conversation, store: VectorMemoryStore) -> FastAPI:

    app = FastAPI(title="agentloop", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ------------------------------------------------------------
    # Health
    # ------------------------------------------------------------

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {
            "status": "ok",
            "provider": conversation.loop.provider.name,
            "tools": [d.name for d in conversation.loop.declarations()],
            "memories": len(store),
        }

    # ------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------

    @app.post("/chat", response_model=ChatResponse)
    def chat(request: ChatRequest):
        try:
            result = conversation.send(request.message)
        except Exception:
            logger.exception("[CHAT] Run failed")
            raise HTTPException(status_code=500, detail="Internal error")

        return ChatResponse(
            status=result.status.value,
            text=result.text,
            payload=result.payload,
            iterations=result.iterations,
            error=result.error,
        )

    @app.post("/reset")
    def reset():
        conversation.reset()
        return {"status": "reset"}

    # ------------------------------------------------------------
    # Memories
    # ------------------------------------------------------------

    @app.post("/memories", response_model=MemoryResponse, status_code=status.HTTP_201_CREATED)
    def save_memory(request: MemoryRequest):
        try:
            record = store.save(request.content)
        except (EmbeddingError, ProviderError) as e:
            logger.error(f"[MEMORIES] Save failed: {e}")
            raise HTTPException(status_code=502, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

        return MemoryResponse(**record.to_dict(include_embedding=False))

    @app.get("/memories/search", response_model=SearchResponse)
    def search_memories(
        q: str = Query(..., min_length=1),
        k: int = Query(10, ge=1, le=100),
    ):
        try:
            hits = store.search(q, k=k)
        except (EmbeddingError, ProviderError) as e:
            logger.error(f"[MEMORIES] Search failed: {e}")
            raise HTTPException(status_code=502, detail=str(e))

        return SearchResponse(
            query=q,
            hits=[
                MemoryHit(similarity=similarity, **record.to_dict(include_embedding=False))
                for record, similarity in hits
            ],
        )

    return app


# ============================================================
# Entry Point
# ============================================================

def main() -> None:
    import uvicorn

    from agentloop.app import AgentApp
    from agentloop.config import AgentConfig

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    config = AgentConfig.from_env()
    logger.info(f"[SERVER] Starting with {config}")

    agent = AgentApp.create(config)
    uvicorn.run(create_app(agent.conversation, agent.store), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
