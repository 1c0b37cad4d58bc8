"""
HTTP API for adding and searching documents
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .config import Config
from .exceptions import AggregationError, EmbeddingBackendError, VectorStoreError
from .service import VectorizationService

logger = logging.getLogger(__name__)


class TextIn(BaseModel):
    text: str


class SearchIn(BaseModel):
    text: str
    limit: Optional[int] = Field(default=None, ge=1)


class AddDocOut(BaseModel):
    status: str
    id: str


class SearchHit(BaseModel):
    text: str
    score: float


class VectorOut(BaseModel):
    vector: List[float]
    length: int
    chunks: int


def create_app(service: Optional[VectorizationService] = None, config: Optional[Config] = None) -> FastAPI:
    """
    Build the API

    Args:
        service: Ready service; when omitted one is built from config at
            startup, and a failure there stops the server from starting
        config: Configuration used to build the service
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "service", None) is None:
            logger.info("Loading models and connecting to the vector store")
            app.state.service = VectorizationService.from_config(config)
        yield

    app = FastAPI(title="docvec", lifespan=lifespan)
    app.state.service = service

    @app.exception_handler(EmbeddingBackendError)
    @app.exception_handler(AggregationError)
    async def embedding_error_handler(request: Request, exc: Exception):
        logger.error(f"Embedding failed for {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(VectorStoreError)
    async def store_error_handler(request: Request, exc: VectorStoreError):
        logger.error(f"Vector store call failed for {request.url.path}: {exc}")
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    def get_service() -> VectorizationService:
        if app.state.service is None:
            raise HTTPException(status_code=503, detail="Service is not initialized")
        return app.state.service

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/doc", response_model=AddDocOut)
    def add_doc(payload: TextIn):
        point_id = get_service().add_document(payload.text)
        return AddDocOut(status="success", id=point_id)

    @app.post("/search", response_model=List[SearchHit])
    def search(payload: SearchIn):
        results = get_service().search(payload.text, payload.limit)
        return [SearchHit(text=r.text, score=r.score) for r in results]

    @app.post("/vectorize", response_model=VectorOut)
    def vectorize(payload: TextIn):
        embedder = get_service().embedder
        chunks = embedder.chunk(payload.text)
        vector = embedder.embed_chunks(chunks)
        return VectorOut(vector=vector, length=len(payload.text), chunks=len(chunks))

    return app
