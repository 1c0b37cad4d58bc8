"""
docvec

Reduces arbitrary-length text to one fixed-size vector (token-bounded
chunking, per-chunk embedding, length-weighted mean pooling) and stores or
searches it in Qdrant.
"""

__version__ = "1.0.0"
__description__ = "Long-text vectorization service backed by Qdrant"

from .aggregator import weighted_mean
from .chunker import Chunk, TextChunker
from .config import Config, get_config
from .embedder import ChunkEmbedder, HashingEmbeddingBackend, SentenceTransformerBackend
from .exceptions import (
    AggregationError,
    ConfigError,
    DocvecError,
    EmbeddingBackendError,
    InvalidWeightsError,
    ModelLoadError,
    VectorStoreError,
)
from .pipeline import DocumentEmbedder
from .service import VectorizationService
from .store import QdrantStore, SearchResult
from .tokenizer import HuggingFaceTokenizer, WhitespaceTokenizer

__all__ = [
    "weighted_mean",
    "Chunk",
    "TextChunker",
    "Config",
    "get_config",
    "ChunkEmbedder",
    "HashingEmbeddingBackend",
    "SentenceTransformerBackend",
    "AggregationError",
    "ConfigError",
    "DocvecError",
    "EmbeddingBackendError",
    "InvalidWeightsError",
    "ModelLoadError",
    "VectorStoreError",
    "DocumentEmbedder",
    "VectorizationService",
    "QdrantStore",
    "SearchResult",
    "HuggingFaceTokenizer",
    "WhitespaceTokenizer",
]
