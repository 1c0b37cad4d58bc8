"""
Document embedding pipeline

Reduces text of any length to one vector: chunk by token count, embed every
chunk, then average the chunk vectors weighted by chunk character length.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List

from .aggregator import weighted_mean
from .chunker import Chunk, TextChunker
from .config import Config
from .embedder import ChunkEmbedder, EmbeddingBackend, SentenceTransformerBackend
from .tokenizer import HuggingFaceTokenizer, TokenCounter

logger = logging.getLogger(__name__)


class DocumentEmbedder:
    """
    Turns arbitrary-length text into a single fixed-size vector

    The tokenizer and backend are shared by reference and never mutated, so
    one instance can serve concurrent callers.
    """

    def __init__(
        self,
        tokenizer: TokenCounter,
        backend: EmbeddingBackend,
        max_tokens: int = 256,
        max_workers: int = 1
    ):
        """
        Args:
            tokenizer: Token counter matching the embedding model
            backend: Loaded embedding backend
            max_tokens: Token cap per chunk
            max_workers: Threads used to embed the chunks of one document
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self.chunker = TextChunker(tokenizer, max_tokens=max_tokens)
        self.chunk_embedder = ChunkEmbedder(backend)
        self.max_tokens = max_tokens
        self.max_workers = max_workers

    @classmethod
    def from_config(cls, config: Config) -> "DocumentEmbedder":
        """
        Load the production tokenizer and model described by config

        Raises:
            ModelLoadError: Either artifact is missing or malformed
        """
        embedding_cfg = config.get_embedding_config()
        model_name = embedding_cfg.get("model", "sentence-transformers/all-MiniLM-L6-v2")

        tokenizer = HuggingFaceTokenizer.load(config.get("tokenizer.path"), model_name)
        backend = SentenceTransformerBackend(
            model_name=model_name,
            device=embedding_cfg.get("device", "cpu"),
            normalize=bool(embedding_cfg.get("normalize", False)),
            expected_dimension=embedding_cfg.get("dimension")
        )
        return cls(
            tokenizer,
            backend,
            max_tokens=int(config.get("chunking.max_tokens", 256)),
            max_workers=int(embedding_cfg.get("max_workers", 1))
        )

    @property
    def dimension(self) -> int:
        return self.chunk_embedder.dimension

    def chunk(self, text: str) -> List[Chunk]:
        """
        Chunks that embed() will use for text

        Empty or whitespace-only text yields a single empty chunk of weight 1
        so that every document produces a vector.
        """
        chunks = self.chunker.split_chunks(text, self.max_tokens)
        if not chunks:
            return [Chunk(content="", weight=1.0)]
        return chunks

    def embed(self, text: str) -> List[float]:
        """
        Embed a document of any length

        Raises:
            EmbeddingBackendError: Any chunk failed to embed; no partial
                vector is returned
        """
        return self.embed_chunks(self.chunk(text))

    def embed_chunks(self, chunks: List[Chunk]) -> List[float]:
        """Embed already split chunks and pool them by weight"""
        vectors = self._embed_texts([chunk.content for chunk in chunks])
        weights = [chunk.weight for chunk in chunks]

        logger.debug(f"Embedded {len(chunks)} chunks")
        return weighted_mean(vectors, weights)

    def _embed_texts(self, texts: List[str]) -> List[List[float]]:
        if self.max_workers == 1 or len(texts) == 1:
            return [self.chunk_embedder.embed_chunk(text) for text in texts]

        # map() yields in submission order, keeping each vector next to its weight
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(texts))) as executor:
            return list(executor.map(self.chunk_embedder.embed_chunk, texts))

