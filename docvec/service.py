"""
Vectorization service: the document embedder wired to the vector store
"""

import logging
from typing import List, Optional

from .config import Config, get_config
from .pipeline import DocumentEmbedder
from .store import QdrantStore, SearchResult

logger = logging.getLogger(__name__)


class VectorizationService:
    """
    Adds documents to and searches the vector store

    Embedding always completes before the store is called.
    """

    def __init__(self, embedder: DocumentEmbedder, store: QdrantStore, search_limit: int = 1):
        if embedder.dimension != store.vector_size:
            raise ValueError(
                f"Embedder produces {embedder.dimension}-dimensional vectors, "
                f"store expects {store.vector_size}"
            )
        self.embedder = embedder
        self.store = store
        self.search_limit = search_limit

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "VectorizationService":
        """
        Load models, connect to Qdrant and make sure the collection exists

        Raises:
            ModelLoadError: Tokenizer or model could not be loaded
            VectorStoreError: The collection could not be created
        """
        config = config or get_config()

        embedder = DocumentEmbedder.from_config(config)
        store = QdrantStore.from_config(config)
        store.ensure_collection()

        logger.info(f"Vectorization service ready (collection: {store.collection_name})")

        return cls(embedder, store, search_limit=int(config.get("vector_store.search_limit", 1)))

    def vectorize(self, text: str) -> List[float]:
        """Document vector for text"""
        return self.embedder.embed(text)

    def add_document(self, text: str) -> str:
        """Embed text and store it; returns the new point id"""
        vector = self.embedder.embed(text)
        return self.store.upsert(vector, text)

    def search(self, text: str, limit: Optional[int] = None) -> List[SearchResult]:
        """Documents most similar to text"""
        vector = self.embedder.embed(text)
        return self.store.search(vector, limit or self.search_limit)
