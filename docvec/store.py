"""
Qdrant vector store gateway

Stores one point per document (the document vector plus its source text as
payload) and runs exact cosine similarity search over them.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from qdrant_client import QdrantClient, models

from .config import Config
from .exceptions import VectorStoreError

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """A scored match returned by the vector store"""
    text: str
    score: float
    id: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)


class QdrantStore:
    """
    Thin wrapper over a Qdrant collection of fixed-size cosine vectors

    Args:
        client: Connected Qdrant client
        collection_name: Collection holding document vectors
        vector_size: Dimension every stored or queried vector must have
    """

    def __init__(self, client: QdrantClient, collection_name: str, vector_size: int):
        self.client = client
        self.collection_name = collection_name
        self.vector_size = vector_size

    @classmethod
    def from_config(cls, config: Config) -> "QdrantStore":
        """Connect to the Qdrant instance described by config"""
        store_cfg = config.get_vector_store_config()
        url = store_cfg.get("url", "http://localhost:6333")
        api_key = store_cfg.get("api_key")

        # Initialize Qdrant client with API key if provided
        if api_key:
            client = QdrantClient(url=url, api_key=api_key)
        else:
            client = QdrantClient(url=url)

        logger.info(f"Connected to Qdrant at {url}")
        return cls(
            client,
            collection_name=store_cfg.get("collection_name", "all_minilm_l6_v2_docs"),
            vector_size=int(config.get("embeddings.dimension", 384))
        )

    def ensure_collection(self) -> bool:
        """
        Create the collection unless it already exists

        Returns:
            True if the collection was created, False if it was already there
        """
        try:
            if self.client.collection_exists(self.collection_name):
                logger.info(f"'{self.collection_name}' collection already exists in Qdrant; do not create")
                return False

            self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config=models.VectorParams(
                    size=self.vector_size,
                    distance=models.Distance.COSINE
                ),
                quantization_config=models.ScalarQuantization(
                    scalar=models.ScalarQuantizationConfig(type=models.ScalarType.INT8)
                )
            )
        except Exception as e:
            logger.error(f"Error creating Qdrant collection {self.collection_name}: {e}")
            raise VectorStoreError(f"Could not create collection {self.collection_name}: {e}") from e

        logger.info(f"Created collection '{self.collection_name}' in Qdrant")
        return True

    def upsert(self, vector: Sequence[float], text: str, point_id: Optional[str] = None) -> str:
        """
        Store a document vector with its source text

        Args:
            vector: Document vector
            text: Source text, stored as the `text` payload field
            point_id: Optional id, a random UUID by default

        Returns:
            The id of the stored point
        """
        self._check_vector(vector)
        point_id = point_id or str(uuid.uuid4())

        point = models.PointStruct(
            id=point_id,
            vector=list(vector),
            payload={"text": text}
        )
        try:
            self.client.upsert(collection_name=self.collection_name, points=[point])
        except Exception as e:
            logger.error(f"Error storing in Qdrant: {e}")
            raise VectorStoreError(f"Upsert into {self.collection_name} failed: {e}") from e

        logger.info(f"Stored document {point_id} in Qdrant collection: {self.collection_name}")
        return point_id

    def search(self, vector: Sequence[float], limit: int = 1) -> List[SearchResult]:
        """
        Find the stored documents closest to vector

        Args:
            vector: Query vector
            limit: Maximum number of matches

        Returns:
            Matches ordered by descending cosine similarity
        """
        self._check_vector(vector)
        if limit < 1:
            raise ValueError("limit must be at least 1")

        try:
            response = self.client.query_points(
                collection_name=self.collection_name,
                query=list(vector),
                limit=limit,
                with_payload=True,
                search_params=models.SearchParams(exact=True)
            )
        except Exception as e:
            logger.error(f"Error searching Qdrant: {e}")
            raise VectorStoreError(f"Search in {self.collection_name} failed: {e}") from e

        results = []
        for hit in response.points:
            payload = hit.payload or {}
            results.append(SearchResult(
                text=payload.get("text", ""),
                score=hit.score,
                id=str(hit.id),
                payload=payload
            ))

        logger.info(f"Retrieved {len(results)} documents")
        return results

    def _check_vector(self, vector: Sequence[float]):
        if len(vector) != self.vector_size:
            raise VectorStoreError(
                f"Vector has dimension {len(vector)}, collection {self.collection_name} "
                f"expects {self.vector_size}"
            )
