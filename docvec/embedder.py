"""
Embedding backends and the per-chunk embedder

A backend turns one piece of text into one fixed-size vector. Backends are
loaded once at startup and shared read-only across callers.
"""

import hashlib
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np
from sentence_transformers import SentenceTransformer

from .exceptions import EmbeddingBackendError, ModelLoadError

logger = logging.getLogger(__name__)


class EmbeddingBackend(ABC):
    """Opaque text -> vector function with a fixed output dimension"""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Size of every vector this backend returns"""

    @abstractmethod
    def embed(self, text: str) -> List[float]:
        """Embed a single piece of text"""


class SentenceTransformerBackend(EmbeddingBackend):
    """
    Backend running a sentence-transformers model locally

    The model's pooling (mean pooling for all-MiniLM-L6-v2) is fixed by the
    model configuration at load time.
    """

    def __init__(
        self,
        model_name: str = "sentence-transformers/all-MiniLM-L6-v2",
        device: str = "cpu",
        normalize: bool = False,
        expected_dimension: Optional[int] = None
    ):
        """
        Load the model

        Args:
            model_name: HuggingFace model id or local model directory
            device: Torch device to run on
            normalize: L2-normalize each chunk vector
            expected_dimension: Fail at load time if the model disagrees

        Raises:
            ModelLoadError: The model cannot be loaded or has the wrong dimension
        """
        self.model_name = model_name
        self.device = device
        self.normalize = normalize

        try:
            self.model = SentenceTransformer(model_name, device=device)
        except Exception as e:
            logger.error(f"Failed to load embedding model {model_name}: {e}")
            raise ModelLoadError(f"Could not load embedding model {model_name}: {e}") from e

        self._dimension = self.model.get_sentence_embedding_dimension()
        if expected_dimension is not None and self._dimension != expected_dimension:
            raise ModelLoadError(
                f"Model {model_name} produces {self._dimension}-dimensional vectors, "
                f"configured dimension is {expected_dimension}"
            )

        logger.info(f"Loaded embedding model {model_name} ({self._dimension} dims) on {device}")

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> List[float]:
        embedding = self.model.encode(
            text,
            convert_to_numpy=True,
            normalize_embeddings=self.normalize
        )
        return embedding.tolist()


class HashingEmbeddingBackend(EmbeddingBackend):
    """
    Deterministic offline backend for tests and local runs

    Each text seeds a random generator with its SHA-256 digest, so identical
    text always maps to the same unit vector. Vectors carry no semantics.
    """

    def __init__(self, dimension: int = 384):
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> List[float]:
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        rng = np.random.default_rng(int.from_bytes(digest[:8], "little"))
        vector = rng.standard_normal(self._dimension)
        return (vector / np.linalg.norm(vector)).tolist()


class ChunkEmbedder:
    """Embeds one chunk with an injected backend, checking the output size"""

    def __init__(self, backend: EmbeddingBackend):
        self.backend = backend
        self.dimension = backend.dimension

    def embed_chunk(self, text: str) -> List[float]:
        """
        Embed one chunk of text

        Raises:
            EmbeddingBackendError: The backend failed or returned a vector of
                the wrong dimension
        """
        try:
            vector = [float(x) for x in self.backend.embed(text)]
        except EmbeddingBackendError:
            raise
        except Exception as e:
            logger.error(f"Embedding backend failed on a {len(text)}-character chunk: {e}")
            raise EmbeddingBackendError(f"Embedding backend failed: {e}") from e

        if len(vector) != self.dimension:
            raise EmbeddingBackendError(
                f"Backend returned a {len(vector)}-dimensional vector, expected {self.dimension}"
            )
        return vector
