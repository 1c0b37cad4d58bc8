"""
Error types raised by the document vectorization pipeline
"""


class DocvecError(Exception):
    """Base class for all docvec errors"""


class ConfigError(DocvecError):
    """Configuration could not be loaded or parsed"""


class ModelLoadError(DocvecError):
    """Tokenizer or embedding model artifacts are missing or malformed.

    Raised at startup only; a service that hits this must not accept requests.
    """


class EmbeddingBackendError(DocvecError):
    """The embedding backend failed to embed a chunk"""


class AggregationError(DocvecError):
    """Chunk vectors could not be combined (empty set, length or dimension mismatch)"""


class InvalidWeightsError(AggregationError):
    """Weights are negative, non-finite, or sum to zero"""


class VectorStoreError(DocvecError):
    """The vector store rejected a call or was given a vector of the wrong size"""
