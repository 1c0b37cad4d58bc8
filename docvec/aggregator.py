"""
Weighted mean pooling of chunk vectors into one document vector
"""

import logging
import math
from typing import List, Sequence

import numpy as np

from .exceptions import AggregationError, InvalidWeightsError

logger = logging.getLogger(__name__)


def weighted_mean(vectors: Sequence[Sequence[float]], weights: Sequence[float]) -> List[float]:
    """
    Component-wise weighted arithmetic mean of equally sized vectors

    result[j] = sum(weights[i] * vectors[i][j]) / sum(weights)

    Args:
        vectors: One or more vectors of the same dimension
        weights: One non-negative weight per vector

    Returns:
        The mean vector as a list of floats

    Raises:
        AggregationError: Empty input, or vectors and weights disagree in
            length, or vectors disagree in dimension
        InvalidWeightsError: A weight is negative or not finite, or the
            weights sum to zero
    """
    if len(vectors) == 0:
        raise AggregationError("Cannot aggregate an empty set of vectors")

    if len(vectors) != len(weights):
        raise AggregationError(
            f"Got {len(vectors)} vectors but {len(weights)} weights"
        )

    dimension = len(vectors[0])
    if dimension == 0:
        raise AggregationError("Cannot aggregate zero-dimensional vectors")
    for i, vector in enumerate(vectors):
        if len(vector) != dimension:
            raise AggregationError(
                f"Vector {i} has dimension {len(vector)}, expected {dimension}"
            )

    for i, weight in enumerate(weights):
        if not math.isfinite(weight) or weight < 0:
            raise InvalidWeightsError(f"Weight {i} must be finite and non-negative, got {weight}")

    weight_array = np.asarray(weights, dtype=np.float64)
    total = weight_array.sum()
    if total <= 0:
        raise InvalidWeightsError("Weights sum to zero")

    matrix = np.asarray(vectors, dtype=np.float64)
    mean = (weight_array[:, np.newaxis] * matrix).sum(axis=0) / total

    logger.debug(f"Aggregated {len(vectors)} vectors of dimension {dimension}")
    return mean.tolist()
