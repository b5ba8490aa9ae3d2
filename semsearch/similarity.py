"""Vector similarity scoring."""

import math
from collections.abc import Sequence

from semsearch.exceptions import DimensionMismatchError
from semsearch.logging_config import get_logger
from semsearch.observability.metrics import track_zero_norm_comparison

logger = get_logger(__name__)


def cosine_similarity(vector_a: Sequence[float], vector_b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors.

    cosine(A, B) = (A . B) / (||A|| * ||B||)

    A comparison involving a zero vector has no defined angle. It scores 0.0
    (neither similar nor dissimilar) and is counted in the
    ``zero_norm_comparisons_total`` metric, so rankings never see NaN.

    Args:
        vector_a: First vector.
        vector_b: Second vector, same length as ``vector_a``.

    Returns:
        Similarity in [-1.0, 1.0].

    Raises:
        DimensionMismatchError: If the vectors differ in length.
    """
    if len(vector_a) != len(vector_b):
        raise DimensionMismatchError(
            expected=len(vector_a),
            actual=len(vector_b),
            message="Vectors must have the same dimensions",
        )

    sq_a = math.fsum(x * x for x in vector_a)
    sq_b = math.fsum(x * x for x in vector_b)
    if sq_a == 0.0 or sq_b == 0.0:
        logger.debug("Cosine similarity against a zero vector scored as 0.0")
        track_zero_norm_comparison()
        return 0.0

    dot_product = math.fsum(a * b for a, b in zip(vector_a, vector_b))
    # One sqrt over the product keeps cosine(A, A) at exactly 1.0
    denominator = math.sqrt(sq_a * sq_b)
    if denominator == 0.0 or math.isinf(denominator):
        # Product of the squared norms under/overflowed
        denominator = math.sqrt(sq_a) * math.sqrt(sq_b)
    score = dot_product / denominator

    # Rounding can push parallel vectors a hair past 1
    return max(-1.0, min(1.0, score))


def similarity_matrix(vectors: Sequence[Sequence[float]]) -> list[list[float]]:
    """Pairwise cosine similarities of a list of vectors.

    Args:
        vectors: Vectors of equal length.

    Returns:
        Square, symmetric matrix; entry [i][j] is cosine(vectors[i], vectors[j]).
    """
    size = len(vectors)
    matrix = [[0.0] * size for _ in range(size)]
    for i in range(size):
        for j in range(i, size):
            score = cosine_similarity(vectors[i], vectors[j])
            matrix[i][j] = score
            matrix[j][i] = score
    return matrix
