"""Document-level aggregation of chunk embeddings."""

import math
from collections.abc import Sequence

from stressy.constants import CONTENT_PREVIEW_LENGTH
from stressy.errors import DimensionMismatch


def aggregate_embeddings(vectors: Sequence[Sequence[float]]) -> list[float]:
    """Average chunk embeddings element-wise into one document embedding.

    Sums are exactly rounded, so the result does not depend on input order.

    Args:
        vectors: Chunk embeddings, all of the same dimension

    Returns:
        list[float]: The element-wise mean

    Raises:
        ValueError: If no vectors are given
        DimensionMismatch: If any vector's length differs from the first
    """
    if not vectors:
        raise ValueError("Cannot aggregate an empty list of embeddings")

    expected = len(vectors[0])
    for index, vector in enumerate(vectors):
        if len(vector) != expected:
            raise DimensionMismatch(expected=expected, actual=len(vector), index=index)

    count = len(vectors)
    return [math.fsum(column) / count for column in zip(*vectors)]


def content_preview(text: str, limit: int = CONTENT_PREVIEW_LENGTH) -> str:
    """First ``limit`` characters of a document's text, verbatim."""
    return text[:limit]
