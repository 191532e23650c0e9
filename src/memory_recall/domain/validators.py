"""Input validation for retrieval requests.

Every check raises InvalidQueryError with ValidationErrorDetails so callers
can tell a malformed request from a failed search.
"""

import math
from collections.abc import Sequence
from numbers import Real
from typing import Any

from memory_recall.core.base import ValidationErrorDetails
from memory_recall.core.errors import InvalidQueryError


def _invalid(message: str, field: str, value: Any, expected_type: str, constraint: str) -> InvalidQueryError:
    return InvalidQueryError(
        message=message,
        details=ValidationErrorDetails(
            source="validators",
            operation=f"validate_{field}",
            field=field,
            actual_value=str(value)[:100],
            expected_type=expected_type,
            constraint=constraint,
        ),
    )


def validate_user_id(user_id: Any) -> str:
    if not isinstance(user_id, str) or not user_id.strip():
        raise _invalid("user_id must be a non-empty string", "user_id", user_id, "str", "non-empty")
    return user_id


def validate_limit(limit: Any) -> int:
    # bool is an int subclass and never a meaningful limit
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise _invalid("limit must be a positive integer", "limit", limit, "int", "limit >= 1")
    return limit


def validate_threshold(threshold: Any) -> float:
    if isinstance(threshold, bool) or not isinstance(threshold, Real) or not -1.0 <= float(threshold) <= 1.0:
        raise _invalid(
            "threshold must be a number in [-1, 1]", "threshold", threshold, "float", "-1 <= threshold <= 1"
        )
    return float(threshold)


def validate_embedding(embedding: Any, dimensions: int | None = None) -> list[float]:
    """Check a query embedding and return it as a list of floats.

    Args:
        embedding: Candidate query vector
        dimensions: Expected length, skipped when None

    Raises:
        InvalidQueryError: If the vector is empty, non-numeric, non-finite or the wrong length
    """
    if isinstance(embedding, str | bytes) or not isinstance(embedding, Sequence) or len(embedding) == 0:
        raise _invalid(
            "query embedding must be a non-empty sequence of numbers",
            "embedding",
            embedding,
            "list[float]",
            "len(embedding) > 0",
        )

    vector: list[float] = []
    for value in embedding:
        if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value):
            raise _invalid(
                "query embedding must contain only finite numbers",
                "embedding",
                value,
                "float",
                "finite",
            )
        vector.append(float(value))

    if dimensions is not None and len(vector) != dimensions:
        raise _invalid(
            f"query embedding has {len(vector)} dimensions, expected {dimensions}",
            "embedding",
            len(vector),
            "list[float]",
            f"len(embedding) == {dimensions}",
        )

    return vector
