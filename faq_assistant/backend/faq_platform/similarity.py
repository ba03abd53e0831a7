from __future__ import annotations

import math
from typing import Mapping

# Added to the denominator so all-zero vectors score 0 instead of dividing by zero.
EPSILON = 1e-12


def cosine_similarity(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    """Cosine similarity between two sparse vectors keyed by token.

    The dot product walks the smaller vector only. ``math.fsum`` keeps the
    result independent of iteration order, so swapping the arguments gives
    a bit-identical score.
    """

    if len(a) < len(b):
        small, big = a, b
    else:
        small, big = b, a
    dot = math.fsum(weight * big[token] for token, weight in small.items() if big.get(token))

    norm_a = math.fsum(weight * weight for weight in a.values())
    norm_b = math.fsum(weight * weight for weight in b.values())

    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b) + EPSILON)
