"""Synthetic survey answers used when no usable real data exists."""
from __future__ import annotations

import random
from typing import List, Optional

from pulse_metrics.models import Answer

# Synthetic answers generated per requested user
ANSWERS_PER_USER = 3


def synthesize(user_count: int, rng: Optional[random.Random] = None) -> List[Answer]:
    """Return ``3 * user_count`` answers with uniform random sentiment scores.

    Scores lie in [0, 1] and are rounded to 2 decimals. Pass a seeded *rng*
    for reproducible output; otherwise the module-level generator is used.
    """

    if user_count < 0:
        raise ValueError("user_count must be non-negative")
    gen = rng or random
    return [
        Answer(sentiment_score=round(gen.random(), 2))
        for _ in range(user_count * ANSWERS_PER_USER)
    ]
