from __future__ import annotations

import math
import random
from typing import Callable, Optional

from gre_tutor.coverage import CoverageTracker
from gre_tutor.dictionary import WordIndex
from gre_tutor.errors import ValidationError

# Rejections tolerated before falling back to a plain uniform draw.
MAX_WEIGHTED_ATTEMPTS = 100
MIN_WIDTH = 0.01


def gaussian(peak_value: float, peak_position: float, peak_width: float) -> Callable[[float], float]:
    """Return ``x -> peak_value * exp(-(x - peak_position)^2 / (2 * peak_width^2))``."""

    def curve(x: float) -> float:
        deviation = ((x - peak_position) ** 2) / (2 * peak_width * peak_width)
        return peak_value * math.exp(-deviation)

    return curve


class WeightedSampler:
    """Pick the next word to quiz, weighted by how far its week is from week 1.

    The expected number of retries grows as the acceptance probability of the
    candidates shrinks, so after ``max_attempts`` rejections a uniform draw is
    returned instead.
    """

    def __init__(
        self,
        index: WordIndex,
        coverage: CoverageTracker,
        prep_week: int,
        rng: Optional[random.Random] = None,
        max_attempts: int = MAX_WEIGHTED_ATTEMPTS,
    ) -> None:
        self.index = index
        self.coverage = coverage
        self.prep_week = prep_week
        self.rng = rng or random.Random()
        self.max_attempts = max_attempts
        self.weight = gaussian(1, 1, max(prep_week - 1, MIN_WIDTH))

    def acceptance(self, word: str) -> float:
        return self.weight(self.index.week_of(word))

    def next_word(self) -> str:
        pool = self.coverage.pending()
        if not pool:
            raise ValidationError("Every word of this session is already known.")

        for _ in range(self.max_attempts):
            candidate = self.rng.choice(pool)
            if self.rng.random() < self.acceptance(candidate):
                return candidate
        return self.rng.choice(pool)
