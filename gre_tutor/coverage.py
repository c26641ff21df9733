from __future__ import annotations

from typing import Dict, List

from gre_tutor.dictionary import DictionaryStore
from gre_tutor.errors import NotFoundError, ValidationError


class CoverageTracker:
    """Per-session "known" flags for every word up to the preparation week."""

    def __init__(self, flags: Dict[str, bool]) -> None:
        self.flags = flags

    @classmethod
    def build(cls, store: DictionaryStore, prep_week: int) -> "CoverageTracker":
        flags: Dict[str, bool] = {}
        for week in store.weeks():
            if week > prep_week:
                break
            for word in store.words[week]:
                flags[word] = False
        return cls(flags)

    @property
    def total(self) -> int:
        return len(self.flags)

    @property
    def known_count(self) -> int:
        return sum(1 for known in self.flags.values() if known)

    def is_tracked(self, word: str) -> bool:
        return word in self.flags

    def pending(self) -> List[str]:
        """Tracked words not yet marked known, in tracking order."""
        return [word for word, known in self.flags.items() if not known]

    def mark_known(self, word: str) -> None:
        if word not in self.flags:
            raise NotFoundError(f"'{word}' is not part of this training session.")
        self.flags[word] = True

    def coverage(self, inclusive_delta: int = 0) -> float:
        """Percentage of tracked words known, counting ``inclusive_delta`` extra."""
        if not self.flags:
            raise ValidationError("There are no words to train on up to this week.")
        return 100 * (self.known_count + inclusive_delta) / self.total
