from __future__ import annotations

import difflib
import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from gre_tutor.errors import NotFoundError, StorageError, ValidationError

Week = Dict[str, str]
Dictionary = Dict[int, Week]

WEEK_PREFIX = "week"
_WEEK_KEY = re.compile(rf"^{WEEK_PREFIX}([1-9][0-9]*)$")


def week_key(week: int) -> str:
    """Return the persisted key for a week id, e.g. ``week3``."""
    return f"{WEEK_PREFIX}{week}"


def parse_week_key(key: str) -> int:
    match = _WEEK_KEY.match(key)
    if not match:
        raise ValidationError(f"'{key}' is not a week key (expected '{WEEK_PREFIX}<number>').")
    return int(match.group(1))


def _decode(raw: Any, source: Path) -> Dictionary:
    """Turn a parsed JSON document into the week -> word -> meaning shape."""
    if not isinstance(raw, dict):
        raise ValidationError(f"{source} must contain a JSON object of weeks.")

    words: Dictionary = {}
    for key, entries in raw.items():
        week = parse_week_key(str(key))
        if not isinstance(entries, dict):
            raise ValidationError(f"{source}: '{key}' must map words to meanings.")
        decoded: Week = {}
        for word, meaning in entries.items():
            if not isinstance(meaning, str) or not word.strip() or not meaning.strip():
                raise ValidationError(
                    f"{source}: '{key}' contains an invalid entry for '{word}'."
                )
            decoded[word] = meaning
        words[week] = decoded
    return words


def _read(path: Path) -> Dictionary:
    try:
        with path.open(encoding="utf-8-sig") as handle:
            raw = json.load(handle)
    except json.JSONDecodeError as exc:
        raise StorageError(f"{path} is not valid JSON: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise StorageError(f"{path} is not UTF-8 text: {exc}") from exc
    return _decode(raw, path)


class DictionaryStore:
    """Week-grouped vocabulary persisted as a single JSON document."""

    def __init__(self, path: Path, words: Optional[Dictionary] = None) -> None:
        self.path = path
        self.words: Dictionary = words if words is not None else {}
        # Set by add_word and restore, cleared once saved to self.path.
        self.dirty = False

    @classmethod
    def load(cls, path: Path) -> "DictionaryStore":
        """Read the dictionary at ``path``, creating an empty one if it is missing."""
        store = cls(path)
        try:
            store.words = _read(path)
        except FileNotFoundError:
            store.save()
        except OSError as error:
            raise StorageError(f"Unable to read {path}: {error}") from error
        return store

    def save(self, path: Optional[Path] = None) -> Path:
        """Overwrite ``path`` (default: the store's own file) with every week."""
        target = path or self.path
        payload = {
            week_key(week): dict(self.words[week]) for week in sorted(self.words)
        }
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with target.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=4)
                handle.write("\n")
        except OSError as error:
            raise StorageError(f"Could not save the dictionary to {target}: {error}") from error
        if target == self.path:
            self.dirty = False
        return target

    def backup(self, path: Path) -> Path:
        return self.save(path)

    def restore(self, path: Union[str, Path, None]) -> Path:
        """Replace every week with the dictionary at ``path`` and persist it."""
        if path is None or not isinstance(path, (str, Path)) or not str(path).strip():
            raise ValidationError("You must type a valid backup file path.")
        source = Path(path)
        if not source.is_file():
            raise ValidationError(f"There is no backup file at {source}.")
        try:
            restored = _read(source)
        except OSError as error:
            raise StorageError(f"Unable to read {source}: {error}") from error

        self.words = restored
        self.dirty = True
        return self.save()

    def add_word(self, week: int, word: str, meaning: str) -> None:
        if not isinstance(week, int) or week < 1:
            raise ValidationError("The week must be a positive number.")
        word = (word or "").strip()
        meaning = (meaning or "").strip()
        if not word:
            raise ValidationError("The word must not be empty.")
        if not meaning:
            raise ValidationError(f"The meaning of '{word}' must not be empty.")
        self.words.setdefault(week, {})[word] = meaning
        self.dirty = True

    def weeks(self) -> List[int]:
        return sorted(self.words)

    def latest_week(self) -> int:
        """Highest week id present, or 1 for an empty dictionary."""
        return max(self.words, default=1)

    def words_in(self, week: int) -> Week:
        return self.words.get(week, {})

    def word_count(self) -> int:
        return sum(len(entries) for entries in self.words.values())


class WordIndex:
    """Merged word -> meaning view over every week of a dictionary.

    A word stored in several weeks takes its meaning from the highest-numbered
    week. ``week_of`` on the other hand reports the first week containing the
    word in the dictionary's own order (file order for loaded documents).
    """

    def __init__(self, store: DictionaryStore) -> None:
        self.store = store
        self.meanings: Week = {}
        for week in store.weeks():
            self.meanings.update(store.words[week])

    @classmethod
    def build(cls, store: DictionaryStore) -> "WordIndex":
        return cls(store)

    def __contains__(self, word: object) -> bool:
        return word in self.meanings

    def __len__(self) -> int:
        return len(self.meanings)

    def meaning_of(self, word: str) -> str:
        try:
            return self.meanings[word]
        except KeyError:
            raise NotFoundError(f"'{word}' is not in the dictionary.") from None

    def week_of(self, word: str) -> int:
        for week, entries in self.store.words.items():
            if word in entries:
                return week
        raise NotFoundError(f"'{word}' does not belong to any week.")

    def search(self, term: str, limit: int = 5) -> List[str]:
        """Return the exact word, else prefix matches, else close spellings."""
        if term in self.meanings:
            return [term]
        folded = term.strip().lower()
        if not folded:
            return []
        prefixed = sorted(word for word in self.meanings if word.lower().startswith(folded))
        if prefixed:
            return prefixed[:limit]
        lowered = {word.lower(): word for word in self.meanings}
        close = difflib.get_close_matches(folded, list(lowered), n=limit, cutoff=0.7)
        return [lowered[match] for match in close]
