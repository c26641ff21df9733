"""Shared fixtures for the tutor tests.

The interactive collaborators (terminal prompt and speech) are replaced by
scripted stand-ins so every loop can be driven deterministically.
"""

import json
import random
from pathlib import Path
from typing import List, Optional

import pytest

from gre_tutor.config import TutorConfig
from gre_tutor.dictionary import DictionaryStore
from gre_tutor.session import TutorContext


class ScriptedPrompter:
    """Answer prompts from a list; raise EOFError once it runs out."""

    def __init__(self, answers: List[str]) -> None:
        self.answers = list(answers)
        self.labels: List[str] = []

    def ask(self, label: str) -> str:
        self.labels.append(label)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


class RecordingSpeaker:
    def __init__(self) -> None:
        self.spoken: List[str] = []

    def say(self, text: str) -> None:
        self.spoken.append(text)

    def wait(self, timeout: float = 5.0) -> None:
        pass


@pytest.fixture(autouse=True)
def no_signal_handlers(monkeypatch: pytest.MonkeyPatch) -> List[tuple]:
    """Keep main() from replacing the test runner's own signal handlers."""
    installed: List[tuple] = []
    monkeypatch.setattr(
        "gre_tutor.cli.signal.signal", lambda signum, handler: installed.append((signum, handler))
    )
    return installed


@pytest.fixture
def sample_words() -> dict:
    return {
        "week1": {"apple": "a fruit"},
        "week2": {"run": "to move fast"},
    }


@pytest.fixture
def dictionary_file(tmp_path: Path, sample_words: dict) -> Path:
    path = tmp_path / "words.json"
    path.write_text(json.dumps(sample_words, indent=4), encoding="utf-8")
    return path


@pytest.fixture
def store(dictionary_file: Path) -> DictionaryStore:
    return DictionaryStore.load(dictionary_file)


@pytest.fixture
def make_context(tmp_path: Path):
    """Build a TutorContext around a store with scripted answers."""

    def _make(
        store: DictionaryStore,
        answers: Optional[List[str]] = None,
        week: Optional[int] = None,
        coverage: float = 90.0,
        mode: str = "train",
    ) -> TutorContext:
        config = TutorConfig(
            dictionary_path=store.path,
            week=week,
            desired_coverage=coverage,
            mute=True,
            audio_dir=tmp_path / "audio",
            mode=mode,
        )
        outputs: List[str] = []
        context = TutorContext(
            config,
            store,
            RecordingSpeaker(),
            prompter=ScriptedPrompter(answers or []),
            output=outputs.append,
            rng=random.Random(7),
        )
        context.outputs = outputs
        return context

    return _make
