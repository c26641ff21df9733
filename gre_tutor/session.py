from __future__ import annotations

import random
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from colorama import Fore, Style

from gre_tutor.config import TutorConfig
from gre_tutor.coverage import CoverageTracker
from gre_tutor.dictionary import DictionaryStore, WordIndex, week_key
from gre_tutor.errors import StorageError, ValidationError
from gre_tutor.sampler import WeightedSampler

AFFIRMATIVE = ("y", "yes")
PEEK = "?"

Output = Callable[[str], None]


class Prompter(Protocol):
    def ask(self, label: str) -> str: ...


class SpeechOutput(Protocol):
    def say(self, text: str) -> object: ...

    def wait(self, timeout: float = ...) -> None: ...


class ConsolePrompter:
    """Read answers from the terminal."""

    def ask(self, label: str) -> str:
        return input(f"{label}{Style.RESET_ALL}: ")


def is_affirmative(answer: str) -> bool:
    return answer == "" or answer.lower() in AFFIRMATIVE


@dataclass
class TutorContext:
    """Everything one run of the tutor works on, built once at startup."""

    config: TutorConfig
    store: DictionaryStore
    speaker: SpeechOutput
    prompter: Prompter = field(default_factory=ConsolePrompter)
    output: Output = print
    rng: random.Random = field(default_factory=random.Random)
    prep_week: int = field(init=False)
    index: WordIndex = field(init=False)
    coverage: CoverageTracker = field(init=False)
    sampler: WeightedSampler = field(init=False)

    def __post_init__(self) -> None:
        self.prep_week = self.config.week or self.store.latest_week()
        self.rebuild()

    def rebuild(self) -> None:
        """Derive the index, coverage flags and sampler from the dictionary."""
        self.index = WordIndex.build(self.store)
        self.coverage = CoverageTracker.build(self.store, self.prep_week)
        self.sampler = WeightedSampler(self.index, self.coverage, self.prep_week, rng=self.rng)


class Shutdown:
    """Persist the dictionary at most once, however the run ends.

    A dictionary without unsaved changes is left untouched on disk. Later calls
    return the exit code of the first one: 0 when nothing needed saving or the
    save succeeded, 1 when saving failed.
    """

    def __init__(self, store: DictionaryStore, output: Output = print) -> None:
        self.store = store
        self.output = output
        self._lock = threading.RLock()
        self.started = False
        self.exit_code: Optional[int] = None

    def __call__(self) -> int:
        self.started = True
        with self._lock:
            if self.exit_code is not None:
                return self.exit_code
            if not self.store.dirty:
                self.exit_code = 0
                return self.exit_code
            try:
                path = self.store.save()
            except StorageError as error:
                self.output(f"{Fore.RED}{error}")
                self.exit_code = 1
            else:
                self.output(f"{Fore.GREEN}All changes are saved to {Style.RESET_ALL}{path}")
                self.exit_code = 0
            return self.exit_code


def ask_word(context: TutorContext) -> bool:
    """Quiz one word and grade the answer. Return True if it was marked known."""
    word = context.sampler.next_word()
    meaning = context.index.meaning_of(word)
    context.speaker.say(word)

    covered = context.coverage.coverage(inclusive_delta=1)
    answer = context.prompter.ask(f"{Fore.BLUE}{word}{Style.RESET_ALL} %{covered:.0f}")

    if answer == meaning or is_affirmative(answer):
        context.coverage.mark_known(word)
        context.output(f"Correct. It's: {Fore.RED}{meaning}")
        known = True
    elif answer == PEEK:
        context.output(f"It means {Fore.RED}{meaning}")
        if is_affirmative(context.prompter.ask(f"{Fore.MAGENTA}Did you know it?")):
            context.coverage.mark_known(word)
            context.output(f"{Style.DIM}Perfect!")
            known = True
        else:
            context.output(f"{Style.DIM}OK, we'll come back to this one later...")
            known = False
    else:
        context.output(f"NOPE! {Style.DIM}It means {Style.RESET_ALL}{Fore.RED}{meaning}")
        known = False

    context.speaker.wait()
    return known


def train(context: TutorContext) -> int:
    """Ask words until the desired coverage is reached. Return the words known."""
    desired = context.config.desired_coverage
    # Fails before the first question when nothing is tracked.
    context.coverage.coverage()

    while True:
        ask_word(context)
        if context.coverage.coverage() >= desired:
            break

    known = context.coverage.known_count
    message = f"Congratulations, you have trained on {known} different words"
    context.output(f"Congratulations, you have trained on {Fore.RED}{known}{Style.RESET_ALL} different words")
    context.speaker.say(message)
    context.speaker.wait()
    return known


def insert_word(context: TutorContext) -> None:
    week = context.prep_week
    count = len(context.store.words_in(week))
    word = context.prompter.ask(f"word #{count + 1} of {week_key(week)}")
    context.speaker.say(word)
    meaning = context.prompter.ask("meaning")
    context.store.add_word(week, word, meaning)
    context.speaker.wait()


def add_words(context: TutorContext) -> None:
    """Keep inserting words into the preparation week until interrupted."""
    while True:
        try:
            insert_word(context)
        except ValidationError as error:
            context.output(f"{Fore.YELLOW}{error} Nothing was added.")


def search_word(context: TutorContext) -> Optional[str]:
    """Look up one word. Return it when it is in the dictionary."""
    index = context.index
    term = context.prompter.ask("Word")
    matches = index.search(term)
    if matches == [term]:
        context.output(
            f"{Fore.BLUE}{term}{Style.RESET_ALL} => {Fore.RED}{index.meaning_of(term)}"
            f"{Style.RESET_ALL} ({week_key(index.week_of(term))})"
        )
        context.speaker.say(term)
        context.speaker.wait()
        return term
    if matches:
        context.output(f"{Style.DIM}Did you mean: {', '.join(matches)}?")
    else:
        context.output(f"{Style.DIM}No match for '{term}'.")
    return None


def search(context: TutorContext) -> None:
    while True:
        search_word(context)
