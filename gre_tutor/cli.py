from __future__ import annotations

import signal
import sys
from typing import List, Optional

from colorama import Fore, Style, init

from gre_tutor.audio import Speaker, english_voices
from gre_tutor.config import parse_config
from gre_tutor.dictionary import DictionaryStore, week_key
from gre_tutor.errors import TutorError
from gre_tutor.session import Output, Shutdown, TutorContext, add_words, search, train


def list_words(context: TutorContext) -> None:
    store = context.store
    context.output(f"There are {store.word_count()} words in the dictionary. They are:")
    for week in store.weeks():
        context.output(f"\n{Fore.RED}{week_key(week)}")
        for word, meaning in store.words_in(week).items():
            context.output(f"  {Fore.BLUE}{word}{Style.RESET_ALL}: {meaning}")


def list_voices(output: Output = print) -> None:
    for voice in english_voices():
        output(f"{Fore.BLUE}{voice['ShortName']}{Style.RESET_ALL} ({voice.get('Gender', '?')})")


def run(context: TutorContext) -> None:
    """Dispatch to the selected mode."""
    config = context.config
    mode = config.mode
    if mode == "add":
        add_words(context)
    elif mode == "train":
        train(context)
    elif mode == "search":
        search(context)
    elif mode == "backup":
        path = context.store.backup(config.target)
        context.output(f"{Fore.GREEN}A copy of the dictionary is saved to {Style.RESET_ALL}{path}")
    elif mode == "restore":
        context.store.restore(config.target)
        context.rebuild()
        context.output(f"{Fore.GREEN}Dictionary is replaced with the file at {Style.RESET_ALL}{config.target}")
    else:
        list_words(context)


def install_signal_handlers(shutdown: Shutdown) -> None:
    """Route SIGINT and SIGTERM through ``shutdown`` before exiting."""

    def _handler(signum: int, frame: object) -> None:
        if shutdown.started:
            return
        print(f"\n{Fore.YELLOW}Saving the dictionary before exit...")
        sys.exit(shutdown())

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = parse_config(argv)
    except TutorError as error:
        print(f"{Fore.RED}{error}")
        return 1

    if config.mode == "voices":
        try:
            list_voices()
        except Exception as error:  # noqa: BLE001
            print(f"{Fore.RED}Could not fetch the voice list: {error}")
            return 1
        return 0

    try:
        store = DictionaryStore.load(config.dictionary_path)
        speaker = Speaker(config.audio_dir, config.voice, muted=config.mute)
        context = TutorContext(config, store, speaker)
    except TutorError as error:
        print(f"{Fore.RED}{error}")
        return 1

    context.output(f"{Style.BRIGHT}Welcome to GRE - Tutor")
    context.output(f"It appears we are working on {Fore.RED}week {context.prep_week}")

    shutdown = Shutdown(store, context.output)
    install_signal_handlers(shutdown)

    status = 0
    try:
        run(context)
    except (KeyboardInterrupt, EOFError):
        context.output(f"\n{Fore.YELLOW}Interrupted.")
    except TutorError as error:
        context.output(f"{Fore.RED}{error}")
        status = 1
    except Exception as error:  # noqa: BLE001
        context.output(f"{Fore.RED}Unexpected error: {error}")
        status = 1

    return shutdown() or status


def entry() -> None:
    init(autoreset=True)
    sys.exit(main())


if __name__ == "__main__":
    entry()
