from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from gre_tutor import __version__
from gre_tutor.errors import ValidationError

DEFAULT_DICTIONARY_PATH = Path.home() / ".words.json"
DEFAULT_AUDIO_DIR = Path.home() / ".words_audio"
DEFAULT_COVERAGE = 90.0
DEFAULT_VOICE = "en-US-AriaNeural"

MODES = ("list", "add", "train", "search", "backup", "restore", "voices")

TRAINING_GUIDE = """\
How to train?
  - Start the tutor with '-t'.
  - The tutor asks a word and shows the coverage you reach if you know it.
  - If you know the meaning, press Enter (or type 'y', or the meaning exactly
    as it is in the dictionary).
  - If you do not know it, type anything else and press Enter.
  - To peek at the meaning before deciding, type '?' and press Enter.
  - Training ends once the desired coverage (%) is reached.

Notes:
  --open    changes the load/save path of the dictionary for this run only.
  --week    selects the week new words are added to, and the span of weeks
            used to weight which words come up while training.
  --voice   any edge-tts voice; run with --voices to list English ones.
  --mute    disables pronunciation.

Examples:
  gre-tutor                              list all words in the default dictionary
  gre-tutor --open my.json --add         add words to the last week of my.json
  gre-tutor -a -w 3                      add words to week 3
  gre-tutor -t -v en-GB-RyanNeural -c 75 train until 75% coverage
  gre-tutor --search -m -o my.json       browse words in my.json silently
  gre-tutor --backup backup.json         copy the dictionary to backup.json
  gre-tutor --restore backup.json        replace the dictionary with backup.json
"""


@dataclass
class TutorConfig:
    """Resolved run parameters for one invocation of the tutor."""

    dictionary_path: Path = DEFAULT_DICTIONARY_PATH
    week: Optional[int] = None
    desired_coverage: float = DEFAULT_COVERAGE
    mute: bool = False
    voice: str = DEFAULT_VOICE
    audio_dir: Path = DEFAULT_AUDIO_DIR
    mode: str = "list"
    target: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.mode not in MODES:
            raise ValidationError(f"Unknown mode '{self.mode}'.")
        if self.week is not None and self.week < 1:
            raise ValidationError("The week must be a positive number.")
        if not 0 < self.desired_coverage <= 100:
            raise ValidationError("The desired coverage must be between 0 and 100.")
        if self.mode in ("backup", "restore") and self.target is None:
            raise ValidationError(f"You must type a valid {self.mode} file path.")

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "TutorConfig":
        mode = "list"
        target: Optional[Path] = None
        if args.add:
            mode = "add"
        elif args.train:
            mode = "train"
        elif args.search:
            mode = "search"
        elif args.voices:
            mode = "voices"
        elif args.backup is not None:
            mode, target = "backup", args.backup
        elif args.restore is not None:
            mode, target = "restore", args.restore

        return cls(
            dictionary_path=args.open.expanduser().resolve(),
            week=args.week,
            desired_coverage=args.coverage,
            mute=args.mute,
            voice=args.voice,
            audio_dir=args.audio_dir.expanduser(),
            mode=mode,
            target=target.expanduser().resolve() if target is not None else None,
        )


def _non_empty_path(value: str) -> Path:
    if not value.strip():
        raise argparse.ArgumentTypeError("path must not be empty")
    return Path(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gre-tutor",
        description="Store GRE words week by week and train on them until you reach the coverage you want.",
        epilog=TRAINING_GUIDE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-o",
        "--open",
        type=_non_empty_path,
        default=DEFAULT_DICTIONARY_PATH,
        metavar="FILEPATH",
        help="Dictionary to load and save (default: %(default)s).",
    )
    parser.add_argument(
        "-w",
        "--week",
        type=int,
        default=None,
        metavar="N",
        help="Preparation week (default: the last week in the dictionary, or 1).",
    )
    parser.add_argument(
        "-c",
        "--coverage",
        type=float,
        default=DEFAULT_COVERAGE,
        metavar="PERCENT",
        help="Desired coverage before training ends (default: %(default)s).",
    )
    parser.add_argument("-m", "--mute", action="store_true", help="Do not pronounce words.")
    parser.add_argument(
        "-v",
        "--voice",
        default=DEFAULT_VOICE,
        metavar="NAME",
        help="edge-tts voice used for pronunciation (default: %(default)s).",
    )
    parser.add_argument(
        "--audio-dir",
        type=Path,
        default=DEFAULT_AUDIO_DIR,
        metavar="DIR",
        help="Cache directory for synthesised speech (default: %(default)s).",
    )

    modes = parser.add_mutually_exclusive_group()
    modes.add_argument("-a", "--add", action="store_true", help="Insert words into the selected week.")
    modes.add_argument("-t", "--train", action="store_true", help="Train on the words up to the selected week.")
    modes.add_argument("-s", "--search", action="store_true", help="Look up words in the dictionary.")
    modes.add_argument(
        "-b",
        "--backup",
        type=_non_empty_path,
        metavar="FILEPATH",
        help="Write a copy of the open dictionary to FILEPATH.",
    )
    modes.add_argument(
        "-r",
        "--restore",
        type=_non_empty_path,
        metavar="FILEPATH",
        help="Overwrite the dictionary with the one at FILEPATH.",
    )
    modes.add_argument("--voices", action="store_true", help="List the English voices available for --voice.")
    return parser


def parse_config(argv: Optional[List[str]] = None) -> TutorConfig:
    """Parse command-line arguments into a validated configuration."""
    args = build_parser().parse_args(argv)
    return TutorConfig.from_args(args)
