from __future__ import annotations

import asyncio
import hashlib
import platform
import shutil
import subprocess
import threading
from pathlib import Path
from typing import Dict, List, Optional

import edge_tts
from colorama import Fore, Style

PLAYERS = ("afplay", "mpg123", "mpg321", "play", "mpv", "ffplay")


class Speaker:
    """Pronounce words with edge-tts, caching the synthesised mp3 files.

    Playback runs on a daemon thread so a question can be shown while the word
    is still being spoken. Every failure is reported and then ignored.
    """

    def __init__(self, base_dir: Path, voice: str, muted: bool = False) -> None:
        self.base_dir = base_dir
        self.voice = voice
        self.muted = muted
        self._mutex = threading.Lock()
        self._current: Optional[threading.Thread] = None
        self._player_missing_reported = False

    def say(self, text: str) -> Optional[threading.Thread]:
        """Start background pronunciation of ``text``."""
        if self.muted or not text.strip():
            return None
        thread = threading.Thread(target=self._prepare_and_play, args=(text,), daemon=True)
        self._current = thread
        thread.start()
        return thread

    def wait(self, timeout: float = 5.0) -> None:
        """Block until the last utterance finished, or ``timeout`` elapsed."""
        thread = self._current
        if thread is not None:
            thread.join(timeout)

    def audio_file(self, text: str) -> Path:
        """Return the cached mp3 for ``text``, synthesising it when missing."""
        with self._mutex:
            path = self.base_dir / f"{self._slugify(f'{self.voice}:{text}')}.mp3"
            if not path.exists():
                self._synthesise(text, path)
            return path

    def _prepare_and_play(self, text: str) -> None:
        try:
            path = self.audio_file(text)
        except Exception as error:  # noqa: BLE001
            _warn(f"Could not pronounce '{text}' ({self.voice}): {error}")
            return
        self._play_file(path)

    def _play_file(self, path: Path) -> None:
        if platform.system() == "Windows":
            uri = path.resolve().as_uri()
            script = (
                "Add-Type -AssemblyName PresentationCore;"
                "$player = New-Object System.Windows.Media.MediaPlayer;"
                f"$player.Open([uri]'{uri}');"
                "$player.Play();"
                "while(-not $player.NaturalDuration.HasTimeSpan){Start-Sleep -Milliseconds 50};"
                "while($player.Position -lt $player.NaturalDuration.TimeSpan){Start-Sleep -Milliseconds 100}"
            )
            command = ["powershell.exe", "-NoProfile", "-WindowStyle", "Hidden", "-Command", script]
        else:
            player = next((found for found in map(shutil.which, PLAYERS) if found), None)
            if player is None:
                if not self._player_missing_reported:
                    _warn("No supported audio player found; install mpg123 or use --mute.")
                    self._player_missing_reported = True
                return
            command = [player, str(path)]
            if Path(player).name == "ffplay":
                command[1:1] = ["-nodisp", "-autoexit", "-loglevel", "quiet"]

        try:
            subprocess.run(
                command,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as error:
            _warn(f"Unable to launch audio playback for '{path}': {error}")

    def _synthesise(self, text: str, target: Path) -> None:
        # Only complete files may appear under the cached name.
        partial = target.with_name(f"{target.name}.part")

        async def _runner() -> None:
            communicate = edge_tts.Communicate(text=text, voice=self.voice)
            await communicate.save(str(partial))

        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            asyncio.run(_runner())
        except Exception:
            partial.unlink(missing_ok=True)
            raise
        partial.replace(target)

    @staticmethod
    def _slugify(text: str) -> str:
        safe = "".join(ch if ch.isalnum() else "_" for ch in text).strip("_")
        digest = hashlib.sha1(text.encode("utf-8")).hexdigest()[:10]
        if safe:
            safe = safe[:40].lower()
            return f"{safe}_{digest}"
        return digest


def english_voices() -> List[Dict[str, str]]:
    """Return the edge-tts voices whose locale is English, sorted by name."""
    voices = asyncio.run(edge_tts.list_voices())
    return sorted(
        (voice for voice in voices if str(voice.get("Locale", "")).startswith("en-")),
        key=lambda voice: voice["ShortName"],
    )


def _warn(message: str) -> None:
    print(f"{Fore.YELLOW}{message}{Style.RESET_ALL}")
