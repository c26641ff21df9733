"""Tests for the edge-tts speaker, with synthesis and playback stubbed out."""

from pathlib import Path

import pytest

from gre_tutor import audio
from gre_tutor.audio import Speaker, english_voices


class FakeCommunicate:
    created = []

    def __init__(self, text: str, voice: str) -> None:
        self.text = text
        self.voice = voice
        FakeCommunicate.created.append((text, voice))

    async def save(self, path: str) -> None:
        Path(path).write_bytes(b"ID3")


class BrokenCommunicate(FakeCommunicate):
    async def save(self, path: str) -> None:
        Path(path).write_bytes(b"partial")
        raise ConnectionError("offline")


@pytest.fixture(autouse=True)
def reset_fake() -> None:
    FakeCommunicate.created = []


def test_muted_speaker_does_nothing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(audio.edge_tts, "Communicate", BrokenCommunicate)
    speaker = Speaker(tmp_path, "en-US-AriaNeural", muted=True)

    assert speaker.say("apple") is None
    speaker.wait()
    assert list(tmp_path.iterdir()) == []


def test_audio_file_is_synthesised_once(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(audio.edge_tts, "Communicate", FakeCommunicate)
    speaker = Speaker(tmp_path / "cache", "en-US-AriaNeural")

    first = speaker.audio_file("apple")
    second = speaker.audio_file("apple")

    assert first == second
    assert first.read_bytes() == b"ID3"
    assert FakeCommunicate.created == [("apple", "en-US-AriaNeural")]


def test_cache_is_per_voice(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(audio.edge_tts, "Communicate", FakeCommunicate)

    aria = Speaker(tmp_path, "en-US-AriaNeural").audio_file("apple")
    ryan = Speaker(tmp_path, "en-GB-RyanNeural").audio_file("apple")

    assert aria != ryan


def test_failed_synthesis_is_reported_not_raised(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    monkeypatch.setattr(audio.edge_tts, "Communicate", BrokenCommunicate)
    played = []
    speaker = Speaker(tmp_path, "en-US-AriaNeural")
    monkeypatch.setattr(speaker, "_play_file", played.append)

    thread = speaker.say("apple")
    assert thread is not None
    speaker.wait()

    assert not thread.is_alive()
    assert played == []
    assert list(tmp_path.iterdir()) == []
    assert "Could not pronounce 'apple'" in capsys.readouterr().out


def test_say_plays_the_cached_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(audio.edge_tts, "Communicate", FakeCommunicate)
    played = []
    speaker = Speaker(tmp_path, "en-US-AriaNeural")
    monkeypatch.setattr(speaker, "_play_file", played.append)

    speaker.say("apple")
    speaker.wait()

    assert played == [speaker.audio_file("apple")]


def test_missing_player_is_reported_once(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    monkeypatch.setattr(audio.platform, "system", lambda: "Linux")
    monkeypatch.setattr(audio.shutil, "which", lambda name: None)
    speaker = Speaker(tmp_path, "en-US-AriaNeural")

    speaker._play_file(tmp_path / "a.mp3")
    speaker._play_file(tmp_path / "b.mp3")

    assert capsys.readouterr().out.count("No supported audio player") == 1


def test_slugify_is_filesystem_safe() -> None:
    slug = Speaker._slugify("en-US-AriaNeural:über / cool?")

    assert all(ch.isalnum() or ch == "_" for ch in slug)
    assert Speaker._slugify("???") != Speaker._slugify("!!!")


def test_english_voices(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_list_voices():
        return [
            {"ShortName": "en-US-GuyNeural", "Locale": "en-US", "Gender": "Male"},
            {"ShortName": "ko-KR-SunHiNeural", "Locale": "ko-KR", "Gender": "Female"},
            {"ShortName": "en-GB-SoniaNeural", "Locale": "en-GB", "Gender": "Female"},
        ]

    monkeypatch.setattr(audio.edge_tts, "list_voices", fake_list_voices)

    assert [voice["ShortName"] for voice in english_voices()] == ["en-GB-SoniaNeural", "en-US-GuyNeural"]


def test_synthesis_writes_beside_the_cache_then_moves_into_place(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    saved_to = []

    class RecordingCommunicate(FakeCommunicate):
        async def save(self, path: str) -> None:
            saved_to.append(Path(path))
            Path(path).write_bytes(b"ID3")

    monkeypatch.setattr(audio.edge_tts, "Communicate", RecordingCommunicate)
    speaker = Speaker(tmp_path, "en-US-AriaNeural")

    final = speaker.audio_file("apple")

    assert saved_to[0] != final
    assert saved_to[0].parent == final.parent
    assert final.read_bytes() == b"ID3"
    assert list(tmp_path.iterdir()) == [final]


def test_leftover_partial_file_is_never_played(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(audio.edge_tts, "Communicate", FakeCommunicate)
    speaker = Speaker(tmp_path, "en-US-AriaNeural")
    expected = tmp_path / f"{Speaker._slugify('en-US-AriaNeural:apple')}.mp3"
    # What an interrupted run leaves behind.
    expected.with_name(f"{expected.name}.part").write_bytes(b"trunc")

    assert speaker.audio_file("apple") == expected
    assert expected.read_bytes() == b"ID3"
    assert FakeCommunicate.created == [("apple", "en-US-AriaNeural")]
    assert list(tmp_path.iterdir()) == [expected]
