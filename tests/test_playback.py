from __future__ import annotations

import wave

import pytest

from conftest import pcm16
from omnivox.audio.model import AudioFormat, AudioMeta, GeneratedAudio
from omnivox.errors import AudioDeviceError

try:
    from omnivox.audio import playback
except OSError as exc:  # PortAudio shared library missing
    pytest.skip(f"PortAudio unavailable: {exc}", allow_module_level=True)

from omnivox.audio.playback import PlaybackEngine, play


class DummyStream:
    instances: list["DummyStream"] = []

    def __init__(self, *args, **kwargs):
        self.kwargs = kwargs
        self.device = kwargs.get("device", "dummy")
        self.writes: list[bytes] = []
        self.closed = False
        DummyStream.instances.append(self)

    def start(self):
        return None

    def write(self, data: bytes):
        self.writes.append(data)

    def stop(self):
        return None

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def fake_stream(monkeypatch):
    DummyStream.instances = []
    monkeypatch.setattr(playback.sd, "RawOutputStream", DummyStream)
    return DummyStream


def test_submit_requires_start():
    engine = PlaybackEngine()
    with pytest.raises(AudioDeviceError):
        engine.submit(b"\x00\x00")


def test_stereo_stream_is_opened_with_meta():
    engine = PlaybackEngine()
    engine.start(AudioMeta(sample_rate=44_100, num_channels=2))
    engine.submit(pcm16([(1, 2), (3, 4)]))
    engine.flush_and_close()

    stream = DummyStream.instances[0]
    assert stream.kwargs["samplerate"] == 44_100
    assert stream.kwargs["channels"] == 2
    assert stream.kwargs["dtype"] == "int16"
    assert stream.writes == [pcm16([(1, 2), (3, 4)])]
    assert stream.closed


def test_partial_frame_is_rejected():
    engine = PlaybackEngine()
    engine.start(AudioMeta(sample_rate=16_000, num_channels=2))
    with pytest.raises(AudioDeviceError):
        engine.submit(b"\x00\x00")
    engine.flush_and_close()


def test_playback_mirrors_to_wav(tmp_path):
    wav_path = tmp_path / "output.wav"
    engine = PlaybackEngine(wav_path=wav_path)
    engine.start(AudioMeta(sample_rate=16_000, num_channels=1))
    engine.submit(b"\x01\x00" * 3200)  # 0.2s
    engine.flush_and_close()

    with wave.open(str(wav_path), "rb") as wav_file:
        duration = wav_file.getnframes() / wav_file.getframerate()
        assert pytest.approx(duration, rel=0.05) == 0.2


def test_play_rejects_compressed_audio():
    audio = GeneratedAudio(b"ID3", AudioMeta(sample_rate=16_000, num_channels=1), AudioFormat.MP3)
    with pytest.raises(AudioDeviceError):
        play(audio)
    assert DummyStream.instances == []


def test_play_writes_whole_clip():
    audio = GeneratedAudio(pcm16([1, 2, 3]), AudioMeta(sample_rate=16_000, num_channels=1))
    play(audio)
    assert DummyStream.instances[0].writes == [pcm16([1, 2, 3])]
