from __future__ import annotations

import wave

from conftest import pcm16
from omnivox.audio.io import WavSink, encode_wav, load_wav, save_raw_pcm16, save_wav
from omnivox.audio.model import AudioFormat, AudioMeta, GeneratedAudio
from omnivox.result import OperationFailed, SaveFailed


def test_wav_header_integrity(tmp_path):
    wav_path = tmp_path / "test.wav"
    sink = WavSink(wav_path)
    sink.start(AudioMeta(sample_rate=16000, num_channels=1))
    sink.write(b"\x00\x00" * 1600)  # 0.1s of silence at 16kHz
    sink.close()

    with wave.open(str(wav_path), "rb") as wav_file:
        assert wav_file.getnchannels() == 1
        assert wav_file.getsampwidth() == 2
        assert wav_file.getframerate() == 16000
        assert wav_file.getnframes() == 1600


def test_save_wav_stereo_and_load_back(tmp_path):
    meta = AudioMeta(sample_rate=22_050, num_channels=2)
    data = pcm16([(1, -1), (300, -300), (32767, -32768)])
    path = tmp_path / "nested" / "stereo.wav"

    assert save_wav(GeneratedAudio(data, meta), path).unwrap() == path

    with wave.open(str(path), "rb") as wav_file:
        assert wav_file.getnchannels() == 2
        assert wav_file.getframerate() == 22_050
        assert wav_file.getnframes() == 3
    assert load_wav(path).unwrap() == (data, meta)


def test_save_wav_rejects_misaligned_audio(tmp_path):
    audio = GeneratedAudio(b"\x00\x00\x00", AudioMeta(sample_rate=16_000, num_channels=2))
    result = save_wav(audio, tmp_path / "bad.wav")

    assert result.is_err()
    assert isinstance(result.error, SaveFailed)
    assert not (tmp_path / "bad.wav").exists()


def test_save_wav_reports_unwritable_path(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_bytes(b"")
    audio = GeneratedAudio(pcm16([1]), AudioMeta(sample_rate=16_000, num_channels=1))

    result = save_wav(audio, blocker / "out.wav")
    assert result.is_err()
    assert isinstance(result.error, SaveFailed)
    assert result.error.context["path"].endswith("out.wav")


def test_save_raw_pcm16_writes_payload_only(tmp_path):
    data = pcm16([1, 2, 3])
    audio = GeneratedAudio(data, AudioMeta(sample_rate=8_000, num_channels=1), AudioFormat.RAW_PCM16)
    path = save_raw_pcm16(audio, tmp_path / "raw" / "clip.pcm").unwrap()
    assert path.read_bytes() == data


def test_encode_wav_matches_file_output(tmp_path):
    audio = GeneratedAudio(pcm16([(5, 6), (7, 8)]), AudioMeta(sample_rate=16_000, num_channels=2))
    path = save_wav(audio, tmp_path / "clip.wav").unwrap()
    assert encode_wav(audio) == path.read_bytes()


def test_load_wav_rejects_8_bit(tmp_path):
    path = tmp_path / "eight.wav"
    with wave.open(str(path), "wb") as wav_file:
        wav_file.setnchannels(1)
        wav_file.setsampwidth(1)
        wav_file.setframerate(8_000)
        wav_file.writeframes(b"\x80\x80")

    result = load_wav(path)
    assert result.is_err()
    assert isinstance(result.error, OperationFailed)
    assert "8-bit" in result.error.message


def test_load_wav_missing_file(tmp_path):
    result = load_wav(tmp_path / "missing.wav")
    assert result.is_err()
    assert isinstance(result.error, OperationFailed)
