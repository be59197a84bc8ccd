from __future__ import annotations

import pytest

from conftest import pcm16, samples_of
from omnivox.audio.model import AudioMeta
from omnivox.audio.preprocessing import (
    resample_pcm16,
    standardize_for_stt,
    to_mono,
    trim_silence,
)
from omnivox.result import OperationFailed

MONO_16K = AudioMeta(sample_rate=16_000, num_channels=1)
STEREO_44K = AudioMeta(sample_rate=44_100, num_channels=2)


def test_to_mono_is_identity_on_mono_input():
    data = pcm16([1, -2, 300, -32768, 32767])
    result = to_mono(data, MONO_16K)
    assert result.unwrap() == (data, MONO_16K)


def test_to_mono_keeps_frame_count_and_averages():
    data = pcm16([(100, 300), (-5, -6), (7, 8)])
    out, meta = to_mono(data, STEREO_44K).unwrap()

    assert meta == STEREO_44K.with_channels(1)
    assert len(out) == 2 * 3
    # -11 / 2 truncates toward zero
    assert samples_of(out) == [200, -5, 7]


def test_to_mono_saturates_extremes_without_overflow():
    data = pcm16([(-32768, -32768), (32767, 32767), (-32768, 32767)])
    out, _ = to_mono(data, STEREO_44K).unwrap()
    assert samples_of(out) == [-32768, 32767, 0]


@pytest.mark.parametrize("target_rate", [8_000, 16_000, 22_050, 48_000])
def test_resample_sets_rate_and_keeps_layout(target_rate):
    data = pcm16([(i, -i) for i in range(441)])
    out, meta = resample_pcm16(data, STEREO_44K, target_rate).unwrap()

    assert meta.sample_rate == target_rate
    assert meta.num_channels == STEREO_44K.num_channels
    assert meta.bit_depth == STEREO_44K.bit_depth
    assert len(out) % meta.frame_size == 0
    assert len(out) // meta.frame_size == round(441 * target_rate / 44_100)


def test_resample_same_rate_is_identity():
    data = pcm16([1, 2, 3])
    assert resample_pcm16(data, MONO_16K, 16_000).unwrap() == (data, MONO_16K)


def test_resample_interpolates_linearly():
    data = pcm16([0, 100, 200, 300])
    out, _ = resample_pcm16(data, MONO_16K, 32_000).unwrap()
    assert samples_of(out) == [0, 50, 100, 150, 200, 250, 300, 300]


def test_resample_rejects_non_positive_target():
    result = resample_pcm16(pcm16([1, 2]), MONO_16K, 0)
    assert result.is_err()
    assert isinstance(result.error, OperationFailed)


def test_trim_silence_on_all_zero_buffer_is_empty():
    data = pcm16([0] * 500)
    assert trim_silence(data, MONO_16K).unwrap() == (b"", MONO_16K)


def test_trim_silence_keeps_single_loud_frame():
    data = pcm16([(0, 0), (0, 0), (0, 600), (0, 0)])
    out, meta = trim_silence(data, STEREO_44K).unwrap()
    assert samples_of(out) == [0, 600]
    assert meta == STEREO_44K


def test_trim_silence_counts_int16_min_as_loud():
    data = pcm16([0, -32768, 0])
    out, _ = trim_silence(data, MONO_16K).unwrap()
    assert samples_of(out) == [-32768]


def test_trim_silence_keeps_quiet_frames_between_loud_ones():
    data = pcm16([0, 1000, 3, 0, -1000, 0])
    out, _ = trim_silence(data, MONO_16K, threshold=512).unwrap()
    assert samples_of(out) == [1000, 3, 0, -1000]


def test_standardize_matches_manual_chain():
    frames = [(0, 0)] * 50 + [(i * 97 % 4000, -(i * 53 % 4000)) for i in range(300)] + [(0, 0)] * 50
    data = pcm16(frames)

    manual = (
        to_mono(data, STEREO_44K)
        .bind(lambda step: resample_pcm16(step[0], step[1], 16_000))
        .bind(lambda step: trim_silence(step[0], step[1]))
    )
    assert standardize_for_stt(data, STEREO_44K, 16_000) == manual


def test_standardize_silent_stereo_clip_yields_empty_mono_16k():
    data = bytes(1000)
    out, meta = standardize_for_stt(data, STEREO_44K, 16_000).unwrap()

    assert meta.num_channels == 1
    assert meta.sample_rate == 16_000
    assert out == b""


@pytest.mark.parametrize(
    "call",
    [
        lambda data, meta: to_mono(data, meta),
        lambda data, meta: resample_pcm16(data, meta, 16_000),
        lambda data, meta: trim_silence(data, meta),
        lambda data, meta: standardize_for_stt(data, meta),
    ],
)
@pytest.mark.parametrize("length", [1, 3, 5, 1001])
def test_misaligned_buffers_fail_without_raising(call, length):
    result = call(bytes(length), STEREO_44K)
    assert result.is_err()
    assert isinstance(result.error, OperationFailed)
    assert "frame size" in result.error.message


def test_non_16_bit_audio_is_rejected():
    meta = AudioMeta(sample_rate=16_000, num_channels=1, bit_depth=24)
    result = to_mono(bytes(6), meta)
    assert result.is_err()
    assert "16-bit" in result.error.message


def test_inputs_are_not_modified():
    data = bytearray(pcm16([(1000, -1000)] * 10))
    snapshot = bytes(data)
    standardize_for_stt(bytes(data), STEREO_44K)
    assert bytes(data) == snapshot
