"""
Composable validators and converters for audio pipelines.

Validators pass a value through unchanged or reject it; converters transform
it. Both compose left to right and stop at the first ``Err``, so adapters can
assemble the checks and steps they need without repeating the sequencing.
"""

from __future__ import annotations

import abc
from functools import reduce
from typing import Generic, Sequence, TypeVar

from ..result import Err, Ok, OperationFailed, Result
from .model import AudioMeta, check_frame_alignment
from .preprocessing import (
    DEFAULT_SILENCE_THRESHOLD,
    STT_SAMPLE_RATE,
    resample_pcm16,
    to_mono,
    trim_silence,
)

A = TypeVar("A")
B = TypeVar("B")
C = TypeVar("C")

AudioPair = tuple[bytes, AudioMeta]

MAX_STT_SAMPLE_RATE = 48_000


class AudioValidator(abc.ABC, Generic[A]):
    name: str = "validator"

    @abc.abstractmethod
    def validate(self, value: A) -> Result[A]:
        """Return ``Ok(value)`` unchanged or an ``Err`` describing the problem."""


class AudioConverter(abc.ABC, Generic[A, B]):
    name: str = "converter"

    @abc.abstractmethod
    def convert(self, value: A) -> Result[B]:
        """Transform ``value``, possibly failing."""

    def __rshift__(self, other: "AudioConverter[B, C]") -> "CompositeConverter[A, B, C]":
        return CompositeConverter(self, other)


# --------------------------------------------------------------------------- #
# Validators


class STTMetadataValidator(AudioValidator[AudioMeta]):
    name = "stt-metadata-validator"

    def validate(self, value: AudioMeta) -> Result[AudioMeta]:
        problems = []
        if value.sample_rate <= 0:
            problems.append("Sample rate must be positive")
        if value.num_channels <= 0:
            problems.append("Number of channels must be positive")
        if value.bit_depth != 16:
            problems.append("Only 16-bit audio is supported")
        if value.sample_rate > MAX_STT_SAMPLE_RATE:
            problems.append("Sample rate too high for STT")
        if problems:
            return Err(OperationFailed(f"Validation failed: {', '.join(problems)}"))
        return Ok(value)


class AudioDataValidator(AudioValidator[AudioPair]):
    name = "audio-data-validator"

    def validate(self, value: AudioPair) -> Result[AudioPair]:
        data, meta = value
        return check_frame_alignment(data, meta)


class NonEmptyAudioValidator(AudioValidator[AudioPair]):
    name = "non-empty-audio-validator"

    def validate(self, value: AudioPair) -> Result[AudioPair]:
        if not value[0]:
            return Err(OperationFailed("Audio data is empty"))
        return Ok(value)


class CompositeValidator(AudioValidator[A]):
    def __init__(self, validators: Sequence[AudioValidator[A]]) -> None:
        self.validators = list(validators)
        self.name = " + ".join(v.name for v in self.validators)

    def validate(self, value: A) -> Result[A]:
        result: Result[A] = Ok(value)
        for validator in self.validators:
            result = result.bind(validator.validate)
            if result.is_err():
                break
        return result


# --------------------------------------------------------------------------- #
# Converters


class MonoConverter(AudioConverter[AudioPair, AudioPair]):
    name = "mono-converter"

    def convert(self, value: AudioPair) -> Result[AudioPair]:
        return to_mono(*value)


class ResampleConverter(AudioConverter[AudioPair, AudioPair]):
    def __init__(self, target_rate: int) -> None:
        self.target_rate = target_rate
        self.name = f"resample-converter-{target_rate}Hz"

    def convert(self, value: AudioPair) -> Result[AudioPair]:
        data, meta = value
        return resample_pcm16(data, meta, self.target_rate)


class SilenceTrimmer(AudioConverter[AudioPair, AudioPair]):
    def __init__(self, threshold: int = DEFAULT_SILENCE_THRESHOLD) -> None:
        self.threshold = threshold
        self.name = f"silence-trimmer-{threshold}"

    def convert(self, value: AudioPair) -> Result[AudioPair]:
        data, meta = value
        return trim_silence(data, meta, self.threshold)


class CompositeConverter(AudioConverter[A, C], Generic[A, B, C]):
    def __init__(self, first: AudioConverter[A, B], second: AudioConverter[B, C]) -> None:
        self.first = first
        self.second = second
        self.name = f"{first.name} -> {second.name}"

    def convert(self, value: A) -> Result[C]:
        return self.first.convert(value).bind(self.second.convert)


def compose(*converters: AudioConverter) -> AudioConverter:
    """Chain converters left to right."""
    if not converters:
        raise ValueError("compose() needs at least one converter")
    return reduce(CompositeConverter, converters)


def stt_validator() -> AudioValidator[AudioPair]:
    return CompositeValidator([NonEmptyAudioValidator(), AudioDataValidator()])


def stt_preprocessor(
    target_rate: int = STT_SAMPLE_RATE, threshold: int = DEFAULT_SILENCE_THRESHOLD
) -> AudioConverter[AudioPair, AudioPair]:
    return compose(MonoConverter(), ResampleConverter(target_rate), SilenceTrimmer(threshold))
