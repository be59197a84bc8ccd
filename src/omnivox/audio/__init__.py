"""
PCM16 audio model, preprocessing and file IO.

Playback lives in ``omnivox.audio.playback`` and is imported on demand because
it needs a PortAudio installation.
"""

from .io import encode_wav, load_wav, save_raw_pcm16, save_wav
from .model import AudioFormat, AudioMeta, GeneratedAudio
from .pipeline import stt_preprocessor, stt_validator
from .preprocessing import resample_pcm16, standardize_for_stt, to_mono, trim_silence, wrap

__all__ = [
    "AudioFormat",
    "AudioMeta",
    "encode_wav",
    "GeneratedAudio",
    "load_wav",
    "resample_pcm16",
    "save_raw_pcm16",
    "save_wav",
    "standardize_for_stt",
    "stt_preprocessor",
    "stt_validator",
    "to_mono",
    "trim_silence",
    "wrap",
]
