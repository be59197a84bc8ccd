from __future__ import annotations

import base64

import requests

from conftest import DummyResponse, DummySession, pcm16
from omnivox.audio.io import encode_wav
from omnivox.audio.model import AudioMeta, GeneratedAudio
from omnivox.result import (
    AuthenticationError,
    RateLimitError,
    ServiceError,
    UnknownError,
    ValidationError,
)
from omnivox.speech.base import sniff_container
from omnivox.speech.config import (
    AzureSpeechConfig,
    ElevenLabsConfig,
    GoogleSpeechConfig,
    OpenAISpeechConfig,
)
from omnivox.speech.models import ASRTranscriptionOptions, TTSSynthesisOptions
from omnivox.speech.providers import (
    AzureSpeechClient,
    ElevenLabsClient,
    GoogleSpeechClient,
    OpenAISpeechClient,
)
from omnivox.speech.providers.azure import build_ssml

WAV_CLIP = encode_wav(GeneratedAudio(pcm16([0, 1000, -1000, 0]), AudioMeta(16_000, 1)))


# --------------------------------------------------------------------------- #
# OpenAI


def test_openai_synthesize_posts_speech_request():
    session = DummySession(DummyResponse(content=b"ID3audio"))
    client = OpenAISpeechClient(OpenAISpeechConfig(api_key="sk-test", model="tts-1-hd"), session=session)

    response = client.synthesize("Hello there world").unwrap()

    method, url, kwargs = session.last_call
    assert (method, url) == ("POST", "https://api.openai.com/v1/audio/speech")
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
    assert kwargs["json"] == {
        "model": "tts-1-hd",
        "input": "Hello there world",
        "voice": "alloy",
        "response_format": "mp3",
        "speed": 1.0,
    }
    assert kwargs["timeout"] == 30.0
    assert response.audio_data == b"ID3audio"
    assert response.format == "mp3"
    assert response.word_count == 3


def test_openai_options_override_model_and_voice():
    session = DummySession(DummyResponse(content=b"RIFF"))
    client = OpenAISpeechClient(OpenAISpeechConfig(api_key="k"), session=session)
    client.synthesize("Hi", TTSSynthesisOptions(voice="nova", model="tts-1-hd", response_format="wav"))

    payload = session.last_call[2]["json"]
    assert payload["voice"] == "nova"
    assert payload["model"] == "tts-1-hd"
    assert payload["response_format"] == "wav"


def test_openai_speech_model_is_split_by_capability():
    session = DummySession(DummyResponse(content=b"ID3"), DummyResponse(json={"text": "hi"}))
    client = OpenAISpeechClient(OpenAISpeechConfig(api_key="k", model="tts-1-hd"), session=session)

    client.synthesize("Hi").unwrap()
    assert session.calls[0][2]["json"]["model"] == "tts-1-hd"
    client.transcribe(b"ID3mp3", ASRTranscriptionOptions(language="en")).unwrap()
    assert session.calls[1][2]["data"]["model"] == "whisper-1"

    session = DummySession(DummyResponse(content=b"ID3"), DummyResponse(json={"text": "hi"}))
    client = OpenAISpeechClient(OpenAISpeechConfig(api_key="k", model="gpt-4o-transcribe"), session=session)

    client.synthesize("Hi", TTSSynthesisOptions(voice=None)).unwrap()
    assert session.calls[0][2]["json"]["model"] == "tts-1"
    assert session.calls[0][2]["json"]["voice"] == "alloy"
    client.transcribe(b"ID3mp3").unwrap()
    assert session.calls[1][2]["data"]["model"] == "gpt-4o-transcribe"


def test_blank_text_is_rejected_before_any_request():
    session = DummySession(DummyResponse())
    client = OpenAISpeechClient(OpenAISpeechConfig(api_key="k"), session=session)

    result = client.synthesize("   ")
    assert isinstance(result.error, ValidationError)
    assert session.calls == []

    result = client.transcribe(b"")
    assert isinstance(result.error, ValidationError)
    assert session.calls == []


def test_openai_transcribe_uploads_multipart_and_parses_segments():
    body = {
        "text": " hello world ",
        "language": "english",
        "duration": 1.25,
        "segments": [
            {"id": 0, "start": 0.0, "end": 0.6, "text": " hello", "tokens": [1, 2], "avg_logprob": -0.2},
            {"id": 1, "start": 0.6, "end": 1.25, "text": " world"},
        ],
    }
    session = DummySession(DummyResponse(json=body))
    client = OpenAISpeechClient(OpenAISpeechConfig(api_key="k"), session=session)

    options = ASRTranscriptionOptions(language="en", response_format="verbose_json")
    transcript = client.transcribe(WAV_CLIP, options).unwrap()

    method, url, kwargs = session.last_call
    assert url == "https://api.openai.com/v1/audio/transcriptions"
    assert kwargs["data"]["model"] == "whisper-1"
    assert kwargs["data"]["language"] == "en"
    assert kwargs["data"]["timestamp_granularities[]"] == ["word", "segment"]
    filename, payload, mime = kwargs["files"]["file"]
    assert (filename, mime) == ("audio.wav", "audio/wav")
    assert payload == WAV_CLIP

    assert transcript.text == "hello world"
    assert transcript.duration == 1.25
    assert [s.text for s in transcript.segments] == ["hello", "world"]
    assert transcript.segments[0].tokens == (1, 2)
    assert transcript.segments[0].avg_logprob == -0.2


def test_openai_plain_text_transcription():
    session = DummySession(DummyResponse(text="just text\n"))
    client = OpenAISpeechClient(OpenAISpeechConfig(api_key="k"), session=session)

    options = ASRTranscriptionOptions(response_format="text")
    transcript = client.transcribe(b"\xff\xfbmp3data", options).unwrap()

    assert transcript.text == "just text"
    assert "timestamp_granularities[]" not in session.last_call[2]["data"]
    assert session.last_call[2]["files"]["file"][0] == "audio.mp3"


def test_status_codes_map_to_error_variants():
    cases = [
        (DummyResponse(401, json={"error": {"message": "Invalid API key"}}), AuthenticationError),
        (DummyResponse(429, json={"error": "slow down"}, headers={"retry-after": "7"}), RateLimitError),
        (DummyResponse(400, json={"detail": "bad voice"}), ValidationError),
        (DummyResponse(500, text="upstream exploded"), ServiceError),
    ]
    for response, expected in cases:
        client = OpenAISpeechClient(OpenAISpeechConfig(api_key="k"), session=DummySession(response))
        result = client.synthesize("hello")
        assert isinstance(result.error, expected)

    client = OpenAISpeechClient(
        OpenAISpeechConfig(api_key="k"),
        session=DummySession(DummyResponse(429, json={"error": "slow"}, headers={"retry-after": "7"})),
    )
    assert client.synthesize("hello").error.retry_after == 7.0

    client = OpenAISpeechClient(
        OpenAISpeechConfig(api_key="k"), session=DummySession(DummyResponse(500, text="upstream exploded"))
    )
    error = client.synthesize("hello").error
    assert error.code == 500
    assert error.message == "HTTP 500: upstream exploded"


def test_connection_failures_become_unknown_errors():
    session = DummySession(requests.ConnectionError("connection refused"))
    client = OpenAISpeechClient(OpenAISpeechConfig(api_key="k"), session=session)

    result = client.synthesize("hello")
    assert isinstance(result.error, UnknownError)
    assert "connection refused" in result.error.message


# --------------------------------------------------------------------------- #
# Azure


def test_build_ssml_escapes_text_and_sets_rate():
    ssml = build_ssml("Fish & <chips>", "en-GB-RyanNeural", "en-GB", 1.2)
    assert "Fish &amp; &lt;chips&gt;" in ssml
    assert "name=\"en-GB-RyanNeural\"" in ssml
    assert "rate=\"+20%\"" in ssml


def test_azure_synthesize_uses_regional_endpoint():
    session = DummySession(DummyResponse(content=b"RIFFdata"))
    config = AzureSpeechConfig(api_key="az-key", region="westeurope", model="en-US-JennyNeural")
    client = AzureSpeechClient(config, session=session)

    response = client.synthesize("Hello", TTSSynthesisOptions(response_format="wav")).unwrap()

    method, url, kwargs = session.last_call
    assert url == "https://westeurope.tts.speech.microsoft.com/cognitiveservices/v1"
    assert kwargs["headers"]["Ocp-Apim-Subscription-Key"] == "az-key"
    assert kwargs["headers"]["X-Microsoft-OutputFormat"] == "riff-16khz-16bit-mono-pcm"
    assert b"en-US-JennyNeural" in kwargs["data"]
    assert response.format == "wav"


def test_azure_voice_option_overrides_configured_voice():
    session = DummySession(DummyResponse(content=b"RIFFdata"))
    client = AzureSpeechClient(AzureSpeechConfig(api_key="k", region="eastus"), session=session)

    client.synthesize("Hello", TTSSynthesisOptions(voice="en-GB-RyanNeural", response_format="wav")).unwrap()

    ssml = session.last_call[2]["data"]
    assert b'name="en-GB-RyanNeural"' in ssml
    assert b"en-US-JennyNeural" not in ssml


def test_azure_rejects_unknown_output_format():
    client = AzureSpeechClient(AzureSpeechConfig(api_key="k", region="r"), session=DummySession(DummyResponse()))
    result = client.synthesize("Hello", TTSSynthesisOptions(response_format="flac"))
    assert isinstance(result.error, ValidationError)


def test_azure_transcribe_parses_detailed_result():
    body = {
        "RecognitionStatus": "Success",
        "DisplayText": "Hello world.",
        "Offset": 5_000_000,
        "Duration": 15_000_000,
    }
    session = DummySession(DummyResponse(json=body))
    client = AzureSpeechClient(AzureSpeechConfig(api_key="k", region="eastus"), session=session)

    transcript = client.transcribe(WAV_CLIP, ASRTranscriptionOptions(language="en-GB")).unwrap()

    method, url, kwargs = session.last_call
    assert url == (
        "https://eastus.stt.speech.microsoft.com"
        "/speech/recognition/conversation/cognitiveservices/v1"
    )
    assert kwargs["params"] == {"language": "en-GB", "format": "detailed"}
    assert transcript.text == "Hello world."
    assert transcript.duration == 1.5
    assert (transcript.segments[0].start, transcript.segments[0].end) == (0.5, 2.0)


def test_azure_no_match_is_a_validation_error():
    session = DummySession(DummyResponse(json={"RecognitionStatus": "NoMatch"}))
    client = AzureSpeechClient(AzureSpeechConfig(api_key="k", region="eastus"), session=session)
    result = client.transcribe(WAV_CLIP)
    assert isinstance(result.error, ValidationError)


def test_azure_rejects_mp3_uploads():
    session = DummySession(DummyResponse())
    client = AzureSpeechClient(AzureSpeechConfig(api_key="k", region="eastus"), session=session)
    result = client.transcribe(b"ID3\x03\x00mp3")
    assert isinstance(result.error, ValidationError)
    assert session.calls == []


# --------------------------------------------------------------------------- #
# Google


def test_google_synthesize_decodes_audio_content():
    audio = b"\x00\x01\x02"
    session = DummySession(DummyResponse(json={"audioContent": base64.b64encode(audio).decode()}))
    client = GoogleSpeechClient(GoogleSpeechConfig(api_key="g-key"), session=session)

    response = client.synthesize(
        "Hello", TTSSynthesisOptions(voice="en-US-Neural2-C", response_format="wav", language="en-US")
    ).unwrap()

    method, url, kwargs = session.last_call
    assert url == "https://texttospeech.googleapis.com/v1/text:synthesize"
    assert kwargs["headers"]["X-Goog-Api-Key"] == "g-key"
    assert kwargs["json"]["voice"]["name"] == "en-US-Neural2-C"
    assert kwargs["json"]["audioConfig"]["audioEncoding"] == "LINEAR16"
    assert response.audio_data == audio


def test_google_default_options_leave_voice_name_to_service():
    session = DummySession(DummyResponse(json={"audioContent": ""}))
    client = GoogleSpeechClient(GoogleSpeechConfig(api_key="k"), session=session)
    client.synthesize("Hello")
    assert "name" not in session.last_call[2]["json"]["voice"]


def test_google_transcribe_collapses_words_into_segment():
    body = {
        "results": [
            {
                "alternatives": [
                    {
                        "transcript": "hello world",
                        "words": [
                            {"word": "hello", "startTime": "0.200s", "endTime": "0.600s"},
                            {"word": "world", "startTime": "0.700s", "endTime": "1.200s"},
                        ],
                    }
                ],
                "languageCode": "en-us",
            }
        ]
    }
    session = DummySession(DummyResponse(json=body))
    client = GoogleSpeechClient(GoogleSpeechConfig(api_key="k"), session=session)

    transcript = client.transcribe(pcm16([1, 2, 3, 4])).unwrap()

    config = session.last_call[2]["json"]["config"]
    assert config["encoding"] == "LINEAR16"
    assert config["sampleRateHertz"] == 16_000
    assert config["model"] == "latest"
    assert transcript.text == "hello world"
    assert transcript.language == "en-us"
    assert transcript.segments[0].start == 0.2
    assert transcript.segments[0].end == 1.2


def test_google_empty_results_are_validation_errors():
    client = GoogleSpeechClient(GoogleSpeechConfig(api_key="k"), session=DummySession(DummyResponse(json={})))
    result = client.transcribe(WAV_CLIP)
    assert result.error == ValidationError("No transcription results found")

    client = GoogleSpeechClient(
        GoogleSpeechConfig(api_key="k"),
        session=DummySession(DummyResponse(json={"results": [{"alternatives": []}]})),
    )
    assert client.transcribe(WAV_CLIP).error == ValidationError("No transcription alternatives found")


# --------------------------------------------------------------------------- #
# ElevenLabs


def test_elevenlabs_defaults_to_configured_model_and_stock_voice():
    session = DummySession(DummyResponse(content=b"\xff\xfb"))
    client = ElevenLabsClient(ElevenLabsConfig(api_key="el-key", model="eleven_turbo_v2"), session=session)

    response = client.synthesize("Hello world").unwrap()

    method, url, kwargs = session.last_call
    assert url == "https://api.elevenlabs.io/v1/text-to-speech/21m00Tcm4TlvDq8ikWAM"
    assert kwargs["params"] == {"output_format": "mp3_44100_128"}
    assert kwargs["headers"]["xi-api-key"] == "el-key"
    assert kwargs["json"]["model_id"] == "eleven_turbo_v2"
    assert kwargs["json"]["voice_settings"]["stability"] == 0.5
    assert response.duration is None


def test_elevenlabs_pcm_output_reports_duration():
    session = DummySession(DummyResponse(content=bytes(32_000)))
    client = ElevenLabsClient(ElevenLabsConfig(api_key="k"), session=session)

    options = TTSSynthesisOptions(voice="voice-123", model="eleven_multilingual_v2", response_format="pcm", speed=1.1)
    response = client.synthesize("Hello", options).unwrap()

    url, kwargs = session.last_call[1], session.last_call[2]
    assert url.endswith("/text-to-speech/voice-123")
    assert kwargs["params"] == {"output_format": "pcm_16000"}
    assert kwargs["json"]["voice_settings"]["speed"] == 1.1
    assert response.duration == 1.0


def test_elevenlabs_rejects_unsupported_format():
    session = DummySession(DummyResponse())
    client = ElevenLabsClient(ElevenLabsConfig(api_key="k"), session=session)
    result = client.synthesize("Hello", TTSSynthesisOptions(response_format="wav"))
    assert isinstance(result.error, ValidationError)
    assert session.calls == []


def test_sniff_container():
    assert sniff_container(WAV_CLIP) == "wav"
    assert sniff_container(b"ID3\x04") == "mp3"
    assert sniff_container(b"\xff\xfb\x90") == "mp3"
    assert sniff_container(b"OggS\x00") == "ogg"
    assert sniff_container(b"fLaC\x00") == "flac"
    assert sniff_container(b"\x01\x02\x03\x04") == "pcm"
