"""
Tests for the Transcriber module.
"""

from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as google_exceptions
from google.cloud import speech

from autosrt.exceptions import TranscriptionServiceError
from autosrt.models import TranscriptSegment
from autosrt.transcriber import GoogleSpeechTranscriber, RetryingTranscriber, Transcriber, create_speech_client


class TestGoogleSpeechTranscriber:

    def test_sends_linear16_request(self, speech_client):
        GoogleSpeechTranscriber(speech_client, language_code="en-GB").transcribe(b"\x01\x02", 48000)
        kwargs = speech_client.recognize.call_args.kwargs
        config, audio = kwargs["config"], kwargs["audio"]
        assert config.encoding == speech.RecognitionConfig.AudioEncoding.LINEAR16
        assert config.sample_rate_hertz == 48000
        assert config.language_code == "en-GB"
        assert audio.content == b"\x01\x02"
        assert "timeout" not in kwargs

    def test_single_request_per_call(self, speech_client):
        GoogleSpeechTranscriber(speech_client).transcribe(b"", 16000)
        assert speech_client.recognize.call_count == 1

    def test_passes_timeout(self, speech_client):
        GoogleSpeechTranscriber(speech_client, timeout=30.0).transcribe(b"", 16000)
        assert speech_client.recognize.call_args.kwargs["timeout"] == 30.0

    def test_keeps_order_and_strips_text(self, speech_client):
        segments = GoogleSpeechTranscriber(speech_client).transcribe(b"", 16000)
        assert segments == [TranscriptSegment("hello"), TranscriptSegment("world"), TranscriptSegment("test")]

    def test_uses_top_alternative_only(self, speech_response):
        client = MagicMock()
        client.recognize.return_value = speech_response(["best guess", "second guess"], ["next", "other"])
        segments = GoogleSpeechTranscriber(client).transcribe(b"", 16000)
        assert [s.text for s in segments] == ["best guess", "next"]

    def test_skips_empty_results(self, speech_response):
        client = MagicMock()
        client.recognize.return_value = speech_response("one", None, "   ", "two")
        segments = GoogleSpeechTranscriber(client).transcribe(b"", 16000)
        assert [s.text for s in segments] == ["one", "two"]

    def test_no_speech_is_not_an_error(self, speech_response):
        client = MagicMock()
        client.recognize.return_value = speech_response()
        assert GoogleSpeechTranscriber(client).transcribe(b"", 16000) == []

    @pytest.mark.parametrize("error", [
        google_exceptions.ServiceUnavailable("connection reset"),
        google_exceptions.DeadlineExceeded("timed out"),
        google_exceptions.ResourceExhausted("quota"),
    ])
    def test_transient_errors_are_retryable(self, error):
        client = MagicMock()
        client.recognize.side_effect = error
        with pytest.raises(TranscriptionServiceError) as excinfo:
            GoogleSpeechTranscriber(client).transcribe(b"", 16000)
        assert excinfo.value.retryable

    @pytest.mark.parametrize("error", [
        google_exceptions.Unauthenticated("bad credentials"),
        google_exceptions.PermissionDenied("no access"),
        google_exceptions.InvalidArgument("sample rate mismatch"),
    ])
    def test_permanent_errors(self, error):
        client = MagicMock()
        client.recognize.side_effect = error
        with pytest.raises(TranscriptionServiceError) as excinfo:
            GoogleSpeechTranscriber(client).transcribe(b"", 16000)
        assert not excinfo.value.retryable


class FlakyTranscriber(Transcriber):

    def __init__(self, failures, retryable=True):
        self.failures = failures
        self.retryable = retryable
        self.calls = 0

    def transcribe(self, audio_content, sample_rate_hz):
        self.calls += 1
        if self.calls <= self.failures:
            raise TranscriptionServiceError("boom", retryable=self.retryable)
        return [TranscriptSegment("ok")]


class TestRetryingTranscriber:

    def test_retries_transient_failures_with_backoff(self):
        inner = FlakyTranscriber(failures=2)
        sleeps = []
        transcriber = RetryingTranscriber(inner, max_attempts=3, backoff_seconds=1.0, sleep=sleeps.append)
        assert transcriber.transcribe(b"", 16000) == [TranscriptSegment("ok")]
        assert inner.calls == 3
        assert sleeps == [1.0, 2.0]

    def test_gives_up_after_max_attempts(self):
        inner = FlakyTranscriber(failures=5)
        transcriber = RetryingTranscriber(inner, max_attempts=2, sleep=lambda s: None)
        with pytest.raises(TranscriptionServiceError):
            transcriber.transcribe(b"", 16000)
        assert inner.calls == 2

    def test_does_not_retry_permanent_failures(self):
        inner = FlakyTranscriber(failures=1, retryable=False)
        transcriber = RetryingTranscriber(inner, max_attempts=3, sleep=lambda s: None)
        with pytest.raises(TranscriptionServiceError):
            transcriber.transcribe(b"", 16000)
        assert inner.calls == 1

    def test_single_attempt_baseline(self):
        inner = FlakyTranscriber(failures=1)
        with pytest.raises(TranscriptionServiceError):
            RetryingTranscriber(inner, max_attempts=1, sleep=lambda s: None).transcribe(b"", 16000)
        assert inner.calls == 1

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryingTranscriber(FlakyTranscriber(0), max_attempts=0)


class TestCreateSpeechClient:

    def test_missing_credentials_file(self, tmp_path):
        with pytest.raises(TranscriptionServiceError):
            create_speech_client(str(tmp_path / "missing-key.json"))
