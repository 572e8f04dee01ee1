"""Handles Speech-to-Text transcription using Google Cloud Speech."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import speech

from .models import TranscriptSegment
from .exceptions import TranscriptionServiceError

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.ResourceExhausted,
    google_exceptions.InternalServerError,
    google_exceptions.RetryError,
)

class Transcriber(ABC):
    """Abstract base class for transcription services."""

    @abstractmethod
    def transcribe(self, audio_content: bytes, sample_rate_hz: int) -> List[TranscriptSegment]:
        """
        Transcribes linear PCM audio.

        Args:
            audio_content: Full byte content of the audio file.
            sample_rate_hz: Sample rate of the audio, as probed.

        Returns:
            Segments in the order the service returned them. May be empty.

        Raises:
            TranscriptionServiceError: If the service call fails.
        """
        pass

def create_speech_client(credentials_file: Optional[str] = None) -> speech.SpeechClient:
    """
    Builds the speech client that is injected into the transcriber.

    Args:
        credentials_file: Optional service account JSON key. If None,
                          application default credentials are used.

    Raises:
        TranscriptionServiceError: If credentials cannot be loaded.
    """
    try:
        if credentials_file:
            logger.info(f"Creating speech client from service account file: {credentials_file}")
            return speech.SpeechClient.from_service_account_file(credentials_file)
        logger.info("Creating speech client with application default credentials")
        return speech.SpeechClient()
    except (auth_exceptions.GoogleAuthError, OSError, ValueError) as e:
        logger.error(f"Failed to create speech client: {e}", exc_info=True)
        raise TranscriptionServiceError(f"Could not authenticate with the speech service: {e}") from e

class GoogleSpeechTranscriber(Transcriber):
    """Issues one synchronous recognize request per pipeline run."""

    def __init__(self, client, language_code: str = "en-US", timeout: Optional[float] = None):
        """
        Args:
            client: A ``speech.SpeechClient`` (or any object with the same ``recognize``).
            language_code: BCP-47 language of the speech.
            timeout: Optional request timeout in seconds.
        """
        self.client = client
        self.language_code = language_code
        self.timeout = timeout

    def _build_request(self, audio_content: bytes, sample_rate_hz: int):
        config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=sample_rate_hz,
            language_code=self.language_code,
        )
        # The client library encodes the content for transport
        audio = speech.RecognitionAudio(content=audio_content)
        return config, audio

    def transcribe(self, audio_content: bytes, sample_rate_hz: int) -> List[TranscriptSegment]:
        logger.info(
            f"Sending {len(audio_content)} bytes of LINEAR16 audio at {sample_rate_hz} Hz "
            f"for recognition ({self.language_code})"
        )
        config, audio = self._build_request(audio_content, sample_rate_hz)
        kwargs = {"config": config, "audio": audio}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        try:
            response = self.client.recognize(**kwargs)
        except TRANSIENT_ERRORS as e:
            logger.error(f"Transient speech service failure: {e}")
            raise TranscriptionServiceError(f"Speech service unavailable: {e}", retryable=True) from e
        except google_exceptions.GoogleAPIError as e:
            logger.error(f"Speech service request failed: {e}", exc_info=True)
            raise TranscriptionServiceError(f"Speech recognition failed: {e}") from e
        except auth_exceptions.GoogleAuthError as e:
            logger.error(f"Speech service authentication failed: {e}")
            raise TranscriptionServiceError(f"Speech service authentication failed: {e}") from e

        segments = []
        for result in response.results:
            if not result.alternatives:
                logger.debug("Skipping result without alternatives")
                continue
            # Alternatives are ranked, the first one is the most likely
            text = result.alternatives[0].transcript.strip()
            if not text:
                logger.debug("Skipping blank transcript")
                continue
            segments.append(TranscriptSegment(text=text))

        if not segments:
            logger.warning("Speech service returned no transcript (no speech detected).")
        else:
            logger.info(f"Received {len(segments)} transcript segments.")
        return segments

class RetryingTranscriber(Transcriber):
    """Retries transient failures of another transcriber with exponential backoff."""

    def __init__(
        self,
        inner: Transcriber,
        max_attempts: int = 3,
        backoff_seconds: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.inner = inner
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.sleep = sleep

    def transcribe(self, audio_content: bytes, sample_rate_hz: int) -> List[TranscriptSegment]:
        for attempt in range(1, self.max_attempts + 1):
            try:
                return self.inner.transcribe(audio_content, sample_rate_hz)
            except TranscriptionServiceError as e:
                if not e.retryable or attempt == self.max_attempts:
                    raise
                wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                logger.warning(
                    f"Transcription attempt {attempt}/{self.max_attempts} failed: {e}. "
                    f"Retrying in {wait_time:.1f}s..."
                )
                self.sleep(wait_time)
