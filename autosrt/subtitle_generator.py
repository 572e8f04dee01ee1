"""Orchestrates the subtitle generation pipeline."""

import logging
import os
import threading
import time
from typing import List, Optional

from .audio_extractor import AudioExtractor
from .sample_rate_probe import SampleRateProbe
from .transcriber import GoogleSpeechTranscriber, RetryingTranscriber, Transcriber, create_speech_client
from .cue_timer import DEFAULT_CUE_DURATION_MS, CueTimer
from .subtitle_formatter import SRTEncoder, SubtitleEncoder
from .models import PipelineResult, PipelineState, VideoAsset
from .exceptions import AutoSrtError, FileSystemError, MediaExtractionError, PipelineCancelledError
from .utils import artifact_paths, ensure_dir_exists, remove_file

logger = logging.getLogger(__name__)

class PipelineOrchestrator:
    """
    Runs extract -> probe -> transcribe -> time -> encode for one video at a time.

    Each stage finishes before the next one starts. A failing stage moves the
    run to FAILED and the remaining stages are skipped. The orchestrator holds
    no per-run state, so one instance can serve concurrent runs in separate
    threads as long as their videos have distinct names.
    """

    def __init__(
        self,
        audio_extractor: AudioExtractor,
        sample_rate_probe: SampleRateProbe,
        transcriber: Transcriber,
        cue_timer: CueTimer,
        subtitle_encoder: SubtitleEncoder,
        output_dir: Optional[str] = None,
        keep_audio: bool = True,
    ):
        """
        Args:
            audio_extractor: Writes the WAV track of the video.
            sample_rate_probe: Reads the sample rate of the WAV track.
            transcriber: Speech recognition, with its client already constructed.
            cue_timer: Assigns timestamps to transcript segments.
            subtitle_encoder: Serializes and writes the subtitle track.
            output_dir: Directory for the .wav and .srt files. Defaults to the
                        directory of each video.
            keep_audio: Keep the extracted WAV after a successful run.
        """
        self.audio_extractor = audio_extractor
        self.sample_rate_probe = sample_rate_probe
        self.transcriber = transcriber
        self.cue_timer = cue_timer
        self.subtitle_encoder = subtitle_encoder
        self.output_dir = output_dir
        self.keep_audio = keep_audio

    @staticmethod
    def _advance(history: List[PipelineState], state: PipelineState, cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise PipelineCancelledError(f"Pipeline cancelled before {state.value}")
        history.append(state)
        logger.info(f"Pipeline stage: {state.value}")

    @staticmethod
    def _read_audio(audio_path: str) -> bytes:
        try:
            with open(audio_path, 'rb') as f:
                return f.read()
        except OSError as e:
            raise MediaExtractionError(f"Extracted audio is not readable: {e}") from e

    def run(
        self,
        video: VideoAsset,
        cancel_event: Optional[threading.Event] = None,
    ) -> PipelineResult:
        """
        Executes the full subtitle generation pipeline for a single video.

        Args:
            video: The stored video. Output names are derived from its
                   original_filename; the file itself is only read.
            cancel_event: When set, the run stops before its next stage.

        Returns:
            A PipelineResult in state DONE (with the subtitle filename) or
            FAILED (with the error kind and message). Stage failures are
            never raised.
        """
        start_time = time.time()
        history = [PipelineState.RECEIVED]
        audio_path = None
        audio_written = False
        finished = False
        video_path = video.path
        logger.info(f"--- Starting subtitle pipeline for: {video_path} ({video.original_filename}) ---")

        try:
            output_dir = self.output_dir or os.path.dirname(os.path.abspath(video_path))
            ensure_dir_exists(output_dir)
            audio_path, subtitle_path = artifact_paths(video.original_filename, output_dir)
            if os.path.abspath(audio_path) == os.path.abspath(video_path):
                raise FileSystemError(f"Audio output would overwrite the input video: {audio_path}")

            # 1. Extract Audio
            self._advance(history, PipelineState.EXTRACTING, cancel_event)
            audio_written = True
            self.audio_extractor.extract(video_path, audio_path)

            # 2. Probe Sample Rate
            self._advance(history, PipelineState.PROBING, cancel_event)
            audio = self.sample_rate_probe.probe(audio_path)

            # 3. Transcribe
            self._advance(history, PipelineState.TRANSCRIBING, cancel_event)
            segments = self.transcriber.transcribe(self._read_audio(audio.path), audio.sample_rate_hz)

            # 4. Time Cues
            self._advance(history, PipelineState.TIMING, cancel_event)
            track = self.cue_timer.build_track(segments)

            # 5. Encode
            self._advance(history, PipelineState.ENCODING, cancel_event)
            self.subtitle_encoder.write(track, subtitle_path)

            history.append(PipelineState.DONE)
            finished = True
            logger.info(
                f"--- Subtitle pipeline completed successfully in {time.time() - start_time:.2f} seconds ---"
            )
            return PipelineResult(
                state=PipelineState.DONE,
                subtitle_file=os.path.basename(subtitle_path),
                subtitle_path=subtitle_path,
                cue_count=len(track),
                history=history,
            )

        except AutoSrtError as e:
            logger.error(f"Subtitle pipeline failed during {history[-1].value}: {e}", exc_info=False)
            return self._failure(history, type(e).__name__, str(e))
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred during subtitle generation: {e}", exc_info=True)
            return self._failure(history, AutoSrtError.__name__, f"An unexpected critical error occurred: {e}")
        finally:
            if audio_written and (not finished or not self.keep_audio):
                remove_file(audio_path)

    @staticmethod
    def _failure(history: List[PipelineState], kind: str, message: str) -> PipelineResult:
        history.append(PipelineState.FAILED)
        return PipelineResult(
            state=PipelineState.FAILED,
            error_kind=kind,
            error_message=message,
            history=history,
        )

def build_orchestrator(config: dict, speech_client=None, output_dir: Optional[str] = None) -> PipelineOrchestrator:
    """
    Wires the pipeline components from a configuration dictionary.

    Args:
        config: Settings as returned by ConfigLoader.load_config.
        speech_client: Speech client to inject. Created from the configured
                       credentials when None.
        output_dir: Overrides config['output_dir'].
    """
    if speech_client is None:
        speech_client = create_speech_client(config.get('google_credentials_file'))

    transcriber: Transcriber = GoogleSpeechTranscriber(
        speech_client,
        language_code=config.get('language_code', 'en-US'),
        timeout=config.get('transcription_timeout_seconds'),
    )
    max_attempts = config.get('max_attempts', 1)
    if max_attempts > 1:
        transcriber = RetryingTranscriber(
            transcriber,
            max_attempts=max_attempts,
            backoff_seconds=config.get('retry_backoff_seconds', 2.0),
        )

    return PipelineOrchestrator(
        audio_extractor=AudioExtractor(
            ffmpeg_path=config.get('ffmpeg_path'),
            channels=config.get('audio_channels', 1),
            sample_rate_hz=config.get('audio_sample_rate_hz'),
        ),
        sample_rate_probe=SampleRateProbe(ffprobe_path=config.get('ffprobe_path')),
        transcriber=transcriber,
        cue_timer=CueTimer(cue_duration_ms=config.get('cue_duration_ms', DEFAULT_CUE_DURATION_MS)),
        subtitle_encoder=SRTEncoder(),
        output_dir=output_dir or config.get('output_dir'),
        keep_audio=config.get('keep_audio', True),
    )
