"""Reads stream metadata of extracted audio with ffprobe."""

import ffmpeg
import logging
import os
from typing import Optional

from .exceptions import MediaProbeError
from .models import AudioAsset

logger = logging.getLogger(__name__)

class SampleRateProbe:
    """Determines the sample rate of an audio file from its stream metadata."""

    def __init__(self, ffprobe_path: Optional[str] = None):
        self.ffprobe_cmd = ffprobe_path or 'ffprobe'

    def _audio_stream(self, audio_path: str) -> dict:
        if not os.path.isfile(audio_path):
            raise MediaProbeError(f"Audio file not found: {audio_path}")
        try:
            metadata = ffmpeg.probe(audio_path, cmd=self.ffprobe_cmd)
        except ffmpeg.Error as e:
            stderr_output = e.stderr.decode('utf-8', errors='replace').strip() if e.stderr else "No stderr output"
            logger.error(f"ffprobe failed for {audio_path}: {stderr_output}")
            raise MediaProbeError(f"ffprobe failed: {stderr_output}") from e
        except OSError as e:
            logger.error(f"Could not run ffprobe '{self.ffprobe_cmd}': {e}", exc_info=True)
            raise MediaProbeError(f"Could not run ffprobe: {e}") from e

        for stream in metadata.get('streams', []):
            if stream.get('codec_type') == 'audio':
                return stream
        raise MediaProbeError(f"No audio stream metadata in {audio_path}")

    def probe(self, audio_path: str) -> AudioAsset:
        """
        Probes an extracted audio file.

        Args:
            audio_path: Path to the audio file written by the extractor.

        Returns:
            An AudioAsset carrying the sample rate and channel count.

        Raises:
            MediaProbeError: If the file cannot be parsed or lacks audio stream metadata.
        """
        logger.info(f"Probing audio stream of: {audio_path}")
        stream = self._audio_stream(audio_path)
        try:
            sample_rate = int(stream['sample_rate'])
            channels = int(stream.get('channels') or 1)
            asset = AudioAsset(path=audio_path, sample_rate_hz=sample_rate, channels=channels)
        except (KeyError, TypeError, ValueError) as e:
            raise MediaProbeError(f"Invalid audio stream metadata in {audio_path}: {e}") from e
        logger.info(f"Audio stream: {asset.sample_rate_hz} Hz, {asset.channels} channel(s)")
        return asset

    def sample_rate(self, audio_path: str) -> int:
        """Returns the sample rate in Hertz."""
        return self.probe(audio_path).sample_rate_hz
