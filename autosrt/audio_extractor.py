"""Handles audio extraction from video files using ffmpeg."""

import contextlib
import ffmpeg
import os
import logging
from .exceptions import MediaExtractionError, FileSystemError
from typing import Optional
from .utils import ensure_dir_exists, remove_file

logger = logging.getLogger(__name__)

class AudioExtractor:
    """Extracts the audio track of a video into a 16-bit linear PCM WAV file."""

    def __init__(self, ffmpeg_path: Optional[str] = None, channels: Optional[int] = 1, sample_rate_hz: Optional[int] = None):
        """
        Initializes the AudioExtractor.

        Args:
            ffmpeg_path: Optional path to the ffmpeg executable.
                         If None, assumes ffmpeg is in the system PATH.
            channels: Output channel count. 1 downmixes to mono, None keeps the source layout.
            sample_rate_hz: Output sample rate. None keeps the source rate.
        """
        self.ffmpeg_cmd = ffmpeg_path or 'ffmpeg'
        self.channels = channels
        self.sample_rate_hz = sample_rate_hz
        logger.info(f"Using ffmpeg command: {self.ffmpeg_cmd}")

    def _build_stream(self, video_filepath: str, output_audio_path: str):
        # vn=None renders as a bare -vn flag
        output_args = {'vn': None, 'acodec': 'pcm_s16le', 'f': 'wav'}
        if self.channels:
            output_args['ac'] = self.channels
        if self.sample_rate_hz:
            output_args['ar'] = self.sample_rate_hz
        return (
            ffmpeg
            .input(video_filepath)
            .output(output_audio_path, **output_args)
            .overwrite_output()
        )

    @contextlib.contextmanager
    def _ffmpeg_process(self, stream):
        """Runs ffmpeg and guarantees the process is reaped on every exit path."""
        process = ffmpeg.run_async(stream, cmd=self.ffmpeg_cmd, pipe_stdout=True, pipe_stderr=True)
        try:
            yield process
        finally:
            if process.poll() is None:
                logger.warning(f"Terminating ffmpeg process {process.pid}")
                process.kill()
                process.wait()

    def extract(self, video_filepath: str, output_audio_path: str) -> str:
        """
        Extracts the audio stream from a video file to a WAV file.

        Returns only once ffmpeg has exited and the output file is closed.

        Args:
            video_filepath: Path to the input video file.
            output_audio_path: Path of the WAV file to write.

        Returns:
            The path of the extracted audio file.

        Raises:
            MediaExtractionError: If the video is missing, has no audio stream,
                                  or ffmpeg fails to decode it.
            FileSystemError: If the output directory cannot be created/accessed.
        """
        logger.info(f"Starting audio extraction for: {video_filepath}")
        if not os.path.isfile(video_filepath):
            raise MediaExtractionError(f"Input video file not found: {video_filepath}")
        if not os.access(video_filepath, os.R_OK):
            raise MediaExtractionError(f"Input video file is not readable: {video_filepath}")

        output_dir = os.path.dirname(os.path.abspath(output_audio_path))
        ensure_dir_exists(output_dir)

        if os.path.exists(output_audio_path):
            logger.warning(f"Output audio file already exists, overwriting: {output_audio_path}")

        stream = self._build_stream(video_filepath, output_audio_path)
        logger.debug(f"ffmpeg arguments: {ffmpeg.get_args(stream)}")

        completed = False
        try:
            logger.info(f"Running ffmpeg to extract audio to {output_audio_path}...")
            with self._ffmpeg_process(stream) as process:
                _, stderr = process.communicate()
                returncode = process.returncode
            if returncode != 0:
                stderr_output = stderr.decode('utf-8', errors='replace').strip() if stderr else "No stderr output"
                logger.error(f"ffmpeg exited with code {returncode} for {video_filepath}")
                logger.error(f"ffmpeg stderr: {stderr_output}")
                raise MediaExtractionError(f"ffmpeg failed: {stderr_output}")
            if not os.path.isfile(output_audio_path):
                raise MediaExtractionError(f"ffmpeg reported success but wrote no file at {output_audio_path}")
            completed = True
            logger.info(f"Successfully extracted audio to: {output_audio_path}")
            return output_audio_path
        except (MediaExtractionError, FileSystemError):
            raise
        except OSError as e:
            logger.error(f"Could not launch ffmpeg '{self.ffmpeg_cmd}': {e}", exc_info=True)
            raise MediaExtractionError(f"Could not run ffmpeg: {e}") from e
        finally:
            if not completed:
                # Output of a failed or interrupted run is never valid
                remove_file(output_audio_path)
