"""Handles encoding subtitle tracks into subtitle files (SRT)."""

import logging
import os
from abc import ABC, abstractmethod
from datetime import timedelta

import srt

from .models import SubtitleCue, SubtitleTrack
from .exceptions import EncodingError
from .utils import format_time_srt, remove_file

logger = logging.getLogger(__name__)

class SubtitleEncoder(ABC):
    """Abstract base class for subtitle encoders."""

    extension = ""

    @abstractmethod
    def encode(self, track: SubtitleTrack) -> str:
        """Serializes a track into subtitle text."""
        pass

    @abstractmethod
    def decode(self, text: str) -> SubtitleTrack:
        """Parses subtitle text back into a track."""
        pass

    def write(self, track: SubtitleTrack, output_path: str) -> str:
        """
        Encodes the track and writes it to ``output_path``.

        The text goes to a temporary sibling file that is renamed into place,
        so a failed write never leaves a partial subtitle file behind.

        Returns:
            The path of the written file.

        Raises:
            EncodingError: If the file cannot be written.
        """
        content = self.encode(track)
        temp_path = f"{output_path}.part"
        logger.info(f"Writing {len(track)} cues to {output_path}")
        try:
            with open(temp_path, 'w', encoding='utf-8', newline='\n') as f:
                f.write(content)
            os.replace(temp_path, output_path)
        except OSError as e:
            logger.error(f"Failed to write subtitle file to {output_path}: {e}", exc_info=True)
            remove_file(temp_path)
            raise EncodingError(f"Could not write subtitle file: {e}") from e
        logger.info(f"Successfully wrote {len(track)} subtitle blocks to {output_path}")
        return output_path


class SRTEncoder(SubtitleEncoder):
    """Encodes subtitles in the SRT (SubRip Text) format."""

    extension = "srt"

    def encode(self, track: SubtitleTrack) -> str:
        blocks = []
        for cue in track:
            blocks.append(
                f"{cue.index}\n"
                f"{format_time_srt(cue.start_ms)} --> {format_time_srt(cue.end_ms)}\n"
                f"{cue.text}\n\n"
            )
        return "".join(blocks)

    def decode(self, text: str) -> SubtitleTrack:
        """
        Parses SRT text.

        Raises:
            EncodingError: If the text is not valid SRT or holds an invalid cue.
        """
        one_ms = timedelta(milliseconds=1)
        try:
            cues = tuple(
                SubtitleCue(
                    index=subtitle.index,
                    start_ms=subtitle.start // one_ms,
                    end_ms=subtitle.end // one_ms,
                    text=subtitle.content,
                )
                for subtitle in srt.parse(text)
            )
        except (srt.SRTParseError, ValueError) as e:
            raise EncodingError(f"Invalid SRT content: {e}") from e
        return SubtitleTrack(cues=cues)

    def read(self, subtitle_path: str) -> SubtitleTrack:
        """Reads and parses an SRT file."""
        try:
            with open(subtitle_path, 'r', encoding='utf-8') as f:
                return self.decode(f.read())
        except OSError as e:
            raise EncodingError(f"Could not read subtitle file {subtitle_path}: {e}") from e
