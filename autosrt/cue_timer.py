"""Assigns timestamps to transcript segments."""

import logging
from typing import Iterable

from .models import SubtitleCue, SubtitleTrack, TranscriptSegment

logger = logging.getLogger(__name__)

DEFAULT_CUE_DURATION_MS = 2000

class CueTimer:
    """
    Fixed-duration timing: every segment gets the same duration and starts
    where the previous one ended, beginning at zero.

    This only reflects segment order, not when the words were spoken. The
    speech service can return word time offsets; they are not used here.
    """

    def __init__(self, cue_duration_ms: int = DEFAULT_CUE_DURATION_MS):
        if not isinstance(cue_duration_ms, int) or isinstance(cue_duration_ms, bool) or cue_duration_ms <= 0:
            raise ValueError(f"cue_duration_ms must be a positive integer, got {cue_duration_ms!r}")
        self.cue_duration_ms = cue_duration_ms

    def build_track(self, segments: Iterable[TranscriptSegment]) -> SubtitleTrack:
        cues = []
        start_ms = 0
        for index, segment in enumerate(segments, start=1):
            end_ms = start_ms + self.cue_duration_ms
            cues.append(SubtitleCue(index=index, start_ms=start_ms, end_ms=end_ms, text=segment.text))
            start_ms = end_ms
        logger.info(f"Timed {len(cues)} cues at {self.cue_duration_ms} ms each.")
        return SubtitleTrack(cues=tuple(cues))
