"""Data models for AutoSrt."""

import enum
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

LINEAR16 = "LINEAR16"


@dataclass(frozen=True)
class VideoAsset:
    """An uploaded video owned by the caller. Outputs are named after original_filename."""
    path: str
    original_filename: str

    def __post_init__(self):
        if not self.path:
            raise ValueError("Video path must not be empty")
        if not self.original_filename:
            raise ValueError(f"Video {self.path} has no original filename")

    @classmethod
    def from_path(cls, path: str, original_filename: Optional[str] = None) -> "VideoAsset":
        """Builds an asset named after the stored file unless an upload name is given."""
        return cls(path=path, original_filename=original_filename or os.path.basename(path))


@dataclass(frozen=True)
class AudioAsset:
    """Extracted audio, with the stream metadata needed for transcription."""
    path: str
    sample_rate_hz: int
    channels: int = 1
    encoding: str = LINEAR16

    def __post_init__(self):
        if self.sample_rate_hz <= 0:
            raise ValueError(f"sample_rate_hz must be positive, got {self.sample_rate_hz}")
        if self.channels <= 0:
            raise ValueError(f"channels must be positive, got {self.channels}")


@dataclass(frozen=True)
class TranscriptSegment:
    """One unit of recognized text, in provider order, without timing."""
    text: str


@dataclass(frozen=True)
class SubtitleCue:
    """A single timed subtitle entry."""
    index: int
    start_ms: int
    end_ms: int
    text: str

    def __post_init__(self):
        if self.index < 1:
            raise ValueError(f"Cue index must start at 1, got {self.index}")
        if self.start_ms < 0:
            raise ValueError(f"Cue {self.index} starts before zero: {self.start_ms}")
        if self.end_ms <= self.start_ms:
            raise ValueError(
                f"Cue {self.index} must end after it starts ({self.start_ms} -> {self.end_ms})"
            )


@dataclass(frozen=True)
class SubtitleTrack:
    """Ordered, immutable sequence of cues."""
    cues: Tuple[SubtitleCue, ...] = ()

    def __len__(self) -> int:
        return len(self.cues)

    def __iter__(self):
        return iter(self.cues)

    @property
    def texts(self) -> List[str]:
        return [cue.text for cue in self.cues]

    def is_contiguous(self) -> bool:
        """True when every cue ends exactly where the next one starts."""
        for current, following in zip(self.cues, self.cues[1:]):
            if current.end_ms != following.start_ms:
                return False
            if following.start_ms < current.start_ms:
                return False
        return True


class PipelineState(enum.Enum):
    RECEIVED = "received"
    EXTRACTING = "extracting"
    PROBING = "probing"
    TRANSCRIBING = "transcribing"
    TIMING = "timing"
    ENCODING = "encoding"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.DONE, PipelineState.FAILED)


@dataclass
class PipelineResult:
    """Outcome of one pipeline run, as handed back to the caller."""
    state: PipelineState
    subtitle_file: Optional[str] = None
    subtitle_path: Optional[str] = None
    error_kind: Optional[str] = None
    error_message: Optional[str] = None
    cue_count: int = 0
    history: List[PipelineState] = field(default_factory=list)

    def __post_init__(self):
        if not self.state.is_terminal:
            raise ValueError(f"A pipeline result needs a terminal state, got {self.state.value}")

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.DONE

    def to_payload(self) -> Dict[str, str]:
        """Response body for the HTTP layer."""
        if self.succeeded:
            return {"subtitleFile": self.subtitle_file}
        return {"error": self.error_message or "Failed to generate subtitles"}
