"""Utility functions for AutoSrt."""

import os
import logging
from typing import Optional, Tuple
from .exceptions import FileSystemError

logger = logging.getLogger(__name__)

MS_PER_HOUR = 3600000
MS_PER_MINUTE = 60000
MS_PER_SECOND = 1000

def ensure_dir_exists(dir_path: str) -> None:
    """
    Ensures that a directory exists. Creates it if it doesn't.

    Args:
        dir_path: The path to the directory.

    Raises:
        FileSystemError: If the directory cannot be created due to permissions
                         or if the path exists but is not a directory.
    """
    if not dir_path:
        raise ValueError("Directory path cannot be empty.")
    try:
        if not os.path.exists(dir_path):
            os.makedirs(dir_path, exist_ok=True)
            logger.info(f"Created directory: {dir_path}")
        elif not os.path.isdir(dir_path):
            raise FileSystemError(f"Path exists but is not a directory: {dir_path}")
    except OSError as e:
        logger.error(f"Error creating or accessing directory {dir_path}: {e}", exc_info=True)
        raise FileSystemError(f"Could not create or access directory {dir_path}: {e}") from e

def format_time_srt(milliseconds: int) -> str:
    """
    Formats integer milliseconds into SRT time format HH:MM:SS,mmm.

    Args:
        milliseconds: Time in milliseconds. Negative values clamp to zero.

    Returns:
        Formatted time string.
    """
    if milliseconds < 0:
        milliseconds = 0
    hrs, milliseconds = divmod(milliseconds, MS_PER_HOUR)
    mins, milliseconds = divmod(milliseconds, MS_PER_MINUTE)
    secs, milliseconds = divmod(milliseconds, MS_PER_SECOND)
    return f"{hrs:02d}:{mins:02d}:{secs:02d},{milliseconds:03d}"

def artifact_paths(original_filename: str, output_dir: str) -> Tuple[str, str]:
    """
    Derives the audio and subtitle paths for an uploaded video.

    ``name.ext`` becomes ``name.wav`` and ``name.srt`` inside ``output_dir``.

    Returns:
        (audio_path, subtitle_path)
    """
    base_name = os.path.splitext(os.path.basename(original_filename))[0]
    if not base_name:
        raise ValueError(f"Cannot derive an output name from '{original_filename}'")
    return (
        os.path.join(output_dir, f"{base_name}.wav"),
        os.path.join(output_dir, f"{base_name}.srt"),
    )

def remove_file(file_path: Optional[str]) -> bool:
    """Removes a file if present. Returns True when something was deleted."""
    if not file_path or not os.path.exists(file_path):
        return False
    try:
        os.remove(file_path)
        logger.info(f"Removed file: {file_path}")
        return True
    except OSError as e:
        logger.warning(f"Could not remove file {file_path}: {e}")
        return False
