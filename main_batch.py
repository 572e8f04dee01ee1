#!/usr/bin/env python3
"""
AutoSrt Batch Processing Entry Point

Generates subtitles for every video in a directory. Each video is an
independent pipeline run with its own audio and subtitle files; runs
execute in parallel worker threads, ordered by size.
"""

import argparse
import logging
import os
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterable, List, Optional, Tuple

# Progress bar library
from tqdm import tqdm

from autosrt.cli import add_common_arguments, apply_overrides, load_config_or_defaults
from autosrt.log_setup import setup_logging
from autosrt.models import PipelineResult, VideoAsset
from autosrt.subtitle_generator import PipelineOrchestrator, build_orchestrator
from autosrt.exceptions import AutoSrtError, ConfigurationError, FileSystemError
from autosrt.utils import ensure_dir_exists

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".mp4", ".mov", ".mkv", ".avi", ".webm")

def find_and_sort_videos(input_dir: str, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> List[Tuple[str, int]]:
    """
    Finds video files in the input directory and sorts them by size.

    Args:
        input_dir: The directory to search for video files.
        extensions: File extensions to accept (case-insensitive).

    Returns:
        A list of (filepath, filesize) tuples, smallest first.

    Raises:
        FileNotFoundError: If the input directory doesn't exist.
        ValueError: If the input path is not a directory.
    """
    if not os.path.exists(input_dir):
        raise FileNotFoundError(f"Input directory not found: {input_dir}")
    if not os.path.isdir(input_dir):
        raise ValueError(f"Input path is not a directory: {input_dir}")

    suffixes = tuple(ext.lower() for ext in extensions)
    videos = []
    logger.info(f"Scanning directory for video files: {input_dir}")
    for filename in os.listdir(input_dir):
        if filename.lower().endswith(suffixes):
            filepath = os.path.join(input_dir, filename)
            try:
                if os.path.isfile(filepath):
                    videos.append((filepath, os.path.getsize(filepath)))
            except OSError as e:
                logger.warning(f"Could not access file {filepath}: {e}. Skipping.")

    videos.sort(key=lambda item: item[1])
    logger.info(f"Found {len(videos)} video files. Sorted by size (smallest first).")
    return videos

def drop_name_collisions(video_paths: List[str]) -> List[str]:
    """
    Keeps the first video for each base name.

    Outputs are named after the video (``name.wav``, ``name.srt``), so two
    videos sharing a base name would write the same files.
    """
    seen = set()
    unique = []
    for video_path in video_paths:
        base_name = os.path.splitext(os.path.basename(video_path))[0]
        if base_name in seen:
            logger.warning(f"Skipping {video_path}: another video already produces {base_name}.srt")
            continue
        seen.add(base_name)
        unique.append(video_path)
    return unique

def run_batch(
    orchestrator: PipelineOrchestrator,
    video_paths: List[str],
    max_workers: int = 2,
    cancel_event: Optional[threading.Event] = None,
) -> Dict[str, PipelineResult]:
    """
    Runs one pipeline per video on a thread pool.

    On KeyboardInterrupt, queued runs are dropped and running ones stop
    before their next stage; the interrupt is then re-raised.

    Returns:
        Results keyed by video path.
    """
    cancel_event = cancel_event or threading.Event()
    results = {}
    executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="autosrt")
    try:
        futures = {
            executor.submit(orchestrator.run, VideoAsset.from_path(video_path), cancel_event): video_path
            for video_path in video_paths
        }
        with tqdm(total=len(futures), unit="video", desc="Generating subtitles") as pbar:
            for future in as_completed(futures):
                video_path = futures[future]
                result = future.result()
                results[video_path] = result
                if result.succeeded:
                    logger.info(f"Subtitles for {os.path.basename(video_path)}: {result.subtitle_path}")
                else:
                    logger.error(f"Failed for {os.path.basename(video_path)} ({result.error_kind}): {result.error_message}")
                pbar.update(1)
    except KeyboardInterrupt:
        cancel_event.set()
        executor.shutdown(wait=True, cancel_futures=True)
        raise
    executor.shutdown(wait=True)
    return results

def run_batch_processing(argv: Optional[List[str]] = None, speech_client=None) -> int:
    """Parses arguments, sets up, and runs the batch subtitle generation."""
    parser = argparse.ArgumentParser(
        description="AutoSrt Batch: Generate SRT subtitles for all videos in a directory.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "-i", "--input-dir",
        required=True,
        help="Directory containing the input video files."
    )
    parser.add_argument(
        "-o", "--output-dir",
        default=None,
        help="Directory for generated files. Defaults to <input-dir>/Subs."
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None, # Default taken from config
        help="Number of videos processed in parallel."
    )
    parser.add_argument(
        "--extensions",
        nargs="+",
        default=list(DEFAULT_EXTENSIONS),
        help="Video file extensions to process."
    )
    add_common_arguments(parser)
    args = parser.parse_args(argv)

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    setup_logging(log_level=log_level, log_dir=None)

    try:
        config = load_config_or_defaults(args.config)
        if args.workers is not None:
            config['max_workers'] = args.workers
        config = apply_overrides(config, args)
    except (ConfigurationError, FileNotFoundError) as e:
        logger.critical(f"Failed to load configuration: {e}")
        return 1

    setup_logging(log_level=log_level, log_dir=config.get('log_dir'), log_file=config.get('log_file', 'autosrt.log'))

    try:
        videos = find_and_sort_videos(args.input_dir, args.extensions)
    except (FileNotFoundError, ValueError) as e:
        logger.critical(f"Input directory error: {e}")
        return 1
    if not videos:
        logger.warning(f"No video files found in {args.input_dir}. Exiting.")
        return 0

    output_dir = args.output_dir or config.get('output_dir') or os.path.join(args.input_dir, "Subs")
    try:
        ensure_dir_exists(output_dir)
        # Components are built once and shared by all worker threads
        orchestrator = build_orchestrator(config, speech_client=speech_client, output_dir=output_dir)
    except FileSystemError as e:
        logger.critical(f"Could not create output directory: {e}")
        return 1
    except AutoSrtError as e:
        logger.critical(f"Failed to initialize AutoSrt components: {e}")
        return 1

    video_paths = drop_name_collisions([path for path, _ in videos])
    total_files = len(video_paths)
    cancel_event = threading.Event()
    batch_start_time = time.time()
    logger.info(f"--- Starting Batch Subtitle Generation for {total_files} files ---")
    try:
        results = run_batch(orchestrator, video_paths, config['max_workers'], cancel_event)
    except KeyboardInterrupt:
        logger.warning("Batch process interrupted by user (Ctrl+C). Exiting.")
        return 1

    files_failed = sum(1 for result in results.values() if not result.succeeded)
    logger.info("--- Batch Subtitle Generation Finished ---")
    logger.info(f"Total time: {time.time() - batch_start_time:.2f} seconds")
    logger.info(f"Successfully processed: {total_files - files_failed}/{total_files} videos")
    logger.info(f"Failed: {files_failed}/{total_files} videos")
    return 1 if files_failed else 0

def main() -> None:
    sys.exit(run_batch_processing())

if __name__ == "__main__":
    main()
