"""Command-Line Interface handler for AutoSrt."""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from .config_loader import ConfigLoader, default_config, validate_config
from .log_setup import setup_logging
from .subtitle_generator import build_orchestrator
from .models import VideoAsset
from .exceptions import AutoSrtError, ConfigurationError

logger = logging.getLogger(__name__) # Get logger for this module

DEFAULT_CONFIG_PATH = "config.yaml"

def load_config_or_defaults(config_path: str) -> dict:
    """
    Loads the config file, falling back to defaults when the default path is absent.

    Raises:
        FileNotFoundError: If a non-default config path does not exist.
        ConfigurationError: If the file is invalid.
    """
    if config_path == DEFAULT_CONFIG_PATH and not os.path.exists(config_path):
        logger.info(f"No {DEFAULT_CONFIG_PATH} found, using built-in defaults.")
        return default_config()
    return ConfigLoader().load_config(config_path)

def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Arguments shared by the single-video and batch entry points."""
    parser.add_argument(
        "-c", "--config",
        default=DEFAULT_CONFIG_PATH,
        help="Path to the configuration YAML file. Built-in defaults are used if the default file is missing."
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level for console and file output."
    )
    parser.add_argument(
        "--language-code",
        default=None, # Default taken from config
        help="Override the speech language (BCP-47, e.g. en-US) specified in config."
    )
    parser.add_argument(
        "--cue-duration-ms",
        type=int,
        default=None, # Default taken from config
        help="Override the duration assigned to each subtitle cue."
    )

def apply_overrides(config: dict, args: argparse.Namespace) -> dict:
    """Copies CLI overrides into the config and re-validates it."""
    if args.language_code:
        logger.info(f"Overriding language_code from config with CLI argument: {args.language_code}")
        config['language_code'] = args.language_code
    if args.cue_duration_ms is not None:
        logger.info(f"Overriding cue_duration_ms from config with CLI argument: {args.cue_duration_ms}")
        config['cue_duration_ms'] = args.cue_duration_ms
    return validate_config(config)

class CLIHandler:
    """Parses arguments and runs the subtitle pipeline for one video."""

    def __init__(self, speech_client=None):
        self.parser = self._create_parser()
        self.speech_client = speech_client

    def _create_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        parser = argparse.ArgumentParser(
            description="AutoSrt: Generate an SRT subtitle file for a video using cloud speech recognition.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter # Show defaults in help
        )
        parser.add_argument(
            "-v", "--video",
            required=True,
            help="Path to the input video file."
        )
        parser.add_argument(
            "-o", "--output-dir",
            default=None,
            help="Directory for the generated .wav and .srt files. Defaults to the config value, then the video's directory."
        )
        parser.add_argument(
            "--original-filename",
            default=None,
            help="Name the video was uploaded under, used to name the outputs."
        )
        add_common_arguments(parser)
        return parser

    def run(self, argv: Optional[List[str]] = None) -> int:
        """
        Parses arguments, sets up logging, loads config, and runs the pipeline.

        The pipeline result payload is printed to stdout as JSON.

        Returns:
            0 on success, 1 on a pipeline or configuration failure, 2 on an
            unexpected error.
        """
        args = self.parser.parse_args(argv)

        log_level = getattr(logging, args.log_level.upper(), logging.INFO)
        # Console only until the config says where the log file goes
        setup_logging(log_level=log_level, log_dir=None)

        try:
            config = apply_overrides(load_config_or_defaults(args.config), args)
        except (ConfigurationError, FileNotFoundError) as e:
            logger.critical(f"Failed to load configuration from {args.config}: {e}")
            return 1

        setup_logging(log_level=log_level, log_dir=config.get('log_dir'), log_file=config.get('log_file', 'autosrt.log'))

        if not os.path.isfile(args.video):
            logger.critical(f"Input video file not found or is not a file: {args.video}")
            print(json.dumps({"error": f"Video not found: {args.video}"}))
            return 1

        try:
            logger.info("Initializing AutoSrt components...")
            orchestrator = build_orchestrator(config, speech_client=self.speech_client, output_dir=args.output_dir)
            result = orchestrator.run(VideoAsset.from_path(args.video, args.original_filename))
        except AutoSrtError as e:
            logger.error(f"An AutoSrt error occurred: {e}")
            print(json.dumps({"error": str(e)}))
            return 1
        except KeyboardInterrupt:
            logger.warning("Process interrupted by user (Ctrl+C). Exiting.")
            return 1
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
            return 2

        if result.succeeded:
            logger.info(f"AutoSrt finished successfully: {result.subtitle_path}")
        else:
            logger.error(f"AutoSrt failed ({result.error_kind}): {result.error_message}")
        print(json.dumps(result.to_payload()))
        return 0 if result.succeeded else 1

def main() -> None:
    sys.exit(CLIHandler().run())
