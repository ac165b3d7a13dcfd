"""Entry point to the Jin generation core tooling.

This source file contains the command line entry point. It is implemented in
the main() function.
"""

import json
import logging
import os
from argparse import ArgumentParser
from typing import Any, Optional

from pydantic import ValidationError
from rich import print_json
from rich.logging import RichHandler

import constants
from configuration import configuration
from log import get_logger, set_log_level
from models.deltas import parse_stream_delta
from streaming.accumulator import ResponseAccumulator

FORMAT = "%(message)s"
logging.basicConfig(
    level="INFO", format=FORMAT, datefmt="[%X]", handlers=[RichHandler()]
)

logger = get_logger(__name__)


def create_argument_parser() -> ArgumentParser:
    """Create and configure argument parser object.

    The parser includes these options:
    - -v / --verbose: enable verbose output
    - -d / --dump-configuration: dump the loaded configuration to JSON and exit
    - -c / --config: path to the configuration file (default "jin-generation.yaml")
    - -r / --replay: JSON lines transcript of stream deltas to fold and print

    Returns:
        Configured ArgumentParser for parsing the CLI options.
    """
    parser = ArgumentParser()
    parser.add_argument(
        "-v",
        "--verbose",
        dest="verbose",
        help="make it verbose",
        action="store_true",
        default=False,
    )
    parser.add_argument(
        "-d",
        "--dump-configuration",
        dest="dump_configuration",
        help="dump actual configuration into JSON file and quit",
        action="store_true",
        default=False,
    )
    parser.add_argument(
        "-c",
        "--config",
        dest="config_file",
        help=f"path to configuration file (default: {constants.DEFAULT_CONFIGURATION_FILE})",
        default=constants.DEFAULT_CONFIGURATION_FILE,
    )
    parser.add_argument(
        "-r",
        "--replay",
        dest="replay_file",
        help="fold a JSON lines transcript of stream deltas and print the result",
        default=None,
    )

    return parser


def replay_transcript(filename: str) -> dict[str, Any]:
    """Fold a recorded stream transcript into the final response.

    Every non-blank line holds one stream delta in its JSON form. Lines that
    can not be parsed are skipped with a warning, the same way a live stream
    ignores malformed events.

    Parameters:
        filename (str): Path to the JSON lines transcript.

    Returns:
        dict[str, Any]: JSON-serializable content parts, tool calls and
        search activities.
    """
    accumulator = ResponseAccumulator()
    with open(filename, encoding="utf-8") as fin:
        for line_number, line in enumerate(fin, start=1):
            if not line.strip():
                continue
            try:
                delta = parse_stream_delta(line)
            except (json.JSONDecodeError, ValidationError) as e:
                logger.warning("Skipping malformed delta on line %d: %s", line_number, e)
                continue
            accumulator.apply(delta)

    return {
        "content": [part.model_dump(mode="json") for part in accumulator.build_content_parts()],
        "tool_calls": [call.model_dump(mode="json") for call in accumulator.build_tool_calls()],
        "search_activities": [
            activity.model_dump(mode="json")
            for activity in accumulator.build_search_activities()
        ],
    }


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point to the command line tooling.

    Parses command-line arguments, loads the configured settings (defaults
    are used when the configuration file does not exist), and then:
    - If --dump-configuration is provided, writes the active configuration to
      configuration.json and exits (exits with status 1 on failure).
    - If --replay is provided, folds the transcript and prints the result as
      JSON.

    Raises:
        SystemExit: when configuration dumping fails (exits with status 1).
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if os.path.exists(args.config_file):
        configuration.load_configuration(args.config_file)
    else:
        logger.info("Configuration file %s not found, using defaults", args.config_file)
        configuration.init_from_dict({})

    set_log_level("DEBUG" if args.verbose else configuration.logging_configuration.level)
    logger.debug("Configuration: %s", configuration.configuration)

    # -d or --dump-configuration CLI flags are used to dump the actual configuration
    # to a JSON file w/o doing any other operation
    if args.dump_configuration:
        try:
            configuration.configuration.dump()
            logger.info("Configuration dumped to configuration.json")
        except Exception as e:
            logger.error("Failed to dump configuration: %s", e)
            raise SystemExit(1) from e
        return

    if args.replay_file is not None:
        print_json(data=replay_transcript(args.replay_file))
        return

    parser.print_help()


if __name__ == "__main__":
    main()
