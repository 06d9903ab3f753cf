"""
Command-line entry point.

    feed-percolator run pipeline.yaml --output merged.xml
"""

import argparse
import sys
from typing import Optional, Sequence

from feed_percolator import __version__
from feed_percolator.config import get_config, load_config_from_yaml, load_pipeline_settings, set_config
from feed_percolator.core.pipeline import PipelineEvaluator
from feed_percolator.exceptions import PercolatorError
from feed_percolator.logger import logger, setup_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feed-percolator",
        description="Merge syndication feeds into one filtered, deduplicated Atom feed",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run a pipeline definition once")
    run.add_argument("pipeline", help="Pipeline YAML file")
    run.add_argument("-o", "--output", help="Output path, overrides the pipeline file")
    run.add_argument("-c", "--config", help="Configuration YAML file")
    run.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return parser


def run(args: argparse.Namespace) -> int:
    """Run one pipeline.

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit code
    """
    try:
        if args.config:
            set_config(load_config_from_yaml(args.config))
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    setup_logger(level="DEBUG" if args.verbose else None)

    try:
        overrides = {"output": args.output} if args.output else {}
        settings = load_pipeline_settings(args.pipeline, **overrides)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid pipeline definition: {e}")
        return 1

    try:
        result = PipelineEvaluator.create(get_config()).execute(None, settings)
    except PercolatorError:
        return 1

    logger.info(f"Done: {result.unique} items")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "run":
        return run(args)
    return 1


if __name__ == "__main__":
    sys.exit(main())
