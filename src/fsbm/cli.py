"""
Command-line entry point.

Usage:
    fsbm --input video.yuv --frames 2
    fsbm --config qcif.json --trace trace.log -v
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import RunConfig
from .errors import FSBMError
from .pipeline import run_files

logger = logging.getLogger(__name__)

# CLI flag -> config key
OVERRIDES = {
    "frames": "frame_count",
    "block_size": "block_size",
    "search_range": "search_range",
    "line_max": "line_max",
    "col_max": "col_max",
    "input": "video_path",
    "results": "results_path",
    "trace": "trace_path",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fsbm",
        description="Full-Search Block-Matching motion estimation with frame-memory tracing",
    )
    parser.add_argument("--config", help="JSON file with run configuration")
    parser.add_argument("--frames", type=int, help="Number of frames to search (after the reference frame)")
    parser.add_argument("--block-size", type=int, help="Macroblock size M")
    parser.add_argument("--search-range", type=int, help="Maximum displacement p")
    parser.add_argument("--line-max", type=int, help="Macroblock rows")
    parser.add_argument("--col-max", type=int, help="Macroblock columns")
    parser.add_argument("--input", help="Raw YUV 4:2:0 input file")
    parser.add_argument("--results", help="Motion-vector results log")
    parser.add_argument("--trace", help="Frame-memory trace file")
    parser.add_argument("--no-trace", action="store_true", help="Count accesses without writing a trace file")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v for progress, -vv for debug")
    return parser


def config_from_args(args: argparse.Namespace) -> RunConfig:
    """Merge config file values with explicit CLI flags (flags win)."""
    data = RunConfig.from_json(args.config).to_dict() if args.config else {}
    for flag, key in OVERRIDES.items():
        value = getattr(args, flag)
        if value is not None:
            data[key] = value
    if args.no_trace:
        data["trace_path"] = None
    return RunConfig.from_dict(data)


def _configure_logging(verbosity: int):
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = config_from_args(args)
        run_files(config)
    except (FSBMError, OSError) as e:
        logger.error(f"Run aborted: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    print("*" * 51)
    print(f"Done! Simulation results have been successfully written to file: {config.results_path}.\n\n")


if __name__ == "__main__":
    main()
