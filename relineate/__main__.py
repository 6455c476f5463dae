"""
relineate CLI

Convert reMarkable v5 .rm files to SVG (or PDF).

Usage:
    relineate -i <input.rm> [-o output.svg] [-v]
    relineate -i samples/*.rm -o output/ -j 4
    relineate -i page.rm -o page.pdf --background notebook.pdf --page 2
"""

from __future__ import annotations

import argparse
import logging
import sys
from multiprocessing import Pool
from pathlib import Path
from typing import Optional

from . import __version__
from .parser import FormatError, analyze_file, parse_file
from .config import ConfigError, RenderConfig, load_config
from .svg import render_to_file
from .pdf_export import export_pdf


logger = logging.getLogger("relineate")

LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert reMarkable v5 .rm files to SVG",
        prog="relineate"
    )
    parser.add_argument(
        "-i", "--input",
        nargs="+",
        type=Path,
        required=True,
        help="Input .rm file(s)"
    )
    parser.add_argument(
        "-o", "--output",
        help="Output file, directory for several inputs, or - for stdout "
             "(default: same name as input with .svg extension)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug)"
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        help="TOML file with canvas, render and palette settings"
    )
    parser.add_argument(
        "--format",
        choices=["svg", "pdf"],
        help="Output format (default: from output extension)"
    )
    parser.add_argument(
        "--smooth",
        action="store_true",
        default=None,
        help="Draw quadratic curves through point midpoints"
    )
    parser.add_argument("--width", type=float, help="SVG canvas width")
    parser.add_argument("--height", type=float, help="SVG canvas height")
    parser.add_argument(
        "--background",
        type=Path,
        help="PDF to draw the strokes on (implies --format pdf)"
    )
    parser.add_argument(
        "--page",
        type=int,
        help="Page of the background PDF to draw on (0-based)"
    )
    parser.add_argument(
        "-j", "--jobs",
        type=int,
        default=1,
        help="Convert several inputs in parallel"
    )
    parser.add_argument(
        "--analyze",
        action="store_true",
        help="Analyze file(s) without converting"
    )
    return parser


def setup_logging(verbosity: int) -> None:
    level = LOG_LEVELS[min(verbosity, len(LOG_LEVELS) - 1)]
    logging.basicConfig(level=level, format="[%(levelname)s]: %(message)s", stream=sys.stderr)


def describe_error(error: Exception) -> str:
    """One-line message naming the failure kind."""
    if isinstance(error, FormatError):
        return f"{error.kind}: {error}"
    if isinstance(error, ConfigError):
        return f"Config: {error}"
    if isinstance(error, OSError):
        return f"{error.strerror or error}: {error.filename}"
    return str(error)


def output_format(args: argparse.Namespace, output: Optional[str]) -> str:
    if args.format:
        return args.format
    if args.background is not None:
        return "pdf"
    if output and output != "-" and Path(output).suffix.lower() == ".pdf":
        return "pdf"
    return "svg"


def convert_file(input_file: Path, output_file: str, fmt: str, config: RenderConfig,
                 background: Optional[Path] = None) -> int:
    """Convert one file. Returns its stroke count."""
    doc = parse_file(input_file)
    logger.info("Parsed %s: %d layers, %d strokes", input_file.name,
                len(doc.layers), doc.stroke_count)
    if fmt == "pdf":
        export_pdf(doc, Path(output_file), config, background)
    else:
        render_to_file(doc, output_file, config)
    return doc.stroke_count


def _convert_worker(item: tuple) -> tuple[Path, str, Optional[int], Optional[str]]:
    """Worker function for multiprocessing. PyMuPDF is not thread-safe, hence process pool."""
    input_file, output_file, fmt, config, background = item
    try:
        count = convert_file(input_file, output_file, fmt, config, background)
    except (FormatError, ConfigError, OSError, ValueError) as e:
        return input_file, output_file, None, describe_error(e)
    return input_file, output_file, count, None


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    missing = [p for p in args.input if not p.is_file()]
    for path in missing:
        print(f"error: input file does not exist: {path}", file=sys.stderr)
    if missing:
        return 1

    # Analyze mode
    if args.analyze:
        for input_file in args.input:
            try:
                analyze_file(input_file)
            except FormatError as e:
                print(f"error: {describe_error(e)}", file=sys.stderr)
                return 1
            print()
        return 0

    try:
        config = load_config(args.config) if args.config else RenderConfig()
    except (ConfigError, OSError) as e:
        print(f"error: {describe_error(e)}", file=sys.stderr)
        return 1
    config = config.override(
        width=args.width,
        height=args.height,
        smooth=args.smooth,
        page=args.page,
    )

    multiple_inputs = len(args.input) > 1
    fmt = output_format(args, args.output)
    suffix = f".{fmt}"

    if multiple_inputs:
        # Multiple inputs - output must be a directory
        if args.output == "-":
            print("error: cannot write several inputs to stdout", file=sys.stderr)
            return 1
        output_dir = Path(args.output) if args.output else None
        if output_dir:
            output_dir.mkdir(parents=True, exist_ok=True)
    else:
        output_dir = None

    work = []
    for input_file in args.input:
        if output_dir:
            output_file = str(output_dir / input_file.with_suffix(suffix).name)
        elif args.output and not multiple_inputs:
            output_file = args.output
        else:
            output_file = str(input_file.with_suffix(suffix))
        work.append((input_file, output_file, fmt, config, args.background))

    if fmt == "pdf" and any(item[1] == "-" for item in work):
        print("error: PDF output cannot be written to stdout", file=sys.stderr)
        return 1

    quiet = any(item[1] == "-" for item in work)
    jobs = max(1, min(args.jobs, len(work)))

    if jobs > 1:
        with Pool(jobs) as pool:
            results = list(pool.imap(_convert_worker, work))
    else:
        results = [_convert_worker(item) for item in work]

    failures = 0
    for input_file, output_file, count, error in results:
        if error is not None:
            failures += 1
            print(f"error: {input_file.name}: {error}", file=sys.stderr)
        elif not quiet:
            print(f"Converted {input_file.name} -> {output_file} ({count} strokes)")

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
