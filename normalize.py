#!/usr/bin/env python3
"""
SpaceForge

Cleans up tab, space and end-of-line formatting in text files and streams.
"""

import argparse
import logging
import sys
import time
from typing import Callable, List, Optional

from tqdm import tqdm

import filemgmt
from cleanconfig import (
    DEFAULT_EOL_MODE,
    DEFAULT_TAB_MIN,
    DEFAULT_TAB_SIZE,
    DEFAULT_WHITESPACE_MODE,
    CleanConfig,
    ConfigError,
    EolMode,
    WhitespaceMode,
    validate_config,
)
from cleanstream import Verdict, clean_stream
from streamio import ByteSink, ByteSource

# Define version
__version__ = "1.0.0"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("SpaceForge")


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Log to standard error, and to `log_file` as well when one is given."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a"))
    logging.basicConfig(
        level=logging.INFO, format=LOG_FORMAT, handlers=handlers, force=True
    )
    if verbose:
        logger.setLevel(logging.DEBUG)


def process_stream(input_name: str, output_name: str, config: CleanConfig) -> Verdict:
    """
    Filter one input into one output. Either name may be "-" for the
    standard streams. If cleaning fails, a partially written output file is
    removed.
    """
    input_file = filemgmt.open_input(input_name)
    try:
        output_file = filemgmt.open_output(output_name)
    except OSError:
        filemgmt.close_file(input_file, input_name)
        raise

    try:
        verdict = clean_stream(
            ByteSource(input_file, filemgmt.describe(input_name)),
            ByteSink(output_file, filemgmt.describe(output_name, output=True)),
            config,
        )
    except BaseException:
        filemgmt.close_remove_file(output_file, output_name)
        filemgmt.close_file(input_file, input_name)
        raise

    filemgmt.close_complete_or_remove(output_file, output_name)
    filemgmt.close_file(input_file, input_name)
    return verdict


def process_file_in_place(file_path: str, config: CleanConfig) -> Verdict:
    """
    Clean a file in place through a temporary file and a rename.
    An unmodified file is never rewritten, so its time stamps are kept.
    """
    input_file = filemgmt.open_input(file_path)
    try:
        temp_file, temp_name = filemgmt.create_temp_file(file_path)
    except OSError:
        filemgmt.close_file(input_file, file_path)
        raise

    try:
        verdict = clean_stream(
            ByteSource(input_file, file_path), ByteSink(temp_file, temp_name), config
        )
    except BaseException:
        filemgmt.close_remove_file(temp_file, temp_name)
        filemgmt.close_file(input_file, file_path)
        raise

    if verdict is Verdict.UNMODIFIED:
        filemgmt.close_remove_file(temp_file, temp_name)
        filemgmt.close_file(input_file, file_path)
        logger.debug("No changes needed for file: %s", file_path)
    else:
        filemgmt.close_complete_or_remove(temp_file, temp_name)
        filemgmt.close_file(input_file, file_path)
        filemgmt.replace_file(file_path, temp_name)
        logger.debug("Updated file: %s", file_path)
    return verdict


def process_file_list(
    file_names: List[str], config: CleanConfig, show_progress: bool = True
) -> int:
    """
    Clean each file in place, one after another, and return how many were
    modified. A name of "-" filters standard input to standard output at that
    point of the list. The first failure aborts the batch.
    """
    modified_count = 0

    with tqdm(
        total=len(file_names),
        desc="Cleaning files",
        unit="file",
        disable=not show_progress,
    ) as pbar:
        for file_name in file_names:
            if file_name == filemgmt.STDIO_FILE_NAME:
                verdict = process_stream(
                    filemgmt.STDIO_FILE_NAME, filemgmt.STDIO_FILE_NAME, config
                )
            else:
                verdict = process_file_in_place(file_name, config)

            if verdict is Verdict.MODIFIED:
                modified_count += 1
            pbar.update(1)

    return modified_count


def _positive_int(message: str) -> Callable[[str], int]:
    def parse(value: str) -> int:
        try:
            number = int(value)
        except ValueError:
            number = 0
        if number < 1:
            raise argparse.ArgumentTypeError(f"{message}: {value}")
        return number

    return parse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spaceforge",
        usage="%(prog)s [OPTION]... [FILE]...\n"
        "   or: %(prog)s [OPTION]... -o OUTFILE [INFILE]",
        description="Clean up tab, space and end-of-line formatting "
        "in text files/streams.",
        epilog=f"Default end-of-line sequence on this platform: "
        f"{DEFAULT_EOL_MODE.label}\n\n"
        "If no input file names are given, or `-' is specified as a file name,\n"
        "then standard input is filtered to standard output. All files are\n"
        "modified in-place unless the `-o' argument is given.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.set_defaults(
        eol_mode=DEFAULT_EOL_MODE, whitespace_mode=DEFAULT_WHITESPACE_MODE
    )
    parser.add_argument(
        "files", nargs="*", metavar="FILE", help="Files to clean in place"
    )
    parser.add_argument(
        "-c",
        "--crlf",
        dest="eol_mode",
        action="store_const",
        const=EolMode.CRLF,
        help="Use CR+LF for the end-of-line sequence",
    )
    parser.add_argument(
        "-l",
        "--lf",
        dest="eol_mode",
        action="store_const",
        const=EolMode.LF,
        help="Use LF for the end-of-line sequence",
    )
    parser.add_argument(
        "-m",
        "--cr",
        dest="eol_mode",
        action="store_const",
        const=EolMode.CR,
        help="Use CR for the end-of-line sequence",
    )
    parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        default=None,
        help="Write filtered output to the given file. "
        "Only one input file may be given in this mode.",
    )
    parser.add_argument(
        "-R",
        "--remove-ctrl-z",
        dest="remove_terminator",
        action="store_true",
        help="Remove any ctrl-z characters encountered",
    )
    parser.add_argument(
        "-r",
        "--tabs",
        dest="whitespace_mode",
        action="store_const",
        const=WhitespaceMode.TABS,
        help="Replace spaces with tab characters wherever possible",
    )
    parser.add_argument(
        "-s",
        "--spaces",
        dest="whitespace_mode",
        action="store_const",
        const=WhitespaceMode.SPACES,
        help="Expand tab characters into spaces (default action)",
    )
    parser.add_argument(
        "-T",
        "--tab-min",
        metavar="N",
        type=_positive_int("Minimum whitespace gap must be a positive integer"),
        default=DEFAULT_TAB_MIN,
        help=f"Minimum whitespace gap for inserting tabs (default: {DEFAULT_TAB_MIN})",
    )
    parser.add_argument(
        "-t",
        "--tab-size",
        metavar="N",
        type=_positive_int("Tab size must be a positive integer"),
        default=DEFAULT_TAB_SIZE,
        help=f"Interpret tab stops as N columns wide (default: {DEFAULT_TAB_SIZE})",
    )
    parser.add_argument(
        "-Z",
        "--stop-at-ctrl-z",
        dest="stop_at_terminator",
        action="store_true",
        help="Interpret ctrl-z characters as end-of-file",
    )
    parser.add_argument(
        "-z",
        "--add-ctrl-z",
        dest="append_terminator",
        action="store_true",
        help="Append a ctrl-z character at end-of-file",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    parser.add_argument(
        "--log-file", metavar="PATH", default=None, help="Also append log to PATH"
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not show a progress bar when cleaning files in place",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"SpaceForge v{__version__}",
        help="Show program version and exit",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> CleanConfig:
    return CleanConfig(
        tab_size=args.tab_size,
        tab_min=args.tab_min,
        whitespace_mode=args.whitespace_mode,
        eol_mode=args.eol_mode,
        remove_terminator=args.remove_terminator,
        stop_at_terminator=args.stop_at_terminator,
        append_terminator=args.append_terminator,
    )


def format_duration(execution_time: float) -> str:
    if execution_time < 60:
        return f"{execution_time:.2f} seconds"
    if execution_time < 3600:
        minutes = int(execution_time // 60)
        seconds = execution_time % 60
        return f"{minutes} minute{'s' if minutes != 1 else ''} {seconds:.2f} seconds"
    hours = int(execution_time // 3600)
    minutes = int((execution_time % 3600) // 60)
    seconds = execution_time % 60
    return (
        f"{hours} hour{'s' if hours != 1 else ''} "
        f"{minutes} minute{'s' if minutes != 1 else ''} "
        f"{seconds:.2f} seconds"
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.output is not None and len(args.files) > 1:
        parser.error("Only one input file may be specified if output file given")

    try:
        setup_logging(args.verbose, args.log_file)
    except OSError as e:
        setup_logging(args.verbose)
        logger.error("Cannot open log file: %s", str(e))
        return 1

    try:
        config = validate_config(config_from_args(args))
    except ConfigError as e:
        logger.error("%s", str(e))
        return 2

    logger.debug("SpaceForge v%s", __version__)
    logger.debug(
        "Tab size: %d, tab minimum: %d, whitespace: %s, end-of-line: %s",
        config.tab_size,
        config.tab_min,
        config.whitespace_mode.value,
        config.eol_mode.label,
    )

    try:
        if args.output is not None:
            input_name = args.files[0] if args.files else filemgmt.STDIO_FILE_NAME
            process_stream(input_name, args.output, config)
        elif args.files:
            start_time: float = time.time()
            modified_count = process_file_list(
                args.files, config, show_progress=not args.no_progress
            )
            logger.info(
                "Done! Cleaned %d of %d files in %s.",
                modified_count,
                len(args.files),
                format_duration(time.time() - start_time),
            )
        else:
            process_stream(filemgmt.STDIO_FILE_NAME, filemgmt.STDIO_FILE_NAME, config)
        return 0
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user.")
        return 130
    except OSError as e:
        logger.error("%s", str(e))
        return 1
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("An unexpected error occurred: %s", str(e))
        if logger.isEnabledFor(logging.DEBUG):
            import traceback  # pylint: disable=import-outside-toplevel

            logger.debug("Traceback: %s", traceback.format_exc())
        return 1


if __name__ == "__main__":
    sys.exit(main())
