"""
The text-cleaning algorithm.

Input is consumed one byte at a time. Runs of spaces, tabs and end-of-line
sequences are collected and re-emitted in canonical form; every other byte is
copied through untouched. Each pass reports whether the output differs from
the input.
"""

import enum
import io
import logging
from typing import Tuple

from cleanconfig import TERMINATOR, CleanConfig, EolMode, WhitespaceMode
from streamio import ByteSink, ByteSource

logger = logging.getLogger("SpaceForge.cleanstream")

TAB: int = 0x09
LF: int = 0x0A
CR: int = 0x0D
SPACE: int = 0x20


class Verdict(enum.Enum):
    """Outcome of one complete pass over a stream."""

    UNMODIFIED = "unmodified"
    MODIFIED = "modified"


class StopReason(enum.Enum):
    """Why the whitespace collector returned."""

    NON_WHITESPACE = "non-whitespace"
    END_OF_STREAM = "end-of-stream"


def next_tab_stop(column: int, tab_size: int) -> int:
    """Return the column of the first tab stop after `column`."""
    return column + tab_size - column % tab_size


def flush_whitespace(  # pylint: disable=too-many-arguments
    sink: ByteSink,
    in_col: int,
    out_col: int,
    spaces: int,
    tabs: int,
    newlines: int,
    config: CleanConfig,
) -> Tuple[int, bool]:
    """
    Write a collected whitespace run to the sink in canonical form.

    Returns the new output column and whether the emitted run differs from the
    collected one. Spaces and tabs are compared by count per kind, so swapping
    eight spaces for one tab is a modification even though the column matches.
    """
    if newlines > 0:
        sink.write_bytes(config.eol_mode.sequence * newlines)
        out_col = 0

    if (
        config.whitespace_mode is WhitespaceMode.TABS
        and in_col - out_col >= config.tab_min
    ):
        emitted_tabs = 0
        while next_tab_stop(out_col, config.tab_size) <= in_col:
            out_col = next_tab_stop(out_col, config.tab_size)
            emitted_tabs += 1
        sink.write_bytes(b"\t" * emitted_tabs)
        tabs -= emitted_tabs

    # Fill the rest of the gap with spaces
    emitted_spaces = in_col - out_col
    sink.write_bytes(b" " * emitted_spaces)
    spaces -= emitted_spaces
    out_col = in_col

    return out_col, spaces != 0 or tabs != 0


def collect_whitespace(  # pylint: disable=too-many-branches
    source: ByteSource, sink: ByteSink, in_col: int, config: CleanConfig
) -> Tuple[int, bool, StopReason]:
    """
    Consume a run of whitespace starting at input column `in_col`.

    The source is left positioned at the next non-whitespace byte, or at end
    of stream. If a non-whitespace byte follows, the run is flushed to the sink
    in canonical form. At end of stream a single EOL is written if the current
    line has content, so the last line is always terminated; a run on an empty
    line is dropped entirely.

    Returns the output column, whether the run was modified and why collection
    stopped.
    """
    out_col = in_col
    spaces = 0
    tabs = 0
    newlines = 0
    modified = False

    while True:
        byte = source.read_byte()

        if byte == SPACE:
            in_col += 1
            spaces += 1
            continue

        if byte == TAB:
            in_col = next_tab_stop(in_col, config.tab_size)
            tabs += 1
            if spaces > 0:
                # Either the spaces become a tab or the tab becomes spaces
                modified = True
            continue

        if byte == CR:
            following = source.read_byte()
            if following == LF:
                eol = EolMode.CRLF
            else:
                if following is not None:
                    source.unread_byte(following)
                eol = EolMode.CR
        elif byte == LF:
            eol = EolMode.LF
        elif byte is None:
            stop_reason = StopReason.END_OF_STREAM
            break
        else:
            source.unread_byte(byte)
            stop_reason = StopReason.NON_WHITESPACE
            break

        if eol is not config.eol_mode:
            modified = True
        if spaces > 0 or tabs > 0:
            # Trailing whitespace is always stripped
            spaces = 0
            tabs = 0
            modified = True
        in_col = 0
        newlines += 1

    if stop_reason is StopReason.NON_WHITESPACE:
        out_col, flushed_modified = flush_whitespace(
            sink, in_col, out_col, spaces, tabs, newlines, config
        )
        return out_col, modified or flushed_modified, stop_reason

    if out_col > 0:
        sink.write_bytes(config.eol_mode.sequence)
        # Anything other than a single EOL after the last byte is filtered out
        if newlines != 1 or spaces != 0 or tabs != 0:
            modified = True
        return 0, modified, stop_reason

    # Nothing written on this line; the whole run is dropped
    if newlines > 0 or spaces > 0 or tabs > 0:
        modified = True
    return 0, modified, stop_reason


def clean_stream(source: ByteSource, sink: ByteSink, config: CleanConfig) -> Verdict:
    """
    Filter `source` into `sink` according to `config`.

    Processing stops at end of stream, or at the first terminator byte when
    `stop_at_terminator` is set; nothing past the terminator is read in that
    case. Neither stream is closed. A StreamError from either end propagates
    immediately and leaves the sink partially written.
    """
    modified = False
    col = 0
    last_byte = None

    while True:
        col, run_modified, stop_reason = collect_whitespace(source, sink, col, config)
        modified = modified or run_modified
        if stop_reason is StopReason.END_OF_STREAM:
            break

        byte = source.read_byte()
        if byte is None:
            break
        last_byte = byte

        if byte == TERMINATOR and (
            config.remove_terminator or config.stop_at_terminator
        ):
            # Marking the stream modified here makes anything past a
            # terminator get discarded consistently, even if nothing before
            # it changed.
            modified = True
            if config.stop_at_terminator:
                break
            continue

        sink.write_byte(byte)
        col += 1

    if (
        config.append_terminator and last_byte != TERMINATOR
    ) or config.stop_at_terminator:
        if col > 0 and config.stop_at_terminator:
            sink.write_bytes(config.eol_mode.sequence)
        sink.write_byte(TERMINATOR)
        modified = True

    verdict = Verdict.MODIFIED if modified else Verdict.UNMODIFIED
    logger.debug("Finished cleaning %s -> %s: %s", source.name, sink.name, verdict.value)
    return verdict


def clean_bytes(data: bytes, config: CleanConfig) -> Tuple[bytes, Verdict]:
    """Clean an in-memory buffer, returning the output and the verdict."""
    output = io.BytesIO()
    verdict = clean_stream(
        ByteSource(io.BytesIO(data), "<bytes>"), ByteSink(output, "<bytes>"), config
    )
    return output.getvalue(), verdict
