"""
File management helpers for SpaceForge.

Standard input and standard output are represented by the name "-" and are
never closed or removed by these helpers.
"""

import logging
import os
import shutil
import sys
import tempfile
from typing import BinaryIO, Tuple

logger = logging.getLogger("SpaceForge.filemgmt")

STDIO_FILE_NAME = "-"
STDIN_DESCRIPTION = "<standard input>"
STDOUT_DESCRIPTION = "<standard output>"


def is_standard_stream(stream: BinaryIO) -> bool:
    return stream is getattr(sys.stdin, "buffer", None) or stream is getattr(
        sys.stdout, "buffer", None
    )


def describe(file_name: str, output: bool = False) -> str:
    """Return a human readable name for error messages."""
    if file_name == STDIO_FILE_NAME:
        return STDOUT_DESCRIPTION if output else STDIN_DESCRIPTION
    return file_name


def open_input(file_name: str) -> BinaryIO:
    if file_name == STDIO_FILE_NAME:
        return sys.stdin.buffer
    return open(file_name, "rb")  # pylint: disable=consider-using-with


def open_output(file_name: str) -> BinaryIO:
    if file_name == STDIO_FILE_NAME:
        return sys.stdout.buffer
    return open(file_name, "wb")  # pylint: disable=consider-using-with


def close_file(stream: BinaryIO, file_name: str) -> None:
    """Close a stream unless it is standard input or output."""
    if is_standard_stream(stream):
        # Standard output still needs its buffer pushed out
        if stream.writable():
            stream.flush()
        return
    stream.close()
    logger.debug("Closed %s", file_name)


def close_remove_file(stream: BinaryIO, file_name: str) -> None:
    """Close and delete a file; standard streams are left alone."""
    if is_standard_stream(stream):
        return
    close_file(stream, file_name)
    os.remove(file_name)
    logger.debug("Removed %s", file_name)


def close_complete_or_remove(stream: BinaryIO, file_name: str) -> None:
    """
    Close a freshly written file.
    If closing fails, flushing the buffer failed and the file is incomplete,
    so it is removed before the error propagates.
    """
    if is_standard_stream(stream):
        close_file(stream, file_name)
        return
    try:
        close_file(stream, file_name)
    except OSError:
        logger.debug("Removing incomplete file %s", file_name)
        os.remove(file_name)
        raise


def create_temp_file(target_file_name: str) -> Tuple[BinaryIO, str]:
    """
    Create a temporary file in the same directory as `target_file_name`,
    so the later rename never crosses a file system boundary.
    """
    directory = os.path.dirname(os.path.abspath(target_file_name))
    fd, temp_file_name = tempfile.mkstemp(
        prefix=".spaceforge-", suffix=".tmp", dir=directory
    )
    return os.fdopen(fd, "wb"), temp_file_name


def replace_file(target_file_name: str, source_file_name: str) -> None:
    """
    Atomically replace `target_file_name` with `source_file_name`.

    Permissions and ownership of the target are carried over first. Failures
    there are ignored; an unprivileged user can't change ownership anyway.
    """
    try:
        target_stat = os.stat(target_file_name)
        shutil.copymode(target_file_name, source_file_name)
        if hasattr(os, "chown"):
            os.chown(source_file_name, target_stat.st_uid, target_stat.st_gid)
    except OSError as e:
        logger.debug(
            "Could not copy attributes of %s to %s: %s",
            target_file_name,
            source_file_name,
            str(e),
        )

    try:
        os.replace(source_file_name, target_file_name)
    except OSError:
        os.remove(source_file_name)
        raise
