"""
Byte-at-a-time stream wrappers used by the stream cleaner.

Any fault reported by the underlying file object is re-raised as StreamError
so callers can tell which end of the pipe failed.
"""

from typing import BinaryIO, Optional


class StreamError(OSError):
    """A read or write fault on one of the streams being cleaned."""

    def __init__(self, stream_name: str, cause: BaseException) -> None:
        super().__init__(f"{stream_name}: {cause}")
        self.stream_name = stream_name
        self.cause = cause


class ByteSource:
    """Readable byte stream with room for exactly one pushed-back byte."""

    def __init__(self, stream: BinaryIO, name: str = "<input>") -> None:
        self._stream = stream
        self._pushback: Optional[int] = None
        self.name = name

    def read_byte(self) -> Optional[int]:
        """Return the next byte value, or None at end of stream."""
        if self._pushback is not None:
            byte = self._pushback
            self._pushback = None
            return byte

        try:
            chunk = self._stream.read(1)
        except OSError as e:
            raise StreamError(self.name, e) from e

        if not chunk:
            return None
        return chunk[0]

    def unread_byte(self, byte: int) -> None:
        if self._pushback is not None:
            raise ValueError("Only one byte of pushback is supported")
        self._pushback = byte


class ByteSink:
    """Writable byte stream."""

    def __init__(self, stream: BinaryIO, name: str = "<output>") -> None:
        self._stream = stream
        self.name = name

    def write_byte(self, byte: int) -> None:
        self.write_bytes(bytes((byte,)))

    def write_bytes(self, data: bytes) -> None:
        if not data:
            return
        try:
            self._stream.write(data)
        except OSError as e:
            raise StreamError(self.name, e) from e
