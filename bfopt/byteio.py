from __future__ import annotations

import sys
from typing import BinaryIO, Iterable, Iterator, List, Optional


class ByteIO:
    """Single-byte channel used by the executor.

    ``read_byte`` returns ``None`` once input is exhausted.
    """

    def read_byte(self) -> Optional[int]:
        raise NotImplementedError

    def write_byte(self, value: int) -> None:
        raise NotImplementedError


class BufferIO(ByteIO):
    """In-memory channel: input from an iterable of ints, output collected."""

    def __init__(self, input_data: Optional[Iterable[int]] = None) -> None:
        self._input: Iterator[int] = iter(list(input_data or []))
        self.output: List[int] = []

    def read_byte(self) -> Optional[int]:
        value = next(self._input, None)
        if value is None:
            return None
        return value & 0xFF

    def write_byte(self, value: int) -> None:
        self.output.append(value)

    def getvalue(self) -> bytes:
        return bytes(self.output)


class StreamIO(ByteIO):
    """Channel over binary streams, flushing after every byte written."""

    def __init__(
        self,
        stdin: Optional[BinaryIO] = None,
        stdout: Optional[BinaryIO] = None,
    ) -> None:
        self.stdin = stdin if stdin is not None else sys.stdin.buffer
        self.stdout = stdout if stdout is not None else sys.stdout.buffer

    def read_byte(self) -> Optional[int]:
        data = self.stdin.read(1)
        if not data:
            return None
        return data[0]

    def write_byte(self, value: int) -> None:
        self.stdout.write(bytes((value,)))
        self.stdout.flush()


def to_input_bytes(data: str) -> List[int]:
    return list(data.encode("utf-8"))


__all__ = ["BufferIO", "ByteIO", "StreamIO", "to_input_bytes"]
