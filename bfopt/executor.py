from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional, Sequence

from .byteio import BufferIO, ByteIO
from .ops import Op, OpKind

logger = logging.getLogger(__name__)

TAPE_LENGTH = 30000


class StepLimitExceeded(RuntimeError):
    """Raised when execution exceeds the configured step budget."""


class TapeOutOfRange(RuntimeError):
    """Raised when the data pointer would leave the tape."""

    def __init__(self, pointer: int, tape_length: int) -> None:
        super().__init__(
            f"Data pointer {pointer} outside tape of length {tape_length}"
        )
        self.pointer = pointer
        self.tape_length = tape_length


class ExitReason(str, Enum):
    COMPLETED = "completed"
    INPUT_EXHAUSTED = "input_exhausted"


@dataclass
class ExecutionContext:
    tape: bytearray
    io: ByteIO
    pointer: int = 0
    pc: int = 0
    steps: int = 0
    exit_reason: Optional[ExitReason] = None


@dataclass(frozen=True)
class TraceEvent:
    """One dispatched operation and the machine state right after it."""

    index: int
    op: Op
    pointer: int
    cell: int


@dataclass
class Executor:
    tape_length: int = TAPE_LENGTH

    context: ExecutionContext = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.tape_length < 1:
            raise ValueError(f"Tape length must be positive, got {self.tape_length}")
        self.reset()

    def reset(
        self,
        io: Optional[ByteIO] = None,
        initial_tape: Optional[Iterable[int]] = None,
    ) -> None:
        tape = bytearray(self.tape_length)
        if initial_tape is not None:
            values = bytes(initial_tape)
            if len(values) > self.tape_length:
                raise ValueError("Initial tape is longer than the tape length")
            tape[: len(values)] = values
        self.context = ExecutionContext(tape=tape, io=io if io is not None else BufferIO())

    def run(
        self,
        program: Sequence[Op],
        *,
        io: Optional[ByteIO] = None,
        input_data: Optional[Iterable[int]] = None,
        max_steps: Optional[int] = None,
        initial_tape: Optional[Iterable[int]] = None,
    ) -> bytes:
        """Run ``program`` to completion.

        Input comes either from ``input_data`` through an in-memory channel,
        whose output is returned, or from a caller supplied ``io``, in which
        case output goes there and ``b""`` is returned. Passing both is an
        error.
        """
        self._start(io, input_data, initial_tape)
        ctx = self.context
        program_length = len(program)

        while ctx.pc < program_length:
            if max_steps is not None and ctx.steps >= max_steps:
                raise StepLimitExceeded("Program exceeded allowed step count")
            self._dispatch(program[ctx.pc], ctx)
            ctx.steps += 1
            if ctx.exit_reason is not None:
                break

        self._finish(ctx)
        return self.output()

    def trace(
        self,
        program: Sequence[Op],
        *,
        io: Optional[ByteIO] = None,
        input_data: Optional[Iterable[int]] = None,
        max_steps: Optional[int] = None,
        initial_tape: Optional[Iterable[int]] = None,
    ) -> Iterator[TraceEvent]:
        """Like :meth:`run`, yielding a :class:`TraceEvent` per dispatch."""
        self._start(io, input_data, initial_tape)
        ctx = self.context
        program_length = len(program)

        while ctx.pc < program_length:
            if max_steps is not None and ctx.steps >= max_steps:
                raise StepLimitExceeded("Program exceeded allowed step count")
            index = ctx.pc
            op = program[index]
            self._dispatch(op, ctx)
            ctx.steps += 1
            yield TraceEvent(index, op, ctx.pointer, ctx.tape[ctx.pointer])
            if ctx.exit_reason is not None:
                break

        self._finish(ctx)

    def _start(
        self,
        io: Optional[ByteIO],
        input_data: Optional[Iterable[int]],
        initial_tape: Optional[Iterable[int]],
    ) -> None:
        if io is not None and input_data is not None:
            raise ValueError("Pass either io or input_data, not both")
        self.reset(io if io is not None else BufferIO(input_data), initial_tape)

    def output(self) -> bytes:
        """Bytes written so far through the in-memory channel."""
        channel = self.context.io
        if isinstance(channel, BufferIO):
            return channel.getvalue()
        return b""

    def _finish(self, ctx: ExecutionContext) -> None:
        if ctx.exit_reason is None:
            ctx.exit_reason = ExitReason.COMPLETED
        logger.debug(
            "execution finished (%s) after %d steps", ctx.exit_reason.value, ctx.steps
        )

    def _checked(self, pointer: int) -> int:
        if pointer < 0 or pointer >= self.tape_length:
            raise TapeOutOfRange(pointer, self.tape_length)
        return pointer

    def _dispatch(self, op: Op, ctx: ExecutionContext) -> None:
        kind = op.kind
        tape = ctx.tape
        if kind is OpKind.MOVE:
            ctx.pointer = self._checked(ctx.pointer + op.argument)
        elif kind is OpKind.ADD:
            tape[ctx.pointer] = (tape[ctx.pointer] + op.argument) % 256
        elif kind is OpKind.WRITE:
            value = tape[ctx.pointer]
            for _ in range(op.argument):
                ctx.io.write_byte(value)
        elif kind is OpKind.READ:
            # Every byte read overwrites the previous one.
            for _ in range(op.argument):
                value = ctx.io.read_byte()
                if value is None:
                    ctx.exit_reason = ExitReason.INPUT_EXHAUSTED
                    return
                tape[ctx.pointer] = value
        elif kind is OpKind.JUMP_IF_ZERO:
            if tape[ctx.pointer] == 0:
                ctx.pc = op.argument
        elif kind is OpKind.JUMP_IF_NONZERO:
            if tape[ctx.pointer] != 0:
                ctx.pc = op.argument
        elif kind is OpKind.CLEAR:
            tape[ctx.pointer] = 0
        elif kind is OpKind.SCAN:
            while tape[ctx.pointer] != 0:
                ctx.pointer = self._checked(ctx.pointer + op.argument)
        elif kind is OpKind.TRANSFER:
            value = tape[ctx.pointer]
            if value != 0:
                target = self._checked(ctx.pointer + op.argument)
                tape[target] = (tape[target] + value) % 256
                tape[ctx.pointer] = 0
        elif kind is OpKind.COMMENT:
            pass
        else:
            raise ValueError(f"Unknown operation kind: {kind!r}")
        # Jumps land on their partner; this increment steps past it.
        ctx.pc += 1


__all__ = [
    "ExecutionContext",
    "Executor",
    "ExitReason",
    "StepLimitExceeded",
    "TAPE_LENGTH",
    "TapeOutOfRange",
    "TraceEvent",
]
