from __future__ import annotations

import logging
from typing import List, Sequence, Tuple, Union

from .ops import Op, OpKind, Program, RUN_KINDS
from .optimizer import optimize_loop

logger = logging.getLogger(__name__)


class TranslationError(Exception):
    """Raised when source bytes cannot be turned into a well-formed program."""

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(message)
        self.offset = offset


class UnmatchedCloseBracket(TranslationError):
    def __init__(self, offset: int) -> None:
        super().__init__(f"Unmatched ']' at byte offset {offset}", offset)


class UnterminatedLoop(TranslationError):
    def __init__(self, offset: int) -> None:
        super().__init__(f"Unterminated '[' at byte offset {offset}", offset)


class ProgramBuilder:
    """Accumulates operations and matches brackets with backpatching.

    Open brackets are remembered as ``(program index, offset)`` pairs where
    ``offset`` is whatever position the caller wants reported on failure
    (a byte offset while translating source).
    """

    def __init__(self, optimize: bool = True) -> None:
        self.optimize = optimize
        self.ops: List[Op] = []
        self.fused = 0
        self._stack: List[Tuple[int, int]] = []

    def emit(self, op: Op) -> None:
        self.ops.append(op)

    def open_loop(self, offset: int) -> None:
        self._stack.append((len(self.ops), offset))
        # Target is patched once the matching close is seen.
        self.ops.append(Op(OpKind.JUMP_IF_ZERO, 0))

    def close_loop(self, offset: int) -> None:
        if not self._stack:
            raise UnmatchedCloseBracket(offset)
        start, _ = self._stack.pop()

        if self.optimize:
            fused = optimize_loop(self.ops[start + 1 :])
            if fused is not None:
                del self.ops[start:]
                self.ops.append(fused)
                self.fused += 1
                return

        close_index = len(self.ops)
        self.ops[start] = Op(OpKind.JUMP_IF_ZERO, close_index)
        self.ops.append(Op(OpKind.JUMP_IF_NONZERO, start))

    def finish(self) -> Program:
        if self._stack:
            _, offset = self._stack[-1]
            raise UnterminatedLoop(offset)
        return tuple(self.ops)


def translate(source: Union[bytes, bytearray, str], *, optimize: bool = True) -> Program:
    """Translate Brainfuck source into a program of tagged operations."""
    code = source.encode("utf-8") if isinstance(source, str) else bytes(source)
    builder = ProgramBuilder(optimize=optimize)
    ptr = 0
    code_size = len(code)

    while ptr < code_size:
        instruction = code[ptr]
        if instruction == ord("["):
            builder.open_loop(ptr)
            ptr += 1
        elif instruction == ord("]"):
            builder.close_loop(ptr)
            ptr += 1
        else:
            start = ptr
            ptr += 1
            while ptr < code_size and code[ptr] == instruction:
                ptr += 1
            repeats = ptr - start
            kind, sign = RUN_KINDS.get(instruction, (OpKind.COMMENT, 1))
            builder.emit(Op(kind, sign * repeats))

    program = builder.finish()
    logger.debug(
        "translated %d bytes into %d operations (%d loops fused)",
        code_size,
        len(program),
        builder.fused,
    )
    return program


def reoptimize(program: Sequence[Op]) -> Program:
    """Replay a finished program through the loop optimizer.

    Generic loops whose bodies match an idiom are fused; everything else,
    including operations fused earlier, is kept as is. Offsets reported by
    errors are program indices.
    """
    builder = ProgramBuilder(optimize=True)
    for index, op in enumerate(program):
        if op.kind is OpKind.JUMP_IF_ZERO:
            builder.open_loop(index)
        elif op.kind is OpKind.JUMP_IF_NONZERO:
            builder.close_loop(index)
        else:
            builder.emit(op)
    return builder.finish()


__all__ = [
    "ProgramBuilder",
    "TranslationError",
    "UnmatchedCloseBracket",
    "UnterminatedLoop",
    "reoptimize",
    "translate",
]
