from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple


class OpKind(str, Enum):
    MOVE = "move"
    ADD = "add"
    READ = "read"
    WRITE = "write"
    JUMP_IF_ZERO = "jz"
    JUMP_IF_NONZERO = "jnz"
    CLEAR = "clear"
    SCAN = "scan"
    TRANSFER = "transfer"
    COMMENT = "comment"


# Kinds produced by collapsing a run of one operator byte.
RUN_KINDS = {
    ord(">"): (OpKind.MOVE, 1),
    ord("<"): (OpKind.MOVE, -1),
    ord("+"): (OpKind.ADD, 1),
    ord("-"): (OpKind.ADD, -1),
    ord(","): (OpKind.READ, 1),
    ord("."): (OpKind.WRITE, 1),
}

FUSED_KINDS = frozenset({OpKind.CLEAR, OpKind.SCAN, OpKind.TRANSFER})


@dataclass(frozen=True)
class Op:
    kind: OpKind
    argument: int = 0


Program = Tuple[Op, ...]


def format_op(op: Op) -> str:
    if op.kind is OpKind.CLEAR:
        return op.kind.value
    return f"{op.kind.value:<8} {op.argument}"


def disassemble(program: Sequence[Op]) -> str:
    """Render one line per operation: ``index  mnemonic  argument``."""
    width = max(4, len(str(len(program))))
    lines = [f"{index:0{width}d}  {format_op(op)}" for index, op in enumerate(program)]
    return "\n".join(lines)


__all__ = [
    "FUSED_KINDS",
    "Op",
    "OpKind",
    "Program",
    "RUN_KINDS",
    "disassemble",
    "format_op",
]
