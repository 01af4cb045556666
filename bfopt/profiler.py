from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .byteio import ByteIO
from .executor import TAPE_LENGTH, Executor, ExitReason
from .ops import Op, OpKind, Program, format_op
from .translator import translate

logger = logging.getLogger(__name__)


@dataclass
class Profile:
    """Dispatch counts of one run, indexed like the program listing."""

    program: Program
    hits: List[int]
    output: bytes
    steps: int
    exit_reason: ExitReason

    def by_kind(self) -> Dict[OpKind, int]:
        totals: Counter = Counter()
        for op, count in zip(self.program, self.hits):
            totals[op.kind] += count
        return {kind: totals[kind] for kind in OpKind if totals[kind]}

    def hottest(self, count: int = 5) -> List[Tuple[int, int]]:
        ranked = sorted(enumerate(self.hits), key=lambda item: (-item[1], item[0]))
        return [(index, hits) for index, hits in ranked[:count] if hits]


def profile(
    program: Sequence[Op],
    *,
    io: Optional[ByteIO] = None,
    input_data: Optional[Iterable[int]] = None,
    max_steps: Optional[int] = None,
    tape_length: int = TAPE_LENGTH,
) -> Profile:
    executor = Executor(tape_length=tape_length)
    hits = [0] * len(program)
    for event in executor.trace(
        program, io=io, input_data=input_data, max_steps=max_steps
    ):
        hits[event.index] += 1
    ctx = executor.context
    return Profile(
        program=tuple(program),
        hits=hits,
        output=executor.output(),
        steps=ctx.steps,
        exit_reason=ctx.exit_reason,
    )


def compare_translations(
    source: Union[bytes, str],
    *,
    input_data: Optional[Iterable[int]] = None,
    max_steps: Optional[int] = None,
) -> Tuple[Profile, Profile]:
    """Profile the fused and the unfused translation of ``source``."""
    data = list(input_data) if input_data is not None else None
    fused = profile(translate(source), input_data=data, max_steps=max_steps)
    plain = profile(translate(source, optimize=False), input_data=data, max_steps=max_steps)
    if fused.output != plain.output:
        logger.warning("fused and unfused outputs differ for the same input")
    return fused, plain


def format_profile(result: Profile) -> str:
    width = max(4, len(str(len(result.program))))
    hit_width = max(1, len(str(max(result.hits, default=0))))
    lines = [
        f"{index:0{width}d}  {count:>{hit_width}}  {format_op(op)}"
        for index, (op, count) in enumerate(zip(result.program, result.hits))
    ]
    lines.append(f"steps={result.steps} exit={result.exit_reason.value}")
    return "\n".join(lines)


__all__ = ["Profile", "compare_translations", "format_profile", "profile"]
