from __future__ import annotations

from typing import Optional, Sequence

from .ops import Op, OpKind


def optimize_loop(body: Sequence[Op]) -> Optional[Op]:
    """Return a single fused operation equivalent to ``[body]``, or ``None``.

    Recognized shapes, first match wins:

    * ``[-]`` / ``[+]`` (a single add of any size) -> ``CLEAR``
    * ``[>]`` / ``[<<]`` (a single move) -> ``SCAN`` with the signed step
    * ``[->+<]`` / ``[+<->]`` and friends -> ``TRANSFER`` with the signed
      offset of the first move
    """
    if len(body) == 1:
        only = body[0]
        if only.kind is OpKind.ADD:
            return Op(OpKind.CLEAR)
        if only.kind is OpKind.MOVE:
            return Op(OpKind.SCAN, only.argument)
        return None
    if len(body) == 4:
        return _match_transfer(body)
    return None


def _match_transfer(body: Sequence[Op]) -> Optional[Op]:
    source, there, dest, back = body
    if source.kind is not OpKind.ADD or dest.kind is not OpKind.ADD:
        return None
    if there.kind is not OpKind.MOVE or back.kind is not OpKind.MOVE:
        return None
    if abs(source.argument) != 1 or dest.argument != -source.argument:
        return None
    if there.argument == 0 or back.argument != -there.argument:
        return None
    return Op(OpKind.TRANSFER, there.argument)


__all__ = ["optimize_loop"]
