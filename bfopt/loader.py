from __future__ import annotations

from pathlib import Path
from typing import Union


class SourceLoadError(Exception):
    """Raised when a program file cannot be read."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        super().__init__(f"Could not read {path}: {reason}")
        self.path = str(path)


def load_source(path: Union[str, Path]) -> bytes:
    """Read a program file byte for byte."""
    source_path = Path(path)
    try:
        return source_path.read_bytes()
    except FileNotFoundError as exc:
        raise SourceLoadError(path, "file not found") from exc
    except OSError as exc:
        raise SourceLoadError(path, exc.strerror or str(exc)) from exc


__all__ = ["SourceLoadError", "load_source"]
