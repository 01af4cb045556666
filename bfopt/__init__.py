from .byteio import BufferIO, ByteIO, StreamIO
from .executor import (
    ExecutionContext,
    Executor,
    ExitReason,
    StepLimitExceeded,
    TapeOutOfRange,
    TraceEvent,
)
from .loader import SourceLoadError, load_source
from .ops import Op, OpKind, Program, disassemble
from .optimizer import optimize_loop
from .profiler import Profile, compare_translations, format_profile, profile
from .translator import (
    TranslationError,
    UnmatchedCloseBracket,
    UnterminatedLoop,
    reoptimize,
    translate,
)

__all__ = [
    "BufferIO",
    "ByteIO",
    "ExecutionContext",
    "Executor",
    "ExitReason",
    "Op",
    "OpKind",
    "Profile",
    "Program",
    "SourceLoadError",
    "StepLimitExceeded",
    "StreamIO",
    "TapeOutOfRange",
    "TraceEvent",
    "TranslationError",
    "UnmatchedCloseBracket",
    "UnterminatedLoop",
    "compare_translations",
    "disassemble",
    "format_profile",
    "load_source",
    "optimize_loop",
    "profile",
    "reoptimize",
    "translate",
]
