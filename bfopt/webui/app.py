from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from bfopt.byteio import to_input_bytes
from bfopt.executor import TAPE_LENGTH, Executor, StepLimitExceeded, TapeOutOfRange
from bfopt.ops import FUSED_KINDS, format_op
from bfopt.profiler import Profile, compare_translations
from bfopt.translator import TranslationError, translate

logger = logging.getLogger(__name__)

# Requests are served synchronously; unbounded programs must not pin a worker.
DEFAULT_MAX_STEPS = 1_000_000
STEP_CEILING = 50_000_000


class TranslateRequest(BaseModel):
    code: str
    optimize: bool = True


class Operation(BaseModel):
    index: int
    kind: str
    argument: int
    text: str


class TranslateResponse(BaseModel):
    length: int
    fused: int
    operations: List[Operation]


class RunRequest(BaseModel):
    code: str
    input: str = ""
    optimize: bool = True
    max_steps: int = Field(default=DEFAULT_MAX_STEPS, ge=1, le=STEP_CEILING)
    tape_length: int = Field(default=TAPE_LENGTH, ge=1, le=1_000_000)


class RunResponse(BaseModel):
    output: str
    exit_reason: str
    steps: int


class ProfileRequest(BaseModel):
    code: str
    input: str = ""
    max_steps: int = Field(default=DEFAULT_MAX_STEPS, ge=1, le=STEP_CEILING)
    top: int = Field(default=5, ge=1, le=100)


class HotOperation(BaseModel):
    index: int
    text: str
    hits: int


class ProfileSummary(BaseModel):
    length: int
    steps: int
    exit_reason: str
    by_kind: Dict[str, int]
    hottest: List[HotOperation]


class ProfileResponse(BaseModel):
    output: str
    fused: ProfileSummary
    plain: ProfileSummary
    steps_saved: int


def _summarize(result: Profile, top: int) -> ProfileSummary:
    return ProfileSummary(
        length=len(result.program),
        steps=result.steps,
        exit_reason=result.exit_reason.value,
        by_kind={kind.value: count for kind, count in result.by_kind().items()},
        hottest=[
            HotOperation(index=index, text=format_op(result.program[index]), hits=hits)
            for index, hits in result.hottest(top)
        ],
    )


def create_app(*, default_max_steps: Optional[int] = None) -> FastAPI:
    app = FastAPI(title="bfopt API", version="0.1.0")
    step_budget = default_max_steps or DEFAULT_MAX_STEPS

    @app.exception_handler(TranslationError)
    def translation_failed(request: Request, exc: TranslationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": type(exc).__name__,
                "detail": str(exc),
                "offset": exc.offset,
            },
        )

    @app.exception_handler(StepLimitExceeded)
    @app.exception_handler(TapeOutOfRange)
    def execution_failed(request: Request, exc: RuntimeError) -> JSONResponse:
        logger.info("%s %s aborted: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    @app.post("/api/translate", response_model=TranslateResponse)
    def translate_code(payload: TranslateRequest) -> TranslateResponse:
        program = translate(payload.code, optimize=payload.optimize)
        return TranslateResponse(
            length=len(program),
            fused=sum(1 for op in program if op.kind in FUSED_KINDS),
            operations=[
                Operation(index=index, kind=op.kind.value, argument=op.argument, text=format_op(op))
                for index, op in enumerate(program)
            ],
        )

    @app.post("/api/run", response_model=RunResponse)
    def run_code(payload: RunRequest) -> RunResponse:
        program = translate(payload.code, optimize=payload.optimize)
        executor = Executor(tape_length=payload.tape_length)
        output = executor.run(
            program,
            input_data=to_input_bytes(payload.input),
            max_steps=min(payload.max_steps, step_budget),
        )
        ctx = executor.context
        return RunResponse(
            output=output.decode("latin-1"),
            exit_reason=ctx.exit_reason.value,
            steps=ctx.steps,
        )

    @app.post("/api/profile", response_model=ProfileResponse)
    def profile_code(payload: ProfileRequest) -> ProfileResponse:
        fused, plain = compare_translations(
            payload.code,
            input_data=to_input_bytes(payload.input),
            max_steps=min(payload.max_steps, step_budget),
        )
        return ProfileResponse(
            output=fused.output.decode("latin-1"),
            fused=_summarize(fused, payload.top),
            plain=_summarize(plain, payload.top),
            steps_saved=plain.steps - fused.steps,
        )

    return app


__all__ = ["create_app"]
