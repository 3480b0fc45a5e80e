"""
Execution contexts — wrap a Result-returning computation with side effects.

The CLI runs every command inside a LoggingExecutionContext so each key,
request or certificate operation gets one start line and one outcome line
with its duration, without the core functions knowing about it.
"""

from __future__ import annotations

import time
from typing import Callable, Protocol, TypeVar, runtime_checkable

import structlog

from simpleca.railway.failure import ErrorCode
from simpleca.railway.result import Result

T = TypeVar("T")
log = structlog.get_logger()


@runtime_checkable
class ExecutionContext(Protocol):
    """Anything with execute(computation) -> Result satisfies this protocol."""

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]: ...


class NoOpExecutionContext:
    """Passthrough context — runs the computation as is."""

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        return computation()


class LoggingExecutionContext:
    """
    Logs entry, exit, duration, and result state of an operation.

        ctx = LoggingExecutionContext(operation="ca")
        result = ctx.execute(lambda: issue_root_certificate(key, name, window))
    """

    def __init__(
        self,
        inner: ExecutionContext | None = None,
        operation: str = "unknown",
    ) -> None:
        self._inner = inner or NoOpExecutionContext()
        self._operation = operation

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        log.debug("operation.started", operation=self._operation)
        start = time.monotonic()

        try:
            result = self._inner.execute(computation)
        except Exception as e:
            elapsed = time.monotonic() - start
            log.error(
                "operation.crashed",
                operation=self._operation,
                elapsed=round(elapsed, 3),
                error=str(e),
                exc_type=type(e).__name__,
            )
            return Result.failure(
                ErrorCode.UNEXPECTED_ERROR,
                f"Unclassified crash in {self._operation}: {type(e).__name__}: {e}",
                e,
            )

        elapsed = time.monotonic() - start
        if result.is_success():
            log.info("operation.completed", operation=self._operation, elapsed=round(elapsed, 3))
        else:
            log.warning(
                "operation.failed",
                operation=self._operation,
                elapsed=round(elapsed, 3),
                code=result.error().code.value,
                failure=result.error().message,
            )
        return result
