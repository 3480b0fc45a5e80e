"""
Railway-Oriented Programming primitives used throughout simpleca.

    from simpleca.railway import Result, ErrorCode

    def require_common_name(cn: str) -> Result[str]:
        if not cn:
            return Result.failure(ErrorCode.INVALID_INPUT, "common name is required")
        return Result.success(cn)
"""

from simpleca.railway.result import Result, Success, Failure
from simpleca.railway.failure import ErrorCode, FailureDescription
from simpleca.railway.execution import (
    ExecutionContext,
    NoOpExecutionContext,
    LoggingExecutionContext,
)
from simpleca.railway.assertions import ResultAssertions

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "ExecutionContext",
    "NoOpExecutionContext",
    "LoggingExecutionContext",
    "ResultAssertions",
]
