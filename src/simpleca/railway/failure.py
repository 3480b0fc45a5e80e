"""
Failure description — structured error information for the failure track.

A single closed ErrorCode enum covers every way an issuance call can fail.
Library exceptions are never surfaced directly: the boundary that catches
them picks one of these codes and keeps the original exception attached.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique
from typing import Optional


@unique
class ErrorCode(Enum):
    """
    Error taxonomy for key, request and certificate operations.

    INVALID_INPUT and DECODE_ERROR are caller problems; CRYPTO_ERROR and
    IO_ERROR come from the primitives and the storage layer. UNEXPECTED_ERROR
    marks a crash that escaped every boundary.
    """

    INVALID_INPUT = "INVALID_INPUT"
    """Missing or malformed caller field: empty common name, bad day count."""

    CRYPTO_ERROR = "CRYPTO_ERROR"
    """Key generation, extension construction, encoding or signing failed."""

    DECODE_ERROR = "DECODE_ERROR"
    """Malformed PEM key, certificate or request bytes."""

    IO_ERROR = "IO_ERROR"
    """Reading or writing an artifact file failed."""

    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"
    """An exception no boundary classified; a bug, not a primitive failure."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor carrying error code, message, optional exception, and timestamp.

    >>> desc = FailureDescription(ErrorCode.INVALID_INPUT, "common name is required")
    >>> desc.code
    <ErrorCode.INVALID_INPUT: 'INVALID_INPUT'>
    """

    code: ErrorCode
    message: str
    exception: Optional[BaseException] = field(default=None, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def full_stack_trace(self) -> str:
        """Message followed by the formatted exception chain, if any."""
        if self.exception is None:
            return self.message
        tb = "".join(
            traceback.format_exception(type(self.exception), self.exception, self.exception.__traceback__)
        )
        return f"{self.message}\n{tb}"

    def __str__(self) -> str:
        if self.exception is None:
            return f"{self.code.value}: {self.message}"
        return f"{self.code.value}: {self.message} ({self.exception})"
