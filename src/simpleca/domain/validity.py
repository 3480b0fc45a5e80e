"""
Validity window model — not-before / not-after from day offsets.

Each bound is resolved once, at construction, to `now + days`. A bound the
caller does not supply stays None. The two bounds are independent: an
inverted window (not-before after not-after) is accepted as is.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta

from simpleca.config import MAX_DAYS
from simpleca.domain.models import ValidityWindow
from simpleca.railway import ErrorCode, Result

type DayCount = int | str | None


def parse_days(value: int | str, label: str) -> Result[int]:
    """
    Normalize a day offset to a non-negative int in the uint32 range.

    Strings (as they arrive from the command line) must be plain decimal digits.
    """
    if isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdecimal()):
            return Result.failure(
                ErrorCode.INVALID_INPUT, f"{label}: {value!r} is not a valid day count"
            )
        value = int(text)

    if isinstance(value, bool) or not isinstance(value, int):
        return Result.failure(ErrorCode.INVALID_INPUT, f"{label}: day count must be an integer")

    return Result.success(value).ensure(
        lambda days: 0 <= days <= MAX_DAYS,
        ErrorCode.INVALID_INPUT,
        f"{label}: day count {value} is out of range 0..{MAX_DAYS}",
    )


def _days_from(now: datetime, value: int | str, label: str) -> Result[datetime]:
    return parse_days(value, label).flat_map(
        lambda days: Result.from_computation(
            lambda: now + timedelta(days=days),
            ErrorCode.INVALID_INPUT,
            f"{label}: {days} days from now is not a representable date",
        )
    )


def build_validity(
    before_days: DayCount = None,
    after_days: DayCount = None,
    now: datetime | None = None,
) -> Result[ValidityWindow]:
    """
    Build a ValidityWindow from optional day offsets.

    `now` defaults to the current UTC time and is shared by both bounds.
    Fails with INVALID_INPUT on non-numeric, negative or out-of-range counts,
    and on a naive `now`.
    """
    if now is None:
        now = datetime.now(UTC)
    elif now.utcoffset() is None:
        return Result.failure(ErrorCode.INVALID_INPUT, "now must be a timezone-aware datetime")

    window: Result[ValidityWindow] = Result.success(ValidityWindow())

    if before_days is not None:
        window = window.flat_map(
            lambda w: _days_from(now, before_days, "before").map(
                lambda ts: replace(w, not_before=ts)
            )
        )

    if after_days is not None:
        window = window.flat_map(
            lambda w: _days_from(now, after_days, "after").map(
                lambda ts: replace(w, not_after=ts)
            )
        )

    return window
