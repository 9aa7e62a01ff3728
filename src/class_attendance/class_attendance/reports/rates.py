"""The two attendance-rate metrics.

They use different denominators and different empty-data results, so they
are kept as separate functions and never substituted for one another.
Percentages are whole numbers rounded half-up (1/3 -> 33, 1/8 -> 13).
"""

from __future__ import annotations

from typing import Union

from ..core.constants import NOT_AVAILABLE

Rate = Union[int, str]


def _percent(numerator: int, denominator: int) -> int:
    # Integer half-up rounding of numerator / denominator * 100.
    return (200 * numerator + denominator) // (2 * denominator)


def day_attendance_rate(present: int, recorded: int) -> int:
    """present / recorded records for a date. 0 when nothing is recorded."""
    if recorded <= 0:
        return 0
    return _percent(present, recorded)


def enrollment_attendance_rate(present: int, recorded_days: int) -> Rate:
    """present / recorded days over a range. "N/A" when nothing is recorded."""
    if recorded_days <= 0:
        return NOT_AVAILABLE
    return _percent(present, recorded_days)


def format_rate(rate: Rate) -> str:
    return rate if isinstance(rate, str) else f"{rate}%"
