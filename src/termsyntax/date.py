"""Epoch and RFC 3339 timestamp normalization.

Timestamps are exchanged either as integer epochs in one of three units
(``secs``, ``msecs``, ``usecs``) or as RFC 3339 text in UTC. All functions
raise :class:`DateError` on malformed input.
"""

import re
import time
from datetime import datetime, timedelta, timezone
from typing import Literal

EpochUnit = Literal["secs", "msecs", "usecs"]

_UNIT_FACTOR: dict[str, int] = {"secs": 1_000_000, "msecs": 1_000, "usecs": 1}
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_RFC3339_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})(\.\d+)?([Zz]|[+\-]\d{2}:\d{2})$"
)
_QUICK_3339_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?Z$")


class DateError(ValueError):
    """Raised when a value cannot be converted to a timestamp."""


def _check_unit(unit: str) -> int:
    try:
        return _UNIT_FACTOR[unit]
    except KeyError:
        raise DateError(f"Invalid epoch unit: {unit!r}") from None


def epoch(unit: EpochUnit = "secs") -> int:
    """Current time as an integer epoch in *unit*."""
    return time.time_ns() // 1000 // _check_unit(unit)


def _norm_date(text: str) -> str:
    """Complete partial dates (``YYYY``, ``YYYY-MM``, ``YYYY-MM-DD``)."""
    if re.fullmatch(r"\d{4}", text):
        return f"{text}-01-01T00:00:00Z"
    if re.fullmatch(r"\d{4}-\d{2}", text):
        return f"{text}-01T00:00:00Z"
    if re.fullmatch(r"\d{4}-\d{2}-\d{2}", text):
        return f"{text}T00:00:00Z"
    return text


def _to_text(value: str | bytes) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _parse_usecs(text: str) -> int:
    """Parse RFC 3339 *text* into microseconds since the epoch."""
    match = _RFC3339_RE.match(text.strip())
    if not match:
        raise DateError(f"Invalid RFC 3339 date: {text!r}")
    year, month, day, hour, minute, second, frac, offset = match.groups()
    try:
        base = datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second),
            tzinfo=timezone.utc,
        )
    except ValueError as e:
        raise DateError(f"Invalid RFC 3339 date: {text!r}: {e}") from e
    usecs = (base - _EPOCH) // timedelta(microseconds=1)
    if frac:
        usecs += int(frac[1:7].ljust(6, "0"))
    if offset not in ("Z", "z"):
        sign = 1 if offset[0] == "+" else -1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        usecs -= sign * (hours * 3600 + minutes * 60) * 1_000_000
    return usecs


def _digits_unit(value: int) -> EpochUnit:
    """Guess the unit of an epoch from its number of digits."""
    size = len(str(abs(value)))
    if size <= 10:
        return "secs"
    if size <= 13:
        return "msecs"
    return "usecs"


def to_3339(value: int | str | bytes, unit: EpochUnit = "secs") -> str:
    """Convert an epoch in *unit*, or RFC 3339 text, to normalized RFC 3339.

    The result is always UTC with a ``Z`` suffix. A fractional part with six
    digits is added when the precision of *unit* leaves a non-zero remainder.

    Examples:
        >>> to_3339(1435708750, "secs")
        '2015-06-30T23:59:10Z'
        >>> to_3339("1980-02", "secs")
        '1980-02-01T00:00:00Z'
    """
    factor = _check_unit(unit)
    if isinstance(value, bool):
        raise DateError(f"Invalid timestamp: {value!r}")
    if isinstance(value, int):
        usecs = value * factor
    elif isinstance(value, (str, bytes)):
        usecs = _parse_usecs(_norm_date(_to_text(value).strip())) // factor * factor
    else:
        raise DateError(f"Invalid timestamp: {value!r}")

    try:
        stamp = _EPOCH + timedelta(microseconds=usecs)
    except OverflowError as e:
        raise DateError(f"Timestamp out of range: {value!r}") from e
    text = stamp.strftime("%Y-%m-%dT%H:%M:%S")
    if stamp.microsecond:
        text += f".{stamp.microsecond:06d}"
    return text + "Z"


def to_epoch(value: int | str | bytes, unit: EpochUnit = "secs") -> int:
    """Convert an epoch in any unit, or RFC 3339 text, to an epoch in *unit*.

    Integer input has its own unit guessed from its number of digits
    (up to 10 digits are seconds, up to 13 milliseconds, otherwise
    microseconds).
    """
    factor = _check_unit(unit)
    if isinstance(value, bool):
        raise DateError(f"Invalid timestamp: {value!r}")
    if isinstance(value, int):
        usecs = value * _UNIT_FACTOR[_digits_unit(value)]
    elif isinstance(value, (str, bytes)):
        usecs = _parse_usecs(_to_text(value))
    else:
        raise DateError(f"Invalid timestamp: {value!r}")
    return usecs // factor


def is_3339(value: str | bytes) -> tuple[datetime, float, EpochUnit] | None:
    """Quick check for UTC RFC 3339 text.

    Returns:
        ``(datetime, fraction, unit)`` where *unit* is the precision implied by
        the fractional digits, or ``None`` if *value* is not of that form.
    """
    match = _QUICK_3339_RE.match(_to_text(value))
    if not match:
        return None
    year, month, day, hour, minute, second, frac = match.groups()
    try:
        stamp = datetime(int(year), int(month), int(day), int(hour), int(minute), int(second))
    except ValueError:
        return None
    if frac is None:
        return stamp, 0.0, "secs"
    return stamp, float(f"0.{frac}"), "msecs" if len(frac) < 4 else "usecs"
