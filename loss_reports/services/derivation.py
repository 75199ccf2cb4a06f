"""Derived-field computation shared by the write path and the export path.

All functions here are pure and deterministic. They hold no state, so they
are safe to call from any number of concurrent requests.
"""

import hashlib
import math
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, NamedTuple, Optional

from loss_reports.exceptions import ValidationError

RESTAURANT_DELIMITER = " — "
IDENTITY_SEPARATOR = "\x1f"

MISSING_FIELDS_MESSAGE = "required fields missing"
NON_POSITIVE_AMOUNT_MESSAGE = "amount must be positive"
AMOUNT_TOO_LARGE_MESSAGE = "amount too large"

# Largest value a BigInteger column holds.
MAX_AMOUNT = 2**63 - 1

_TIMESTAMP_RE = re.compile(r"^([0-9]{2})\.([0-9]{2})\.([0-9]{4}) ([0-9]{2}):([0-9]{2})$")


@dataclass(frozen=True)
class ValidatedSubmission:
    """Normalized required fields plus the whole-unit amount."""

    manager: str
    restaurant: str
    reason: str
    amount: int


class RestaurantParts(NamedTuple):
    code: str
    name: str


def normalize(value: Any) -> str:
    """Trim and collapse internal whitespace runs. ``None`` becomes ``""``."""
    if value is None:
        return ""
    return " ".join(str(value).split())


def _parse_amount(amount: Any) -> Optional[Decimal]:
    """Parse a numeric amount from a number or numeric string; None if not finite."""
    if amount is None or isinstance(amount, bool):
        return None
    if isinstance(amount, float):
        if not math.isfinite(amount):
            return None
        return Decimal(amount)
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def round_amount(value: Decimal) -> int:
    """Round to the nearest whole unit, halves away from zero."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def validate_submission(manager: Any, restaurant: Any, reason: Any, amount: Any) -> ValidatedSubmission:
    """
    Validate and normalize the required fields of a submission.

    Args:
        manager: Manager name
        restaurant: Restaurant label, optionally ``code — name``
        reason: Loss reason
        amount: Number or numeric string

    Returns:
        ValidatedSubmission with normalized strings and integer amount

    Raises:
        ValidationError: If a required field is empty or the amount is not
            a finite number that rounds to a positive whole unit no larger
            than ``MAX_AMOUNT``
    """
    manager_n = normalize(manager)
    restaurant_n = normalize(restaurant)
    reason_n = normalize(reason)
    if not manager_n or not restaurant_n or not reason_n:
        missing = [
            name
            for name, value in (
                ("manager", manager_n),
                ("restaurant", restaurant_n),
                ("reason", reason_n),
            )
            if not value
        ]
        raise ValidationError(MISSING_FIELDS_MESSAGE, details={"missing": missing})

    parsed = _parse_amount(amount)
    if parsed is None or parsed <= 0:
        raise ValidationError(NON_POSITIVE_AMOUNT_MESSAGE, details={"amount": str(amount)})

    if parsed > MAX_AMOUNT:
        raise ValidationError(
            AMOUNT_TOO_LARGE_MESSAGE, details={"amount": str(amount), "max": MAX_AMOUNT}
        )

    # 0 < amount < 0.5 would round to zero.
    rounded = round_amount(parsed)
    if rounded <= 0:
        raise ValidationError(NON_POSITIVE_AMOUNT_MESSAGE, details={"amount": str(amount)})

    return ValidatedSubmission(
        manager=manager_n,
        restaurant=restaurant_n,
        reason=reason_n,
        amount=rounded,
    )


def parse_timestamp(text: Any) -> Optional[datetime]:
    """
    Parse ``DD.MM.YYYY HH:MM`` into a naive datetime.

    Returns None for anything else, including calendar-invalid values that
    ``datetime`` refuses to build (month 13, day 32, hour 24).
    """
    if not isinstance(text, str):
        return None
    match = _TIMESTAMP_RE.match(text)
    if match is None:
        return None
    day, month, year, hour, minute = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day, hour, minute)
    except ValueError:
        return None


def duration_hours(start: Any, end: Any) -> Optional[float]:
    """Hours from ``start`` to ``end`` rounded to 2 places, or None if either is unparseable.

    Negative results are returned as-is.
    """
    start_dt = parse_timestamp(start)
    end_dt = parse_timestamp(end)
    if start_dt is None or end_dt is None:
        return None
    return round((end_dt - start_dt).total_seconds() / 3600, 2)


def split_restaurant(text: Any) -> RestaurantParts:
    """Split ``code — name`` on the first delimiter only."""
    value = "" if text is None else str(text)
    code, delimiter, name = value.partition(RESTAURANT_DELIMITER)
    if not delimiter:
        return RestaurantParts(code="", name=value.strip())
    return RestaurantParts(code=code.strip(), name=name.strip())


def derive_request_identity(
    manager: Any,
    restaurant: Any,
    reason: Any,
    amount: int,
    start: Any = None,
    end: Any = None,
    comment: Any = None,
) -> str:
    """SHA-256 over the normalized field values, joined by the unit separator."""
    parts = [
        normalize(manager),
        normalize(restaurant),
        normalize(reason),
        str(int(amount)),
        normalize(start),
        normalize(end),
        normalize(comment),
    ]
    payload = IDENTITY_SEPARATOR.join(parts)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
