"""Amount and identifier validation utilities."""
import math
from typing import Any

from bson import ObjectId

from app.core.exceptions import InvalidAmountError, NotFoundError
from app.utils.money import to_paise


def _as_paise(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise InvalidAmountError(f"{field} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidAmountError(f"{field} must be a number")
    if not math.isfinite(number):
        raise InvalidAmountError(f"{field} must be a finite number")
    return to_paise(number)


def validate_positive_amount(value: Any, field: str = "amount") -> int:
    """
    Validate an amount that moves money and return it in paise.

    Rules:
    - must parse as a finite number
    - must be at least one paisa once rounded
    """
    paise = _as_paise(value, field)
    if paise <= 0:
        raise InvalidAmountError(f"{field} must be a positive number")
    return paise


def validate_non_negative_amount(value: Any, field: str = "amount") -> int:
    """Validate an absolute amount that may be zero (loan amendments); paise."""
    paise = _as_paise(value, field)
    if paise < 0:
        raise InvalidAmountError(f"{field} must not be negative")
    return paise


def validate_number(value: Any, field: str) -> int:
    """Validate a signed finite amount; paise."""
    return _as_paise(value, field)


def parse_object_id(value: str, what: str) -> ObjectId:
    """Unparseable ids cannot resolve to a record, so they are reported as not found."""
    if isinstance(value, ObjectId):
        return value
    if not ObjectId.is_valid(value):
        raise NotFoundError(f"{what} not found")
    return ObjectId(value)
