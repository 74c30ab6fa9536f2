from __future__ import annotations

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, List

from ..core.exceptions import InvalidEmbedding, ValidationError

USERNAME_RE = re.compile(r"^[a-zA-Z0-9_-]{3,30}$")


def require_non_empty(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if not isinstance(value, str) or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_username(value: str) -> str:
    value = require_non_empty(value, "Username")
    if not USERNAME_RE.match(value):
        raise ValidationError("Username must be 3-30 characters: letters, digits, '_' or '-'")
    return value


def require_embedding(value: Any) -> List[float]:
    """A face embedding is a non-empty list of finite numbers."""
    if not isinstance(value, (list, tuple)) or len(value) == 0:
        raise InvalidEmbedding("Embedding must be a non-empty array of numbers")
    out: list[float] = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            raise InvalidEmbedding("Embedding must be a non-empty array of numbers")
        try:
            number = float(item)
        except OverflowError:
            raise InvalidEmbedding("Embedding contains a non-finite value")
        if not math.isfinite(number):
            raise InvalidEmbedding("Embedding contains a non-finite value")
        out.append(number)
    return out


def require_non_negative_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{field_name} must be a non-negative number")
    try:
        return amount.quantize(Decimal("0.01"))
    except InvalidOperation:
        raise ValidationError(f"{field_name} is too large")


def require_int(value: Any, field_name: str, *, minimum: int | None = None, maximum: int | None = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{field_name} must be an integer")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field_name} must be >= {minimum}")
    if maximum is not None and number > maximum:
        raise ValidationError(f"{field_name} must be <= {maximum}")
    return number
