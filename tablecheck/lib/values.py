"""Per-cell value validators.

One pure function per data type. Each takes the raw cell text and raises
``ValueTypeError`` when it does not conform; none hold state, so they can
be shared freely across tables and columns.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Callable, Dict

from tablecheck.lib.errors import ValueTypeError
from tablecheck.lib.model import DataType, TypeKind

__all__ = [
    "ValueValidator",
    "validate_bool",
    "validate_date",
    "validate_int",
    "validate_string",
    "validate_value",
    "validator_for",
]

ValueValidator = Callable[[str], None]

# ASCII digits only; int() would also accept underscores, whitespace and
# non-ASCII digits.
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INT = DataType.integer()
_BOOL = DataType.boolean()


def validate_int(raw: str) -> None:
    """Accept a signed 64-bit decimal integer literal."""
    if not _INT_PATTERN.fullmatch(raw) or not INT64_MIN <= int(raw) <= INT64_MAX:
        raise ValueTypeError(_INT, raw)


def validate_bool(raw: str) -> None:
    """Accept exactly ``true`` or ``false``."""
    if raw not in ("true", "false"):
        raise ValueTypeError(_BOOL, raw)


def validate_string(raw: str) -> None:
    """Every string is valid."""


def validate_date(fmt: str) -> ValueValidator:
    """Build a validator for dates written in ``fmt`` (strptime directives)."""
    data_type = DataType.date(fmt)

    def _validate(raw: str) -> None:
        try:
            datetime.strptime(raw, fmt)
        except ValueError:
            raise ValueTypeError(
                data_type,
                raw,
                f"Illegal value for type '{data_type}': '{raw}' does not match format '{fmt}'",
            ) from None

    return _validate


_SIMPLE_VALIDATORS: Dict[TypeKind, ValueValidator] = {
    TypeKind.INT: validate_int,
    TypeKind.BOOL: validate_bool,
    TypeKind.STRING: validate_string,
}


def validator_for(data_type: DataType) -> ValueValidator:
    """Return the validator for ``data_type``."""
    if data_type.kind is TypeKind.DATE:
        return validate_date(data_type.format)
    return _SIMPLE_VALIDATORS[data_type.kind]


def validate_value(data_type: DataType, raw: str) -> None:
    """Validate one raw value against ``data_type``.

    Raises:
        ValueTypeError: If ``raw`` does not conform
    """
    validator_for(data_type)(raw)
