"""
Domain: customer tax-id (CPF) validation.

A CPF is an 11-digit national tax identifier whose last two digits are
check digits:

- First check digit: digits 1-9 weighted 10..2, sum mod 11.
- Second check digit: digits 1-10 weighted 11..2, sum mod 11.
- For both, a remainder below 2 maps to 0, otherwise the digit is 11 - remainder.

Sequences of one repeated digit (000.000.000-00, 111.111.111-11, ...) satisfy
the checksum but are never issued, so they are rejected.

Pure functions, no I/O.
"""

from __future__ import annotations

import re

CPF_LENGTH = 11

_NON_DIGITS = re.compile(r"\D")


def normalize_cpf(raw: str) -> str:
    """Return only the digits of `raw` (punctuation and whitespace dropped)."""

    return _NON_DIGITS.sub("", raw or "")


def _check_digit(digits: str) -> int:
    weight = len(digits) + 1
    total = sum(int(d) * (weight - i) for i, d in enumerate(digits))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def validate_cpf(raw: str) -> bool:
    """
    Validate a CPF given in any common notation.

    Examples:
        validate_cpf("123.456.789-09")  # True
        validate_cpf("12345678909")     # True
        validate_cpf("123.456.789-01")  # False (bad check digits)
        validate_cpf("111.111.111-11")  # False (repeated digit)
    """

    if not isinstance(raw, str):
        return False

    digits = normalize_cpf(raw)
    if len(digits) != CPF_LENGTH:
        return False
    if digits == digits[0] * CPF_LENGTH:
        return False

    first = _check_digit(digits[:9])
    if first != int(digits[9]):
        return False

    second = _check_digit(digits[:10])
    return second == int(digits[10])


__all__ = ["CPF_LENGTH", "normalize_cpf", "validate_cpf"]
