"""
Tests for `domain/document.py`.

Covers contract rules:
- Punctuation and whitespace are ignored; exactly 11 digits are required.
- Both check digits must match (weights 10..2 and 11..2, remainder < 2 -> 0).
- Repeated-digit sequences are rejected even though they pass the checksum.
"""

from __future__ import annotations

import pytest

from domain.document import normalize_cpf, validate_cpf


@pytest.mark.parametrize(
    "raw",
    [
        "123.456.789-09",
        "12345678909",
        " 123 456 789 09 ",
        "529.982.247-25",
        "111.444.777-35",
    ],
)
def test_valid_cpfs_are_accepted(raw: str) -> None:
    assert validate_cpf(raw) is True


def test_wrong_check_digits_are_rejected() -> None:
    """Only the last two digits differ from a valid CPF."""

    assert validate_cpf("123.456.789-01") is False
    assert validate_cpf("12345678901") is False
    # First digit right, second wrong.
    assert validate_cpf("12345678908") is False


@pytest.mark.parametrize("digit", list("0123456789"))
def test_repeated_digit_sequences_are_rejected(digit: str) -> None:
    assert validate_cpf(digit * 11) is False


@pytest.mark.parametrize("raw", ["", "1234567890", "123456789091", "abc.def.ghi-jk", "---"])
def test_wrong_length_is_rejected(raw: str) -> None:
    assert validate_cpf(raw) is False


def test_non_string_input_is_rejected() -> None:
    assert validate_cpf(None) is False  # type: ignore[arg-type]
    assert validate_cpf(12345678909) is False  # type: ignore[arg-type]


def test_remainder_below_two_maps_to_zero() -> None:
    """123.456.789-09 (remainder 1) and 000.000.014-06 (remainder 0) both take a 0 first check digit."""

    assert validate_cpf("123.456.789-09") is True
    assert validate_cpf("000.000.014-06") is True
    assert validate_cpf("000.000.014-16") is False
    # 100.000.000-19: remainders 10 and 2 give digits 1 and 9
    assert validate_cpf("100.000.000-19") is True


def test_normalize_strips_punctuation() -> None:
    assert normalize_cpf("123.456.789-09") == "12345678909"
    assert normalize_cpf("") == ""
