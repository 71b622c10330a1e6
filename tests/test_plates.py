"""Tests for license plate normalization."""

import pytest

from parking_pay.domain import normalize_plate


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("abc-123", "ABC123"),
        ("AB12 CDE", "AB12CDE"),
        ("  ab.12/cd  ", "AB12CD"),
        ("ABC123", "ABC123"),
        ("---", ""),
        ("", ""),
    ],
)
def test_normalize_plate(raw, expected):
    assert normalize_plate(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["abc-123", "x y z", "ñandú 42", "straße 7", "🚗 CAR-1", "a\tb\nc", "12-34-56"],
)
def test_normalize_is_idempotent(raw):
    once = normalize_plate(raw)
    assert normalize_plate(once) == once


def test_normalized_plate_is_uppercase_alphanumeric():
    plate = normalize_plate("straße-7 ñ")
    assert plate == "STRASSE7"
    assert all(c.isascii() and c.isalnum() and not c.islower() for c in plate)
