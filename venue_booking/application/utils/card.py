from __future__ import annotations

import re

_CARD_BRANDS = (
    (re.compile(r"^4"), "Visa"),
    (re.compile(r"^5[1-5]"), "Mastercard"),
    (re.compile(r"^3[47]"), "American Express"),
    (re.compile(r"^6(?:011|5)"), "Discover"),
)


def clean_card_number(card_number: str) -> str:
    return re.sub(r"\s+", "", card_number or "")


def validate_card_number(card_number: str) -> bool:
    """Luhn checksum over the digits of the card number."""
    digits = clean_card_number(card_number)
    if not digits.isdigit():
        return False

    total = 0
    for index, char in enumerate(reversed(digits)):
        digit = int(char)
        if index % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def format_card_number(card_number: str) -> str:
    digits = clean_card_number(card_number)
    return " ".join(digits[i : i + 4] for i in range(0, len(digits), 4))


def card_brand(card_number: str) -> str:
    digits = clean_card_number(card_number)
    for pattern, brand in _CARD_BRANDS:
        if pattern.match(digits):
            return brand
    return "Unknown"
