"""Input validators shared by DTOs across modules."""

from __future__ import annotations

import re
from datetime import date

UAE_MOBILE_PATTERN = re.compile(r"^\+971\s?\d{2}\s?\d{3}\s?\d{4}$")
SPECIAL_CHAR_PATTERN = re.compile(r"[!@#$%^&*(),.?\":{}|<>\-_=+\[\]\\/;'`~]")
EXPIRY_PATTERN = re.compile(r"^(0[1-9]|1[0-2])/(\d{2})$")
CVV_PATTERN = re.compile(r"^\d{3,4}$")
UUID_PATTERN = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"


def is_valid_uae_mobile(value: str) -> bool:
    return bool(UAE_MOBILE_PATTERN.match(value.strip()))


def normalize_mobile(value: str) -> str:
    return re.sub(r"\s", "", value)


def password_problems(password: str) -> list[str]:
    """Return the unmet strength rules; an empty list means the password is strong."""
    problems = []
    if len(password) < 8:
        problems.append("Password must be at least 8 characters long.")
    if not re.search(r"[A-Z]", password):
        problems.append("Password must contain an uppercase letter.")
    if not SPECIAL_CHAR_PATTERN.search(password):
        problems.append("Password must contain a special character.")
    return problems


def luhn_valid(number: str) -> bool:
    digits = re.sub(r"[\s-]", "", number)
    if not digits.isdigit() or not 13 <= len(digits) <= 19:
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


def expiry_valid(expiry: str, today: date | None = None) -> bool:
    """``MM/YY`` that is not in the past (the card is valid through its month)."""
    match = EXPIRY_PATTERN.match(expiry.strip())
    if not match:
        return False
    today = today or date.today()
    month, year = int(match.group(1)), 2000 + int(match.group(2))
    return (year, month) >= (today.year, today.month)


def cvv_valid(cvv: str) -> bool:
    return bool(CVV_PATTERN.match(cvv.strip()))


def card_brand(number: str) -> str:
    digits = re.sub(r"\D", "", number)
    if digits.startswith("4"):
        return "Visa"
    if digits[:2] in {"51", "52", "53", "54", "55"} or "2221" <= digits[:4] <= "2720":
        return "Mastercard"
    if digits[:2] in {"34", "37"}:
        return "Amex"
    return "Card"
