import re

PHONE_PATTERN = re.compile(r"^(?:\+8801|8801|01)[3-9]\d{8}$")

_PHONE_NOISE = re.compile(r"[\s\-().]")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_phone(phone: str) -> str:
    """Map every accepted mobile form onto ``8801XXXXXXXXX``.

    Input that does not look like a mobile number is returned with the
    separators removed and otherwise untouched.
    """
    digits = _PHONE_NOISE.sub("", phone)
    if digits.startswith("+"):
        digits = digits[1:]
    if digits.startswith("880"):
        return digits
    if digits.startswith("0"):
        return "88" + digits
    if digits.startswith("1") and len(digits) == 10:
        return "880" + digits
    return digits


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_PATTERN.match(phone))
