import secrets
import string


BOOKING_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_booking_code(length: int = 8) -> str:
    return ''.join(secrets.choice(BOOKING_CODE_ALPHABET) for _ in range(length))


def normalize_booking_code(code: str) -> str:
    return code.strip().upper()
