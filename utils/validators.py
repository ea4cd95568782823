import re
from email_validator import validate_email, EmailNotValidError

# bcrypt only accepts 72 bytes of input
PASSWORD_MAX_BYTES = 72

PASSWORD_POLICY_MESSAGE = (
    "Password must be at least 8 characters (at most 72 bytes) and contain at least one "
    "uppercase letter, one lowercase letter, and one number"
)

_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"\d")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    try:
        validate_email(email, check_deliverability=False)
        return True
    except EmailNotValidError:
        return False


def is_valid_password(password: str | None) -> bool:
    if not password or len(password) < 8:
        return False
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        return False
    return bool(_UPPER.search(password) and _LOWER.search(password) and _DIGIT.search(password))
