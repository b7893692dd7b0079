import re
from typing import Dict

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-']+$")


class SubscriberError(ValueError):
    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__("Subscriber validation failed")

    @property
    def first_message(self) -> str:
        return next(iter(self.errors.values()))


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def _validate_subscriber(email: str, name: str) -> None:
    """
    Checks an already-sanitized email/name pair. Raises SubscriberError
    with the first failing rule per field.
    """
    errors: Dict[str, str] = {}

    if not is_valid_email(email):
        errors["email"] = "Please provide a valid email address"
    elif len(email) > 254:
        errors["email"] = "Email address is too long"

    if name:
        if len(name) > 100:
            errors["name"] = "Name is too long"
        elif not NAME_PATTERN.match(name):
            errors["name"] = "Name contains invalid characters"

    if errors:
        raise SubscriberError(errors)
