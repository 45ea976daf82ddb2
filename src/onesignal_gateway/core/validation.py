"""Input validation predicates shared by the request handlers."""

import re
from typing import Any, Iterable, List, Mapping, Sequence, Union

from onesignal_gateway.utils.errors import InvalidEmailError, MissingFieldsError

# local@domain.tld, no whitespace, exactly one @
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: Any) -> bool:
    """Basic syntactic email check."""
    return isinstance(value, str) and EMAIL_PATTERN.match(value) is not None


def is_missing(value: Any) -> bool:
    """A field is missing when absent or empty (None, "", [], {})."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def missing_fields(values: Mapping[str, Any], required: Iterable[str]) -> List[str]:
    """Names of required fields that are missing, in the order given."""
    return [name for name in required if is_missing(values.get(name))]


def require_fields(values: Mapping[str, Any], required: Iterable[str]) -> None:
    """Raise MissingFieldsError listing every missing required field."""
    missing = missing_fields(values, required)
    if missing:
        raise MissingFieldsError(missing)


def normalize_recipients(email: Union[str, Sequence[str]]) -> List[str]:
    """Accept one address or a list of addresses; validate each.

    Raises:
        InvalidEmailError: if any address fails the syntactic check
    """
    recipients = [email] if isinstance(email, str) else list(email)
    for recipient in recipients:
        if not is_valid_email(recipient):
            raise InvalidEmailError(recipient if isinstance(recipient, str) else None)
    return recipients
