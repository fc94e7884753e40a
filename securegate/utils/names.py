"""
Role / permission name rules.

Names are stored stripped and lower-cased. A name that starts with an
integer literal ("123", "42abc", "-7") is rejected so that names can never
be confused with ids.
"""

import re

from securegate.core.exceptions import BadRequestError

_NUMERIC_PREFIX = re.compile(r"^[+-]?\d")


def normalize_name(name: str) -> str:
    return name.strip().lower()


def is_numeric_name(name: str) -> bool:
    return bool(_NUMERIC_PREFIX.match(name.strip()))


def validate_name(name: str, label: str) -> str:
    """
    Normalize ``name`` and check it is usable as a role/permission name.

    Raises:
        BadRequestError: blank or numeric name
    """
    normalized = normalize_name(name or "")
    if not normalized:
        raise BadRequestError(f"{label} name can't be empty")
    if is_numeric_name(normalized):
        raise BadRequestError(f"{label} can't be a number")
    return normalized
