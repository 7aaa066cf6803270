"""
normalize.validators
--------------------
Sanity checks used by the record normalizers.
"""

import re

_EMAIL_RX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_valid_doc_id(value: str | None) -> bool:
    """Firestore document ids: non-empty, no '/', not '.' or '..'."""
    if not value:
        return False
    if "/" in value or value in (".", ".."):
        return False
    return True


def looks_like_email(value: str | None) -> bool:
    """Return True when value has a plausible local@domain.tld shape."""
    if not value:
        return False
    return bool(_EMAIL_RX.match(value))
