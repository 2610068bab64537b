"""
utils/keys.py
-------------
Identifier helpers. Every catalog row is keyed by a canonical UUID string.
"""

import uuid


def generate_id() -> str:
    """Return a new random identifier in canonical 36-character UUID form."""
    return str(uuid.uuid4())


def is_uuid(value: str) -> bool:
    """True when ``value`` parses as a UUID."""
    try:
        uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return False
    return True
