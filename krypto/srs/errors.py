"""
Engine error taxonomy.

- KryptoError: base for everything the engine raises itself
- ItemNotFound: grading an id the store does not know
- InvalidThreshold: bad configuration, rejected when settings are built
"""

from __future__ import annotations


class KryptoError(Exception):
    """Base class for krypto errors."""


class ItemNotFound(KryptoError, KeyError):
    """Raised when a review targets an id that is not in the store."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(item_id)

    def __str__(self) -> str:
        return f"Review item not found: {self.item_id}"


class InvalidThreshold(KryptoError, ValueError):
    """Raised for a non-positive or out-of-range configuration value."""

    def __init__(self, field: str, value: object, reason: str = "must be positive"):
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}={value!r}: {reason}")
