"""Resource identifiers: UUIDs, compared only in their canonical string form."""

import uuid

from geocats.core.errors import InvalidIdentifierError


def parse_identifier(value: object) -> uuid.UUID:
    """Parse a UUID from a string or UUID. Raises InvalidIdentifierError on malformed input."""
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidIdentifierError(value)
    try:
        return uuid.UUID(value.strip())
    except ValueError as e:
        raise InvalidIdentifierError(value) from e


def normalize_identifier(value: object) -> str:
    """Canonical form: lowercase, hyphenated UUID string."""
    return str(parse_identifier(value))
