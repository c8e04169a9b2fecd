"""Opaque article identifiers."""
import uuid


def unique_id() -> str:
    """Return a fresh random identifier."""
    return str(uuid.uuid4())


def valid_id(token: str) -> bool:
    """
    Check that token is a UUID in its canonical string form.

    Empty strings, non-strings and anything that does not parse as a UUID
    are invalid.
    """
    if not token or not isinstance(token, str):
        return False

    try:
        parsed = uuid.UUID(token)
    except (ValueError, AttributeError, TypeError):
        return False

    # uuid.UUID also accepts braces, urn prefixes and missing hyphens
    return str(parsed) == token.lower()
