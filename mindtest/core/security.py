import re
import secrets
import uuid

# Accepts our own tokens as well as legacy nanoid / uuid cookies
_SESSION_TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]{8,128}$")


def generate_session_token() -> str:
    """Generate a new opaque visitor session token."""
    return secrets.token_urlsafe(16)


def is_valid_session_token(token: str | None) -> bool:
    """Check that a presented session token is well formed."""
    return bool(token) and _SESSION_TOKEN_RE.match(token) is not None


def generate_record_id() -> str:
    """Generate a unique id for an event or result row."""
    return str(uuid.uuid4())
