"""Utility for issuing and verifying helpdesk access tokens."""

import uuid
from datetime import datetime, timedelta, timezone

import jwt

from app.settings import settings
from app.utils.exceptions import AuthenticationError


def create_access_token(user_id: uuid.UUID | str, role: str) -> str:
    """
    Creates a signed access token for a provisioned user.

    Production tokens come from the identity provider; this is used by the
    maintenance scripts and the test-suite, which share the signing secret.

    Args:
        user_id: The id of the user, stored as the token subject.
        role: The user's role, informational only; the database row is authoritative.

    Returns:
        str: The encoded JWT token.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        "sub": str(user_id),
        "role": role,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> uuid.UUID:
    """Verify a token and return the user id it was issued for."""
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired.") from None
    except jwt.InvalidTokenError as e:
        raise AuthenticationError("Invalid or expired token") from e

    subject = payload.get("sub")
    if subject is None:
        raise AuthenticationError("Invalid token: Subject not found.")
    try:
        return uuid.UUID(subject)
    except ValueError as e:
        raise AuthenticationError("Invalid authentication token") from e
