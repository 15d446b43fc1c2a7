"""JWT access token creation and validation.

Session issuance belongs to an external login service; this module only needs
to verify the bearer token it hands out and read the user id from it.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from livecomment.config.settings import get_settings


ACCESS_TOKEN_TYPE = "access"


def create_access_token(
    user_id: int,
    expires_delta: timedelta | None = None,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """Create a signed access token for ``user_id``.

    Token payload includes:
        - sub: the user id as a string
        - exp: expiration timestamp
        - iat: issued at timestamp
        - type: "access"
    """
    settings = get_settings()

    now = datetime.now(UTC)
    to_encode: dict[str, Any] = dict(extra_claims or {})
    to_encode.update(
        {
            "sub": str(user_id),
            "exp": now
            + (
                expires_delta
                or timedelta(minutes=settings.auth_access_token_expire_minutes)
            ),
            "iat": now,
            "type": ACCESS_TOKEN_TYPE,
        }
    )

    return jwt.encode(
        to_encode,
        settings.auth_secret_key,
        algorithm=settings.auth_algorithm,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Raises:
        JWTError: If the signature is invalid, the token expired, or it is
            not an access token
    """
    settings = get_settings()

    payload = jwt.decode(
        token,
        settings.auth_secret_key,
        algorithms=[settings.auth_algorithm],
    )

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        msg = "Invalid token type"
        raise JWTError(msg)

    return payload


def user_id_from_payload(payload: dict[str, Any]) -> int:
    """Read the integer user id from the ``sub`` claim.

    Raises:
        JWTError: If the claim is missing or not an integer
    """
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        msg = "Invalid subject claim"
        raise JWTError(msg) from e
