"""JWT token creation and verification.

HS256 with one shared JWT_SECRET. Tokens are not revocable; an access token
stays valid until it expires, so keep JWT_EXPIRE_MINUTES short.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.ms_common.errors import InvalidCredentialsError, InvalidRefreshTokenError

_ALGORITHM = settings.JWT_ALGORITHM
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
_REFRESH_EXPIRE = timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)


def _encode(account_id: str, token_type: str, lifetime: timedelta) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": account_id,
        "type": token_type,
        "iat": now,
        "exp": now + lifetime,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def create_access_token(account_id: str) -> str:
    return _encode(account_id, "access", _ACCESS_EXPIRE)


def create_refresh_token(account_id: str) -> str:
    return _encode(account_id, "refresh", _REFRESH_EXPIRE)


def decode_token(token: str, expected_type: str) -> dict[str, str]:
    """Decode and validate a token of the given type ("access" or "refresh").

    Raises:
        InvalidCredentialsError: bad or expired access token.
        InvalidRefreshTokenError: bad or expired refresh token.
    """
    payload: dict[str, str] = {}
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[_ALGORITHM])
    except JWTError:
        _raise_auth_error(expected_type)

    # A refresh token must never pass as an access token and vice versa.
    if payload.get("type") != expected_type:
        _raise_auth_error(expected_type)

    return payload


def _raise_auth_error(expected_type: str) -> None:
    if expected_type == "access":
        raise InvalidCredentialsError()
    raise InvalidRefreshTokenError()
