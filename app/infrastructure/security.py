"""Security helpers for viewer token handling."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config import get_settings

DEFAULT_TOKEN_LIFETIME = timedelta(minutes=60)

settings = get_settings()


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or DEFAULT_TOKEN_LIFETIME)
    return jwt.encode(
        {**data, "exp": expire}, settings.secret_key, algorithm=settings.jwt_algorithm
    )


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(
            token, settings.secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc
