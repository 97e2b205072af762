from datetime import datetime, timedelta

from jose import JWTError, jwt

from config.env import JWT_SECRET, JWT_ALGORITHM, OAUTH_STATE_MINUTES


def _require_jwt_secret() -> str:
    secret = (JWT_SECRET or "").strip()
    if not secret:
        raise RuntimeError("JWT_SECRET is not configured")
    return secret


def sign_claims(claims: dict, *, purpose: str, minutes: int = OAUTH_STATE_MINUTES) -> str:
    """Short-lived token bound to one purpose."""
    now = datetime.utcnow()
    payload = {
        **claims,
        "purpose": purpose,
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, _require_jwt_secret(), algorithm=JWT_ALGORITHM)


def read_claims(token: str, *, purpose: str) -> dict:
    payload = jwt.decode(token, _require_jwt_secret(), algorithms=[JWT_ALGORITHM])
    if payload.get("purpose") != purpose:
        raise JWTError("token issued for another purpose")
    return payload
