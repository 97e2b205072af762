from passlib.context import CryptContext

# bcrypt configuration
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto"
)

# bcrypt hard limit
MAX_BCRYPT_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_BCRYPT_BYTES


def hash_password(password: str) -> str:
    """
    Hash a password safely using bcrypt.
    Enforces bcrypt 72-byte limit.
    """
    if password_too_long(password):
        raise ValueError("Password too long (max 72 bytes)")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """
    Verify password safely.
    A missing hash still runs one dummy bcrypt round.
    """
    if not hashed_password or password_too_long(plain_password):
        pwd_context.dummy_verify()
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False
