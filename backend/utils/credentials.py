import logging

from fastapi.concurrency import run_in_threadpool

from utils.errors import DuplicateKey, InvalidCredential
from utils.hash import hash_password, verify_password, password_too_long
from utils.identity_store import create_user, find_user_by_username, find_user_by_email

logger = logging.getLogger(__name__)


def normalize_username(username: str) -> str:
    return username.strip().lower()


async def register_local_user(db, username: str, password: str, email: str | None = None) -> dict:
    username = normalize_username(username)
    email = email.strip().lower() if email else None

    if password_too_long(password):
        raise ValueError("Password too long (max 72 bytes)")

    # fast path; the unique indexes still catch concurrent registrations
    if await find_user_by_username(db, username):
        raise DuplicateKey("username")
    if email and await find_user_by_email(db, email):
        raise DuplicateKey("email")

    password_hash = await run_in_threadpool(hash_password, password)

    user = await create_user(db, {
        "username": username,
        "email": email,
        "password_hash": password_hash,
    })

    logger.info("USER_REGISTERED user=%s", user["_id"])
    return user


async def verify_local_user(db, username: str, password: str) -> dict:
    """
    Check a username/password pair.
    Unknown user, federated-only account and wrong password all raise the
    same InvalidCredential.
    """
    user = await find_user_by_username(db, normalize_username(username))

    ok = await run_in_threadpool(
        verify_password,
        password,
        user.get("password_hash") if user else None,
    )
    if not user or not ok:
        raise InvalidCredential()

    return user
