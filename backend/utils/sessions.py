import hashlib
import logging
import secrets
from datetime import datetime, timedelta

from config.env import SESSION_IDLE_MINUTES
from utils.identity_store import find_user_by_id, to_object_id

logger = logging.getLogger(__name__)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


async def create_session(db, user_id) -> str:
    """
    Bind a fresh opaque token to an identity id.
    Only the token hash is stored; the raw token lives in the cookie.
    """
    token = secrets.token_urlsafe(32)
    now = datetime.utcnow()

    await db.sessions.insert_one({
        "token_hash": hash_token(token),
        "user_id": to_object_id(user_id),
        "created_at": now,
        "last_seen_at": now,
        "expires_at": now + timedelta(minutes=SESSION_IDLE_MINUTES),
    })

    return token


async def resolve_session(db, token: str | None) -> dict | None:
    """
    Rehydrate the identity behind a session token, sliding the idle timeout.
    Expired sessions and sessions whose identity vanished are destroyed.
    """
    if not token:
        return None

    token_hash = hash_token(token)
    session = await db.sessions.find_one({"token_hash": token_hash})
    if not session:
        return None

    now = datetime.utcnow()
    if session.get("expires_at") and now > session["expires_at"]:
        await db.sessions.delete_one({"_id": session["_id"]})
        return None

    user = await find_user_by_id(db, session["user_id"])
    if not user:
        logger.info("SESSION_ORPHANED user=%s", session["user_id"])
        await db.sessions.delete_one({"_id": session["_id"]})
        return None

    await db.sessions.update_one(
        {"_id": session["_id"]},
        {"$set": {
            "last_seen_at": now,
            "expires_at": now + timedelta(minutes=SESSION_IDLE_MINUTES),
        }},
    )

    return user


async def destroy_session(db, token: str | None) -> None:
    if not token:
        return
    await db.sessions.delete_one({"token_hash": hash_token(token)})
