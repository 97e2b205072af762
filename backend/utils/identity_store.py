import logging
from datetime import datetime

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from config.constants import USER_SCHEMA_VERSION, FEDERATED_LINK_MAX_ATTEMPTS
from models.user import UserInDB
from utils.errors import DuplicateKey, NotFound
from utils.registration import compute_stage

logger = logging.getLogger(__name__)

UNIQUE_USER_FIELDS = ("federated_id", "username", "email")


def to_object_id(value) -> ObjectId | None:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def _duplicate_field(e: DuplicateKeyError) -> str:
    key_value = (e.details or {}).get("keyValue") or {}
    if key_value:
        return next(iter(key_value))

    message = str(e)
    for field in UNIQUE_USER_FIELDS:
        if field in message:
            return field
    return "key"


# ======================
# Create / read
# ======================

async def create_user(db, data: dict) -> dict:
    """
    Insert a new identity.
    None values are dropped so the sparse unique indexes skip them.
    """
    now = datetime.utcnow()

    doc = {k: v for k, v in data.items() if v is not None}
    doc.setdefault("profile", {})
    doc["schema_version"] = USER_SCHEMA_VERSION
    doc["created_at"] = now
    doc["last_active_at"] = now
    doc["registration_stage"] = compute_stage(doc).value

    UserInDB.model_validate(doc)

    try:
        await db.users.insert_one(doc)
    except DuplicateKeyError as e:
        raise DuplicateKey(_duplicate_field(e)) from e

    return doc


async def find_user_by_id(db, user_id) -> dict | None:
    oid = to_object_id(user_id)
    if oid is None:
        return None
    return await db.users.find_one({"_id": oid})


async def find_user_by_username(db, username: str) -> dict | None:
    return await db.users.find_one({"username": username})


async def find_user_by_email(db, email: str) -> dict | None:
    return await db.users.find_one({"email": email})


# ======================
# Federated find-or-create
# ======================

async def find_or_create_federated_user(db, *, email: str, federated_id: str) -> dict:
    """
    Resolve a federated login to exactly one identity.

    Order: match on federated_id, then link an unlinked account with the same
    email, then insert. A concurrent first login that loses the insert race
    hits the unique index and re-reads instead of failing.
    """
    email = email.strip().lower()

    for _ in range(FEDERATED_LINK_MAX_ATTEMPTS):
        user = await db.users.find_one({"federated_id": federated_id})
        if user:
            return user

        # federated_id is immutable once set: only link unlinked accounts
        user = await db.users.find_one_and_update(
            {"email": email, "federated_id": None},
            {"$set": {"federated_id": federated_id, "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if user:
            logger.info("FEDERATED_ID_LINKED user=%s", user["_id"])
            return user

        existing = await find_user_by_email(db, email)
        if existing is None:
            try:
                user = await create_user(db, {"email": email, "federated_id": federated_id})
            except DuplicateKey:
                logger.info("FEDERATED_CREATE_RACE federated_id=%s", federated_id)
                continue
            logger.info("FEDERATED_USER_CREATED user=%s", user["_id"])
            return user

        if existing.get("federated_id") != federated_id:
            raise DuplicateKey("email")

        return existing

    user = await db.users.find_one({"federated_id": federated_id})
    if user:
        return user
    raise DuplicateKey("federated_id")


# ======================
# Update
# ======================

async def update_user(db, user_id, set_fields: dict, unset_fields: list | None = None) -> dict:
    """
    Single-record read-modify-write. Returns the updated identity and keeps
    the stored registration_stage in step with the new field values.
    """
    oid = to_object_id(user_id)
    if oid is None:
        raise NotFound("user")

    update = {"$set": {**set_fields, "updated_at": datetime.utcnow()}}
    if unset_fields:
        update["$unset"] = {field: "" for field in unset_fields}

    try:
        user = await db.users.find_one_and_update(
            {"_id": oid},
            update,
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError as e:
        raise DuplicateKey(_duplicate_field(e)) from e

    if not user:
        raise NotFound("user")

    stage = compute_stage(user).value
    if user.get("registration_stage") != stage:
        await db.users.update_one({"_id": oid}, {"$set": {"registration_stage": stage}})
        user["registration_stage"] = stage

    return user


async def touch_last_active(db, user_id) -> None:
    await db.users.update_one(
        {"_id": user_id},
        {"$set": {"last_active_at": datetime.utcnow()}},
    )
