import logging
from datetime import date, datetime

from models.user import (
    BasicProfileForm,
    RegistrationStage,
    SellerProfile,
    SellerProfileForm,
)
from utils.errors import NotASeller, NotFound
from utils.identity_store import find_user_by_id, update_user
from utils.registration import compute_stage
from utils.retry import with_store_retry

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "phone_number",
    "address",
    "zipcode",
    "date_of_birth",
)


def _clean(value):
    return value.strip() if isinstance(value, str) else value


def _as_datetime(value: date | None) -> datetime | None:
    # BSON has no plain date type
    if value is None or isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


# ======================
# Basic profile
# ======================

def build_basic_profile_update(user: dict, form: BasicProfileForm) -> dict:
    """Fields of the submission that differ from what is stored."""
    profile = {field: _clean(getattr(form, field)) for field in PROFILE_FIELDS}
    profile["date_of_birth"] = _as_datetime(form.date_of_birth)

    stored_profile = user.get("profile") or {}
    changes = {
        f"profile.{field}": value
        for field, value in profile.items()
        if stored_profile.get(field) != value
    }

    if user.get("is_seller") != form.is_seller:
        changes["is_seller"] = form.is_seller

    if form.email:
        email = str(form.email).strip().lower()
        if user.get("email") != email:
            changes["email"] = email

    return changes


async def _apply_basic_profile(db, user_id, form: BasicProfileForm) -> dict:
    user = await find_user_by_id(db, user_id)
    if not user:
        raise NotFound("user")

    changes = build_basic_profile_update(user, form)
    if not changes:
        return user

    return await update_user(db, user["_id"], changes)


async def submit_basic_profile(db, user_id, form: BasicProfileForm) -> dict:
    """
    Commit the basic profile stage. Last write wins; an identical
    resubmission performs no write.
    """
    user = await with_store_retry(_apply_basic_profile, db, user_id, form)
    logger.info("BASIC_PROFILE_SUBMITTED user=%s stage=%s", user["_id"], compute_stage(user).value)
    return user


# ======================
# Seller profile
# ======================

def build_seller_profile(existing: dict, form: SellerProfileForm) -> dict:
    profile = {
        "organisation_name": _clean(form.organisation_name),
        "address": _clean(form.address),
        "zipcode": _clean(form.zipcode),
        "phone_number": _clean(form.phone_number),
        "website": _clean(form.website),
        "email": str(form.email).lower() if form.email else None,
        "social_handles": {
            "facebook": _clean(form.facebook),
            "twitter": _clean(form.twitter),
            "instagram": _clean(form.instagram),
            "linked_in": _clean(form.linked_in),
        },
        "employment_history": [
            {"company_name": name.strip()}
            for name in form.employment_history
            if name and name.strip()
        ],
        "business_type": _clean(form.business_type),
        # first submission marks the stage complete; later edits keep it
        "submitted_at": existing.get("submitted_at") or datetime.utcnow(),
    }
    SellerProfile.model_validate(profile)
    return profile


async def _apply_seller_profile(db, user_id, form: SellerProfileForm) -> dict:
    user = await find_user_by_id(db, user_id)
    if not user:
        raise NotFound("user")

    stage = compute_stage(user)
    if user.get("is_seller") is not True or stage not in {
        RegistrationStage.SELLER_INCOMPLETE,
        RegistrationStage.SELLER_COMPLETE,
    }:
        raise NotASeller()

    existing = user.get("seller_profile") or {}
    profile = build_seller_profile(existing, form)
    if profile == existing:
        return user

    return await update_user(db, user["_id"], {"seller_profile": profile})


async def submit_seller_profile(db, user_id, form: SellerProfileForm) -> dict:
    user = await with_store_retry(_apply_seller_profile, db, user_id, form)
    logger.info("SELLER_PROFILE_SUBMITTED user=%s", user["_id"])
    return user
