from bson import ObjectId
from datetime import datetime

from utils.registration import compute_stage


def serialize_object_id(value):
    return str(value) if isinstance(value, ObjectId) else value


def _iso(value):
    return value.isoformat() if isinstance(value, datetime) else None


def serialize_listing(listing: dict) -> dict:
    return {
        "id": str(listing["_id"]),
        "seller_id": serialize_object_id(listing["seller_id"]),

        "product_name": listing.get("product_name"),
        "description": listing.get("description"),
        "price": listing.get("price"),
        "stock": listing.get("stock", 0),

        "image_url": listing.get("image_url"),
        "reviews": listing.get("reviews", []),

        "created_at": _iso(listing.get("created_at")),
    }


def serialize_user(user: dict) -> dict:
    """Public view of an identity. Never includes the password hash."""
    profile = dict(user.get("profile") or {})
    profile["date_of_birth"] = _iso(profile.get("date_of_birth"))

    seller_profile = user.get("seller_profile")
    if seller_profile:
        seller_profile = dict(seller_profile)
        seller_profile["submitted_at"] = _iso(seller_profile.get("submitted_at"))

    return {
        "id": str(user["_id"]),
        "email": user.get("email"),
        "username": user.get("username"),
        "profile": profile,
        "is_seller": user.get("is_seller"),
        "seller_profile": seller_profile,
        "registration_stage": compute_stage(user).value,
        "created_at": _iso(user.get("created_at")),
    }
