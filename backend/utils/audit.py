from datetime import datetime


def actor_role(user: dict) -> str:
    return "seller" if user.get("is_seller") is True else "buyer"


async def log_audit(db, user: dict, action: str, metadata: dict | None = None):
    """Append an onboarding event for the identity that caused it."""
    await db.audit_logs.insert_one({
        "actor_id": str(user["_id"]),
        "actor_role": actor_role(user),
        "action": action,
        "stage": user.get("registration_stage"),
        "metadata": metadata or {},
        "created_at": datetime.utcnow(),
    })
