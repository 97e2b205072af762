"""Tests for the audit trail and its retention worker."""

from datetime import datetime, timedelta

import pytest

from config.constants import AUDIT_RETENTION_DAYS
from utils.audit import actor_role, log_audit
from workers.audit_cleanup_worker import prune_audit_logs


@pytest.mark.unit
class TestAudit:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kwargs,role", [
        ({}, "buyer"),
        ({"first_name": "Ann", "is_seller": False}, "buyer"),
        ({"first_name": "Ann", "is_seller": True}, "seller"),
    ])
    async def test_actor_role(self, make_user, kwargs, role):
        assert actor_role(await make_user(**kwargs)) == role

    @pytest.mark.asyncio
    async def test_log_records_actor_and_stage(self, db, make_user):
        user = await make_user(first_name="Ann", is_seller=True)

        await log_audit(db, user, "SELLER_PROFILE_SUBMITTED", metadata={"organisation_name": "Pots"})

        entry = await db.audit_logs.find_one({})
        assert entry["actor_id"] == str(user["_id"])
        assert entry["action"] == "SELLER_PROFILE_SUBMITTED"
        assert entry["stage"] == "seller_incomplete"
        assert entry["metadata"] == {"organisation_name": "Pots"}

    @pytest.mark.asyncio
    async def test_retention_prunes_old_entries(self, db, make_user):
        user = await make_user()
        await log_audit(db, user, "OLD")
        await log_audit(db, user, "NEW")
        await db.audit_logs.update_one(
            {"action": "OLD"},
            {"$set": {"created_at": datetime.utcnow() - timedelta(days=AUDIT_RETENTION_DAYS + 1)}},
        )

        assert await prune_audit_logs(db) == 1
        assert [e["action"] async for e in db.audit_logs.find({})] == ["NEW"]
