from pymongo import ASCENDING, DESCENDING
from pymongo.errors import OperationFailure


def _normalize_key_pairs(keys):
    return [(k, v) for k, v in keys]


async def _create_index_safe(collection, keys, **kwargs):
    """
    Create index safely.
    If Mongo reports IndexOptionsConflict/IndexKeySpecsConflict for same key pattern,
    drop the conflicting index and recreate with desired options.
    """
    desired_key = _normalize_key_pairs(keys)
    desired_name = kwargs.get("name")
    try:
        await collection.create_index(keys, **kwargs)
        return
    except OperationFailure as e:
        if getattr(e, "code", None) not in {85, 86}:
            raise

        conflicting_names = []
        async for idx in collection.list_indexes():
            idx_key = _normalize_key_pairs(list(idx.get("key", {}).items()))
            if idx_key == desired_key:
                idx_name = idx.get("name")
                if idx_name and idx_name != desired_name:
                    conflicting_names.append(idx_name)

        for idx_name in conflicting_names:
            await collection.drop_index(idx_name)

        await collection.create_index(keys, **kwargs)


INDEXES = {
    # sparse: records without the field do not collide
    "users": [
        ([("email", ASCENDING)], {"name": "users_email_unique_idx", "unique": True, "sparse": True}),
        ([("username", ASCENDING)], {"name": "users_username_unique_idx", "unique": True, "sparse": True}),
        ([("federated_id", ASCENDING)], {"name": "users_federated_id_unique_idx", "unique": True, "sparse": True}),
        ([("registration_stage", ASCENDING)], {"name": "users_registration_stage_idx"}),
    ],
    "sessions": [
        ([("token_hash", ASCENDING)], {"name": "sessions_token_hash_unique_idx", "unique": True}),
        ([("expires_at", ASCENDING)], {"name": "sessions_expires_ttl_idx", "expireAfterSeconds": 0}),
    ],
    "listings": [
        ([("created_at", DESCENDING)], {"name": "listings_created_idx"}),
        ([("seller_id", ASCENDING), ("created_at", DESCENDING)], {"name": "listings_seller_created_idx"}),
    ],
    "audit_logs": [
        ([("created_at", ASCENDING)], {"name": "audit_logs_created_idx"}),
    ],
}


async def ensure_indexes(db):
    for collection_name, specs in INDEXES.items():
        for keys, options in specs:
            await _create_index_safe(db[collection_name], keys, **options)
