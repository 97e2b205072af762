import logging
from datetime import datetime

from fastapi.concurrency import run_in_threadpool

from config.constants import LISTING_SCHEMA_VERSION, SHOP_MAX_PAGE_SIZE
from models.product import ListingCreate, ListingInDB
from models.user import RegistrationStage
from utils import cloudinary as asset_store
from utils.errors import NotASeller
from utils.registration import compute_stage

logger = logging.getLogger(__name__)


async def create_listing(db, seller: dict, data: ListingCreate, image_file) -> dict:
    """
    Upload the image, then persist the listing.
    The image must be stored before the listing exists; if the insert fails
    the uploaded image is removed again.
    """
    # checked at write time only
    if compute_stage(seller) != RegistrationStage.SELLER_COMPLETE:
        raise NotASeller()

    asset = await run_in_threadpool(
        asset_store.upload_image,
        image_file,
        f"shopfront/products/{seller['_id']}",
    )

    record = ListingInDB(
        schema_version=LISTING_SCHEMA_VERSION,
        product_name=data.product_name.strip(),
        description=data.description,
        price=data.price,
        stock=data.stock,
        seller_id=str(seller["_id"]),
        image_url=asset["url"],
        image_public_id=asset["public_id"],
        reviews=[],
        created_at=datetime.utcnow(),
    )
    doc = record.model_dump()
    doc["seller_id"] = seller["_id"]

    try:
        await db.listings.insert_one(doc)
    except Exception:
        logger.exception("LISTING_INSERT_FAILED seller=%s", seller["_id"])
        await run_in_threadpool(asset_store.delete_image, asset["public_id"])
        raise

    logger.info("LISTING_CREATED listing=%s seller=%s", doc["_id"], seller["_id"])
    return doc


async def list_listings(db, page: int = 1, limit: int = 20) -> list[dict]:
    page = max(page, 1)
    limit = min(max(limit, 1), SHOP_MAX_PAGE_SIZE)
    skip = (page - 1) * limit

    cursor = db.listings.find(
        {},
        sort=[("created_at", -1)],
        skip=skip,
        limit=limit,
    )

    return [listing async for listing in cursor]
