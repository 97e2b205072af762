from fastapi import APIRouter, Depends, Query

from config.constants import SHOP_PAGE_SIZE
from database import get_db
from utils.listings import list_listings
from utils.pages import render_page
from utils.serializers import serialize_listing
from utils.security import get_optional_user, require_basic_profile

router = APIRouter(tags=["Public"])


@router.get("/")
async def home(user=Depends(get_optional_user)):
    return render_page("home", user=user)


# =========================
# SHOP (BUYER ROUTES)
# =========================

@router.get("/shop")
async def shop(
    page: int = Query(1, ge=1),
    limit: int = Query(SHOP_PAGE_SIZE, ge=1),
    user=Depends(require_basic_profile),
    db=Depends(get_db),
):
    listings = await list_listings(db, page=page, limit=limit)

    return render_page(
        "shop",
        user=user,
        listings=[serialize_listing(listing) for listing in listings],
        page_number=page,
    )
