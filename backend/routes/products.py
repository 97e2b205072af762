from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from typing import Optional

from database import get_db
from models.product import ListingCreate
from utils.audit import log_audit
from utils.listings import create_listing
from utils.pages import render_page, redirect_to
from utils.security import get_complete_seller

router = APIRouter(tags=["Products"])


# =========================
# UPLOAD PRODUCT
# =========================

@router.get("/upload-product")
async def upload_product_page(seller=Depends(get_complete_seller)):
    return render_page("upload-product", user=seller)


@router.post("/upload-product")
async def upload_product(
    product_name: str = Form(..., min_length=1),
    price: float = Form(..., ge=0),
    stock: int = Form(..., ge=0),
    description: Optional[str] = Form(None),
    image: UploadFile = File(...),
    seller=Depends(get_complete_seller),
    db=Depends(get_db),
):
    # validate file type
    if not image.content_type or not image.content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files are allowed",
        )

    data = ListingCreate(
        product_name=product_name,
        description=description or None,
        price=price,
        stock=stock,
    )

    listing = await create_listing(db, seller, data, image.file)

    await log_audit(
        db,
        seller,
        "LISTING_CREATED",
        metadata={"listing_id": str(listing["_id"]), "product_name": listing["product_name"]},
    )

    return redirect_to("/shop", after_post=True)
