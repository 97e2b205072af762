from typing import Annotated

from fastapi import APIRouter, Depends, Form

from database import get_db
from models.user import BasicProfileForm, RegistrationStage, SellerProfileForm
from utils.audit import log_audit
from utils.onboarding import submit_basic_profile, submit_seller_profile
from utils.pages import render_page, redirect_to
from utils.registration import compute_stage, next_step_path
from utils.security import get_current_user, get_current_seller

router = APIRouter(tags=["Onboarding"])


# ======================================================
# BASIC PROFILE
# ======================================================

@router.get("/complete-registration")
async def basic_profile_page(user=Depends(get_current_user)):
    stage = compute_stage(user)

    if stage != RegistrationStage.BASIC_INCOMPLETE:
        return redirect_to(next_step_path(stage))

    return render_page("complete-registration", user=user)


@router.post("/complete-registration")
async def basic_profile_submit(
    data: Annotated[BasicProfileForm, Form()],
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    updated = await submit_basic_profile(db, user["_id"], data)

    await log_audit(
        db,
        updated,
        "BASIC_PROFILE_SUBMITTED",
        metadata={"is_seller": updated.get("is_seller")},
    )

    if updated.get("is_seller") is True:
        return redirect_to("/complete-seller-registration", after_post=True)
    return redirect_to("/shop", after_post=True)


# ======================================================
# SELLER PROFILE
# ======================================================

@router.get("/complete-seller-registration")
async def seller_profile_page(seller=Depends(get_current_seller)):
    return render_page(
        "complete-seller-registration",
        user=seller,
        completed=compute_stage(seller) == RegistrationStage.SELLER_COMPLETE,
    )


@router.post("/complete-seller-registration")
async def seller_profile_submit(
    data: Annotated[SellerProfileForm, Form()],
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    # NotASeller from the mutator sends the user back to the basic stage
    updated = await submit_seller_profile(db, user["_id"], data)

    await log_audit(
        db,
        updated,
        "SELLER_PROFILE_SUBMITTED",
        metadata={"organisation_name": data.organisation_name},
    )

    return redirect_to("/shop", after_post=True)
