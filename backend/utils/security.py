from fastapi import Depends, HTTPException, Request, status

from config.env import SESSION_COOKIE_NAME, COOKIE_SECURE
from database import get_db
from models.user import RegistrationStage
from utils.identity_store import touch_last_active
from utils.registration import compute_stage, is_basic_complete
from utils.sessions import resolve_session


class StageRedirect(Exception):
    """Raised by a guard to send the browser to the step it still owes."""

    def __init__(self, location: str):
        super().__init__(location)
        self.location = location


def get_session_token(request: Request) -> str | None:
    return request.cookies.get(SESSION_COOKIE_NAME)


async def get_optional_user(
    token: str | None = Depends(get_session_token),
    db=Depends(get_db),
):
    """The session principal, or None for anonymous requests."""
    user = await resolve_session(db, token)
    if user:
        await touch_last_active(db, user["_id"])
    return user


async def get_current_user(user=Depends(get_optional_user)):
    if not user:
        raise StageRedirect("/login")
    return user


async def require_basic_profile(user=Depends(get_current_user)):
    if not is_basic_complete(compute_stage(user)):
        raise StageRedirect("/complete-registration")
    return user


async def get_current_seller(user=Depends(require_basic_profile)):
    if user.get("is_seller") is not True:
        raise StageRedirect("/complete-registration")
    return user


async def get_complete_seller(user=Depends(require_basic_profile)):
    stage = compute_stage(user)

    if stage == RegistrationStage.SELLER_INCOMPLETE:
        raise StageRedirect("/complete-seller-registration")

    if stage != RegistrationStage.SELLER_COMPLETE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Seller access only",
        )
    return user


# ======================
# Cookies
# ======================

def set_session_cookie(response, token: str) -> None:
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
