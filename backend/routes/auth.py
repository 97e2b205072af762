import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request

from config.constants import OAUTH_STATE_COOKIE_NAME
from config.env import COOKIE_SECURE
from database import get_db
from models.user import LocalLoginForm, LocalRegisterForm
from utils.audit import log_audit
from utils.auth_methods import (
    AuthenticationMethod,
    GoogleAuthentication,
    get_google_auth,
    get_local_auth,
)
from utils.credentials import register_local_user
from utils.pages import render_page, redirect_to
from utils.security import (
    clear_session_cookie,
    get_current_user,
    get_optional_user,
    get_session_token,
    set_session_cookie,
)
from utils.sessions import create_session, destroy_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


async def _start_session(db, user: dict, location: str, *, after_post: bool = False):
    token = await create_session(db, user["_id"])
    response = redirect_to(location, after_post=after_post)
    set_session_cookie(response, token)
    return response


# ======================
# Local login
# ======================

@router.get("/login")
async def login_page(
    error: Optional[str] = None,
    user=Depends(get_optional_user),
):
    if user:
        return redirect_to("/complete-registration")
    return render_page("login", error=error)


@router.post("/login")
async def login(
    data: Annotated[LocalLoginForm, Form()],
    method: AuthenticationMethod = Depends(get_local_auth),
    db=Depends(get_db),
):
    user = await method.complete(db, username=data.username, password=data.password)
    logger.info("LOCAL_LOGIN user=%s", user["_id"])
    return await _start_session(db, user, "/complete-registration", after_post=True)


# ======================
# Local registration
# ======================

@router.get("/register")
async def register_page(error: Optional[str] = None):
    return render_page("register", error=error)


@router.post("/register")
async def register(
    data: Annotated[LocalRegisterForm, Form()],
    db=Depends(get_db),
):
    try:
        user = await register_local_user(
            db,
            data.username,
            data.password,
            str(data.email) if data.email else None,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    await log_audit(db, user, "USER_REGISTERED", metadata={"method": "local"})

    return await _start_session(db, user, "/complete-registration", after_post=True)


# ======================
# Google
# ======================

@router.get("/auth/google")
async def google_login(method: GoogleAuthentication = Depends(get_google_auth)):
    initiation = method.initiate()
    response = redirect_to(initiation.redirect_url)
    response.set_cookie(
        OAUTH_STATE_COOKIE_NAME,
        initiation.nonce,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
        path="/auth/google",
    )
    return response


@router.get("/auth/google/complete-registration")
async def google_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    method: AuthenticationMethod = Depends(get_google_auth),
    db=Depends(get_db),
):
    if error:
        logger.info("GOOGLE_LOGIN_DENIED error=%s", error)
        return redirect_to("/login?error=provider")

    user = await method.complete(
        db,
        code=code,
        state=state,
        nonce=request.cookies.get(OAUTH_STATE_COOKIE_NAME),
    )

    await log_audit(db, user, "FEDERATED_LOGIN", metadata={"provider": "google"})

    response = await _start_session(db, user, "/complete-registration")
    response.delete_cookie(OAUTH_STATE_COOKIE_NAME, path="/auth/google")
    return response


# ======================
# Logout
# ======================

@router.get("/logout")
async def logout(
    user=Depends(get_current_user),
    token: Optional[str] = Depends(get_session_token),
    db=Depends(get_db),
):
    await destroy_session(db, token)
    logger.info("LOGOUT user=%s", user["_id"])

    response = redirect_to("/login")
    clear_session_cookie(response)
    return response
