from dotenv import load_dotenv
load_dotenv()

import asyncio
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from database import get_db

# ENV
from config.env import ENV, LOG_LEVEL, CORS_ALLOWED_ORIGINS, validate_production_env

# ROUTES
from routes.auth import router as auth_router
from routes.onboarding import router as onboarding_router
from routes.products import router as products_router
from routes.public import router as public_router

# ERRORS
from utils.errors import (
    AssetStoreFailure,
    DuplicateKey,
    InvalidCredential,
    NotASeller,
    NotFound,
    ProfileIncomplete,
    ProviderError,
    StoreUnavailable,
)
from utils.indexes import ensure_indexes
from utils.pages import render_page, redirect_to
from utils.security import StageRedirect, clear_session_cookie, get_session_token
from utils.sessions import destroy_session

# WORKERS
from workers.audit_cleanup_worker import audit_cleanup_worker
from workers.session_cleanup_worker import session_cleanup_worker

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

validate_production_env()
logger.info("ENV: %s", ENV)

app = FastAPI(
    title="Shopfront",
    version="1.0.0",
    docs_url=None if ENV == "production" else "/docs",
    redoc_url=None if ENV == "production" else "/redoc",
    openapi_url=None if ENV == "production" else "/openapi.json",
)

# -----------------------------
# CORS
# -----------------------------

allowed_origins = [origin.strip() for origin in CORS_ALLOWED_ORIGINS if origin.strip()]
if not allowed_origins:
    allowed_origins = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------
# ROUTES
# -----------------------------

app.include_router(public_router)
app.include_router(auth_router)
app.include_router(onboarding_router)
app.include_router(products_router)

# -----------------------------
# ERROR MAPPING
# -----------------------------

def _page_for(request: Request) -> str:
    return request.url.path.strip("/") or "home"


@app.exception_handler(StageRedirect)
async def stage_redirect_handler(request: Request, exc: StageRedirect):
    return redirect_to(exc.location)


@app.exception_handler(DuplicateKey)
async def duplicate_key_handler(request: Request, exc: DuplicateKey):
    # the Google callback is a redirect endpoint, not a page
    if request.url.path.startswith("/auth/google"):
        return redirect_to(f"/login?error=duplicate_{exc.field}")
    return render_page(_page_for(request), status_code=409, error=f"duplicate_{exc.field}")


@app.exception_handler(InvalidCredential)
async def invalid_credential_handler(request: Request, exc: InvalidCredential):
    return render_page("login", status_code=401, error="invalid_credentials")


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError):
    logger.info("FEDERATED_LOGIN_FAILED reason=%s", exc)
    return redirect_to("/login?error=provider")


@app.exception_handler(ProfileIncomplete)
async def profile_incomplete_handler(request: Request, exc: ProfileIncomplete):
    return redirect_to("/register?error=profile_incomplete")


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    # identity vanished under a live session: force a fresh login
    await destroy_session(get_db(), get_session_token(request))
    response = redirect_to("/login", after_post=request.method != "GET")
    clear_session_cookie(response)
    return response


@app.exception_handler(NotASeller)
async def not_a_seller_handler(request: Request, exc: NotASeller):
    return redirect_to("/complete-registration", after_post=request.method != "GET")


@app.exception_handler(AssetStoreFailure)
async def asset_store_failure_handler(request: Request, exc: AssetStoreFailure):
    return render_page("upload-product", status_code=502, error="image_upload_failed")


@app.exception_handler(StoreUnavailable)
@app.exception_handler(PyMongoError)
async def store_error_handler(request: Request, exc: Exception):
    logger.error("STORE_ERROR path=%s error=%s", request.url.path, type(exc).__name__)
    return JSONResponse(
        status_code=503,
        content={"error": "service_unavailable", "detail": "Please try again later."},
    )

# -----------------------------
# HEALTH CHECKS
# -----------------------------

@app.get("/api/health")
async def health():

    return {"status": "ok"}

@app.get("/api/health/db")
async def health_db():
    db = get_db()
    await db.command("ping")
    return {"status": "mongodb connected"}

# -----------------------------
# STARTUP (ONE PLACE ONLY)
# -----------------------------

@app.on_event("startup")
async def startup():
    await ensure_indexes(get_db())
    asyncio.create_task(audit_cleanup_worker())
    asyncio.create_task(session_cleanup_worker())
