# backend/config/constants.py

# -----------------------------
# USER RECORDS
# -----------------------------

USER_SCHEMA_VERSION = 1
LISTING_SCHEMA_VERSION = 1

# find-or-create retries after a duplicate key race
FEDERATED_LINK_MAX_ATTEMPTS = 3

# -----------------------------
# GOOGLE OAUTH ENDPOINTS
# -----------------------------

GOOGLE_AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"
GOOGLE_SCOPES = ["profile", "email"]

OAUTH_STATE_COOKIE_NAME = "shopfront_oauth_nonce"

# -----------------------------
# SHOP
# -----------------------------

SHOP_PAGE_SIZE = 20
SHOP_MAX_PAGE_SIZE = 50

# Time windows
AUDIT_RETENTION_DAYS = 90
