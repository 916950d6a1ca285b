"""
Settings shared by every LocalShop service.
The signing secret itself never lives in code; see shop_common.keys.
"""
import os
from datetime import timedelta

# HMAC secret shared by the auth server, gateway and resource services.
# If unset, shop_common.keys loads (or generates) it from JWT_SECRET_PATH.
JWT_SECRET = os.environ.get("SHOP_JWT_SECRET", "").strip() or None
JWT_SECRET_PATH = os.environ.get("SHOP_JWT_SECRET_PATH", ".shop_signing_secret")

JWT_ALGORITHM = "HS256"

# Token lifetime is fixed: exp is always iat + 24h
TOKEN_TTL = timedelta(hours=24)

# HS256 keys shorter than the digest size are rejected
MIN_SECRET_BYTES = 32

LOG_LEVEL = os.environ.get("SHOP_LOG_LEVEL", "INFO")
