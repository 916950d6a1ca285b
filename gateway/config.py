"""
Gateway configuration: where each upstream service lives.
"""
import os

AUTH_SERVICE_URL = os.environ.get("GATEWAY_AUTH_SERVICE_URL", "http://127.0.0.1:9000").rstrip("/")

PRODUCT_SERVICE_URL = os.environ.get("GATEWAY_PRODUCT_SERVICE_URL", "http://127.0.0.1:7000").rstrip("/")

# Seconds to wait on an upstream before answering 502
UPSTREAM_TIMEOUT_SECONDS = float(os.environ.get("GATEWAY_UPSTREAM_TIMEOUT_SECONDS", "10"))
