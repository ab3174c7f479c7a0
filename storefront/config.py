"""
Configuration for the storefront service.

All settings are read from environment variables once, at import time.
"""
import os


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Key-value store
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
KV_NAMESPACE = os.getenv("KV_NAMESPACE", "kv_store:")

# Auth provider (GoTrue-compatible)
AUTH_PROVIDER_URL = os.getenv("AUTH_PROVIDER_URL", "http://localhost:9999").rstrip("/")
AUTH_SERVICE_ROLE_KEY = os.getenv("AUTH_SERVICE_ROLE_KEY", "")
# When set, bearer tokens are verified locally instead of asking the provider
AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET") or None
AUTH_JWT_ALGORITHM = os.getenv("AUTH_JWT_ALGORITHM", "HS256")
AUTH_JWT_AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE", "authenticated")

HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "5.0"))  # seconds

# Password reset
RESET_CODE_TTL_SECONDS = int(os.getenv("RESET_CODE_TTL_SECONDS", "600"))
EXPOSE_RESET_CODE = _env_bool("EXPOSE_RESET_CODE", True)

# Order handling
ENFORCE_STATUS_TRANSITIONS = _env_bool("ENFORCE_STATUS_TRANSITIONS", False)
STRICT_PRICING = _env_bool("STRICT_PRICING", False)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Client side
STOREFRONT_API_URL = os.getenv("STOREFRONT_API_URL", "http://localhost:8000").rstrip("/")
ADMIN_POLL_INTERVAL_SECONDS = float(os.getenv("ADMIN_POLL_INTERVAL_SECONDS", "30"))
