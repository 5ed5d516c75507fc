import os

from dotenv import load_dotenv

load_dotenv(dotenv_path=".env")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

# Web Push (VAPID)
VAPID_PUBLIC_KEY = os.getenv("VAPID_PUBLIC_KEY")
VAPID_PRIVATE_KEY = os.getenv("VAPID_PRIVATE_KEY")
VAPID_SUBJECT = os.getenv("VAPID_SUBJECT", "mailto:support@bigsurf.app")

# Native push (Expo)
EXPO_ACCESS_TOKEN = os.getenv("EXPO_ACCESS_TOKEN")

PUSH_ICON = os.getenv("PUSH_ICON", "/BigSurf.png")

# Comma separated browser origins allowed to call the API
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# Shared secret for the external sweep trigger (unset = open)
CRON_SECRET = os.getenv("CRON_SECRET")

# Delivery worker
SWEEP_INTERVAL_SECONDS = int(os.getenv("SWEEP_INTERVAL_SECONDS", "60"))
RETENTION_SECONDS = int(os.getenv("RETENTION_SECONDS", "3600"))  # 1 hour
MAX_CONCURRENT_DELIVERIES = int(os.getenv("MAX_CONCURRENT_DELIVERIES", "10"))
EVICT_INVALID_TARGETS = _env_bool("EVICT_INVALID_TARGETS", True)

# Local countdown
DEFAULT_REST_SECONDS = int(os.getenv("DEFAULT_REST_SECONDS", "90"))
