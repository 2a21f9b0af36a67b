import os

db_url = os.environ.get("DB_URL", "sqlite://futsal.sqlite3")
# No migration tool ships with the service; tables are created on startup
GENERATE_SCHEMAS = os.environ.get("GENERATE_SCHEMAS", "true").lower() in {"1", "true", "yes"}
REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")

JWT_SECRET = os.environ.get("JWT_SECRET", "change-me-in-production")
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_MINUTES = int(os.environ.get("JWT_EXPIRE_MINUTES", str(7 * 24 * 60)))

# Wall-clock zone used for day types, price tiers and "today" boundaries
APP_TIMEZONE = os.environ.get("APP_TIMEZONE", "Asia/Jakarta")

UPLOAD_DIR = os.environ.get("UPLOAD_DIR", "uploads")
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "4000"))
BASE_URL = os.environ.get("BASE_URL", "http://localhost:4000")
CORS_ORIGINS = [
    o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()
]

SMTP_HOST = os.environ.get("SMTP_HOST", "")
SMTP_PORT = int(os.environ.get("SMTP_PORT", "587"))
SMTP_USERNAME = os.environ.get("SMTP_USERNAME")
SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD")
SMTP_USE_TLS = os.environ.get("SMTP_USE_TLS", "true").lower() in {"1", "true", "yes"}
SMTP_FROM_EMAIL = os.environ.get("SMTP_FROM_EMAIL", "")
SMTP_FROM_NAME = os.environ.get("SMTP_FROM_NAME", "Reservasi Futsal")
SMTP_TIMEOUT = float(os.environ.get("SMTP_TIMEOUT", "10"))


def tortoise_config(url: str | None = None) -> dict:
    return {
        "connections": {"default": url or db_url},
        "apps": {
            "models": {
                "models": ["futsal.models"],
                "default_connection": "default",
            }
        },
        "use_tz": True,
        "timezone": "UTC",
    }
