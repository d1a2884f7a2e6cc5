import os

from dotenv import load_dotenv

# Loads the .env at the project root
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./restopos.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_TEST = ENV_NORMALIZED == "test"
IS_PROD = ENV_NORMALIZED in {"prod", "production"}
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Off by default in production
SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "0" if IS_PROD else "1").strip().lower() in {
    "1",
    "true",
    "yes",
    "on",
}

# CORS
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip() and origin.strip() != "*"]

if not CORS_ORIGINS and IS_DEV:
    CORS_ORIGINS = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]

# Auth (JWT)
DEV_JWT_SECRET_KEY = "dev-only-restopos-secret"
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "").strip()
if not JWT_SECRET_KEY and not IS_PROD:
    JWT_SECRET_KEY = DEV_JWT_SECRET_KEY
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", str(60 * 12)))
