"""
Application settings loaded from the environment (.env supported)
"""
import os
from dotenv import load_dotenv

load_dotenv()

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
IS_PRODUCTION = ENVIRONMENT == "production"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./streaming.db")
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 5))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", 10))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", 30))
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", 3600))
DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"

# Identity token / sessions
JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
SESSION_TTL_DAYS = int(os.getenv("SESSION_TTL_DAYS", 7))
MAX_ACTIVE_SESSIONS = int(os.getenv("MAX_ACTIVE_SESSIONS", 4))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 12))

AUTH_COOKIE_NAME = "auth-token"
SESSION_COOKIE_NAME = "session-token"

# Password reset
RESET_TOKEN_TTL_MINUTES = int(os.getenv("RESET_TOKEN_TTL_MINUTES", 5))
APP_URL = os.getenv("APP_URL", "http://localhost:3000")

# HTTP
FRONTEND_URL = os.getenv("FRONTEND_URL")
TRUSTED_HOSTS = [h.strip() for h in os.getenv("TRUSTED_HOSTS", "").split(",") if h.strip()]

# Scheduler
ENABLE_BACKGROUND_JOBS = os.getenv("ENABLE_BACKGROUND_JOBS", "false").lower() == "true"
TIMEZONE = os.getenv("TIMEZONE", "UTC")
