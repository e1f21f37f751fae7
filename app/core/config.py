# app/core/config.py

import os
from dotenv import load_dotenv

load_dotenv()

APP_NAME = "Store Rating System API"
APP_VERSION = "1.0.0"
APP_ENV = os.getenv("APP_ENV", "development")
IS_PRODUCTION = APP_ENV == "production"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_HOST = os.getenv("DB_HOST")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_NAME = os.getenv("DB_NAME")

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    if DB_HOST:
        DATABASE_URL = f"postgresql+psycopg2://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
    else:
        DATABASE_URL = "sqlite:///./store_ratings.db"

SECRET_KEY = os.getenv("SECRET_KEY", "store-rating-dev-secret-change-me-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOWED_ORIGINS", FRONTEND_URL).split(",")
    if origin.strip()
]

# Optional bootstrap administrator, created on startup when missing
ADMIN_NAME = os.getenv("ADMIN_NAME", "System Administrator Account")
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

TOP_STORES_LIMIT = 5
ADMIN_RECENT_RATINGS_LIMIT = 10
OWNER_RECENT_RATINGS_LIMIT = 20
USER_RECENT_RATINGS_LIMIT = 10
TREND_MONTHS = 12
