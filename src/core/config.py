"""
Core configuration and settings for the Bookshelf API

Values come from the process environment, optionally seeded from a dotenv
file in the project root (.env.development when ENV=development, else .env).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def load_environment():
    """Load the dotenv file matching ENV, if present"""
    env = os.getenv("ENV", "production").lower()
    env_file = PROJECT_ROOT / (".env.development" if env == "development" else ".env")

    if env_file.exists():
        load_dotenv(env_file, override=True)
        print(f"Loaded {env.upper()} configuration from {env_file.name}")
    elif env == "development":
        # Development never falls back to the production .env
        print("WARNING: No development environment file found!")


def _split_origins(raw: str):
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_app_config():
    """
    Get application configuration based on environment
    """
    # Re-read ENV after loading files
    ENV = os.getenv("ENV", "production").lower()
    is_development = ENV == "development"

    config = {
        "env": ENV,
        "debug": is_development or os.getenv("DEBUG", "false").lower() == "true",
        "host": os.getenv("HOST", "localhost" if is_development else "0.0.0.0"),
        "port": int(os.getenv("PORT", 8000)),
        # MongoDB
        "mongodb_uri": os.getenv("MONGODB_URI", "mongodb://localhost:27017/"),
        "mongodb_name": os.getenv("MONGODB_NAME", "bookshelf_db"),
        # Listing
        "books_page_size": int(os.getenv("BOOKS_PAGE_SIZE", 10)),
        # Sessions & passwords
        "session_ttl_hours": int(os.getenv("SESSION_TTL_HOURS", 24)),
        "password_hash_iterations": int(
            os.getenv("PASSWORD_HASH_ITERATIONS", 260000)
        ),
        "cors_origins": _split_origins(
            os.getenv("CORS_ORIGINS", "http://localhost:3000")
        ),
    }

    if config["books_page_size"] < 1:
        raise ValueError("BOOKS_PAGE_SIZE must be a positive integer")

    return config


# Initialize environment on import
load_environment()
APP_CONFIG = get_app_config()
