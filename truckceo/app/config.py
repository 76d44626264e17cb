#!/usr/bin/env python3
"""
Configuration management for the TruckCEO operations backend.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Values the setup guides ship with; treated as "no key configured"
PLACEHOLDER_KEYS = ("PLACEHOLDER_API_KEY", "test", "dev")

class Config:
    """Configuration class for the application."""

    # Document store (SQLAlchemy URL)
    DATABASE_URL = os.getenv(
        "DATABASE_URL",
        f"sqlite:///{os.path.join(os.path.dirname(__file__), '..', 'data', 'truckceo.db')}",
    )

    # Archive location for uploaded CSV files
    BLOB_STORAGE_DIR = os.getenv(
        "BLOB_STORAGE_DIR",
        os.path.join(os.path.dirname(__file__), "..", "data", "blobs"),
    )

    # Gemini (Google) API Configuration for the assistant
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    GEMINI_TIMEOUT = int(os.getenv("GEMINI_TIMEOUT", 60))

    # Redis Configuration (assistant chat history)
    REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT = int(os.getenv("REDIS_PORT", 6379))
    REDIS_DB = int(os.getenv("REDIS_DB", 0))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Application Configuration
    MAX_CONVERSATION_TURNS = 14
    DEFAULT_WEATHER = "Sunny, 75°F"

    @classmethod
    def has_gemini_key(cls) -> bool:
        """True when a usable Gemini key is configured."""
        key = cls.GEMINI_API_KEY
        return bool(key) and key not in PLACEHOLDER_KEYS and len(key) > 10

    @classmethod
    def debug_print(cls):
        print(f"[CONFIG] DATABASE_URL={cls.DATABASE_URL}")
        print(f"[CONFIG] BLOB_STORAGE_DIR={cls.BLOB_STORAGE_DIR}")
        print(f"[CONFIG] GEMINI_MODEL={cls.GEMINI_MODEL} set={cls.has_gemini_key()}")
        print(f"[CONFIG] REDIS={cls.REDIS_HOST}:{cls.REDIS_PORT}/{cls.REDIS_DB}")

    @classmethod
    def validate(cls):
        """Validate that all required configuration is present."""
        missing = []

        if not cls.DATABASE_URL:
            missing.append("DATABASE_URL")
        if not cls.BLOB_STORAGE_DIR:
            missing.append("BLOB_STORAGE_DIR")
        # GEMINI_API_KEY is optional: the assistant degrades to local fallbacks

        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")

        return True

# Validate configuration on import
Config.validate()
