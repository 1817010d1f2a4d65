"""
Configuration loader for recordrepo.

Loads settings from environment variables (.env file).
Connection settings for individual repositories live in
recordrepo.repositories.config.RepositoryConfig.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """
    Process-wide settings shared by all repositories.

    All values loaded from environment variables - NO SECRETS IN CODE.
    """

    # ===== Logging =====
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "simple")  # "simple" or "json"
    DEBUG_MODE: bool = os.getenv("DEBUG_MODE", "false").lower() == "true"

    # ===== MongoDB =====
    # Prefix of the <SECTION>_URI / <SECTION>_DATABASE variables
    DEFAULT_CONFIG_SECTION: str = os.getenv("RECORDREPO_CONFIG_SECTION", "MONGODB")
