"""
Configuration Management
Loads and validates environment variables
"""
import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Application configuration"""

    # Tracking API
    GRAPHQL_URL = os.getenv("TRACKING_GRAPHQL_URL", "http://localhost:8000/graphql/")
    API_BASE_URL = os.getenv("TRACKING_API_BASE_URL", "http://localhost:8000")
    API_TIMEOUT_SECONDS = float(os.getenv("TRACKING_API_TIMEOUT_SECONDS", 15))
    ACCESS_TOKEN_LIFETIME_MINUTES = float(os.getenv("ACCESS_TOKEN_LIFETIME_MINUTES", 5))

    # Application Settings
    TIMEZONE = os.getenv("TIMEZONE", "America/Mexico_City")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Shop-floor rules
    SHIFT_DURATION_HOURS = float(os.getenv("SHIFT_DURATION_HOURS", 9))
    DEFAULT_CYCLE_TARGET_MIN = float(os.getenv("DEFAULT_CYCLE_TARGET_MIN", 30))

    # Refresh intervals (seconds)
    MACHINE_REFRESH_SECONDS = int(os.getenv("MACHINE_REFRESH_SECONDS", 30))
    PROGRESS_REFRESH_SECONDS = int(os.getenv("PROGRESS_REFRESH_SECONDS", 60))

    @classmethod
    def validate(cls):
        """Validate required configuration"""
        required = ['GRAPHQL_URL', 'API_BASE_URL']

        missing = [field for field in required if not getattr(cls, field)]

        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")

        positive = [
            'API_TIMEOUT_SECONDS', 'SHIFT_DURATION_HOURS',
            'MACHINE_REFRESH_SECONDS', 'PROGRESS_REFRESH_SECONDS'
        ]
        invalid = [field for field in positive if getattr(cls, field) <= 0]

        if invalid:
            raise ValueError(f"Configuration values must be positive: {', '.join(invalid)}")

        return True

# Validate on import
Config.validate()
