"""
Configuration Management

Simple utility for loading and validating environment configuration.
"""

import os
from typing import Optional
from urllib.parse import urlparse

import pytz
from dotenv import load_dotenv


def load_config(env_path: Optional[str] = None) -> bool:
    """
    Load environment configuration from .env file.

    Args:
        env_path: Optional path to .env file. If None, searches in current directory.

    Returns:
        bool: True if .env file was found and loaded, False otherwise
    """
    if env_path:
        return load_dotenv(env_path)
    return load_dotenv()


def get_api_config() -> dict:
    """
    Get tracking API configuration.

    Returns:
        dict: API configuration

    Raises:
        ValueError: If an endpoint is missing or not an http(s) URL
    """
    config = {
        "graphql_url": os.getenv("TRACKING_GRAPHQL_URL", "http://localhost:8000/graphql/"),
        "api_base_url": os.getenv("TRACKING_API_BASE_URL", "http://localhost:8000"),
        "timeout_seconds": float(os.getenv("TRACKING_API_TIMEOUT_SECONDS", "15")),
    }

    # Validate
    invalid = [
        k for k in ("graphql_url", "api_base_url")
        if urlparse(config[k] or "").scheme not in ("http", "https")
    ]
    if invalid:
        raise ValueError(
            f"Invalid tracking API configuration: {invalid}. "
            f"Please check your .env file."
        )

    return config


def get_app_config() -> dict:
    """
    Get application configuration settings.

    Returns:
        dict: Application settings
    """
    return {
        "timezone": os.getenv("TIMEZONE", "America/Mexico_City"),
        "shift_duration_hours": float(os.getenv("SHIFT_DURATION_HOURS", "9")),
        "machine_refresh_seconds": int(os.getenv("MACHINE_REFRESH_SECONDS", "30")),
        "progress_refresh_seconds": int(os.getenv("PROGRESS_REFRESH_SECONDS", "60")),
    }


def validate_config() -> list:
    """
    Validate all required configuration is present.

    Returns:
        list: List of configuration problems (empty if all valid)
    """
    missing = []

    try:
        get_api_config()
    except ValueError as e:
        missing.append(f"API: {str(e)}")

    try:
        app_config = get_app_config()
    except ValueError as e:
        missing.append(f"APP: {str(e)}")
    else:
        if app_config["timezone"] not in pytz.all_timezones_set:
            missing.append(f"APP: Unknown timezone '{app_config['timezone']}'")

    return missing
