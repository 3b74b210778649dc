"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports two families of modes:
    - DEVELOPMENT: Uses the in-memory document store and mock image host
    - PRODUCTION / STAGING: Uses Cloud Firestore and Cloudinary

The ENV_MODE variable controls which collaborators the application entry
point constructs. Nothing in this module creates a client; it only
describes how to build one.

Usage:
    from restaurant_admin.core.config import get_settings

    settings = get_settings()
    if settings.use_real_services:
        # Firestore + Cloudinary
    else:
        # MockDocumentStore + MockImageHost

Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from typing import Optional
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local work against in-memory collaborators
        PRODUCTION: Live Firestore project and Cloudinary account
        STAGING: Real services pointed at a staging project
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Credentials (service account files, upload presets) should NEVER be
    committed to version control.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging and error details

        # Document store
        firestore_project_id: Google Cloud project hosting Firestore
        firestore_database: Firestore database id
        google_application_credentials: Service account JSON path

        # Collection layout
        users_collection: Tenant collection holding order sub-collections
        orders_collection: Per-tenant order sub-collection name
        couriers_collection: Courier records with delivery counters

        # Image hosting
        cloudinary_cloud_name: Cloudinary cloud name
        cloudinary_upload_preset: Unsigned upload preset
        cloudinary_upload_timeout: Client-side upload timeout in seconds
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="Restaurant Admin",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8001,
        description="API server port"
    )

    # ==========================================================================
    # FIRESTORE
    # ==========================================================================

    firestore_project_id: Optional[str] = Field(
        default=None,
        description="Google Cloud project id hosting the Firestore database"
    )
    firestore_database: str = Field(
        default="(default)",
        description="Firestore database id"
    )
    google_application_credentials: Optional[str] = Field(
        default=None,
        description="Path to a service account JSON key file"
    )

    # ==========================================================================
    # COLLECTION LAYOUT
    # ==========================================================================

    users_collection: str = Field(
        default="users",
        description="Tenant collection; each tenant owns an orders sub-collection"
    )
    orders_collection: str = Field(
        default="orders",
        description="Order sub-collection name (also the collection-group id)"
    )
    couriers_collection: str = Field(
        default="deliverymen",
        description="Courier records carrying deliveriesCompleted counters"
    )
    cuisines_collection: str = Field(default="cuisines")
    categories_collection: str = Field(default="categories")
    products_collection: str = Field(default="products")

    # ==========================================================================
    # CLOUDINARY
    # ==========================================================================

    cloudinary_cloud_name: Optional[str] = Field(
        default=None,
        description="Cloudinary cloud name"
    )
    cloudinary_upload_preset: Optional[str] = Field(
        default=None,
        description="Unsigned upload preset"
    )
    cloudinary_upload_timeout: float = Field(
        default=60.0,
        description="Seconds before an upload is abandoned"
    )

    # ==========================================================================
    # DASHBOARD
    # ==========================================================================

    recent_orders_limit: int = Field(
        default=5,
        description="Number of recent orders on the dashboard"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def use_real_services(self) -> bool:
        """Check if real external services should be used."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    @property
    def cloudinary_upload_url(self) -> str:
        """Upload endpoint for the configured cloud."""
        return f"https://api.cloudinary.com/v1_1/{self.cloudinary_cloud_name}/image/upload"

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Validate that all required production settings are configured.

        Returns:
            List of missing configuration keys (empty if all present)
        """
        missing = []

        if self.use_real_services:
            if not self.firestore_project_id:
                missing.append("FIRESTORE_PROJECT_ID")
            if not self.cloudinary_cloud_name:
                missing.append("CLOUDINARY_CLOUD_NAME")
            if not self.cloudinary_upload_preset:
                missing.append("CLOUDINARY_UPLOAD_PRESET")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Configured application settings
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)

    return logging.getLogger("restaurant_admin")
