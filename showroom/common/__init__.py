"""
Common Utilities

Shared modules used by the sync service and CLI:
- models.py - Catalog data models
- config.py - Cloud settings and sync policy
- state.py - File-based local key-value store
- exceptions.py - Custom exception classes
- logging_setup.py - Structured logging setup
"""

from .models import (
    AppData,
    CaseStudy,
    Category,
    Product,
    now_ms,
    payload_size_kb,
    serialize_document,
)
from .config import (
    PUBLIC_READ_CONFIG,
    CloudSettings,
    ShowroomConfig,
    SyncPolicy,
    load_config,
)
from .state import LocalStore, PRODUCTS_KEY, CASES_KEY, CLOUD_SETTINGS_KEY
from .exceptions import (
    ShowroomError,
    ConfigError,
    SyncError,
    PublishError,
    PayloadTooLargeError,
    NotConfiguredError,
    CatalogError,
    ImportValidationError,
)
from .logging_setup import setup_logging, get_service_logger

__all__ = [
    # Models
    "AppData",
    "CaseStudy",
    "Category",
    "Product",
    "now_ms",
    "payload_size_kb",
    "serialize_document",
    # Config
    "PUBLIC_READ_CONFIG",
    "CloudSettings",
    "ShowroomConfig",
    "SyncPolicy",
    "load_config",
    # State
    "LocalStore",
    "PRODUCTS_KEY",
    "CASES_KEY",
    "CLOUD_SETTINGS_KEY",
    # Exceptions
    "ShowroomError",
    "ConfigError",
    "SyncError",
    "PublishError",
    "PayloadTooLargeError",
    "NotConfiguredError",
    "CatalogError",
    "ImportValidationError",
    # Logging
    "setup_logging",
    "get_service_logger",
]
