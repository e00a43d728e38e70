"""
Sync Service - Catalog Synchronization

Responsibilities:
- Resolve which cloud settings to load from (admin override or public)
- Fetch the catalog document, falling back to the local cache
- Mirror every edit into the local cache
- Publish the full catalog after size/endpoint/overwrite confirmations
"""

from .service import (
    CatalogSyncService,
    Confirmation,
    PublishResult,
    PublishStatus,
    SyncStatus,
)
from .store_client import CredentialNegotiation, CredentialState, DocumentStoreClient
from .settings import SettingsResolver
from .cache import CatalogCache
from .validator import CatalogValidator

__all__ = [
    "CatalogSyncService",
    "Confirmation",
    "PublishResult",
    "PublishStatus",
    "SyncStatus",
    "CredentialNegotiation",
    "CredentialState",
    "DocumentStoreClient",
    "SettingsResolver",
    "CatalogCache",
    "CatalogValidator",
]
