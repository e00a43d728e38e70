"""
Catalog Sync Service

Responsible for:
- Hydrating the catalog at startup (cloud first, local cache as fallback)
- Applying admin edits and mirroring every change into the local cache
- Publishing the full catalog document to the cloud after confirmations

The remote document is always replaced whole. Two admins publishing at
the same time overwrite each other; there is no revision check.
"""

import asyncio
import json
from dataclasses import dataclass
from enum import Enum
from typing import Callable
from uuid import uuid4

from showroom.common.config import PUBLIC_READ_CONFIG, CloudSettings, SyncPolicy
from showroom.common.defaults import default_cases, default_products
from showroom.common.exceptions import (
    CatalogError,
    ImportValidationError,
    NotConfiguredError,
    PublishError,
)
from showroom.common.logging_setup import get_service_logger
from showroom.common.models import (
    AppData,
    CaseStudy,
    Product,
    now_ms,
    payload_size_kb,
    serialize_document,
)
from showroom.common.state import LocalStore

from .cache import CatalogCache
from .settings import SettingsResolver
from .store_client import DocumentStoreClient
from .validator import CatalogValidator

logger = get_service_logger("sync")


class SyncStatus(str, Enum):
    """Startup load status (terminal once SYNCED or FALLBACK_TO_CACHE)"""
    UNINITIALIZED = "uninitialized"
    FETCHING = "fetching"
    SYNCED = "synced"
    FALLBACK_TO_CACHE = "fallback_to_cache"


class PublishStatus(str, Enum):
    """Publish cycle status"""
    IDLE = "idle"
    PUBLISHING = "publishing"
    PUBLISHED = "published"
    FAILED = "failed"


class Confirmation(str, Enum):
    """Prompts shown to the admin before publishing"""
    LARGE_PAYLOAD = "large_payload"
    ENDPOINT_MISMATCH = "endpoint_mismatch"
    OVERWRITE = "overwrite"


# confirm(kind, message) -> proceed?
ConfirmFn = Callable[[Confirmation, str], bool]


@dataclass
class PublishResult:
    """Outcome of a publish request that did not raise"""
    published: bool
    size_kb: float
    declined: Confirmation | None = None
    last_updated: int | None = None


class CatalogSyncService:
    """
    Catalog state holder and cloud sync orchestrator.

    Single writer: callers serialize access (one event loop, one admin).
    """

    def __init__(
        self,
        store: LocalStore,
        public_config: CloudSettings = PUBLIC_READ_CONFIG,
        client: DocumentStoreClient | None = None,
        policy: SyncPolicy | None = None,
    ):
        self.policy = policy or SyncPolicy()
        self.settings = SettingsResolver(store, public_config)
        self.cache = CatalogCache(store)
        self.validator = CatalogValidator()
        self.client = client or DocumentStoreClient(timeout=self.policy.fetch_timeout_s)

        # Seed data until a source replaces it
        self.products: list[Product] = default_products()
        self.cases: list[CaseStudy] = default_cases()

        self.sync_status = SyncStatus.UNINITIALIZED
        self.active_settings: CloudSettings | None = None
        self.publish_status = PublishStatus.IDLE
        self.last_publish_error: str | None = None

    async def close(self) -> None:
        await self.client.close()

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def initialize(self, prefer_cache: bool = False) -> SyncStatus:
        """
        Load the catalog for this session.

        Cloud document first; on any failure, each cached collection is
        loaded on its own. Never raises.

        Args:
            prefer_cache: Resume the local working copy when one is cached,
                skipping the fetch. Unpublished edits live only there.
        """
        if self.sync_status is not SyncStatus.UNINITIALIZED:
            logger.debug(f"Already initialized ({self.sync_status.value})")
            return self.sync_status

        self.sync_status = SyncStatus.FETCHING
        settings = self.settings.resolve()
        self.active_settings = settings

        if prefer_cache and self._load_from_cache():
            logger.info("Resumed local working copy")
            self.sync_status = SyncStatus.FALLBACK_TO_CACHE
            return self.sync_status

        if settings.is_configured:
            data = await self._fetch_with_timeout(settings)
            if data is not None:
                self.products = list(data.products)
                self.cases = list(data.cases)
                # Update local cache so next load works offline
                try:
                    self.cache.save_products(self.products)
                    self.cache.save_cases(self.cases)
                except OSError as e:
                    logger.error(f"Failed to cache cloud catalog: {e}")
                self.sync_status = SyncStatus.SYNCED
                logger.info(
                    "Synced with cloud data",
                    extra={"endpoint": settings.endpoint_url},
                )
                return self.sync_status
        else:
            logger.info("Cloud sync not configured, using local cache")

        self._load_from_cache()
        self.sync_status = SyncStatus.FALLBACK_TO_CACHE
        return self.sync_status

    async def _fetch_with_timeout(self, settings: CloudSettings) -> AppData | None:
        try:
            return await asyncio.wait_for(
                self.client.fetch_document(settings),
                timeout=self.policy.fetch_timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Cloud fetch timed out after {self.policy.fetch_timeout_s}s",
                extra={"endpoint": settings.endpoint_url},
            )
        except Exception as e:
            logger.error(f"Cloud sync init failed: {e}", exc_info=True)
        return None

    def _load_from_cache(self) -> bool:
        """Apply cached collections; True if either was present"""
        products = self.cache.load_products()
        if products is not None:
            self.products = products

        cases = self.cache.load_cases()
        if cases is not None:
            self.cases = cases

        logger.info(
            f"Loaded catalog from cache: {len(self.products)} products, {len(self.cases)} cases",
            extra={
                "products_cached": products is not None,
                "cases_cached": cases is not None,
            },
        )
        return products is not None or cases is not None

    # ------------------------------------------------------------------
    # Mutations (each one re-persists its collection)
    # ------------------------------------------------------------------

    @staticmethod
    def new_id() -> str:
        return uuid4().hex

    def add_product(self, product: Product) -> Product:
        if not product.id:
            product = product.model_copy(update={"id": self.new_id()})
        if self._index(self.products, product.id) is not None:
            raise CatalogError(f"Product id already exists: {product.id}")
        self.products = [*self.products, product]
        self.cache.save_products(self.products)
        logger.info(f"Product added: {product.id}")
        return product

    def update_product(self, product: Product) -> None:
        index = self._require_index(self.products, product.id, "Product")
        self.products = [*self.products[:index], product, *self.products[index + 1:]]
        self.cache.save_products(self.products)
        logger.info(f"Product updated: {product.id}")

    def delete_product(self, product_id: str) -> None:
        self._require_index(self.products, product_id, "Product")
        self.products = [p for p in self.products if p.id != product_id]
        self.cache.save_products(self.products)
        logger.info(f"Product deleted: {product_id}")

    def import_products(self, payload) -> int:
        """
        Replace all products.

        Raises:
            ImportValidationError: payload rejected, state untouched
        """
        items, errors = self.validator.validate("products", payload)
        if errors:
            raise ImportValidationError(errors)
        self.products = items
        self.cache.save_products(self.products)
        logger.info(f"Imported {len(items)} products")
        return len(items)

    def add_case(self, case: CaseStudy) -> CaseStudy:
        if not case.id:
            case = case.model_copy(update={"id": self.new_id()})
        if self._index(self.cases, case.id) is not None:
            raise CatalogError(f"Case id already exists: {case.id}")
        self.cases = [*self.cases, case]
        self.cache.save_cases(self.cases)
        logger.info(f"Case added: {case.id}")
        return case

    def update_case(self, case: CaseStudy) -> None:
        index = self._require_index(self.cases, case.id, "Case")
        self.cases = [*self.cases[:index], case, *self.cases[index + 1:]]
        self.cache.save_cases(self.cases)
        logger.info(f"Case updated: {case.id}")

    def delete_case(self, case_id: str) -> None:
        self._require_index(self.cases, case_id, "Case")
        self.cases = [c for c in self.cases if c.id != case_id]
        self.cache.save_cases(self.cases)
        logger.info(f"Case deleted: {case_id}")

    def import_cases(self, payload) -> int:
        items, errors = self.validator.validate("cases", payload)
        if errors:
            raise ImportValidationError(errors)
        self.cases = items
        self.cache.save_cases(self.cases)
        logger.info(f"Imported {len(items)} cases")
        return len(items)

    @staticmethod
    def _index(items: list, item_id: str) -> int | None:
        for index, item in enumerate(items):
            if item.id == item_id:
                return index
        return None

    def _require_index(self, items: list, item_id: str, label: str) -> int:
        index = self._index(items, item_id)
        if index is None:
            raise CatalogError(f"{label} not found: {item_id}")
        return index

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def snapshot(self, last_updated: int | None = None) -> AppData:
        return AppData(
            products=self.products,
            cases=self.cases,
            last_updated=last_updated if last_updated is not None else now_ms(),
        )

    def export_products(self) -> str:
        return _dump_list(self.products)

    def export_cases(self) -> str:
        return _dump_list(self.cases)

    def export_document(self) -> str:
        return self.snapshot().model_dump_json(by_alias=True, exclude_none=True, indent=2)

    # ------------------------------------------------------------------
    # Admin settings and publish
    # ------------------------------------------------------------------

    def load_admin_settings(self) -> CloudSettings:
        return self.settings.load_admin_settings() or CloudSettings()

    def save_admin_settings(self, settings: CloudSettings) -> None:
        self.settings.save_admin_settings(settings)

    def endpoint_mismatch(self) -> bool:
        return self.settings.endpoint_mismatch(self.load_admin_settings())

    async def publish(self, confirm: ConfirmFn) -> PublishResult:
        """
        Publish the current catalog with the admin's settings.

        Args:
            confirm: Asked before large payloads, endpoint mismatches and
                the final overwrite; returning False aborts

        Raises:
            NotConfiguredError: admin settings disabled or no endpoint
            PublishError: the store rejected the upload (message is meant
                to be shown to the admin as-is)
        """
        admin = self.load_admin_settings()
        if not admin.is_configured:
            raise NotConfiguredError("Cloud sync is not configured: enable it and set an endpoint URL")

        data = self.snapshot()
        size_kb = payload_size_kb(serialize_document(data))

        if size_kb > self.policy.size_warning_kb:
            message = (
                f"Payload is {size_kb:.2f} KB, above the {self.policy.size_warning_kb:.0f} KB "
                "guideline. Large documents may be rejected or load slowly. Continue?"
            )
            if not confirm(Confirmation.LARGE_PAYLOAD, message):
                return self._declined(Confirmation.LARGE_PAYLOAD, size_kb)

        if self.settings.endpoint_mismatch(admin):
            public_endpoint = self.settings.public_config.endpoint_url or "(none)"
            message = (
                f"Publishing to {admin.endpoint_url}, but visitors read from "
                f"{public_endpoint}. Visitors will not see this update. Continue?"
            )
            logger.warning(
                "Admin endpoint differs from public read endpoint",
                extra={"admin_endpoint": admin.endpoint_url, "public_endpoint": public_endpoint},
            )
            if not confirm(Confirmation.ENDPOINT_MISMATCH, message):
                return self._declined(Confirmation.ENDPOINT_MISMATCH, size_kb)

        message = (
            f"Overwrite the cloud catalog with {len(self.products)} products and "
            f"{len(self.cases)} cases? All visitors will see this version."
        )
        if not confirm(Confirmation.OVERWRITE, message):
            return self._declined(Confirmation.OVERWRITE, size_kb)

        self.publish_status = PublishStatus.PUBLISHING
        self.last_publish_error = None
        try:
            await asyncio.wait_for(
                self.client.publish_document(admin, data),
                timeout=self.policy.publish_timeout_s,
            )
        except asyncio.TimeoutError as e:
            self._publish_failed("Upload failed: timed out waiting for the document store")
            raise PublishError(self.last_publish_error) from e
        except PublishError as e:
            self._publish_failed(str(e))
            raise

        self.publish_status = PublishStatus.PUBLISHED
        logger.info(
            f"Catalog published ({size_kb:.2f} KB)",
            extra={"endpoint": admin.endpoint_url, "last_updated": data.last_updated},
        )
        return PublishResult(published=True, size_kb=size_kb, last_updated=data.last_updated)

    def _declined(self, kind: Confirmation, size_kb: float) -> PublishResult:
        logger.info(f"Publish cancelled at {kind.value} confirmation")
        self.publish_status = PublishStatus.IDLE
        return PublishResult(published=False, size_kb=size_kb, declined=kind)

    def _publish_failed(self, message: str) -> None:
        self.publish_status = PublishStatus.FAILED
        self.last_publish_error = message
        logger.error(f"Publish failed: {message}")


def _dump_list(items: list) -> str:
    return json.dumps([item.to_wire() for item in items], ensure_ascii=False, indent=2)
