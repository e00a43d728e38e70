"""
Catalog Cache

Local copy of the last-known catalog for offline loads. Products and
cases live under separate keys and are read independently: a corrupt
entry for one never blocks the other.
"""

import json
from typing import Type, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from showroom.common.logging_setup import get_service_logger
from showroom.common.models import CaseStudy, Product
from showroom.common.state import CASES_KEY, PRODUCTS_KEY, LocalStore

logger = get_service_logger("sync.cache")

ModelT = TypeVar("ModelT", bound=BaseModel)


class CatalogCache:
    """Two independently keyed collections in the local store"""

    def __init__(self, store: LocalStore):
        self.store = store

    def save_products(self, products: list[Product]) -> None:
        self._save(PRODUCTS_KEY, products)

    def save_cases(self, cases: list[CaseStudy]) -> None:
        self._save(CASES_KEY, cases)

    def load_products(self) -> list[Product] | None:
        """Cached products, or None if absent/unreadable"""
        return self._load(PRODUCTS_KEY, Product)

    def load_cases(self) -> list[CaseStudy] | None:
        """Cached cases, or None if absent/unreadable"""
        return self._load(CASES_KEY, CaseStudy)

    def clear(self) -> None:
        """Clear both cached collections"""
        self.store.delete(PRODUCTS_KEY)
        self.store.delete(CASES_KEY)
        logger.info("Catalog cache cleared")

    def _save(self, key: str, items: list[BaseModel]) -> None:
        payload = json.dumps([item.to_wire() for item in items], ensure_ascii=False)
        self.store.set(key, payload)
        logger.debug(f"Cached {len(items)} {key}")

    def _load(self, key: str, model: Type[ModelT]) -> list[ModelT] | None:
        try:
            raw = self.store.get(key)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading cached {key}: {e}")
            return None

        if raw is None:
            return None

        try:
            return TypeAdapter(list[model]).validate_json(raw)
        except ValidationError as e:
            logger.error(
                f"Error loading cached {key}: {e.error_count()} errors",
                extra={"key": key},
            )
            return None
