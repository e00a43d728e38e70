"""
Shared fixtures: an in-memory JSONBin-style document store served through
httpx.MockTransport, plus local store / service factories.
"""

import json
from dataclasses import dataclass, field

import httpx
import pytest

from showroom.common.config import CloudSettings, SyncPolicy
from showroom.common.models import CaseStudy, Product
from showroom.common.state import LocalStore
from showroom.services.sync import CatalogSyncService, DocumentStoreClient

ACCESS_KEY = "$2a$10$read-only-access-key"
MASTER_KEY = "$2a$10$read-write-master-key"


@dataclass
class FakeDocumentStore:
    """
    Mimics the store's key tiers: an access key is only accepted in
    X-Access-Key, a master key only in X-Master-Key. Writes need the
    master key unless access_can_write is set.
    """
    documents: dict[str, dict] = field(default_factory=dict)
    access_key: str = ACCESS_KEY
    master_key: str = MASTER_KEY
    open_read: bool = False
    access_can_write: bool = False
    envelope: bool = True
    size_limit_bytes: int | None = None
    fail_with: Exception | None = None
    requests: list[httpx.Request] = field(default_factory=list)

    def _key_tier(self, request: httpx.Request) -> str | None:
        if request.headers.get("X-Master-Key") == self.master_key:
            return "master"
        if request.headers.get("X-Access-Key") == self.access_key:
            return "access"
        return None

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with

        url = str(request.url)
        tier = self._key_tier(request)

        if request.method == "GET":
            if tier is None and not self.open_read:
                return httpx.Response(401, json={"message": "You need to pass a valid key"})
            if url not in self.documents:
                return httpx.Response(404, json={"message": "Bin not found"})
            document = self.documents[url]
            if self.envelope:
                return httpx.Response(200, json={"record": document, "metadata": {"id": url}})
            return httpx.Response(200, json=document)

        if request.method == "PUT":
            if tier is None:
                return httpx.Response(401, json={"message": "You need to pass a valid key"})
            if tier == "access" and not self.access_can_write:
                return httpx.Response(403, json={"message": "Access key cannot write"})
            if self.size_limit_bytes is not None and len(request.content) > self.size_limit_bytes:
                return httpx.Response(413, json={"message": "Payload too large"})
            self.documents[url] = json.loads(request.content)
            return httpx.Response(200, json={"record": self.documents[url], "metadata": {}})

        return httpx.Response(405)

    @property
    def methods(self) -> list[str]:
        return [r.method for r in self.requests]


@pytest.fixture
def fake_store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture
def store_client(fake_store: FakeDocumentStore) -> DocumentStoreClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_store.handle))
    return DocumentStoreClient(http_client=http_client)


@pytest.fixture
def local_store(tmp_path) -> LocalStore:
    return LocalStore(tmp_path / "state")


@pytest.fixture
def make_service(local_store: LocalStore, store_client: DocumentStoreClient):
    """Factory for services sharing one local store and fake remote"""

    def _make(
        public_config: CloudSettings | None = None,
        store: LocalStore | None = None,
        policy: SyncPolicy | None = None,
        client=None,
    ) -> CatalogSyncService:
        return CatalogSyncService(
            store=store or local_store,
            public_config=public_config or CloudSettings(),
            client=client or store_client,
            policy=policy,
        )

    return _make


def make_product(product_id: str, name: str = "", **overrides) -> Product:
    data = {
        "id": product_id,
        "model": f"MDL-{product_id.upper()}",
        "name": name or f"Product {product_id}",
        "category": "Hardware",
        "subCategory": "NVR",
        "price": "¥1,000",
        "description": "Test product",
        "features": ["fast", "quiet"],
        "specs": ["4 channels"],
        "imageUrl": "https://example.com/p.jpg",
    }
    data.update(overrides)
    return Product.model_validate(data)


def make_case(case_id: str, title: str = "", **overrides) -> CaseStudy:
    data = {
        "id": case_id,
        "title": title or f"Case {case_id}",
        "description": "Test case",
        "imageUrl": "https://example.com/c.jpg",
    }
    data.update(overrides)
    return CaseStudy.model_validate(data)
