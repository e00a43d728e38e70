"""
Catalog sync service tests: startup precedence chain, cache mirroring of
edits, and the publish confirmation flow.
"""

import asyncio

import httpx
import pytest

from showroom.common.config import CloudSettings, SyncPolicy
from showroom.common.defaults import default_cases, default_products
from showroom.common.exceptions import (
    CatalogError,
    ImportValidationError,
    NotConfiguredError,
    PayloadTooLargeError,
)
from showroom.common.models import AppData
from showroom.common.state import CASES_KEY, LocalStore
from showroom.services.sync import Confirmation, PublishStatus, SyncStatus

from conftest import ACCESS_KEY, MASTER_KEY, make_case, make_product

ENDPOINT_X = "https://api.store/b/X"
ENDPOINT_Y = "https://api.store/b/Y"
PUBLIC = CloudSettings(enabled=True, endpoint_url=ENDPOINT_X, api_key=ACCESS_KEY)


class Recorder:
    """Confirmation hook that records prompts and answers from a script"""

    def __init__(self, answers: dict | None = None):
        self.answers = answers or {}
        self.asked: list[Confirmation] = []

    def __call__(self, kind: Confirmation, message: str) -> bool:
        self.asked.append(kind)
        return self.answers.get(kind, True)


class SlowClient:
    """Store client whose fetch never answers in time"""

    async def fetch_document(self, settings):
        await asyncio.sleep(5)

    async def close(self):
        pass


def seed_remote(fake_store, endpoint=ENDPOINT_X) -> AppData:
    data = AppData(
        products=[make_product("remote-1")],
        cases=[make_case("remote-c1"), make_case("remote-c2")],
        last_updated=1700000000000,
    )
    fake_store.documents[endpoint] = data.to_wire()
    return data


# ----------------------------------------------------------------------
# Startup
# ----------------------------------------------------------------------

async def test_initialize_adopts_remote_and_refreshes_cache(fake_store, make_service):
    remote = seed_remote(fake_store)
    service = make_service(PUBLIC)

    status = await service.initialize()

    assert status is SyncStatus.SYNCED
    assert service.products == remote.products
    assert service.cases == remote.cases
    assert service.cache.load_products() == remote.products
    assert service.cache.load_cases() == remote.cases


async def test_initialize_falls_back_to_cache_on_network_error(fake_store, make_service):
    cached_products = [make_product("p1"), make_product("p2")]
    cached_cases = [make_case("c1")]
    seeding = make_service(PUBLIC)
    seeding.cache.save_products(cached_products)
    seeding.cache.save_cases(cached_cases)
    fake_store.fail_with = httpx.ConnectError("offline")

    service = make_service(PUBLIC)
    status = await service.initialize()

    assert status is SyncStatus.FALLBACK_TO_CACHE
    assert service.products == cached_products
    assert service.cases == cached_cases


async def test_corrupt_cached_cases_keep_defaults_but_load_products(local_store, make_service):
    service = make_service(CloudSettings())
    service.cache.save_products([make_product("p1")])
    local_store.set(CASES_KEY, "not json at all")

    service = make_service(CloudSettings())
    await service.initialize()

    assert [p.id for p in service.products] == ["p1"]
    assert service.cases == default_cases()


async def test_first_run_without_cloud_or_cache_uses_defaults(make_service, fake_store):
    service = make_service(CloudSettings())

    status = await service.initialize()

    assert status is SyncStatus.FALLBACK_TO_CACHE
    assert service.products == default_products()
    assert service.cases == default_cases()
    assert fake_store.requests == []


async def test_remote_without_products_array_falls_back(fake_store, make_service):
    fake_store.documents[ENDPOINT_X] = {"items": []}
    service = make_service(PUBLIC)
    service.cache.save_products([make_product("cached")])

    service = make_service(PUBLIC)
    await service.initialize()

    assert [p.id for p in service.products] == ["cached"]


async def test_remote_with_numeric_price_still_syncs(fake_store, make_service):
    fake_store.documents[ENDPOINT_X] = {
        "products": [{"id": "p1", "name": "Scanner", "price": 100}, {"id": "bad", "category": "Furniture"}],
        "cases": [],
    }
    service = make_service(PUBLIC)

    status = await service.initialize()

    assert status is SyncStatus.SYNCED
    assert [p.id for p in service.products] == ["p1"]
    assert service.products[0].price == "100"


async def test_cache_write_failure_after_fetch_still_syncs(fake_store, make_service, monkeypatch):
    remote = seed_remote(fake_store)
    service = make_service(PUBLIC)

    def disk_full(items):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(service.cache, "save_products", disk_full)

    status = await service.initialize()

    assert status is SyncStatus.SYNCED
    assert service.products == remote.products


async def test_prefer_cache_resumes_working_copy_without_fetch(fake_store, make_service):
    seed_remote(fake_store)
    seeding = make_service(PUBLIC)
    seeding.cache.save_products([make_product("edited")])

    service = make_service(PUBLIC)
    status = await service.initialize(prefer_cache=True)

    assert status is SyncStatus.FALLBACK_TO_CACHE
    assert [p.id for p in service.products] == ["edited"]
    assert fake_store.requests == []


async def test_prefer_cache_with_empty_cache_fetches(fake_store, make_service):
    remote = seed_remote(fake_store)
    service = make_service(PUBLIC)

    status = await service.initialize(prefer_cache=True)

    assert status is SyncStatus.SYNCED
    assert service.products == remote.products


async def test_fetch_timeout_is_treated_as_failure(make_service):
    service = make_service(
        PUBLIC,
        policy=SyncPolicy(fetch_timeout_s=0.05),
        client=SlowClient(),
    )
    service.cache.save_cases([make_case("cached")])

    status = await service.initialize()

    assert status is SyncStatus.FALLBACK_TO_CACHE
    assert [c.id for c in service.cases] == ["cached"]


async def test_admin_override_is_used_for_startup(fake_store, make_service):
    seed_remote(fake_store, ENDPOINT_Y)
    service = make_service(PUBLIC)
    service.save_admin_settings(CloudSettings(True, ENDPOINT_Y, MASTER_KEY))

    await service.initialize()

    assert service.active_settings.endpoint_url == ENDPOINT_Y
    assert [p.id for p in service.products] == ["remote-1"]


async def test_initialize_is_terminal(fake_store, make_service):
    seed_remote(fake_store)
    service = make_service(PUBLIC)

    await service.initialize()
    status = await service.initialize()

    assert status is SyncStatus.SYNCED
    assert len(fake_store.requests) == 1


# ----------------------------------------------------------------------
# Mutations
# ----------------------------------------------------------------------

async def test_every_mutation_is_cached(make_service):
    service = make_service()
    await service.initialize()

    service.add_product(make_product("new"))
    assert "new" in [p.id for p in service.cache.load_products()]

    service.update_product(make_product("new", name="Renamed"))
    cached = {p.id: p for p in service.cache.load_products()}
    assert cached["new"].name == "Renamed"

    service.delete_product("type-a")
    assert "type-a" not in [p.id for p in service.cache.load_products()]

    case = service.add_case(make_case(""))
    assert case.id
    service.update_case(make_case(case.id, title="Updated"))
    service.delete_case("c1")
    cached_cases = service.cache.load_cases()
    assert [c.id for c in cached_cases] == ["c2", case.id]
    assert cached_cases[-1].title == "Updated"


async def test_update_preserves_order(make_service):
    service = make_service()
    await service.initialize()

    service.update_product(make_product("type-b", name="Middle"))

    assert [p.id for p in service.products] == ["type-c", "type-b", "type-a"]


async def test_duplicate_and_unknown_ids_raise(make_service):
    service = make_service()
    await service.initialize()

    with pytest.raises(CatalogError):
        service.add_product(make_product("type-a"))
    with pytest.raises(CatalogError):
        service.update_case(make_case("missing"))
    with pytest.raises(CatalogError):
        service.delete_product("missing")


async def test_generated_ids_are_unique(make_service):
    service = make_service()
    first = service.add_product(make_product(""))
    service.delete_product(first.id)
    second = service.add_product(make_product(""))

    assert first.id != second.id


async def test_import_replaces_collection(make_service):
    service = make_service()
    await service.initialize()

    count = service.import_products('[{"id": "x", "name": "X"}, {"id": "y", "name": "Y"}]')

    assert count == 2
    assert [p.id for p in service.products] == ["x", "y"]
    assert [p.id for p in service.cache.load_products()] == ["x", "y"]


async def test_rejected_import_leaves_state_untouched(make_service):
    service = make_service()
    await service.initialize()
    before = list(service.cases)

    with pytest.raises(ImportValidationError) as exc_info:
        service.import_cases('{"id": "c"}')

    assert exc_info.value.errors == ["Imported data must be an array"]
    assert service.cases == before


async def test_export_round_trips_through_import(make_service, local_store, tmp_path):
    service = make_service()
    await service.initialize()
    exported = service.export_products()

    other = make_service(store=LocalStore(tmp_path / "other"))
    other.import_products("[]")
    other.import_products(exported)

    assert other.products == service.products


# ----------------------------------------------------------------------
# Publish
# ----------------------------------------------------------------------

async def test_publish_refused_when_not_configured(make_service, fake_store):
    service = make_service(PUBLIC)
    service.save_admin_settings(CloudSettings(False, ENDPOINT_X, MASTER_KEY))

    with pytest.raises(NotConfiguredError):
        await service.publish(Recorder())

    assert fake_store.requests == []


async def test_publish_asks_only_final_confirmation_when_consistent(make_service, fake_store):
    service = make_service(PUBLIC)
    service.save_admin_settings(CloudSettings(True, ENDPOINT_X, MASTER_KEY))
    await service.initialize()
    confirm = Recorder()

    result = await service.publish(confirm)

    assert result.published
    assert confirm.asked == [Confirmation.OVERWRITE]
    assert service.publish_status is PublishStatus.PUBLISHED
    stored = fake_store.documents[ENDPOINT_X]
    assert [p["id"] for p in stored["products"]] == [p.id for p in service.products]
    assert stored["lastUpdated"] == result.last_updated


async def test_declining_overwrite_sends_nothing(make_service, fake_store):
    service = make_service(PUBLIC)
    service.save_admin_settings(CloudSettings(True, ENDPOINT_X, MASTER_KEY))

    result = await service.publish(Recorder({Confirmation.OVERWRITE: False}))

    assert not result.published
    assert result.declined is Confirmation.OVERWRITE
    assert service.publish_status is PublishStatus.IDLE
    assert fake_store.requests == []


async def test_large_payload_requires_confirmation(make_service, fake_store):
    service = make_service(PUBLIC, policy=SyncPolicy(size_warning_kb=1))
    service.save_admin_settings(CloudSettings(True, ENDPOINT_X, MASTER_KEY))
    confirm = Recorder({Confirmation.LARGE_PAYLOAD: False})

    result = await service.publish(confirm)

    assert confirm.asked == [Confirmation.LARGE_PAYLOAD]
    assert result.declined is Confirmation.LARGE_PAYLOAD
    assert result.size_kb > 1
    assert fake_store.requests == []


async def test_endpoint_divergence_scenario(make_service, fake_store, local_store, tmp_path):
    original = seed_remote(fake_store, ENDPOINT_X)

    admin_service = make_service(PUBLIC)
    admin_service.save_admin_settings(CloudSettings(True, ENDPOINT_Y, MASTER_KEY))
    await admin_service.initialize()
    admin_service.add_product(make_product("staging-only"))
    confirm = Recorder()

    result = await admin_service.publish(confirm)

    assert result.published
    assert confirm.asked == [Confirmation.ENDPOINT_MISMATCH, Confirmation.OVERWRITE]
    assert "staging-only" in [p["id"] for p in fake_store.documents[ENDPOINT_Y]["products"]]

    # Anonymous visitor with a fresh browser reads the public endpoint
    visitor = make_service(PUBLIC, store=LocalStore(tmp_path / "visitor"))
    await visitor.initialize()

    assert visitor.products == original.products
    assert "staging-only" not in [p.id for p in visitor.products]


async def test_declining_endpoint_mismatch_aborts(make_service, fake_store):
    service = make_service(PUBLIC)
    service.save_admin_settings(CloudSettings(True, ENDPOINT_Y, MASTER_KEY))

    result = await service.publish(Recorder({Confirmation.ENDPOINT_MISMATCH: False}))

    assert result.declined is Confirmation.ENDPOINT_MISMATCH
    assert fake_store.requests == []


async def test_publish_failure_is_raised_and_recorded(make_service, fake_store):
    fake_store.size_limit_bytes = 100
    service = make_service(PUBLIC)
    service.save_admin_settings(CloudSettings(True, ENDPOINT_X, MASTER_KEY))

    with pytest.raises(PayloadTooLargeError) as exc_info:
        await service.publish(Recorder())

    assert service.publish_status is PublishStatus.FAILED
    assert service.last_publish_error == str(exc_info.value)
    assert "KB" in service.last_publish_error

    # Publishing can be retried after trimming content
    fake_store.size_limit_bytes = None
    result = await service.publish(Recorder())
    assert result.published
    assert service.publish_status is PublishStatus.PUBLISHED
    assert service.last_publish_error is None
