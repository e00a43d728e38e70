"""
Document Store Client

Reads and writes the single catalog document held by a JSONBin-style
document store. The store has two key tiers (access key, master key),
each sent in its own header, and the client is not told which tier a
configured key belongs to. A 401/403 on the first attempt moves the
request to the other header; a second failure is final.

Optimized for low overhead:
- Reuses single HTTP client (no connection overhead per request)
"""

from enum import Enum
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from showroom.common.config import CloudSettings
from showroom.common.exceptions import PayloadTooLargeError, PublishError
from showroom.common.logging_setup import get_service_logger
from showroom.common.models import (
    AppData,
    CaseStudy,
    Product,
    payload_size_kb,
    serialize_document,
)

logger = get_service_logger("sync.store")

ModelT = TypeVar("ModelT", bound=BaseModel)

ACCESS_KEY_HEADER = "X-Access-Key"
MASTER_KEY_HEADER = "X-Master-Key"
ENVELOPE_FIELD = "record"
AUTH_REJECTED = (401, 403)

DEFAULT_TIMEOUT_S = 10.0


class CredentialState(str, Enum):
    """Credential discovery states"""
    TRY_ACCESS_KEY = "try_access_key"
    TRY_MASTER_KEY = "try_master_key"
    EXHAUSTED = "exhausted"


_HEADER_FOR_STATE = {
    CredentialState.TRY_ACCESS_KEY: ACCESS_KEY_HEADER,
    CredentialState.TRY_MASTER_KEY: MASTER_KEY_HEADER,
}


class CredentialNegotiation:
    """
    Two-attempt credential discovery.

    Starts in the given state; an auth rejection on the first attempt moves
    to the other key scheme, anything else (or a second rejection) ends in
    EXHAUSTED. At most two attempts are ever made.
    """

    def __init__(self, first: CredentialState):
        if first is CredentialState.EXHAUSTED:
            raise ValueError("negotiation cannot start exhausted")
        self.state = first
        self.attempts = 0
        self._fallback = (
            CredentialState.TRY_MASTER_KEY
            if first is CredentialState.TRY_ACCESS_KEY
            else CredentialState.TRY_ACCESS_KEY
        )

    @property
    def header_name(self) -> str:
        return _HEADER_FOR_STATE[self.state]

    @property
    def exhausted(self) -> bool:
        return self.state is CredentialState.EXHAUSTED

    def record_failure(self, status_code: int) -> None:
        """Advance after a non-success response"""
        self.attempts += 1
        if self.attempts == 1 and status_code in AUTH_REJECTED:
            self.state = self._fallback
        else:
            self.state = CredentialState.EXHAUSTED


def build_headers(api_key: str | None = None, key_header: str | None = None) -> dict[str, str]:
    """Request headers; key header only when a key is given"""
    headers = {
        "Content-Type": "application/json",
        "X-Bin-Versioning": "false",
    }
    if api_key and key_header:
        headers[key_header] = api_key
    return headers


def unwrap_document(body: Any) -> AppData | None:
    """
    Normalize a fetch response body into AppData.

    The envelope field wins when it holds an object; otherwise the body
    itself is taken as the document. A document needs an array-typed
    ``products``; a missing or non-array ``cases`` becomes empty. Entries
    that do not validate are dropped one by one, never the whole document.
    """
    if not isinstance(body, dict):
        return None

    envelope = body.get(ENVELOPE_FIELD)
    document = envelope if isinstance(envelope, dict) else body

    if not isinstance(document.get("products"), list):
        return None

    cases = document.get("cases")
    last_updated = document.get("lastUpdated")

    return AppData(
        products=_valid_entries(document["products"], Product, "product"),
        cases=_valid_entries(cases, CaseStudy, "case") if isinstance(cases, list) else [],
        last_updated=last_updated if isinstance(last_updated, int) and not isinstance(last_updated, bool) else 0,
    )


def _valid_entries(entries: list, model: type[ModelT], label: str) -> list[ModelT]:
    items = []
    for index, entry in enumerate(entries):
        try:
            items.append(model.model_validate(entry))
        except ValidationError as e:
            logger.warning(
                f"Dropping invalid remote {label} at index {index}: {e.error_count()} errors",
                extra={"label": label, "index": index},
            )
    return items


def _describe_failure(response: httpx.Response) -> str:
    """Upload error text with the store's own message when it sends one"""
    message = f"Upload failed: {response.status_code} {response.reason_phrase}".rstrip()
    try:
        body = response.json()
    except ValueError:
        return message
    if isinstance(body, dict) and body.get("message"):
        message += f" ({body['message']})"
    return message


class DocumentStoreClient:
    """Async client for one remote catalog document"""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_S,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.timeout = timeout
        # Reusable HTTP client - avoids connection overhead per request
        self._client = http_client
        # Injected clients belong to the caller
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create reusable HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        """Close HTTP client"""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "DocumentStoreClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def fetch_document(self, settings: CloudSettings) -> AppData | None:
        """
        Fetch the catalog document.

        Never raises: every failure (network, auth, bad body) returns None.

        Args:
            settings: Endpoint and key to read with

        Returns:
            AppData, or None if unavailable
        """
        if not settings.endpoint_url:
            return None

        try:
            client = await self._get_client()

            if not settings.api_key:
                response = await client.get(
                    settings.endpoint_url,
                    headers=build_headers(),
                    timeout=self.timeout,
                )
            else:
                negotiation = CredentialNegotiation(CredentialState.TRY_ACCESS_KEY)
                while True:
                    response = await client.get(
                        settings.endpoint_url,
                        headers=build_headers(settings.api_key, negotiation.header_name),
                        timeout=self.timeout,
                    )
                    if response.is_success:
                        break
                    negotiation.record_failure(response.status_code)
                    if negotiation.exhausted:
                        break
                    logger.info(
                        f"Fetch rejected ({response.status_code}), retrying with {negotiation.header_name}"
                    )

            if not response.is_success:
                logger.warning(
                    f"Cloud fetch failed: {response.status_code} {response.reason_phrase}",
                    extra={"endpoint": settings.endpoint_url, "status_code": response.status_code},
                )
                return None

            data = unwrap_document(response.json())
            if data is None:
                logger.warning(
                    "Cloud document has no products array, ignoring",
                    extra={"endpoint": settings.endpoint_url},
                )
                return None

            logger.info(
                f"Fetched catalog: {len(data.products)} products, {len(data.cases)} cases",
                extra={"endpoint": settings.endpoint_url},
            )
            return data

        except httpx.HTTPError as e:
            logger.error(f"HTTP error fetching catalog: {e}")
            return None
        except ValueError as e:
            logger.error(f"Invalid JSON from document store: {e}")
            return None

    async def publish_document(self, settings: CloudSettings, data: AppData) -> bool:
        """
        Replace the remote document with ``data``.

        Args:
            settings: Endpoint and (write-capable) key
            data: Complete catalog document

        Returns:
            True on success

        Raises:
            PayloadTooLargeError: store answered 413
            PublishError: any other failure, including network errors
        """
        if not settings.endpoint_url:
            raise PublishError("Cloud settings incomplete: no endpoint URL")

        body = serialize_document(data)
        size_kb = payload_size_kb(body)
        negotiation = CredentialNegotiation(CredentialState.TRY_MASTER_KEY)

        try:
            client = await self._get_client()
            while True:
                response = await client.put(
                    settings.endpoint_url,
                    content=body.encode("utf-8"),
                    headers=build_headers(settings.api_key, negotiation.header_name),
                    timeout=self.timeout,
                )
                if response.is_success:
                    logger.info(
                        f"Published catalog ({size_kb:.2f} KB)",
                        extra={"endpoint": settings.endpoint_url, "size_kb": round(size_kb, 2)},
                    )
                    return True
                negotiation.record_failure(response.status_code)
                if negotiation.exhausted:
                    break
                logger.info(
                    f"Publish rejected ({response.status_code}), retrying with {negotiation.header_name}"
                )
        except httpx.HTTPError as e:
            logger.error(f"HTTP error publishing catalog: {e}")
            raise PublishError(f"Upload failed: network error ({e})") from e

        logger.error(
            f"Publish failed: {response.status_code}",
            extra={"endpoint": settings.endpoint_url, "status_code": response.status_code},
        )
        if response.status_code == 413:
            raise PayloadTooLargeError(size_kb)
        raise PublishError(_describe_failure(response), status_code=response.status_code)
