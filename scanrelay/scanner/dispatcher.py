"""
==============================================================================
Delivery Dispatcher Module
==============================================================================

Sends one scan event to the configured remote endpoint and records the
outcome in the event store.

Delivery Contract:
-----------------
- One POST per event, JSON body, no authentication header
- HTTP 200 is the only success; everything else is a failure
- No retries: a failed event stays failed, the operator scans again
- Missing or invalid endpoint fails the event without any network I/O
- Every attempt is bounded by the delivery timeout

Failure Taxonomy:
----------------
    ConfigurationError   no/invalid endpoint
    TransportError       DNS, refused connection, timeout
    ProtocolError        non-200 response
    SerializationError   payload could not be encoded

All four end as DeliveryStatus.FAILED with the reason logged and kept on
the event. None of them escapes dispatch().

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx

from scanrelay.config.provider import ConfigurationProvider
from scanrelay.core.exceptions import (
    ConfigurationError,
    DeliveryError,
    ProtocolError,
    SerializationError,
    TransportError,
)
from scanrelay.scanner.models import (
    DeliveryPayload,
    DeliveryResult,
    DeliveryStatus,
    ScanEvent,
)
from scanrelay.scanner.store import ScanEventStore
from scanrelay.utils.validators import EndpointURLValidator


# Module logger
logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
SUCCESS_STATUS_CODE = 200


class DeliveryDispatcher:
    """
    Delivers scan events over HTTP.

    The configuration provider is read on every attempt, so endpoint
    changes apply to the next scan without restarting anything. Reads run
    in a worker thread since a provider may hit the database.

    Attributes:
        _config: Source of endpoint URL and device info
        _client: Shared async HTTP client (created lazily if not injected)
        _timeout: Upper bound for one attempt in seconds

    Example:
        >>> dispatcher = DeliveryDispatcher(StaticConfigurationProvider(url))
        >>> result = await dispatcher.dispatch(event, store)
        >>> result.status
        <DeliveryStatus.DELIVERED: 'delivered'>
    """

    def __init__(
        self,
        config: ConfigurationProvider,
        client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    ) -> None:
        """
        Initialize dispatcher.

        Args:
            config: Configuration provider
            client: HTTP client to use; the dispatcher creates and owns one
                when omitted
            timeout_seconds: Upper bound for one delivery attempt
        """
        self._config = config
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout_seconds
        self._url_validator = EndpointURLValidator()

    @property
    def client(self) -> httpx.AsyncClient:
        """HTTP client, created on first use."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
        return self._client

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    # =========================================================================
    # ATTEMPT STEPS
    # =========================================================================

    def resolve_endpoint(self) -> str:
        """
        Read and validate the endpoint URL.

        Raises:
            ConfigurationError: If the URL is empty or invalid
        """
        url = (self._config.get_endpoint_url() or "").strip()

        if not url:
            raise ConfigurationError("Endpoint URL is not configured")

        is_valid, error = self._url_validator.validate(url)
        if not is_valid:
            raise ConfigurationError(f"Invalid endpoint URL '{url}': {error}")

        return url

    def build_payload(self, event: ScanEvent, device_info: str) -> bytes:
        """
        Build and encode the wire payload for an event.

        Raises:
            SerializationError: If the payload cannot be built or encoded
        """
        try:
            payload = DeliveryPayload.from_event(event, device_info)
            return payload.to_json()
        except (ValueError, TypeError) as e:
            raise SerializationError(f"Payload serialization failed: {e}") from e

    async def _post(self, url: str, body: bytes) -> httpx.Response:
        """Issue the POST, mapping every transport problem to TransportError."""
        try:
            return await asyncio.wait_for(
                self.client.post(
                    url,
                    content=body,
                    headers={"Content-Type": "application/json"}
                ),
                timeout=self._timeout
            )
        except asyncio.TimeoutError as e:
            raise TransportError(f"Request timed out after {self._timeout:g}s") from e
        except httpx.InvalidURL as e:
            raise ConfigurationError(f"Invalid endpoint URL '{url}': {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request failed: {e.__class__.__name__}: {e}") from e

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    async def deliver(self, event: ScanEvent, url: Optional[str] = None) -> DeliveryResult:
        """
        Perform one delivery attempt and report the outcome.

        Does not touch any store.

        Args:
            event: Event to deliver
            url: Endpoint already resolved by the caller

        Returns:
            DeliveryResult, DELIVERED only for HTTP 200
        """
        try:
            if url is None:
                url = await asyncio.to_thread(self.resolve_endpoint)

            device_info = await asyncio.to_thread(self._config.get_device_info)
            body = self.build_payload(event, device_info)
            response = await self._post(url, body)

            if response.status_code != SUCCESS_STATUS_CODE:
                raise ProtocolError(
                    f"Server responded with HTTP {response.status_code}",
                    status_code=response.status_code
                )

        except DeliveryError as e:
            logger.warning(
                f"❌ Delivery failed for scan {event.id} ({event.code}): "
                f"{e.__class__.__name__}: {e.message}"
            )
            return DeliveryResult.failed(e.message, e.status_code)

        logger.info(f"✅ Delivered scan {event.id} ({event.code})")
        return DeliveryResult.delivered(response.status_code)

    async def dispatch(self, event: ScanEvent, store: ScanEventStore) -> DeliveryResult:
        """
        Deliver an event and apply the outcome to the store.

        A configuration problem fails the event straight away. Otherwise the
        event is marked IN_FLIGHT before the request goes out.

        Args:
            event: Event created by the store
            store: Store owning the event

        Returns:
            The DeliveryResult that was applied
        """
        try:
            url = await asyncio.to_thread(self.resolve_endpoint)
        except ConfigurationError as e:
            logger.warning(f"❌ Scan {event.id} not sent: {e.message}")
            result = DeliveryResult.failed(e.message)
            store.update_status(event.id, result.status, result.reason)
            return result

        store.update_status(event.id, DeliveryStatus.IN_FLIGHT)

        result = await self.deliver(event, url=url)

        if not store.update_status(event.id, result.status, result.reason):
            logger.debug(f"Scan {event.id} no longer in history, outcome dropped")

        return result

    async def aclose(self) -> None:
        """Close the HTTP client if this dispatcher created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
