"""
==============================================================================
Delivery Dispatcher Tests
==============================================================================

Tests for one-shot HTTP delivery against a mocked remote endpoint.

==============================================================================
"""

import asyncio
import json
import threading

import httpx
import pytest

from scanrelay.config import StaticConfigurationProvider
from scanrelay.scanner import DeliveryDispatcher, DeliveryStatus

from conftest import ENDPOINT_URL, RecordingEndpoint


pytestmark = pytest.mark.anyio


class TestDispatch:
    """Tests for DeliveryDispatcher.dispatch outcomes."""

    async def test_http_200_is_delivered(self, dispatcher, store, endpoint):
        event = store.insert("8801234567890", 1718000000.25)

        result = await dispatcher.dispatch(event, store)

        assert result.ok
        assert store.get(event.id).status == DeliveryStatus.DELIVERED
        assert endpoint.call_count == 1

    async def test_request_wire_format(self, dispatcher, store, endpoint):
        """One POST with the JSON body and no auth header."""
        event = store.insert("8801234567890", 1718000000.25, "emergency")

        await dispatcher.dispatch(event, store)

        request = endpoint.requests[0]
        assert request.method == "POST"
        assert str(request.url) == ENDPOINT_URL
        assert request.headers["content-type"] == "application/json"
        assert "authorization" not in request.headers
        assert json.loads(request.content) == {
            "code": "8801234567890",
            "timestamp": 1718000000.25,
            "device_info": "Test Scanner",
            "type": "emergency",
        }

    @pytest.mark.parametrize("status_code", [201, 204, 302, 404, 500, 503])
    async def test_non_200_is_failed(self, dispatcher, store, endpoint, status_code):
        endpoint.status_code = status_code
        event = store.insert("A123", 1.0)

        result = await dispatcher.dispatch(event, store)

        stored = store.get(event.id)
        assert stored.status == DeliveryStatus.FAILED
        assert str(status_code) in stored.failure_reason
        assert result.status_code == status_code

    async def test_connection_error_is_failed(self, dispatcher, store, endpoint):
        endpoint.error = httpx.ConnectError("Connection refused")
        event = store.insert("A123", 1.0)

        result = await dispatcher.dispatch(event, store)

        assert result.status == DeliveryStatus.FAILED
        assert store.get(event.id).status == DeliveryStatus.FAILED
        assert "ConnectError" in store.get(event.id).failure_reason

    @pytest.mark.parametrize("url", ["", "   ", "not a url", "ftp://scan-server.test/", "http://"])
    async def test_bad_endpoint_fails_without_request(self, store, url):
        endpoint = RecordingEndpoint()
        client = httpx.AsyncClient(transport=httpx.MockTransport(endpoint))
        dispatcher = DeliveryDispatcher(StaticConfigurationProvider(endpoint_url=url), client=client)
        event = store.insert("A123", 1.0)

        result = await dispatcher.dispatch(event, store)

        assert result.status == DeliveryStatus.FAILED
        assert store.get(event.id).status == DeliveryStatus.FAILED
        assert endpoint.call_count == 0

    async def test_in_flight_while_request_outstanding(self, config, store):
        release = asyncio.Event()
        started = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            started.set()
            await release.wait()
            return httpx.Response(200)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        dispatcher = DeliveryDispatcher(config, client=client)
        event = store.insert("A123", 1.0)

        task = asyncio.create_task(dispatcher.dispatch(event, store))
        await started.wait()

        assert store.get(event.id).status == DeliveryStatus.IN_FLIGHT
        assert store.is_sending is True

        release.set()
        await task

        assert store.get(event.id).status == DeliveryStatus.DELIVERED
        assert store.is_sending is False

    async def test_timeout_is_failed(self, config, store):
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        dispatcher = DeliveryDispatcher(config, client=client, timeout_seconds=0.05)
        event = store.insert("A123", 1.0)

        await dispatcher.dispatch(event, store)

        stored = store.get(event.id)
        assert stored.status == DeliveryStatus.FAILED
        assert "timed out" in stored.failure_reason

    async def test_completion_after_clear_is_dropped(self, config, store):
        release = asyncio.Event()
        started = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            started.set()
            await release.wait()
            return httpx.Response(200)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        dispatcher = DeliveryDispatcher(config, client=client)
        event = store.insert("A123", 1.0)

        task = asyncio.create_task(dispatcher.dispatch(event, store))
        await started.wait()
        store.clear()
        release.set()

        result = await task

        assert result.ok
        assert len(store) == 0
        assert store.get(event.id) is None

    async def test_endpoint_read_per_attempt(self, store, endpoint, http_client):
        """Changing the configured URL applies to the next delivery."""
        config = StaticConfigurationProvider(endpoint_url="")
        dispatcher = DeliveryDispatcher(config, client=http_client)

        first = store.insert("A", 1.0)
        await dispatcher.dispatch(first, store)

        config.endpoint_url = ENDPOINT_URL
        second = store.insert("B", 2.0)
        await dispatcher.dispatch(second, store)

        assert store.get(first.id).status == DeliveryStatus.FAILED
        assert store.get(second.id).status == DeliveryStatus.DELIVERED
        assert endpoint.call_count == 1

    async def test_unencodable_payload_is_failed(self, store):
        """A payload that cannot be built fails the scan without a request."""
        endpoint = RecordingEndpoint()
        client = httpx.AsyncClient(transport=httpx.MockTransport(endpoint))
        config = StaticConfigurationProvider(endpoint_url=ENDPOINT_URL, device_info=None)
        dispatcher = DeliveryDispatcher(config, client=client)
        event = store.insert("A123", 1.0)

        result = await dispatcher.dispatch(event, store)

        stored = store.get(event.id)
        assert result.status == DeliveryStatus.FAILED
        assert stored.status == DeliveryStatus.FAILED
        assert "serialization" in stored.failure_reason
        assert endpoint.call_count == 0

    async def test_configuration_read_off_loop(self, store, http_client):
        loop_thread = threading.get_ident()
        reader_threads = []

        class RecordingConfig:
            def get_endpoint_url(self):
                reader_threads.append(threading.get_ident())
                return ENDPOINT_URL

            def get_device_info(self):
                reader_threads.append(threading.get_ident())
                return "Test Scanner"

        dispatcher = DeliveryDispatcher(RecordingConfig(), client=http_client)
        event = store.insert("A123", 1.0)

        result = await dispatcher.dispatch(event, store)

        assert result.ok
        assert len(reader_threads) == 2
        assert loop_thread not in reader_threads


class TestDeliver:
    """Tests for DeliveryDispatcher.deliver."""

    async def test_deliver_does_not_touch_store(self, dispatcher, store):
        event = store.insert("A123", 1.0)

        result = await dispatcher.deliver(event)

        assert result.ok
        assert store.get(event.id).status == DeliveryStatus.PENDING

    async def test_owned_client_closed(self, config):
        dispatcher = DeliveryDispatcher(config)
        client = dispatcher.client

        await dispatcher.aclose()

        assert client.is_closed

    async def test_injected_client_left_open(self, dispatcher, http_client):
        await dispatcher.aclose()
        assert not http_client.is_closed
