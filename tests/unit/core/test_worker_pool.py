"""
Tests for QueryWorkerPool.
"""

import asyncio
import gzip

import httpx
import pytest
import respx

from rest_query_engine.core.config import EngineConfig
from rest_query_engine.core.exceptions import ResponseTooLargeError
from rest_query_engine.core.worker_pool import QueryWorkerPool


class TestQueryWorkerPoolInit:
    """Test pool construction and lifecycle."""

    def test_defaults(self):
        pool = QueryWorkerPool()
        assert pool.max_response_size == 10 * 1024 * 1024
        assert pool.config.pool.max_concurrency == 32

    @pytest.mark.asyncio
    async def test_client_created_lazily(self):
        pool = QueryWorkerPool()
        assert pool._client is None
        request = pool.build_request("GET", httpx.URL("https://example.com"))
        assert request.method == "GET"
        assert pool._client is not None
        assert pool._client.follow_redirects is False
        await pool.close()

    @pytest.mark.asyncio
    async def test_closed_pool_rejects_requests(self):
        pool = QueryWorkerPool()
        await pool.close()
        with pytest.raises(RuntimeError):
            pool.build_request("GET", httpx.URL("https://example.com"))

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        pool = QueryWorkerPool()
        pool.build_request("GET", httpx.URL("https://example.com"))
        await pool.close()
        await pool.close()

    @pytest.mark.asyncio
    async def test_external_client_not_closed(self):
        """Test that a client passed in is owned by the caller."""
        client = httpx.AsyncClient()
        pool = QueryWorkerPool(client=client)
        await pool.close()
        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_context_manager(self):
        async with QueryWorkerPool() as pool:
            client = pool._client
            assert client is not None
        assert client.is_closed


class TestQueryWorkerPoolSend:
    """Test sending and buffering."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_send_buffers_response(self):
        respx.get("https://api.example.com/users").mock(
            return_value=httpx.Response(200, json={"id": 1}, headers={"X-Id": "7"})
        )

        async with QueryWorkerPool() as pool:
            request = pool.build_request("GET", httpx.URL("https://api.example.com/users"))
            response = await pool.send(request)

        # readable after the pool is closed
        assert response.status_code == 200
        assert response.json() == {"id": 1}
        assert response.headers["x-id"] == "7"
        assert response.request is request

    @pytest.mark.asyncio
    @respx.mock
    async def test_gzip_decoded_once(self):
        respx.get("https://api.example.com/z").mock(
            return_value=httpx.Response(
                200,
                content=gzip.compress(b"hello world"),
                headers={"Content-Encoding": "gzip", "Content-Type": "text/plain"},
            )
        )

        async with QueryWorkerPool() as pool:
            response = await pool.send(pool.build_request("GET", httpx.URL("https://api.example.com/z")))

        assert response.content == b"hello world"

    @pytest.mark.asyncio
    @respx.mock
    async def test_content_length_over_limit(self):
        """Test that a declared Content-Length over the cap fails early."""
        respx.get("https://api.example.com/big").mock(return_value=httpx.Response(200, content=b"x" * 100))

        config = EngineConfig.create(max_response_size=10)
        async with QueryWorkerPool(config) as pool:
            with pytest.raises(ResponseTooLargeError) as exc_info:
                await pool.send(pool.build_request("GET", httpx.URL("https://api.example.com/big")))

        assert exc_info.value.max_size == 10
        assert exc_info.value.size == 100

    @pytest.mark.asyncio
    @respx.mock
    async def test_streamed_body_over_limit(self):
        """Test that a body without Content-Length is capped while reading."""
        respx.get("https://api.example.com/stream").mock(
            return_value=httpx.Response(200, stream=httpx.ByteStream(b"y" * 50))
        )

        config = EngineConfig.create(max_response_size=10)
        async with QueryWorkerPool(config) as pool:
            with pytest.raises(ResponseTooLargeError):
                await pool.send(pool.build_request("GET", httpx.URL("https://api.example.com/stream")))

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_error_propagates(self):
        respx.get("https://api.example.com/down").mock(side_effect=httpx.ConnectError("refused"))

        async with QueryWorkerPool() as pool:
            with pytest.raises(httpx.ConnectError):
                await pool.send(pool.build_request("GET", httpx.URL("https://api.example.com/down")))

    @pytest.mark.asyncio
    @respx.mock
    async def test_concurrency_bounded(self):
        """Test that no more than max_concurrency sends run at once."""
        in_flight = 0
        peak = 0

        async def slow(request):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return httpx.Response(200, text="ok")

        respx.get("https://api.example.com/slow").mock(side_effect=slow)

        config = EngineConfig.create(max_concurrency=2)
        async with QueryWorkerPool(config) as pool:
            await asyncio.gather(*[
                pool.send(pool.build_request("GET", httpx.URL("https://api.example.com/slow")))
                for _ in range(6)
            ])

        assert peak <= 2

    def test_built_outside_event_loop(self):
        """Test that a pool constructed before the loop starts sends under contention."""
        pool = QueryWorkerPool(EngineConfig.create(max_concurrency=1))
        assert pool._semaphore is None

        async def slow(request):
            await asyncio.sleep(0.01)
            return httpx.Response(200, text="ok")

        async def main():
            with respx.mock:
                respx.get("https://api.example.com/slow").mock(side_effect=slow)
                try:
                    return await asyncio.gather(*[
                        pool.send(pool.build_request("GET", httpx.URL("https://api.example.com/slow")))
                        for _ in range(3)
                    ])
                finally:
                    await pool.close()

        responses = asyncio.run(main())

        assert [response.text for response in responses] == ["ok", "ok", "ok"]
