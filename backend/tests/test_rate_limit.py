"""
Postboard Backend: Rate Limiter Tests
=======================================

What we test:
    ✅ requests beyond the limit get 429 with Retry-After
    ✅ the window slides: old hits stop counting
    ✅ paths outside /api/ are never limited
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.middleware.rate_limit import RateLimitMiddleware


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limited_app(clock):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, limit=2, window=60, clock=clock)

    @app.get("/api/ping")
    async def ping():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app


class TestRateLimit:
    @pytest.mark.asyncio
    async def test_third_request_is_rejected(self, limited_app, clock):
        transport = ASGITransport(app=limited_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            assert (await client.get("/api/ping")).status_code == 200
            clock.now = 10
            assert (await client.get("/api/ping")).status_code == 200
            clock.now = 20

            response = await client.get("/api/ping")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "41"
        assert response.json()["error"] == "rate_limit_exceeded"

    @pytest.mark.asyncio
    async def test_window_slides(self, limited_app, clock):
        transport = ASGITransport(app=limited_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            await client.get("/api/ping")
            await client.get("/api/ping")
            clock.now = 61
            assert (await client.get("/api/ping")).status_code == 200

    @pytest.mark.asyncio
    async def test_non_api_paths_are_free(self, limited_app):
        transport = ASGITransport(app=limited_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            for _ in range(5):
                assert (await client.get("/health")).status_code == 200
