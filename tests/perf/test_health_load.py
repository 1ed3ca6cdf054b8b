import asyncio

import pytest


@pytest.mark.anyio
async def test_health_under_load(client):
    results = await asyncio.gather(*[client.get("/health") for _ in range(20)])
    assert all(r.status_code == 200 for r in results)
