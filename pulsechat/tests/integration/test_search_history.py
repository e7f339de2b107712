import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def add(client, user, query):
    response = await client.post(
        "/api/v1/search-history/", headers=user["headers"], json={"query": query}
    )
    assert response.status_code == 200
    return response.json()


async def test_recent_searches_are_deduplicated(client: AsyncClient, alice):
    await add(client, alice, "bob")
    await add(client, alice, "carol")
    await add(client, alice, "  bob ")

    response = await client.get("/api/v1/search-history/", headers=alice["headers"])

    assert response.status_code == 200
    assert [e["query"] for e in response.json()] == ["bob", "carol"]


async def test_history_is_capped(client: AsyncClient, alice, app_config):
    for i in range(app_config.SEARCH_HISTORY_LIMIT + 3):
        await add(client, alice, f"query {i}")

    response = await client.get("/api/v1/search-history/", headers=alice["headers"])

    assert len(response.json()) == app_config.SEARCH_HISTORY_LIMIT
    assert response.json()[0]["query"] == f"query {app_config.SEARCH_HISTORY_LIMIT + 2}"


async def test_blank_query_is_ignored(client: AsyncClient, alice):
    assert await add(client, alice, "   ") is None

    response = await client.get("/api/v1/search-history/", headers=alice["headers"])
    assert response.json() == []


async def test_history_is_private(client: AsyncClient, alice, bob):
    await add(client, alice, "secret")

    response = await client.get("/api/v1/search-history/", headers=bob["headers"])
    assert response.json() == []

    response = await client.get("/api/v1/search-history/")
    assert response.json() == []
