"""
Integration tests for the HTTP API.

Routes run in-process against a container built from local backends.
"""

import httpx
import pytest

from hello_directory.constants import HELLO_CACHE
from hello_directory.main import create_app
from hello_directory.services.container import ServiceContainer


class TestHelloEndpoint:
    """Test GET /hello."""

    @pytest.mark.asyncio
    async def test_default_greeting(self, api_client):
        response = await api_client.get("/hello")

        assert response.status_code == 200
        assert response.text == "Hello, World!"
        assert response.headers["content-type"].startswith("text/plain")

    @pytest.mark.asyncio
    async def test_named_greeting_is_cached(self, api_client, local_store):
        response = await api_client.get("/hello", params={"name": "  John   Doe  "})

        assert response.text == "Hello, John Doe!"
        assert (HELLO_CACHE, "John Doe") in local_store.entries()


class TestUserEndpoints:
    """Test the /user routes."""

    @pytest.mark.asyncio
    async def test_crud_flow(self, api_client):
        response = await api_client.post(
            "/user",
            json={"username": "john_doe", "email": "john@example.com", "firstName": "John"},
        )
        assert response.status_code == 201
        created = response.json()
        assert created["id"] == 1
        assert created["firstName"] == "John"
        assert "createdAt" in created

        response = await api_client.put("/user/1", json={"firstName": "Johnny"})
        assert response.status_code == 200
        assert response.json()["firstName"] == "Johnny"
        assert response.json()["username"] == "john_doe"

        response = await api_client.get("/user/1")
        assert response.status_code == 200
        assert response.json()["email"] == "john@example.com"

        response = await api_client.delete("/user/1")
        assert response.status_code == 204
        assert response.content == b""

        response = await api_client.get("/user/1")
        assert response.status_code == 404
        assert response.json()["error_code"] == "USER_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_snake_case_input_accepted(self, api_client):
        response = await api_client.post(
            "/user", json={"username": "a", "first_name": "Ann", "last_name": "Lee"}
        )

        assert response.status_code == 201
        assert response.json()["lastName"] == "Lee"

    @pytest.mark.asyncio
    async def test_conflict_is_400(self, api_client):
        await api_client.post("/user", json={"username": "john_doe", "email": "j@example.com"})

        response = await api_client.post(
            "/user", json={"username": "john_doe", "email": "x@y.com"}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "username already exists"

    @pytest.mark.asyncio
    async def test_list_pages(self, api_client):
        for i in range(3):
            await api_client.post("/user", json={"username": f"user{i}"})

        response = await api_client.get("/user", params={"page": 1, "size": 2})

        assert response.status_code == 200
        assert [u["username"] for u in response.json()] == ["user2"]

    @pytest.mark.asyncio
    async def test_bad_page_size_is_400(self, api_client):
        response = await api_client.get("/user", params={"size": 1000})
        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{"page": "abc"}, {"size": "ten"}])
    async def test_non_numeric_paging_is_400(self, api_client, params):
        response = await api_client.get("/user", params=params)

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_INPUT"

    @pytest.mark.asyncio
    async def test_non_numeric_id_is_400(self, api_client):
        response = await api_client.get("/user/abc")

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_INPUT"

    @pytest.mark.asyncio
    async def test_missing_user(self, api_client):
        assert (await api_client.get("/user/999")).status_code == 404
        assert (await api_client.put("/user/999", json={})).status_code == 404
        assert (await api_client.delete("/user/999")).status_code == 404


class TestStorageOutage:
    """Test the API while the database is unreachable."""

    @pytest.fixture
    async def outage_client(self, local_store, unreachable_storage):
        container = ServiceContainer(
            cache_store=local_store, user_storage=unreachable_storage
        )
        transport = httpx.ASGITransport(app=create_app(container=container))
        async with httpx.AsyncClient(
            transport=transport, base_url="http://test"
        ) as client:
            yield client

    @pytest.mark.asyncio
    async def test_user_routes_answer_503(self, outage_client):
        response = await outage_client.get("/user/1")

        assert response.status_code == 503
        body = response.json()
        assert body["error_code"] == "STORAGE_UNAVAILABLE"
        assert body["details"]["backend"] == "storage"

        assert (await outage_client.get("/user")).status_code == 503
        created = await outage_client.post("/user", json={"username": "ann"})
        assert created.status_code == 503

    @pytest.mark.asyncio
    async def test_greeting_still_served(self, outage_client):
        response = await outage_client.get("/hello", params={"name": "Ann"})

        assert response.status_code == 200
        assert response.text == "Hello, Ann!"


class TestHealthEndpoints:
    """Test health and metrics routes."""

    @pytest.mark.asyncio
    async def test_liveness(self, api_client):
        response = await api_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_readiness(self, api_client):
        response = await api_client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["cache"]["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_metrics_exposes_cache_counters(self, api_client):
        await api_client.get("/hello", params={"name": "x"})

        response = await api_client.get("/metrics")

        assert response.status_code == 200
        assert "hello_directory_cache_operations_total" in response.text
