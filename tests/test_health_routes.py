"""Tests for /api/health, /api/test-db and /api/db-status."""

import pytest


class TestHealth:

    @pytest.mark.asyncio
    async def test_reports_disconnected_before_first_connect(self, http_client, manager):
        response = await http_client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["dbConnected"] is False
        assert body["readyState"] == "disconnected"
        assert body["uptime"] >= 0
        assert body["memory"]["rss"] > 0
        # health never opens a connection
        assert manager.attempts == 0

    @pytest.mark.asyncio
    async def test_reports_connected_after_connect(self, http_client, manager):
        await manager.ensure_connected()

        body = (await http_client.get("/api/health")).json()

        assert body["dbConnected"] is True
        assert body["readyState"] == "connected"

    @pytest.mark.asyncio
    async def test_reports_disconnected_after_refused_connection(self, http_client, manager, client_factory, refused):
        client_factory.error = refused

        response = await http_client.get("/api/test-db")
        assert response.status_code == 500

        body = (await http_client.get("/api/health")).json()
        assert body["dbConnected"] is False
        assert body["readyState"] == "failed"
        assert manager.client is None


class TestDatabaseTest:

    @pytest.mark.asyncio
    async def test_connects_and_lists_collections(self, http_client, manager):
        response = await http_client.get("/api/test-db")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["database"]["status"] == "connected"
        assert body["database"]["collections"] == ["users", "jobs", "referrals"]
        assert body["database"]["totalCollections"] == 3
        assert manager.attempts == 1

    @pytest.mark.asyncio
    async def test_repeated_requests_reuse_connection(self, http_client, manager):
        for _ in range(3):
            assert (await http_client.get("/api/test-db")).status_code == 200

        assert manager.attempts == 1

    @pytest.mark.asyncio
    async def test_failure_is_a_json_500(self, http_client, client_factory, refused):
        client_factory.error = refused

        response = await http_client.get("/api/test-db")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Database connection failed"
        assert body["error"] == "connection_refused"

    @pytest.mark.asyncio
    async def test_next_request_retries_after_failure(self, http_client, manager, client_factory, refused):
        client_factory.error = refused
        assert (await http_client.get("/api/test-db")).status_code == 500

        client_factory.error = None
        assert (await http_client.get("/api/test-db")).status_code == 200
        assert manager.attempts == 2


class TestDatabaseStatus:

    @pytest.mark.asyncio
    async def test_before_connect(self, http_client, manager):
        body = (await http_client.get("/api/db-status")).json()

        assert body["database"]["connected"] is False
        assert body["database"]["status"] == "disconnected"
        assert body["database"]["hosts"] == []
        assert body["database"]["attempts"] == 0
        assert body["databaseStats"] is None
        assert body["connectionPool"] == "Not available"
        assert body["environment"] == "test"
        assert manager.attempts == 0

    @pytest.mark.asyncio
    async def test_after_connect(self, http_client, manager):
        await manager.ensure_connected()

        body = (await http_client.get("/api/db-status")).json()

        assert body["database"]["connected"] is True
        assert body["database"]["hosts"] == ["localhost:27017"]
        assert body["database"]["name"] == "campus_recruitment"
        assert body["databaseStats"]["collections"] == 3
        assert "ok" not in body["databaseStats"]
        assert body["connectionPool"] == {
            "totalConnectionCount": 0,
            "availableConnectionCount": 0,
            "pendingConnectionCount": 0,
        }

    @pytest.mark.asyncio
    async def test_connection_pool_follows_driver_events(self, http_client, manager):
        await manager.ensure_connected()
        manager.pool_stats.connection_created(None)
        manager.pool_stats.connection_created(None)
        manager.pool_stats.connection_check_out_started(None)
        manager.pool_stats.connection_checked_out(None)

        body = (await http_client.get("/api/db-status")).json()

        assert body["connectionPool"]["totalConnectionCount"] == 2
        assert body["connectionPool"]["availableConnectionCount"] == 1
        assert body["connectionPool"]["pendingConnectionCount"] == 0

    @pytest.mark.asyncio
    async def test_after_failure_shows_last_error(self, http_client, manager, client_factory, refused):
        client_factory.error = refused
        await http_client.get("/api/test-db")

        body = (await http_client.get("/api/db-status")).json()

        assert body["database"]["status"] == "failed"
        assert body["database"]["attempts"] == 1
        assert body["database"]["lastError"]["kind"] == "connection_refused"
