"""Root, health check and cross-cutting middleware"""
from core.config import get_settings


async def test_root(client):
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "running"
    assert data["version"] == get_settings().app_version


async def test_health_check_healthy(client):
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["checks"]["entry_store"] is True
    assert data["checks"]["cache"] is None


async def test_health_check_unhealthy_store(client, entry_repo):
    async def down():
        raise ConnectionError("store unreachable")

    entry_repo.ping = down

    response = await client.get("/health")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "unhealthy"
    assert "store unreachable" in data["checks"]["error"]


async def test_correlation_id_echoed(client):
    response = await client.get("/", headers={"X-Correlation-ID": "req-123"})

    assert response.headers["X-Correlation-ID"] == "req-123"


async def test_correlation_id_generated(client):
    response = await client.get("/")

    assert response.headers["X-Correlation-ID"]


async def test_security_headers(client):
    response = await client.get("/")

    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


async def test_oversized_request_rejected(client, auth_headers):
    too_big = get_settings().max_upload_size + 2 * 1024 * 1024

    response = await client.post(
        "/api/upload",
        headers={**auth_headers, "Content-Length": str(too_big)},
        content=b"",
    )

    assert response.status_code == 413
