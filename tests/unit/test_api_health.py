from httpx import AsyncClient


async def test_health_endpoint_returns_service_metadata(async_client: AsyncClient) -> None:
    response = await async_client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["service"]
    assert payload["status"] == "ok"
    assert payload["datastores"]["database"] == {"status": "ok"}


async def test_responses_echo_request_id(async_client: AsyncClient) -> None:
    response = await async_client.get("/health", headers={"X-Request-ID": "trace-42"})

    assert response.headers["X-Request-ID"] == "trace-42"
