"""
Tests for the health check endpoint.
"""

from fastapi import status
from redis.exceptions import ConnectionError


def test_health_check(client, redis_client):
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "healthy", "database": True, "redis": True}
    redis_client.ping.assert_called_once()


def test_health_check_redis_down(client, redis_client):
    """A Redis outage degrades the service but the endpoint still answers"""
    redis_client.ping.side_effect = ConnectionError("Connection refused")
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "degraded", "database": True, "redis": False}
