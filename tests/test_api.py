"""
Tests for the HTTP API
"""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from nodegroup_autoscaler.api.server import APIServer


@pytest.fixture
def api_client(engine):
    return TestClient(APIServer(engine).app)


def test_root(api_client):
    response = api_client.get("/")
    assert response.status_code == 200
    assert response.json()["service"] == "NodeGroup Autoscaler"


def test_health(api_client):
    response = api_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_health_reports_stopped_operator(engine):
    operator = Mock(running=False)
    client = TestClient(APIServer(engine, operator).app)

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"


def test_get_config_uses_camel_case(api_client, config):
    body = api_client.get("/config").json()
    assert body["cpuThresholdHigh"] == config.cpu_threshold_high
    assert body["maxNodes"] == config.max_nodes


def test_put_config_replaces_snapshot(api_client, engine):
    response = api_client.put("/config", json={
        "cpuThresholdHigh": 90,
        "cpuThresholdLow": 20,
        "memoryThresholdHigh": 85,
        "memoryThresholdLow": 25,
        "minNodes": 2,
        "maxNodes": 8,
        "cooldownSeconds": 60,
        "reconcileIntervalSeconds": 15,
        "targetNodeGroup": "web-pool",
    })

    assert response.status_code == 200
    config = engine.get_config()
    assert config.cpu_threshold_high == 90
    assert config.max_nodes == 8
    assert config.target_node_group == "web-pool"


@pytest.mark.parametrize("body", [
    {"minNodes": 5, "maxNodes": 2},
    {"cpuThresholdHigh": 150},
    {"scaleStep": 2},
])
def test_put_invalid_config_is_rejected(api_client, engine, config, body):
    response = api_client.put("/config", json=body)

    assert response.status_code == 422
    assert engine.get_config() is config


def test_status_lists_cooldowns(api_client, engine, clock):
    engine.cooldowns.record_scale("web-pool", clock.now)

    body = api_client.get("/status").json()

    assert "web-pool" in body["cooldowns"]
    assert body["in_flight"] == []


def test_delete_cooldown(api_client, engine, clock):
    engine.cooldowns.record_scale("web-pool", clock.now)

    assert api_client.delete("/cooldowns/web-pool").status_code == 200
    assert "web-pool" not in engine.cooldowns
    assert api_client.delete("/cooldowns/web-pool").status_code == 404
