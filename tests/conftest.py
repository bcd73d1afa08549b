"""
Shared fixtures and mocks for the autoscaler tests
"""

from unittest.mock import AsyncMock, Mock

import pytest

from nodegroup_autoscaler.core.reconciliation import ReconciliationEngine
from nodegroup_autoscaler.models import AutoscalerConfig, NodeGroup

from .helpers import ManualClock, MockKubernetesClient, raw_sample


@pytest.fixture
def config() -> AutoscalerConfig:
    return AutoscalerConfig(
        cpu_threshold_high=80,
        cpu_threshold_low=30,
        memory_threshold_high=80,
        memory_threshold_low=30,
        min_nodes=1,
        max_nodes=10,
        cooldown_seconds=180,
        reconcile_interval_seconds=30,
    )


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def metrics_source() -> Mock:
    source = Mock()
    source.fetch_samples = AsyncMock(return_value=[raw_sample("node-1", 50, 50)])
    return source


@pytest.fixture
def scaler() -> Mock:
    sink = Mock()
    sink.apply_desired_size = AsyncMock(return_value=True)
    return sink


@pytest.fixture
def engine(config, metrics_source, scaler, clock) -> ReconciliationEngine:
    return ReconciliationEngine(config, metrics_source, scaler, clock=clock)


@pytest.fixture
def web_pool() -> NodeGroup:
    return NodeGroup(name="web-pool", spec_node_count=3, status_node_count=3)


@pytest.fixture
def kube() -> MockKubernetesClient:
    return MockKubernetesClient()
