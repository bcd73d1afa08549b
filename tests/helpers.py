"""
Test doubles for the metrics source, scale sink, clock and Kubernetes clients
"""

from typing import Dict, List
from unittest.mock import Mock

from nodegroup_autoscaler.models import RawNodeSample


class ManualClock:
    """Millisecond clock advanced by hand"""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float):
        self.now += ms


def raw_sample(name: str, cpu_percent: float, memory_percent: float,
               cpu_capacity: float = 4.0, memory_capacity: float = 8 * 1024 ** 3) -> RawNodeSample:
    """Raw sample whose usage works out to the given percentages"""
    return RawNodeSample(
        node_name=name,
        cpu_usage=cpu_capacity * cpu_percent / 100,
        memory_usage=memory_capacity * memory_percent / 100,
        cpu_capacity=cpu_capacity,
        memory_capacity=memory_capacity,
    )


class MockKubernetesClient:
    """Mock CoreV1Api / CustomObjectsApi pair for testing"""

    def __init__(self):
        self.nodes = []
        self.node_metrics: List[Dict] = []
        self.node_groups: List[Dict] = []
        self.patches = []

    def add_node(self, name: str, cpu: str = "4", memory: str = "8Gi",
                 cpu_usage: str = "2", memory_usage: str = "4Gi"):
        node = Mock()
        node.metadata = Mock()
        node.metadata.name = name
        node.status = Mock()
        node.status.allocatable = {"cpu": cpu, "memory": memory}
        self.nodes.append(node)
        self.node_metrics.append({
            "metadata": {"name": name},
            "usage": {"cpu": cpu_usage, "memory": memory_usage},
        })
        return node

    def list_node(self, **kwargs):
        return Mock(items=self.nodes)

    def list_cluster_custom_object(self, group, version, plural, **kwargs):
        if group == "metrics.k8s.io":
            return {"items": self.node_metrics}
        return {"items": self.node_groups}

    def patch_cluster_custom_object(self, group, version, plural, name, body, **kwargs):
        self.patches.append((group, version, plural, name, body))
        return {}
