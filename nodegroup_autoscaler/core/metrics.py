#!/usr/bin/env python3
"""
Metrics source reading node usage from metrics-server
"""

import logging
from typing import Dict, List, Tuple

from kubernetes import client

from ..models.metrics import RawNodeSample
from .kube import call_api
from .units import parse_cpu, parse_memory

logger = logging.getLogger(__name__)

METRICS_API_GROUP = "metrics.k8s.io"
METRICS_API_VERSION = "v1beta1"


class KubernetesMetricsSource:
    """Joins metrics-server NodeMetrics with Node allocatable capacity"""

    def __init__(
        self,
        core_api: client.CoreV1Api,
        custom_api: client.CustomObjectsApi,
        node_label: str = "nodegroup.api.clever-cloud.com/name",
        request_timeout: float = 10.0
    ):
        """
        Initialize metrics source

        Args:
            core_api: Client used to list nodes
            custom_api: Client used to list metrics.k8s.io NodeMetrics
            node_label: Label key carrying the NodeGroup name on each node
            request_timeout: Bound in seconds on each API call
        """
        self.core_api = core_api
        self.custom_api = custom_api
        self.node_label = node_label
        self.request_timeout = request_timeout

    def label_selector(self, group_name: str) -> str:
        return f"{self.node_label}={group_name}"

    async def fetch_samples(self, group_name: str) -> List[RawNodeSample]:
        """
        Get usage and capacity for every node labeled as a member of the group

        Nodes missing from either the node list or metrics-server are left
        out. API errors and timeouts propagate to the caller.
        """
        selector = self.label_selector(group_name)

        nodes = await call_api(
            self.core_api.list_node,
            label_selector=selector,
            _request_timeout=self.request_timeout,
            timeout=self.request_timeout
        )
        capacities = self._capacities(nodes.items)
        if not capacities:
            logger.debug(f"No nodes match {selector}")
            return []

        node_metrics = await call_api(
            self.custom_api.list_cluster_custom_object,
            METRICS_API_GROUP,
            METRICS_API_VERSION,
            "nodes",
            label_selector=selector,
            _request_timeout=self.request_timeout,
            timeout=self.request_timeout
        )

        samples = []
        for item in node_metrics.get("items", []):
            node_name = (item.get("metadata") or {}).get("name", "")
            if node_name not in capacities:
                continue
            usage = item.get("usage") or {}
            cpu_capacity, memory_capacity = capacities[node_name]
            samples.append(RawNodeSample(
                node_name=node_name,
                cpu_usage=parse_cpu(usage.get("cpu")),
                memory_usage=parse_memory(usage.get("memory")),
                cpu_capacity=cpu_capacity,
                memory_capacity=memory_capacity,
            ))

        logger.debug(f"Collected metrics for {len(samples)}/{len(capacities)} nodes of {group_name}")
        return samples

    def _capacities(self, nodes) -> Dict[str, Tuple[float, float]]:
        capacities = {}
        for node in nodes:
            allocatable = (node.status.allocatable if node.status else None) or {}
            capacities[node.metadata.name] = (
                parse_cpu(allocatable.get("cpu")),
                parse_memory(allocatable.get("memory")),
            )
        return capacities
