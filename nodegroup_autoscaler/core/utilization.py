#!/usr/bin/env python3
"""
Aggregation of per-node usage into group-level utilization
"""

import logging
from typing import Iterable, List

from ..models.metrics import RawNodeSample, NodeSample, AggregateUtilization

logger = logging.getLogger(__name__)


def percentage(used: float, capacity: float) -> float:
    """Usage as a percentage of capacity; capacity must be positive"""
    if capacity <= 0:
        raise ValueError(f"capacity must be positive, got {capacity}")
    return used / capacity * 100


def to_node_samples(raw_samples: Iterable[RawNodeSample]) -> List[NodeSample]:
    """
    Convert raw usage/capacity samples into percentages

    Nodes reporting no allocatable CPU or memory are dropped, since their
    utilization is undefined.
    """
    samples = []
    for raw in raw_samples:
        if raw.cpu_capacity <= 0 or raw.memory_capacity <= 0:
            logger.warning(
                f"Node {raw.node_name} has no allocatable capacity "
                f"(cpu={raw.cpu_capacity}, memory={raw.memory_capacity}), ignoring"
            )
            continue
        samples.append(NodeSample(
            node_name=raw.node_name,
            cpu_percent=percentage(raw.cpu_usage, raw.cpu_capacity),
            memory_percent=percentage(raw.memory_usage, raw.memory_capacity),
        ))
    return samples


def average(samples: List[NodeSample]) -> AggregateUtilization:
    """Mean CPU and memory percentage; an empty list averages to zero"""
    if not samples:
        return AggregateUtilization(avg_cpu=0.0, avg_memory=0.0, node_count=0)

    total_cpu = sum(s.cpu_percent for s in samples)
    total_memory = sum(s.memory_percent for s in samples)
    return AggregateUtilization(
        avg_cpu=total_cpu / len(samples),
        avg_memory=total_memory / len(samples),
        node_count=len(samples),
    )
