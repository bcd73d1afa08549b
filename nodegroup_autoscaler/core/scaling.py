#!/usr/bin/env python3
"""
Scaling policy for NodeGroup size decisions
"""

from ..models.config import AutoscalerConfig


def decide(current: int, avg_cpu: float, avg_memory: float, config: AutoscalerConfig) -> int:
    """
    Decide the desired node count for a group

    Args:
        current: Declared node count (spec.nodeCount)
        avg_cpu: Average CPU usage percentage across the group's nodes
        avg_memory: Average memory usage percentage across the group's nodes
        config: Thresholds and bounds

    Returns:
        current + 1, current - 1, or current. Scale-up is checked first and
        thresholds are strict, so a value exactly on a threshold holds.
    """
    if (avg_cpu > config.cpu_threshold_high or avg_memory > config.memory_threshold_high) \
            and current < config.max_nodes:
        return current + 1

    if avg_cpu < config.cpu_threshold_low and avg_memory < config.memory_threshold_low \
            and current > config.min_nodes:
        return current - 1

    return current


def describe_decision(current: int, desired: int, avg_cpu: float, avg_memory: float) -> str:
    """Human readable summary of a decision for logs"""
    usage = f"CPU: {avg_cpu:.2f}%, Mem: {avg_memory:.2f}%"
    if desired > current:
        return f"Scaling UP: {current} -> {desired} ({usage})"
    if desired < current:
        return f"Scaling DOWN: {current} -> {desired} ({usage})"
    return f"No scaling needed ({usage})"
