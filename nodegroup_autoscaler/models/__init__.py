"""
Models package for autoscaler data structures
"""

from .config import AutoscalerConfig
from .nodegroup import EventKind, NodeGroup, ReconcileOutcome
from .metrics import RawNodeSample, NodeSample, AggregateUtilization

__all__ = [
    "AutoscalerConfig",
    "EventKind",
    "NodeGroup",
    "ReconcileOutcome",
    "RawNodeSample",
    "NodeSample",
    "AggregateUtilization",
]
