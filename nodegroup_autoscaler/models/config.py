#!/usr/bin/env python3
"""
Immutable autoscaler configuration snapshot
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class AutoscalerConfig(BaseModel):
    """Thresholds and bounds used by a reconciliation pass.

    Instances are frozen; a configuration change builds a new instance and
    swaps it in whole.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    cpu_threshold_high: float = Field(80.0, ge=0, le=100, alias="cpuThresholdHigh",
                                      description="Scale up when average CPU % is above this")
    cpu_threshold_low: float = Field(30.0, ge=0, le=100, alias="cpuThresholdLow",
                                     description="Scale down when average CPU % is below this")
    memory_threshold_high: float = Field(80.0, ge=0, le=100, alias="memoryThresholdHigh",
                                         description="Scale up when average memory % is above this")
    memory_threshold_low: float = Field(30.0, ge=0, le=100, alias="memoryThresholdLow",
                                        description="Scale down when average memory % is below this")
    min_nodes: int = Field(1, ge=0, alias="minNodes", description="Lower bound on spec.nodeCount")
    max_nodes: int = Field(10, ge=0, alias="maxNodes", description="Upper bound on spec.nodeCount")
    reconcile_interval_seconds: int = Field(30, gt=0, alias="reconcileIntervalSeconds",
                                            description="Period of the timer-driven reconciliation")
    cooldown_seconds: int = Field(180, ge=0, alias="cooldownSeconds",
                                  description="Minimum time between two scaling actions on a group")
    target_node_group: Optional[str] = Field(None, alias="targetNodeGroup",
                                             description="Only reconcile this NodeGroup when set")

    @model_validator(mode="after")
    def _check_bounds(self) -> "AutoscalerConfig":
        if self.min_nodes > self.max_nodes:
            raise ValueError("minNodes must be <= maxNodes")
        if self.cpu_threshold_low > self.cpu_threshold_high:
            raise ValueError("cpuThresholdLow must be <= cpuThresholdHigh")
        if self.memory_threshold_low > self.memory_threshold_high:
            raise ValueError("memoryThresholdLow must be <= memoryThresholdHigh")
        return self

    @property
    def cooldown_ms(self) -> float:
        return self.cooldown_seconds * 1000
