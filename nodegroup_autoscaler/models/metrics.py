#!/usr/bin/env python3
"""
Pydantic models for node utilization samples
"""

from pydantic import BaseModel, Field


class RawNodeSample(BaseModel):
    """Usage and allocatable capacity of one node, in plain units"""
    node_name: str = Field(..., description="Name of the node")
    cpu_usage: float = Field(..., ge=0, description="CPU usage in cores")
    memory_usage: float = Field(..., ge=0, description="Memory usage in bytes")
    cpu_capacity: float = Field(..., ge=0, description="Allocatable CPU in cores")
    memory_capacity: float = Field(..., ge=0, description="Allocatable memory in bytes")


class NodeSample(BaseModel):
    """Utilization percentages of one node"""
    node_name: str = Field(..., description="Name of the node")
    cpu_percent: float = Field(..., ge=0, description="CPU usage percentage")
    memory_percent: float = Field(..., ge=0, description="Memory usage percentage")


class AggregateUtilization(BaseModel):
    """Average utilization across the nodes of a group"""
    avg_cpu: float = Field(0.0, ge=0, description="Average CPU usage percentage")
    avg_memory: float = Field(0.0, ge=0, description="Average memory usage percentage")
    node_count: int = Field(0, ge=0, description="Number of nodes averaged")
