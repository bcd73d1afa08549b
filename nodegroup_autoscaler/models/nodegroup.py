#!/usr/bin/env python3
"""
NodeGroup snapshot and reconciliation event models
"""

from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    """Lifecycle event delivered with a NodeGroup snapshot"""

    CREATED = "Created"
    MODIFIED = "Modified"
    DELETED = "Deleted"

    @classmethod
    def from_watch_type(cls, watch_type: str) -> Optional["EventKind"]:
        """Map a Kubernetes watch event type, None for BOOKMARK/ERROR"""
        return _WATCH_TYPES.get(watch_type)


_WATCH_TYPES = {
    "ADDED": EventKind.CREATED,
    "MODIFIED": EventKind.MODIFIED,
    "DELETED": EventKind.DELETED,
}


class ReconcileOutcome(str, Enum):
    """How a reconciliation pass ended"""

    SKIPPED_NO_NAME = "skipped_no_name"
    SKIPPED_FILTERED = "skipped_filtered"
    DELETED = "deleted"
    SKIPPED_COOLDOWN = "skipped_cooldown"
    SKIPPED_PROVISIONING = "skipped_provisioning"
    SKIPPED_NO_METRICS = "skipped_no_metrics"
    HELD = "held"
    SCALED = "scaled"
    APPLY_FAILED = "apply_failed"
    FAILED = "failed"


class NodeGroup(BaseModel):
    """Read-only snapshot of a NodeGroup resource"""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = Field(None, description="metadata.name")
    spec_node_count: int = Field(..., ge=0, description="Declared size (spec.nodeCount)")
    status_node_count: Optional[int] = Field(None, ge=0, description="Observed size (status.nodeCount)")

    @property
    def observed_node_count(self) -> int:
        if self.status_node_count is None:
            return self.spec_node_count
        return self.status_node_count

    @classmethod
    def from_resource(cls, obj: Dict[str, Any]) -> "NodeGroup":
        """Build a snapshot from a raw custom object dict.

        Raises pydantic.ValidationError when spec.nodeCount is missing or
        negative.
        """
        metadata = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        status = obj.get("status") or {}
        return cls(
            name=metadata.get("name"),
            spec_node_count=spec.get("nodeCount"),
            status_node_count=status.get("nodeCount"),
        )
