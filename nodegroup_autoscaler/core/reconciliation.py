#!/usr/bin/env python3
"""
NodeGroup reconciliation engine
Decides and applies the desired size of a NodeGroup from node utilization
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Protocol

from prometheus_client import Counter, Gauge, Histogram

from ..models.config import AutoscalerConfig
from ..models.metrics import RawNodeSample
from ..models.nodegroup import EventKind, NodeGroup, ReconcileOutcome
from .cooldown import CooldownTracker
from .dispatch import KeyedDispatcher
from .logging_config import nodegroup_context
from .scaling import decide, describe_decision
from .utilization import average, to_node_samples

logger = logging.getLogger(__name__)

RECONCILIATIONS = Counter(
    'nodegroup_autoscaler_reconciliations_total',
    'Reconciliation passes by outcome',
    ['outcome']
)
RECONCILIATION_DURATION = Histogram(
    'nodegroup_autoscaler_reconciliation_duration_seconds',
    'Time taken by a reconciliation pass'
)
SCALING_ACTIONS = Counter(
    'nodegroup_autoscaler_scaling_actions_total',
    'Successful scaling actions',
    ['direction']
)
DESIRED_NODES = Gauge(
    'nodegroup_autoscaler_desired_nodes',
    'Last desired node count computed per NodeGroup',
    ['nodegroup']
)
COLLABORATOR_ERRORS = Counter(
    'nodegroup_autoscaler_collaborator_errors_total',
    'Failed calls to the metrics source or the scale sink',
    ['kind']
)


class MetricsSource(Protocol):
    async def fetch_samples(self, group_name: str) -> List[RawNodeSample]:
        ...


class ScaleSink(Protocol):
    async def apply_desired_size(self, group_name: str, desired_size: int) -> bool:
        ...


def wall_clock_ms() -> float:
    return time.time() * 1000


class ConfigStore:
    """Holds the current AutoscalerConfig; updates swap the whole snapshot"""

    def __init__(self, config: AutoscalerConfig):
        self._config = config

    def get(self) -> AutoscalerConfig:
        return self._config

    def replace(self, config: AutoscalerConfig) -> AutoscalerConfig:
        if not isinstance(config, AutoscalerConfig):
            raise TypeError(f"expected AutoscalerConfig, got {type(config).__name__}")
        previous, self._config = self._config, config
        return previous


class ReconciliationEngine:
    """
    Reconciles one NodeGroup at a time per name

    reconcile() is the only entry point for the watch and the periodic
    trigger. Passes for the same NodeGroup are serialized through a
    KeyedDispatcher, and the cooldown map is only read or written from inside
    those serialized passes.
    """

    def __init__(
        self,
        config: AutoscalerConfig,
        metrics_source: MetricsSource,
        scaler: ScaleSink,
        clock: Callable[[], float] = wall_clock_ms,
        dispatcher: Optional[KeyedDispatcher] = None
    ):
        """
        Initialize the engine

        Args:
            config: Initial configuration snapshot
            metrics_source: Provides raw node samples for a group
            scaler: Applies a new spec.nodeCount to a group
            clock: Returns the current time in milliseconds
            dispatcher: Per-group serialization, a new one by default
        """
        self.config_store = ConfigStore(config)
        self.metrics_source = metrics_source
        self.scaler = scaler
        self.clock = clock
        self.dispatcher = dispatcher or KeyedDispatcher()
        self.cooldowns = CooldownTracker()

    async def reconcile(self, group: NodeGroup, event_kind: EventKind) -> ReconcileOutcome:
        """Run one reconciliation pass; never raises"""
        start_time = time.perf_counter()
        try:
            outcome = await self._reconcile(group, event_kind)
        except Exception as e:
            logger.error(f"Reconciliation of NodeGroup {group.name} failed: {e}", exc_info=True)
            outcome = ReconcileOutcome.FAILED

        RECONCILIATIONS.labels(outcome=outcome.value).inc()
        RECONCILIATION_DURATION.observe(time.perf_counter() - start_time)
        return outcome

    async def _reconcile(self, group: NodeGroup, event_kind: EventKind) -> ReconcileOutcome:
        name = (group.name or "").strip()
        if not name:
            logger.info("NodeGroup has no name, skipping")
            return ReconcileOutcome.SKIPPED_NO_NAME

        # One snapshot per pass, checked here and handed to the serialized part
        config = self.config_store.get()
        if config.target_node_group and name != config.target_node_group:
            logger.debug(f"Skipping NodeGroup {name} (target is {config.target_node_group})")
            return ReconcileOutcome.SKIPPED_FILTERED

        return await self.dispatcher.submit(
            name, lambda: self._serialized_pass(name, group, event_kind, config)
        )

    async def _serialized_pass(self, name: str, group: NodeGroup, event_kind: EventKind,
                               config: AutoscalerConfig) -> ReconcileOutcome:
        with nodegroup_context(name):
            return await self._run_pass(name, group, event_kind, config)

    async def _run_pass(self, name: str, group: NodeGroup, event_kind: EventKind,
                        config: AutoscalerConfig) -> ReconcileOutcome:
        logger.info(f"Reconciling NodeGroup: {name} (event: {event_kind.value})")

        if event_kind == EventKind.DELETED:
            logger.info(f"NodeGroup {name} deleted, removing from tracking")
            self.cooldowns.forget(name)
            self._clear_desired_gauge(name)
            return ReconcileOutcome.DELETED

        now = self.clock()
        if not self.cooldowns.is_eligible(name, now, config.cooldown_seconds):
            logger.info(f"NodeGroup {name} is in cooldown period, skipping")
            return ReconcileOutcome.SKIPPED_COOLDOWN

        current_count = group.spec_node_count
        status_count = group.observed_node_count
        logger.info(f"Current spec.nodeCount: {current_count}, status.nodeCount: {status_count}")

        if status_count < current_count:
            logger.info(f"Nodes still being provisioned ({status_count}/{current_count}), waiting...")
            return ReconcileOutcome.SKIPPED_PROVISIONING

        try:
            raw_samples = await self.metrics_source.fetch_samples(name)
        except Exception as e:
            logger.error(f"Failed to fetch metrics for NodeGroup {name}: {e}")
            COLLABORATOR_ERRORS.labels(kind="metrics").inc()
            return ReconcileOutcome.SKIPPED_NO_METRICS

        samples = to_node_samples(raw_samples)
        if not samples:
            logger.info(f"No metrics available for NodeGroup {name}, skipping")
            return ReconcileOutcome.SKIPPED_NO_METRICS

        utilization = average(samples)
        logger.info(
            f"Metrics for {name}: avgCPU={utilization.avg_cpu:.2f}%, "
            f"avgMemory={utilization.avg_memory:.2f}% over {utilization.node_count} nodes"
        )

        desired_count = decide(current_count, utilization.avg_cpu, utilization.avg_memory, config)
        DESIRED_NODES.labels(nodegroup=name).set(desired_count)
        logger.info(describe_decision(current_count, desired_count, utilization.avg_cpu, utilization.avg_memory))

        if desired_count == current_count:
            return ReconcileOutcome.HELD

        if not await self._apply(name, desired_count):
            return ReconcileOutcome.APPLY_FAILED

        self.cooldowns.record_scale(name, self.clock())
        SCALING_ACTIONS.labels(direction="up" if desired_count > current_count else "down").inc()
        return ReconcileOutcome.SCALED

    async def _apply(self, name: str, desired_count: int) -> bool:
        try:
            applied = await self.scaler.apply_desired_size(name, desired_count)
        except Exception as e:
            logger.error(f"Failed to scale NodeGroup {name}: {e}")
            applied = False

        if not applied:
            COLLABORATOR_ERRORS.labels(kind="scale").inc()
            logger.warning(f"NodeGroup {name} was not scaled to {desired_count}, cooldown not started")
        return applied

    def _clear_desired_gauge(self, name: str):
        try:
            DESIRED_NODES.remove(name)
        except KeyError:
            pass

    async def forget_cooldown(self, name: str) -> bool:
        """Drop a group's cooldown entry; returns whether one existed"""
        async def _forget():
            existed = name in self.cooldowns
            self.cooldowns.forget(name)
            return existed
        return await self.dispatcher.submit(name, _forget)

    def get_config(self) -> AutoscalerConfig:
        return self.config_store.get()

    def update_config(self, new_config: AutoscalerConfig) -> AutoscalerConfig:
        """Replace the whole configuration; returns the previous snapshot"""
        previous = self.config_store.replace(new_config)
        logger.info(f"Autoscaler config updated: {new_config.model_dump(by_alias=True)}")
        return previous

    def get_status(self) -> Dict[str, Any]:
        config = self.config_store.get()
        now = self.clock()
        cooldowns = {}
        for name, last in self.cooldowns.snapshot().items():
            remaining = max(0.0, config.cooldown_ms - (now - last)) / 1000
            cooldowns[name] = {
                "last_scale_ms": last,
                "remaining_seconds": round(remaining, 3),
            }
        return {
            "config": config.model_dump(by_alias=True),
            "cooldowns": cooldowns,
            "in_flight": self.dispatcher.active_keys(),
        }

    async def close(self):
        await self.dispatcher.close()
