#!/usr/bin/env python3
"""
NodeGroup operator
Feeds the reconciliation engine from a Kubernetes watch and a periodic timer
"""

import asyncio
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from kubernetes import client, watch
from pydantic import ValidationError

from ..models.nodegroup import EventKind, NodeGroup
from .kube import call_api
from .reconciliation import ReconciliationEngine

logger = logging.getLogger(__name__)


class NodeGroupOperator:
    """
    Two independent producers calling ReconciliationEngine.reconcile

    - the watch streams NodeGroup events from a worker thread and hands each
      one to the event loop
    - the periodic loop lists every NodeGroup each reconcile interval and
      reconciles it as Modified
    """

    def __init__(
        self,
        engine: ReconciliationEngine,
        custom_api: client.CustomObjectsApi,
        group: str = "api.clever-cloud.com",
        version: str = "v1",
        plural: str = "nodegroups",
        request_timeout: float = 10.0,
        watch_timeout_seconds: int = 300,
        watch_retry_seconds: float = 5.0
    ):
        self.engine = engine
        self.custom_api = custom_api
        self.group = group
        self.version = version
        self.plural = plural
        self.request_timeout = request_timeout
        self.watch_timeout_seconds = watch_timeout_seconds
        self.watch_retry_seconds = watch_retry_seconds

        self.running = False
        self.tick_count = 0
        self.last_tick: Optional[datetime] = None
        self.events_received = 0

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._periodic_task: Optional[asyncio.Task] = None
        self._watch_thread: Optional[threading.Thread] = None
        self._watch: Optional[watch.Watch] = None

    async def start(self, enable_watch: bool = True):
        """Start the periodic loop and, optionally, the watch thread"""
        if self.running:
            logger.warning("NodeGroupOperator already running")
            return

        self.running = True
        self._loop = asyncio.get_running_loop()
        self._periodic_task = asyncio.create_task(self.run_periodic(), name="periodic-reconcile")
        logger.info("Periodic reconciliation scheduled")

        if enable_watch:
            self._watch_thread = threading.Thread(
                target=self._watch_loop,
                name="nodegroup-watch",
                daemon=True
            )
            self._watch_thread.start()
            logger.info(f"Watching {self.plural}.{self.group}/{self.version}")

    async def stop(self):
        """Stop both producers and the engine's per-group workers"""
        if not self.running:
            return

        logger.info("Stopping NodeGroupOperator")
        self.running = False
        if self._watch:
            self._watch.stop()

        if self._periodic_task:
            self._periodic_task.cancel()
            try:
                await self._periodic_task
            except asyncio.CancelledError:
                pass
            self._periodic_task = None

        await self.engine.close()

    async def run_periodic(self):
        """Reconcile all NodeGroups every reconcile interval"""
        while self.running:
            await asyncio.sleep(self.engine.get_config().reconcile_interval_seconds)
            try:
                await self.reconcile_all()
            except Exception as e:
                logger.error(f"Error in periodic reconciliation: {e}")

    async def reconcile_all(self) -> int:
        """One periodic tick; returns the number of NodeGroups reconciled"""
        self.tick_count += 1
        logger.info(f"Running periodic reconciliation #{self.tick_count}...")

        items = await self.list_node_groups()
        groups = []
        for item in items:
            group = self._to_node_group(item)
            if group is not None:
                groups.append(group)

        await asyncio.gather(*(self.engine.reconcile(g, EventKind.MODIFIED) for g in groups))
        self.last_tick = datetime.now(timezone.utc)
        return len(groups)

    async def list_node_groups(self) -> List[Dict[str, Any]]:
        response = await call_api(
            self.custom_api.list_cluster_custom_object,
            self.group,
            self.version,
            self.plural,
            _request_timeout=self.request_timeout,
            timeout=self.request_timeout
        )
        return response.get("items", [])

    async def handle_event(self, event: Dict[str, Any]):
        """Reconcile the NodeGroup carried by one watch event"""
        event_type = event.get("type")
        event_kind = EventKind.from_watch_type(event_type)
        if event_kind is None:
            logger.debug(f"Ignoring watch event of type {event_type}")
            return None

        self.events_received += 1
        group = self._to_node_group(event.get("object") or {})
        if group is None:
            return None

        logger.info(f"NodeGroup event: {event_kind.value} - {group.name}")
        return await self.engine.reconcile(group, event_kind)

    def _to_node_group(self, obj: Dict[str, Any]) -> Optional[NodeGroup]:
        try:
            return NodeGroup.from_resource(obj)
        except ValidationError as e:
            name = (obj.get("metadata") or {}).get("name")
            logger.warning(f"Ignoring malformed NodeGroup {name}: {e.error_count()} validation errors")
            return None

    def _watch_loop(self):
        """Blocking watch stream, restarted after errors until stopped"""
        while self.running:
            self._watch = watch.Watch()
            try:
                for event in self._watch.stream(
                    self.custom_api.list_cluster_custom_object,
                    self.group,
                    self.version,
                    self.plural,
                    timeout_seconds=self.watch_timeout_seconds
                ):
                    if not self.running:
                        break
                    future = asyncio.run_coroutine_threadsafe(self.handle_event(event), self._loop)
                    future.add_done_callback(self._log_event_failure)
            except Exception as e:
                if not self.running:
                    break
                logger.error(f"NodeGroup watch failed: {e}, restarting in {self.watch_retry_seconds}s")
                time.sleep(self.watch_retry_seconds)
            finally:
                self._watch.stop()

        logger.info("NodeGroup watch stopped")

    def _log_event_failure(self, future):
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Failed to handle NodeGroup watch event: {error}", exc_info=error)

    def get_status(self) -> Dict[str, Any]:
        return {
            "running": self.running,
            "watch_alive": bool(self._watch_thread and self._watch_thread.is_alive()),
            "tick_count": self.tick_count,
            "last_tick": self.last_tick.isoformat() if self.last_tick else None,
            "events_received": self.events_received,
        }
