#!/usr/bin/env python3
"""
Scale sink patching spec.nodeCount on NodeGroup custom objects
"""

import asyncio
import logging

from kubernetes import client
from kubernetes.client.rest import ApiException

from .kube import call_api

logger = logging.getLogger(__name__)


class KubernetesNodeGroupScaler:
    """Applies a desired size to a NodeGroup with a JSON patch"""

    def __init__(
        self,
        custom_api: client.CustomObjectsApi,
        group: str = "api.clever-cloud.com",
        version: str = "v1",
        plural: str = "nodegroups",
        request_timeout: float = 10.0,
        dry_run: bool = False
    ):
        self.custom_api = custom_api
        self.group = group
        self.version = version
        self.plural = plural
        self.request_timeout = request_timeout
        self.dry_run = dry_run

    async def apply_desired_size(self, group_name: str, desired_size: int) -> bool:
        """Patch the NodeGroup; returns False instead of raising on API failure"""
        if self.dry_run:
            logger.info(f"[DRY RUN] Would scale NodeGroup {group_name} to {desired_size} nodes")
            return True

        patch = [
            {
                "op": "replace",
                "path": "/spec/nodeCount",
                "value": desired_size
            }
        ]

        try:
            await call_api(
                self.custom_api.patch_cluster_custom_object,
                self.group,
                self.version,
                self.plural,
                group_name,
                patch,
                _request_timeout=self.request_timeout,
                timeout=self.request_timeout
            )
        except ApiException as e:
            logger.error(f"Failed to scale NodeGroup {group_name}: {e.status} {e.reason}")
            return False
        except asyncio.TimeoutError:
            logger.error(f"Timed out scaling NodeGroup {group_name} after {self.request_timeout}s")
            return False

        logger.info(f"Successfully scaled NodeGroup {group_name} to {desired_size} nodes")
        return True
