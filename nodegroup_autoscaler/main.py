#!/usr/bin/env python3
"""
NodeGroup Autoscaler - Main Entry Point
Scales NodeGroup custom resources based on node CPU and memory utilization
"""

import argparse
import asyncio
import logging
import os
import signal
import sys
from typing import Optional

from kubernetes import client
from prometheus_client import start_http_server
from pydantic import ValidationError

from .api.server import APIServer
from .config.settings import Settings
from .core.kube import init_kubernetes_client
from .core.logging_config import setup_logging, get_logger
from .core.metrics import KubernetesMetricsSource
from .core.operator import NodeGroupOperator
from .core.reconciliation import ReconciliationEngine
from .core.scaler import KubernetesNodeGroupScaler


class AutoscalerService:
    """Main autoscaler service that wires the engine to Kubernetes"""

    def __init__(self, config_path: Optional[str] = None, dry_run: bool = False):
        """Initialize the autoscaler service"""
        if config_path and os.path.exists(config_path):
            self.settings = Settings.load_from_yaml_with_env_override(config_path)
        else:
            self.settings = Settings()
        if dry_run:
            self.settings.autoscaler.dry_run = True

        setup_logging(
            level=self.settings.logging.level,
            log_file=self.settings.logging.file,
            enable_colors=True,
            log_format=self.settings.logging.format,
            json_logs=self.settings.logging.json_format
        )
        self.logger = get_logger(__name__)

        self.config = self.settings.get_autoscaler_config()
        self.logger.info(f"Configuration: {self.config.model_dump(by_alias=True)}")

        kube = self.settings.kubernetes
        api_client = init_kubernetes_client(kube)
        custom_api = client.CustomObjectsApi(api_client)
        core_api = client.CoreV1Api(api_client)

        self.engine = ReconciliationEngine(
            config=self.config,
            metrics_source=KubernetesMetricsSource(
                core_api, custom_api,
                node_label=kube.node_label,
                request_timeout=kube.request_timeout
            ),
            scaler=KubernetesNodeGroupScaler(
                custom_api,
                group=kube.api_group,
                version=kube.api_version,
                plural=kube.plural,
                request_timeout=kube.request_timeout,
                dry_run=self.settings.autoscaler.dry_run
            )
        )
        self.operator = NodeGroupOperator(
            self.engine,
            custom_api,
            group=kube.api_group,
            version=kube.api_version,
            plural=kube.plural,
            request_timeout=kube.request_timeout
        )
        self.api_server = APIServer(self.engine, self.operator)

        if self.settings.autoscaler.dry_run:
            self.logger.info("Dry-run mode enabled")
        self.logger.info("NodeGroup Autoscaler Service initialized")

    async def run(self):
        """Run the operator, and the API server when enabled, until a signal arrives"""
        loop = asyncio.get_running_loop()
        stop_event = asyncio.Event()
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(signum, stop_event.set)

        start_http_server(self.settings.api.metrics_port)
        self.logger.info(f"Prometheus metrics server started on :{self.settings.api.metrics_port}")

        await self.operator.start()

        waiters = {asyncio.create_task(stop_event.wait(), name="stop-signal")}
        server = None
        if self.settings.api.enabled:
            server = self.api_server.create_server(self.settings.api.host, self.settings.api.port)
            waiters.add(asyncio.create_task(server.serve(), name="api-server"))
            self.logger.info(f"API server starting on {self.settings.api.host}:{self.settings.api.port}")

        done, pending = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        self.logger.info("Shutting down operator...")

        if server is not None:
            server.should_exit = True
        for task in pending:
            if task.get_name() == "stop-signal":
                task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        await self.operator.stop()
        self.logger.info("Autoscaler service stopped")


def main():
    """Entry point"""
    parser = argparse.ArgumentParser(description='NodeGroup Autoscaler')
    parser.add_argument(
        '--config',
        default=os.getenv('CONFIG_PATH'),
        help='Path to YAML configuration file'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Log scaling decisions without patching NodeGroups'
    )
    args = parser.parse_args()

    try:
        service = AutoscalerService(args.config, dry_run=args.dry_run)
    except ValidationError as e:
        logging.getLogger(__name__).error(f"Invalid configuration: {e}")
        sys.exit(1)
    except Exception as e:
        logging.getLogger(__name__).error(f"Failed to start autoscaler: {e}", exc_info=True)
        sys.exit(1)

    try:
        asyncio.run(service.run())
    except KeyboardInterrupt:
        service.logger.info("Received keyboard interrupt")


if __name__ == "__main__":
    main()
