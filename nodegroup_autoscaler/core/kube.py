#!/usr/bin/env python3
"""
Kubernetes client bootstrap and async helpers for the blocking client
"""

import asyncio
import contextvars
import functools
import logging
import os
from typing import Any, Callable

from kubernetes import client
from kubernetes import config as k8s_config

from ..config.settings import KubernetesSettings

logger = logging.getLogger(__name__)


def init_kubernetes_client(settings: KubernetesSettings) -> client.ApiClient:
    """
    Load in-cluster or kubeconfig credentials and build an ApiClient

    Raises:
        FileNotFoundError: kubeconfig_path is set but does not exist
        kubernetes.config.ConfigException: credentials cannot be loaded
    """
    if settings.in_cluster:
        logger.info("Loading in-cluster config")
        k8s_config.load_incluster_config()
    else:
        kubeconfig_path = settings.kubeconfig_path
        if kubeconfig_path and not os.path.exists(kubeconfig_path):
            logger.error(f"Kubeconfig file not found at: {kubeconfig_path}")
            raise FileNotFoundError(f"Kubeconfig file not found: {kubeconfig_path}")
        logger.info(f"Loading kubeconfig from: {kubeconfig_path or 'default location'}")
        k8s_config.load_kube_config(config_file=kubeconfig_path)

    configuration = client.Configuration.get_default_copy()
    if settings.skip_tls_verify:
        configuration.verify_ssl = False
        logger.warning("TLS certificate verification disabled (development mode)")

    logger.info(f"Kubernetes client initialized for {configuration.host}")
    return client.ApiClient(configuration)


async def call_api(func: Callable[..., Any], *args, timeout: float, **kwargs) -> Any:
    """
    Run a blocking Kubernetes client call in the default executor

    The call runs in a copy of the caller's context, so log records it emits
    keep the NodeGroup tag. It is bounded by timeout seconds;
    asyncio.TimeoutError is raised when it does not return in time.
    """
    loop = asyncio.get_running_loop()
    context = contextvars.copy_context()
    return await asyncio.wait_for(
        loop.run_in_executor(None, functools.partial(context.run, func, *args, **kwargs)),
        timeout=timeout
    )
