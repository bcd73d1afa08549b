#!/usr/bin/env python3
"""
Configuration settings using Pydantic for environment variable loading
"""

import os
import re
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.config import AutoscalerConfig

# Load environment variables from .env file if it exists
load_dotenv()

ENV_REFERENCE = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


class AutoscalerSettings(BaseSettings):
    """Scaling thresholds, bounds and timing"""
    model_config = SettingsConfigDict(extra="ignore")

    cpu_threshold_high: float = float(os.getenv("CPU_THRESHOLD_HIGH", "80"))
    cpu_threshold_low: float = float(os.getenv("CPU_THRESHOLD_LOW", "30"))
    memory_threshold_high: float = float(os.getenv("MEMORY_THRESHOLD_HIGH", "80"))
    memory_threshold_low: float = float(os.getenv("MEMORY_THRESHOLD_LOW", "30"))

    min_nodes: int = int(os.getenv("MIN_NODES", "1"))
    max_nodes: int = int(os.getenv("MAX_NODES", "10"))
    reconcile_interval_seconds: int = int(os.getenv("RECONCILE_INTERVAL_SECONDS", "30"))
    cooldown_seconds: int = int(os.getenv("COOLDOWN_SECONDS", "180"))
    target_node_group: Optional[str] = Field(
        None, validation_alias=AliasChoices("TARGET_NODEGROUP", "target_node_group")
    )

    dry_run: bool = os.getenv("AUTOSCALER_DRY_RUN", "false").lower() == "true"


class KubernetesSettings(BaseSettings):
    """Kubernetes client and NodeGroup resource settings"""
    model_config = SettingsConfigDict(env_prefix="KUBERNETES_", extra="ignore")

    in_cluster: bool = os.getenv("KUBERNETES_IN_CLUSTER", "false").lower() == "true"
    kubeconfig_path: Optional[str] = Field(
        None, validation_alias=AliasChoices("KUBECONFIG", "kubeconfig_path")
    )
    skip_tls_verify: bool = Field(
        False, validation_alias=AliasChoices("SKIP_TLS_VERIFY", "skip_tls_verify")
    )
    request_timeout: float = float(os.getenv("KUBERNETES_REQUEST_TIMEOUT", "10"))

    api_group: str = os.getenv("NODEGROUP_API_GROUP", "api.clever-cloud.com")
    api_version: str = os.getenv("NODEGROUP_API_VERSION", "v1")
    plural: str = os.getenv("NODEGROUP_PLURAL", "nodegroups")
    node_label: str = os.getenv("NODEGROUP_LABEL", "nodegroup.api.clever-cloud.com/name")


class APISettings(BaseSettings):
    """HTTP API and Prometheus exporter settings"""
    model_config = SettingsConfigDict(env_prefix="AUTOSCALER_API_", extra="ignore")

    enabled: bool = os.getenv("AUTOSCALER_API_ENABLED", "true").lower() == "true"
    host: str = os.getenv("AUTOSCALER_API_HOST", "0.0.0.0")
    port: int = int(os.getenv("AUTOSCALER_API_PORT", "8080"))
    metrics_port: int = int(os.getenv("AUTOSCALER_METRICS_PORT", "9091"))


class LoggingSettings(BaseSettings):
    """Logging configuration settings"""
    model_config = SettingsConfigDict(env_prefix="LOG_", extra="ignore")

    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - [%(nodegroup)s] %(message)s"
    )
    file: Optional[str] = os.getenv("LOG_FILE", None)
    json_format: bool = os.getenv("LOG_JSON_FORMAT", "false").lower() == "true"


class Settings(BaseSettings):
    """Main settings class that includes all sub-settings"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = os.getenv("DEBUG", "false").lower() == "true"

    autoscaler: AutoscalerSettings = Field(default_factory=AutoscalerSettings)
    kubernetes: KubernetesSettings = Field(default_factory=KubernetesSettings)
    api: APISettings = Field(default_factory=APISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def get_autoscaler_config(self) -> AutoscalerConfig:
        """Build the immutable config snapshot used by the reconciliation engine.

        Raises pydantic.ValidationError when thresholds or bounds are inconsistent.
        """
        return AutoscalerConfig(
            cpu_threshold_high=self.autoscaler.cpu_threshold_high,
            cpu_threshold_low=self.autoscaler.cpu_threshold_low,
            memory_threshold_high=self.autoscaler.memory_threshold_high,
            memory_threshold_low=self.autoscaler.memory_threshold_low,
            min_nodes=self.autoscaler.min_nodes,
            max_nodes=self.autoscaler.max_nodes,
            reconcile_interval_seconds=self.autoscaler.reconcile_interval_seconds,
            cooldown_seconds=self.autoscaler.cooldown_seconds,
            target_node_group=self.autoscaler.target_node_group,
        )

    @classmethod
    def load_from_yaml_with_env_override(cls, yaml_path: str) -> "Settings":
        """
        Load settings from a YAML file, expanding ${VAR} and ${VAR:-default}

        Sections missing from the file fall back to environment variables.
        A missing file yields environment-only settings.

        Raises:
            ValueError: a referenced variable is unset and has no default
        """
        yaml_config = {}
        if os.path.exists(yaml_path):
            with open(yaml_path, 'r') as f:
                yaml_config = yaml.safe_load(expand_env(f.read())) or {}

        return Settings(
            debug=yaml_config.get("debug", False),
            autoscaler=AutoscalerSettings(**yaml_config.get("autoscaler", {})),
            kubernetes=KubernetesSettings(**yaml_config.get("kubernetes", {})),
            api=APISettings(**yaml_config.get("api", {})),
            logging=LoggingSettings(**yaml_config.get("logging", {})),
        )


def expand_env(text: str) -> str:
    """Replace ${VAR} and ${VAR:-default} references with environment values"""
    def _substitute(match):
        name, default = match.group(1), match.group(2)
        value = os.environ.get(name, default)
        if value is None:
            raise ValueError(f"Environment variable {name} is referenced in config but not set")
        return value

    return ENV_REFERENCE.sub(_substitute, text)
