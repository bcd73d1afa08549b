"""
Configuration module for autoscaler settings
"""

from .settings import Settings, AutoscalerSettings, KubernetesSettings, APISettings, LoggingSettings

__all__ = [
    "Settings",
    "AutoscalerSettings",
    "KubernetesSettings",
    "APISettings",
    "LoggingSettings",
]
