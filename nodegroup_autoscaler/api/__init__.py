"""
HTTP API for the autoscaler
"""

from .server import APIServer

__all__ = ["APIServer"]
