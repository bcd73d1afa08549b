#!/usr/bin/env python3
"""
FastAPI server module for autoscaler API endpoints
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from .. import __version__
from ..core.operator import NodeGroupOperator
from ..core.reconciliation import ReconciliationEngine
from ..models.config import AutoscalerConfig

logger = logging.getLogger(__name__)


class APIServer:
    """FastAPI server for autoscaler endpoints"""

    def __init__(self, engine: ReconciliationEngine, operator: Optional[NodeGroupOperator] = None):
        """
        Initialize API server

        Args:
            engine: Reconciliation engine whose state and config are exposed
            operator: Operator reported by /health and /status, if running
        """
        self.engine = engine
        self.operator = operator
        self.app = FastAPI(
            title="NodeGroup Autoscaler API",
            description="API for inspecting and configuring NodeGroup autoscaling",
            version=__version__
        )
        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes"""

        @self.app.get("/")
        async def root():
            return {
                "service": "NodeGroup Autoscaler",
                "version": __version__,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }

        @self.app.get("/health")
        async def health_check():
            """Healthy unless an attached operator has stopped"""
            healthy = self.operator is None or self.operator.running
            return JSONResponse(
                content={
                    "status": "healthy" if healthy else "unhealthy",
                    "timestamp": datetime.now(timezone.utc).isoformat()
                },
                status_code=200 if healthy else 503
            )

        @self.app.get("/status")
        async def get_status():
            status = self.engine.get_status()
            if self.operator is not None:
                status["operator"] = self.operator.get_status()
            return status

        @self.app.get("/config")
        async def get_config():
            return self.engine.get_config().model_dump(by_alias=True)

        @self.app.put("/config")
        async def replace_config(new_config: AutoscalerConfig):
            """Replace the whole configuration; partial bodies fall back to defaults"""
            self.engine.update_config(new_config)
            return new_config.model_dump(by_alias=True)

        @self.app.delete("/cooldowns/{name}")
        async def forget_cooldown(name: str):
            if not await self.engine.forget_cooldown(name):
                raise HTTPException(status_code=404, detail=f"NodeGroup {name} has no cooldown entry")
            return {"nodegroup": name, "cooldown": "cleared"}

    def create_server(self, host: str = "0.0.0.0", port: int = 8080) -> uvicorn.Server:
        """Build a uvicorn server to be served on the operator's event loop"""
        config = uvicorn.Config(self.app, host=host, port=port, log_config=None)
        return uvicorn.Server(config)
