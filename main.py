""" main.py: FastAPI application entry point and runtime configuration.

This module builds the ASGI app, mounts the API routers, configures CORS (Cross-Origin Resource Sharing) and
exposes a Prometheus metrics endpoint. It centralizes web-layer wiring so the rest of the codebase can focus on
the orchestration logic. When executed directly, it starts a Uvicorn server using host/port values from
configuration.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app
import logging
from config import CONFIG
from version import __version__

# --- Router Imports ---
from api import health as health_router
from api import prompt as prompt_router

# Get a logger instance for this module
logger = logging.getLogger(__name__)

app = FastAPI(title="ParentGPT Assistant", version=__version__)

# Include routers
app.include_router(prompt_router.router, prefix="/api", tags=["Prompt"])
app.include_router(health_router.router, tags=["Health"])

# Add Prometheus metrics endpoint
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# Configure CORS
allow_origins = CONFIG.get('cors', {}).get('allow_origins', ["*"])
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# The uvicorn server is used to run the FastAPI application.
if __name__ == '__main__':
    import uvicorn
    logger.info("[__main__] Starting Uvicorn server for main.py\n")
    uvicorn.run(
        app,
        host=CONFIG.get('server', {}).get('host', '0.0.0.0'),
        port=CONFIG.get('server', {}).get('port', 8080)
    )

# Endpoints once the server is running:
# http://<host>:8080/api/prompt
# http://<host>:8080/api/reset?session_id=<id>
# http://<host>:8080/api/classify?question=<text>
# http://<host>:8080/api/providers
# http://<host>:8080/health
