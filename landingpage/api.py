"""FastAPI application serving the landing page."""

import asyncio
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from kubernetes import client

from . import __version__
from .config import Config
from .credentials import load_home_client
from .logging_config import get_logger, log_function_entry, log_function_exit, log_http_request
from .models import GroupEntry
from .scheduler import RefreshScheduler, SnapshotHandle
from .web import generate_landing_html

logger = get_logger(__name__)

app = FastAPI(
    title="Landing Page",
    description="Links to every ingress across the local and remote Kubernetes clusters",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every served request with its status and duration."""
    start_time = asyncio.get_running_loop().time()

    response = await call_next(request)

    duration = asyncio.get_running_loop().time() - start_time
    log_http_request(logger, request.method, str(request.url.path),
                     response.status_code,
                     round(duration * 1000, 2),
                     client_ip=request.client.host if request.client else None)
    return response


# Set by initialize_collector before the server starts
_config: Optional[Config] = None
_home_client: Optional[client.ApiClient] = None

scheduler: Optional[RefreshScheduler] = None
handle: Optional[SnapshotHandle] = None


def initialize_collector(config: Config, home_client: Optional[client.ApiClient] = None) -> None:
    """Register the configuration used when the application starts."""
    log_function_entry(logger, "initialize_collector",
                       local_enabled=config.local_enabled,
                       remote_groups=list(config.remote.keys()))
    global _config, _home_client
    _config = config
    _home_client = home_client
    log_function_exit(logger, "initialize_collector", status="success")


def mount_static_folder(directory: str) -> None:
    logger.info("Adding static folder", directory=directory)
    app.mount("/static", StaticFiles(directory=directory), name="static")


def get_handle() -> SnapshotHandle:
    """Return the published snapshot handle."""
    if handle is None:
        raise HTTPException(status_code=503, detail="Snapshot not available yet")
    return handle


@app.get("/", response_class=HTMLResponse)
async def index():
    """Render the landing page from the current snapshot."""
    snapshot, published_at, _ = get_handle().read()
    return HTMLResponse(content=generate_landing_html(snapshot, published_at))


@app.get("/health", response_class=PlainTextResponse)
async def health():
    return "OK"


@app.get("/api/groups", response_model=List[GroupEntry])
async def get_groups():
    """Return the current snapshot as JSON."""
    return list(get_handle().snapshot)


@app.get("/api/status")
async def get_status():
    """Return metadata about the published snapshot."""
    snapshot, published_at, generation = get_handle().read()
    return {
        "state": scheduler.state.value if scheduler else "uninitialized",
        "generation": generation,
        "published_at": published_at.isoformat(),
        "groups": len(snapshot),
    }


@app.on_event("startup")
async def startup_event():
    """Publish the first snapshot and start the refresh loop."""
    global scheduler, handle
    if _config is None:
        logger.warning("No configuration registered, not starting the collector")
        return

    home_client = _home_client or load_home_client()
    scheduler = RefreshScheduler(home_client)
    # A failed first build aborts startup
    handle = await scheduler.start(_config)
    logger.info("Collector started", groups=len(handle.snapshot))


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the refresh loop."""
    logger.info("Shutting down landingpage")
    if scheduler is not None:
        await scheduler.stop()
