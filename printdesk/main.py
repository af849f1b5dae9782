"""Main FastAPI application."""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
import logging
import os

from printdesk.core.config import settings
from printdesk.core.dependencies import build_hub, get_order_store
from printdesk.core.errors import OrderLifecycleError
from printdesk.core.logging import setup_logging
from printdesk.db.database import init_db
from printdesk.api import health, notifications, orders, products, stream, updates

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    await init_db()
    app.state.hub = build_hub(get_order_store())
    yield
    # Shutdown
    await app.state.hub.close()


app = FastAPI(
    title="PrintDesk",
    description="Order lifecycle and live order views for custom printing",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(OrderLifecycleError)
async def lifecycle_error_handler(request: Request, exc: OrderLifecycleError):
    """Translate lifecycle errors into HTTP responses."""
    logger.warning(
        f"[API] {request.method} {request.url.path} failed - "
        f"{type(exc).__name__}: {exc.message}"
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Include routers (must be before static file mounting to take precedence)
app.include_router(health.router, tags=["health"])
app.include_router(orders.router, tags=["orders"])
app.include_router(updates.router, tags=["updates"])
app.include_router(notifications.router, tags=["notifications"])
app.include_router(products.router, tags=["products"])
app.include_router(stream.router, tags=["stream"])

# Serve uploaded attachments
os.makedirs(settings.attachments_dir, exist_ok=True)
app.mount(
    settings.attachments_base_url,
    StaticFiles(directory=settings.attachments_dir),
    name="attachments",
)
