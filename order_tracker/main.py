import logging
import sys

from fastapi import FastAPI
from fastapi.responses import Response

from order_tracker.config import settings
from order_tracker.metrics import get_metrics_bytes, get_metrics_content_type
from order_tracker.routes import orders

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(message)s",
    stream=sys.stdout,
)

app = FastAPI(title=settings.app_title)
app.include_router(orders.router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/metrics")
async def metrics() -> Response:
    """Prometheus scrape endpoint: orders created/cancelled, transitions applied/rejected, orders in progress."""
    return Response(
        content=get_metrics_bytes(),
        media_type=get_metrics_content_type(),
    )
