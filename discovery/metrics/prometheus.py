from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

metrics_router = APIRouter()


@metrics_router.get("/metrics")
async def metrics(request: Request):
    """Prometheus exposition of the sink's own registry."""
    data = generate_latest(request.app.state.observability.registry)
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
