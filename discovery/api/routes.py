"""API routes for the telegraf sink.

Discovery engines push their results here; each result is dispatched to the
sink synchronously and the persistence outcome of every file is returned.
"""
from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Body, HTTPException, Request
from pydantic import ValidationError

from discovery.models.schemas import LabelsDiscovery, PersistResult, SignalDiscovery
from discovery.services.sink import TelegrafSink

router = APIRouter()


def _get_sink(request: Request) -> TelegrafSink:
    return request.app.state.sink


@router.get("/health")
async def health_check(request: Request):
    """Health check endpoint."""
    return {"status": "OK", "version": request.app.version}


@router.post("/telegraf/{kind}", response_model=List[PersistResult])
def process_discovery(kind: str, request: Request, payload: Dict[str, Any] = Body(...)):
    """
    Push a discovery result to the telegraf sink.

    ``kind`` selects the shape of the body:
      - Signal: {"source": ..., "services": {key: Object}, "options": {...}}
      - anything else: {"source": ..., "targets": {key: {label: value}}}
    Unknown kinds are accepted and produce no files.
    """
    try:
        if kind == "Signal":
            d = SignalDiscovery.model_validate({**payload, "kind": kind})
        else:
            d = LabelsDiscovery.model_validate({**payload, "kind": kind})
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    request.app.state.observability.logs().info("%s: received %s discovery", d.source, kind)
    return _get_sink(request).process(d)
