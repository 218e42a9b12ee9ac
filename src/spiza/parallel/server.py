"""FastAPI front for a SnapshotCoordinator."""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from ..exceptions import SerializationError
from ..solver.observer import ObserverSnapshot
from .coordinator import SnapshotCoordinator


class SnapshotRequest(BaseModel):
    CurrentGenerationIndex: int = Field(ge=0)
    Inhabitants: List[Dict[str, Any]]
    RequestId: Optional[str] = None


def create_app(coordinator: SnapshotCoordinator) -> FastAPI:
    """
    Build an app exposing coordinator.submit at POST /.

    The response body is the coordinator's text result: merged JSON for a
    completed quorum, or the timeout message.
    """
    app = FastAPI(title="spiza coordinator")

    @app.post("/", response_class=PlainTextResponse)
    async def submit(request: SnapshotRequest) -> str:
        try:
            snapshot = ObserverSnapshot.deserialize(request.model_dump())
        except SerializationError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        return await coordinator.submit(snapshot)

    return app
