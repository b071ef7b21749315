# cancelflow/web/routes.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from cancelflow.services.cancellation_service import CancellationService
from cancelflow.web.deps import get_cancellation_service
from cancelflow.web.schemas import (
    CancellationCreatedOut,
    CancellationOut,
    CreateCancellationIn,
    UpdateCancellationIn,
)

router = APIRouter()


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.post("/cancellations", response_model=CancellationCreatedOut)
async def create_cancellation(
    body: CreateCancellationIn,
    svc: CancellationService = Depends(get_cancellation_service),
):
    """Starts the flow; a repeat call for the same user returns the same record."""
    record = await svc.create(body.user_id, body.subscription_id)
    return CancellationCreatedOut(id=record.id, downsell_variant=record.downsell_variant)


@router.put("/cancellations", response_model=CancellationOut)
async def update_cancellation(
    body: UpdateCancellationIn,
    svc: CancellationService = Depends(get_cancellation_service),
):
    record = await svc.update(body.cancellation_id, body.changes())
    return CancellationOut.model_validate(record)
