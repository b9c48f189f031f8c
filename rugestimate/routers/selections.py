"""Client service-selection router.

Endpoints:
- POST /selections                          -- start a selection (all services selected)
- GET /selections/{selection_id}            -- per-rug selection and totals
- POST /selections/{selection_id}/toggle     -- flip one optional service
- POST /selections/{selection_id}/toggle-all -- select all / clear optional
- POST /selections/{selection_id}/checkout   -- payload for the payment collaborator
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from rugestimate.dependencies import get_selection_sessions
from rugestimate.errors import (
    EmptySelectionError,
    SessionNotFoundError,
    UnknownRugError,
    UnknownServiceError,
)
from rugestimate.models.selection import (
    CheckoutPayload,
    CreateSelectionRequest,
    SelectionSummary,
    ToggleAllRequest,
    ToggleRequest,
)
from rugestimate.repositories.session_store import SessionStore
from rugestimate.services.selection_engine import SelectionEngine

router = APIRouter(prefix="/selections", tags=["selections"])

Sessions = SessionStore[SelectionEngine]


def _get_engine(store: Sessions, selection_id: str) -> SelectionEngine:
    try:
        return store.get(selection_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Selection not found")


def _summary(selection_id: str, engine: SelectionEngine) -> SelectionSummary:
    return SelectionSummary(
        id=selection_id,
        rugs=[engine.summary(rug_id) for rug_id in engine.rug_ids],
        selected_count=engine.selected_count(),
        total_services=engine.total_services(),
        grand_total=engine.grand_total(),
    )


@router.post("", response_model=SelectionSummary)
async def create_selection(
    body: CreateSelectionRequest,
    store: Sessions = Depends(get_selection_sessions),
) -> SelectionSummary:
    engine = SelectionEngine(body.rugs)
    return _summary(store.add(engine), engine)


@router.get("/{selection_id}", response_model=SelectionSummary)
async def get_selection(
    selection_id: str,
    store: Sessions = Depends(get_selection_sessions),
) -> SelectionSummary:
    return _summary(selection_id, _get_engine(store, selection_id))


@router.post("/{selection_id}/toggle", response_model=SelectionSummary)
async def toggle_service(
    selection_id: str,
    body: ToggleRequest,
    store: Sessions = Depends(get_selection_sessions),
) -> SelectionSummary:
    """Flip one service; mandatory services stay selected."""
    engine = _get_engine(store, selection_id)
    try:
        engine.toggle(body.rug_id, body.service_id)
    except UnknownRugError:
        raise HTTPException(status_code=404, detail="Rug not found")
    except UnknownServiceError:
        raise HTTPException(status_code=404, detail="Service not found")
    return _summary(selection_id, engine)


@router.post("/{selection_id}/toggle-all", response_model=SelectionSummary)
async def toggle_all_services(
    selection_id: str,
    body: ToggleAllRequest,
    store: Sessions = Depends(get_selection_sessions),
) -> SelectionSummary:
    engine = _get_engine(store, selection_id)
    try:
        engine.toggle_all(body.rug_id, body.select_all)
    except UnknownRugError:
        raise HTTPException(status_code=404, detail="Rug not found")
    return _summary(selection_id, engine)


@router.post("/{selection_id}/checkout", response_model=CheckoutPayload)
async def checkout(
    selection_id: str,
    store: Sessions = Depends(get_selection_sessions),
) -> CheckoutPayload:
    engine = _get_engine(store, selection_id)
    try:
        return engine.checkout()
    except EmptySelectionError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
