"""Annotation editing session router.

Endpoints:
- POST /annotation-sessions                       -- open a session from a raw seed
- GET /annotation-sessions/{session_id}           -- committed + staged annotations
- DELETE /annotation-sessions/{session_id}        -- drop the session
- POST /annotation-sessions/{session_id}/edit     -- enter edit mode (snapshot)
- POST /annotation-sessions/{session_id}/cancel   -- discard staged edits
- POST /annotation-sessions/{session_id}/save     -- commit staged edits
- POST .../photos/{photo_index}/events            -- pointer event on a photo
- PATCH .../photos/{photo_index}/markers/{index}  -- relabel a marker
- DELETE .../photos/{photo_index}/markers/{index} -- delete a marker

Handlers run on the event loop, so one pointer event finishes updating a
session before the next one is handled.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path

from rugestimate.dependencies import get_annotation_sessions
from rugestimate.errors import (
    AnnotationIndexError,
    CommitInProgressError,
    SessionNotFoundError,
)
from rugestimate.models.annotation import (
    AnnotationSessionResponse,
    CreateAnnotationSessionRequest,
    MarkerEventResponse,
    PointerEvent,
    RelabelRequest,
)
from rugestimate.repositories.session_store import SessionStore
from rugestimate.services.annotation_model import normalize_photo_annotations
from rugestimate.services.edit_session import AnnotationEditSession
from rugestimate.services.marker_controller import MarkerInteractionController

router = APIRouter(prefix="/annotation-sessions", tags=["annotations"])

Sessions = SessionStore[AnnotationEditSession]


def _get_session(store: Sessions, session_id: str) -> AnnotationEditSession:
    try:
        return store.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Annotation session not found")


def _snapshot(session_id: str, session: AnnotationEditSession) -> AnnotationSessionResponse:
    dragging = {
        photo_index: controller.dragging_index
        for photo_index, controller in session.controllers.items()
        if controller.dragging_index is not None
    }
    return AnnotationSessionResponse(
        id=session_id,
        editing=session.is_editing,
        committed=session.committed,
        staging=session.staging,
        dragging=dragging,
    )


def _marker_response(
    controller: MarkerInteractionController, changed: bool
) -> MarkerEventResponse:
    return MarkerEventResponse(
        photo_index=controller.photo_index,
        changed=changed,
        state=controller.state.value,
        dragging_index=controller.dragging_index,
        annotations=controller.annotations,
    )


@router.post("", response_model=AnnotationSessionResponse)
async def create_session(
    body: CreateAnnotationSessionRequest,
    store: Sessions = Depends(get_annotation_sessions),
) -> AnnotationSessionResponse:
    """Open a session; malformed seed entries are dropped, never rejected."""
    session = AnnotationEditSession(normalize_photo_annotations(body.annotations))
    session_id = store.add(session)
    return _snapshot(session_id, session)


@router.get("/{session_id}", response_model=AnnotationSessionResponse)
async def get_session(
    session_id: str,
    store: Sessions = Depends(get_annotation_sessions),
) -> AnnotationSessionResponse:
    return _snapshot(session_id, _get_session(store, session_id))


@router.delete("/{session_id}")
async def delete_session(
    session_id: str,
    store: Sessions = Depends(get_annotation_sessions),
) -> dict:
    try:
        store.delete(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Annotation session not found")
    return {"deleted": session_id}


@router.post("/{session_id}/edit", response_model=AnnotationSessionResponse)
async def begin_edit(
    session_id: str,
    store: Sessions = Depends(get_annotation_sessions),
) -> AnnotationSessionResponse:
    session = _get_session(store, session_id)
    try:
        session.begin_edit()
    except CommitInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return _snapshot(session_id, session)


@router.post("/{session_id}/cancel", response_model=AnnotationSessionResponse)
async def cancel_edit(
    session_id: str,
    store: Sessions = Depends(get_annotation_sessions),
) -> AnnotationSessionResponse:
    session = _get_session(store, session_id)
    try:
        session.cancel()
    except CommitInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return _snapshot(session_id, session)


@router.post("/{session_id}/save", response_model=AnnotationSessionResponse)
async def save_edit(
    session_id: str,
    store: Sessions = Depends(get_annotation_sessions),
) -> AnnotationSessionResponse:
    """Commit staged annotations; a failed commit leaves edit mode open."""
    session = _get_session(store, session_id)
    try:
        await session.asave()
    except CommitInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return _snapshot(session_id, session)


@router.post(
    "/{session_id}/photos/{photo_index}/events",
    response_model=MarkerEventResponse,
)
async def handle_pointer_event(
    session_id: str,
    event: PointerEvent,
    photo_index: int = Path(..., ge=0),
    store: Sessions = Depends(get_annotation_sessions),
) -> MarkerEventResponse:
    """Apply a click / drag event to one photo's markers."""
    controller = _get_session(store, session_id).controller(photo_index)
    try:
        changed = controller.handle(event)
    except AnnotationIndexError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except CommitInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return _marker_response(controller, changed)


@router.patch(
    "/{session_id}/photos/{photo_index}/markers/{index}",
    response_model=MarkerEventResponse,
)
async def relabel_marker(
    session_id: str,
    body: RelabelRequest,
    photo_index: int = Path(..., ge=0),
    index: int = Path(..., ge=0),
    store: Sessions = Depends(get_annotation_sessions),
) -> MarkerEventResponse:
    controller = _get_session(store, session_id).controller(photo_index)
    try:
        changed = controller.relabel(index, body.label)
    except AnnotationIndexError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except CommitInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    if not changed:
        raise HTTPException(status_code=409, detail="Markers can only be edited in edit mode")
    return _marker_response(controller, changed)


@router.delete(
    "/{session_id}/photos/{photo_index}/markers/{index}",
    response_model=MarkerEventResponse,
)
async def delete_marker(
    session_id: str,
    photo_index: int = Path(..., ge=0),
    index: int = Path(..., ge=0),
    store: Sessions = Depends(get_annotation_sessions),
) -> MarkerEventResponse:
    controller = _get_session(store, session_id).controller(photo_index)
    try:
        changed = controller.delete(index)
    except AnnotationIndexError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except CommitInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    if not changed:
        raise HTTPException(status_code=409, detail="Markers can only be edited in edit mode")
    return _marker_response(controller, changed)
