"""Pydantic models for photo defect markers."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_LOCATION = "on rug"


class Annotation(BaseModel):
    """Single defect marker, positioned as a percentage of image width/height."""

    label: str
    location: str = DEFAULT_LOCATION
    x: float = Field(ge=0, le=100)
    y: float = Field(ge=0, le=100)


class PhotoAnnotations(BaseModel):
    """All markers placed on one photo (0-based index into the photo list)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    photo_index: int = Field(ge=0)
    annotations: list[Annotation] = []


class Surface(BaseModel):
    """On-screen rectangle of the rendered photo, in pixels."""

    left: float = 0.0
    top: float = 0.0
    width: float = Field(gt=0)
    height: float = Field(gt=0)


PointerEventType = Literal[
    "click", "pointer_down", "pointer_move", "pointer_up", "pointer_leave"
]


class PointerEvent(BaseModel):
    """Pointer event on a photo surface, in client pixel coordinates.

    ``marker`` is set when the event targets an existing marker badge.
    """

    type: PointerEventType
    x: float = 0.0
    y: float = 0.0
    surface: Surface | None = None
    marker: int | None = Field(None, ge=0)


class RelabelRequest(BaseModel):
    """Request body for PATCH .../markers/{index}."""

    label: str


class CreateAnnotationSessionRequest(BaseModel):
    """Request body for POST /annotation-sessions.

    ``annotations`` is the raw upstream seed and is normalized, not validated.
    """

    annotations: Any = None


class AnnotationSessionResponse(BaseModel):
    """Snapshot of an annotation editing session."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    editing: bool
    committed: list[PhotoAnnotations]
    staging: list[PhotoAnnotations] | None = None
    dragging: dict[int, int] = {}


class MarkerEventResponse(BaseModel):
    """Result of applying a pointer event or marker control to one photo."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    photo_index: int
    changed: bool
    state: str
    dragging_index: int | None = None
    annotations: list[Annotation]
