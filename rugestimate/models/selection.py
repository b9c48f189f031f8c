"""Pydantic models for client-side service selection."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from rugestimate.models.service import ServiceItem


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RugServices(_CamelModel):
    """Approved service list for one rug."""

    id: str
    rug_number: str = ""
    services: list[ServiceItem] = []


class CreateSelectionRequest(_CamelModel):
    """Request body for POST /selections."""

    rugs: list[RugServices]


class ToggleRequest(_CamelModel):
    """Request body for POST /selections/{id}/toggle."""

    rug_id: str
    service_id: str


class ToggleAllRequest(_CamelModel):
    """Request body for POST /selections/{id}/toggle-all."""

    rug_id: str
    select_all: bool


class RugSelectionSummary(_CamelModel):
    """Per-rug selection state shown in the client portal."""

    rug_id: str
    rug_number: str
    selected_ids: list[str]
    mandatory_ids: list[str]
    all_selected: bool
    total: float


class SelectionSummary(_CamelModel):
    """Full selection state with per-rug and grand totals."""

    id: str
    rugs: list[RugSelectionSummary]
    selected_count: int
    total_services: int
    grand_total: float


class CheckoutRug(_CamelModel):
    """Selected services for one rug, as sent to the payment collaborator."""

    rug_number: str
    services: list[ServiceItem]


class CheckoutPayload(_CamelModel):
    """Checkout request body for the payment collaborator."""

    selected_services: list[CheckoutRug]
    total_amount: float
