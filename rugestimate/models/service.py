"""Pydantic models for estimate service line items."""

import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Priority = Literal["high", "medium", "low"]

DEFAULT_SERVICE_NAME = "New Service"

# A service whose name contains one of these cannot be deselected by the client.
MANDATORY_KEYWORDS: tuple[str, ...] = ("clean", "wash")


def new_service_id() -> str:
    """Return a fresh opaque service id."""
    return str(uuid.uuid4())


class ServiceItem(BaseModel):
    """Single priced line item on a rug estimate.

    Serialized with camelCase keys (``unitPrice``) to match the stored
    JSON layout; snake_case names are accepted on input as well.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    id: str = Field(default_factory=new_service_id)
    name: str
    quantity: int = Field(1, ge=1)
    unit_price: float = Field(0.0, ge=0)
    priority: Priority = "medium"

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("service name must not be blank")
        return value

    @property
    def is_mandatory(self) -> bool:
        return is_mandatory_name(self.name)


def is_mandatory_name(name: str) -> bool:
    """Return ``True`` if *name* denotes a cleaning or washing service."""
    lowered = name.lower()
    return any(keyword in lowered for keyword in MANDATORY_KEYWORDS)


class CatalogPrice(BaseModel):
    """Business price-list entry used to fill unpriced parsed services."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    unit_price: float = Field(ge=0)


class ParseEstimateRequest(BaseModel):
    """Request body for POST /estimates/parse."""

    report: str
    catalog: list[CatalogPrice] = []


class EstimateResponse(BaseModel):
    """Parsed (or approved) service list with its running total."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    services: list[ServiceItem]
    total: float


class ApproveEstimateRequest(BaseModel):
    """Request body for POST /estimates/approve."""

    services: list[ServiceItem]


class ApprovedEstimate(BaseModel):
    """Final service list handed to the persistence collaborator."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    services: list[ServiceItem]
    total_cost: float
