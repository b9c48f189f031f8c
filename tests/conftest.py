"""Shared pytest fixtures for rugestimate tests."""

from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI

from rugestimate.models.selection import RugServices
from rugestimate.models.service import ServiceItem
from rugestimate.repositories.session_store import SessionStore
from rugestimate.routers import annotations, estimates, selections
from rugestimate.services.report_parser import ReportTextParser

SAMPLE_LETTER = """Dear Ms. Alvarez,

Thank you for trusting us with your rugs. Our inspection found moth
damage along the fringe and some color run near the border.

RUG BREAKDOWN

Rug #1: Persian Tabriz, 8x10
- Standard wash: $240.00
- Fringe repair: $1,150.00
- Moth treatment: $85
Subtotal: $1,475.00

Rug #2: Turkish Oushak, 5x7
- Standard wash: $140.00
- **Stain removal**: $60.00
Subtotal: $200.00

TOTAL ESTIMATE: $1,675.00

Next steps: reply to approve and we will schedule pickup.

Sincerely,
The Team
"""


@pytest.fixture()
def parser() -> ReportTextParser:
    return ReportTextParser()


@pytest.fixture()
def sample_letter() -> str:
    return SAMPLE_LETTER


@pytest.fixture()
def rugs() -> list[RugServices]:
    """Two rugs: one with a mandatory wash and optional extras, one mandatory-only."""
    return [
        RugServices(
            id="rug-1",
            rug_number="R-1",
            services=[
                ServiceItem(id="wash-1", name="Standard Wash", quantity=1, unit_price=120.0),
                ServiceItem(id="fringe-1", name="Fringe repair", quantity=2, unit_price=45.5),
                ServiceItem(id="pad-1", name="Padding", quantity=1, unit_price=30.0),
            ],
        ),
        RugServices(
            id="rug-2",
            rug_number="R-2",
            services=[
                ServiceItem(id="clean-2", name="Deep cleaning", quantity=1, unit_price=120.0),
                ServiceItem(id="block-2", name="Blocking", quantity=1, unit_price=75.0),
            ],
        ),
    ]


@pytest.fixture()
async def app_client() -> httpx.AsyncClient:
    """Create a FastAPI test app with fresh session stores and yield an async HTTP client."""
    test_app = FastAPI()
    test_app.state.parser = ReportTextParser()
    test_app.state.annotation_sessions = SessionStore(max_entries=10, ttl_seconds=60)
    test_app.state.selection_sessions = SessionStore(max_entries=10, ttl_seconds=60)

    test_app.include_router(estimates.router)
    test_app.include_router(annotations.router)
    test_app.include_router(selections.router)

    @test_app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=test_app),
        base_url="http://testserver",
    ) as client:
        yield client
