"""Estimate parsing and approval router.

Endpoints:
- POST /estimates/parse   -- extract priced services from an AI estimate letter
- POST /estimates/approve -- finalize an edited service list
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from rugestimate.dependencies import get_parser
from rugestimate.errors import EmptyEstimateError
from rugestimate.models.service import (
    ApprovedEstimate,
    ApproveEstimateRequest,
    EstimateResponse,
    ParseEstimateRequest,
)
from rugestimate.services.estimate_review import EstimateReview
from rugestimate.services.money import round_cents
from rugestimate.services.report_parser import ReportTextParser, apply_catalog_prices

router = APIRouter(prefix="/estimates", tags=["estimates"])


@router.post("/parse", response_model=EstimateResponse)
def parse_estimate(
    body: ParseEstimateRequest,
    parser: ReportTextParser = Depends(get_parser),
) -> EstimateResponse:
    """Parse the letter; an empty service list means manual entry is needed."""
    services = apply_catalog_prices(parser.parse(body.report), body.catalog)
    total = round_cents(sum(s.quantity * s.unit_price for s in services))
    return EstimateResponse(services=services, total=total)


@router.post("/approve", response_model=ApprovedEstimate)
def approve_estimate(body: ApproveEstimateRequest) -> ApprovedEstimate:
    """Compute the final total for a reviewed service list."""
    review = EstimateReview(body.services)
    try:
        services, total = review.approve()
    except EmptyEstimateError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return ApprovedEstimate(services=services, total_cost=total)
