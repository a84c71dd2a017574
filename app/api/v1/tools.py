"""Tools API router — mortgage calculator and side-by-side comparison.
/api/v1/tools"""
from fastapi import APIRouter, Request

from app.api.responses import ok
from app.schemas.base_schema import ApiResponse
from app.schemas.tools_schema import (
    ComparisonRequest,
    ComparisonResult,
    MortgageRequest,
    MortgageResult,
)
from app.services.tools_service import calculate_mortgage, compare_properties

router = APIRouter()


@router.post("/mortgage", response_model=ApiResponse[MortgageResult])
async def mortgage_calculator(payload: MortgageRequest, request: Request):
    """Monthly payment, totals and the first year of the amortization schedule."""
    return ok(calculate_mortgage(payload), "Mortgage calculated successfully", request)


@router.post("/comparison", response_model=ApiResponse[ComparisonResult])
async def property_comparison(payload: ComparisonRequest, request: Request):
    """Compare two or three properties."""
    return ok(compare_properties(payload), "Properties compared successfully", request)
