"""Analytics API router — market overview and per-property investment reports.
/api/v1/analytics"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.api.responses import ok
from app.schemas.analytics_schema import InvestmentAnalysis, MarketAnalytics, PropertyReport
from app.schemas.base_schema import ApiResponse
from app.services.analytics_service import investment_analysis, market_analytics, property_report

router = APIRouter()


@router.get("/market", response_model=ApiResponse[MarketAnalytics])
async def get_market_analytics(
    request: Request,
    db: AsyncSession = Depends(get_db),
    city: Optional[str] = Query(None),
    district: Optional[str] = Query(None),
):
    """Average prices, six-month trend and popular districts of active listings."""
    return ok(await market_analytics(db, city, district), "Market analytics retrieved successfully", request)


@router.get("/properties/{property_id}/investment", response_model=ApiResponse[InvestmentAnalysis])
async def get_investment_analysis(property_id: UUID, request: Request, db: AsyncSession = Depends(get_db)):
    return ok(await investment_analysis(db, property_id), "Investment analysis completed", request)


@router.get("/properties/{property_id}/report", response_model=ApiResponse[PropertyReport])
async def get_property_report(property_id: UUID, request: Request, db: AsyncSession = Depends(get_db)):
    """Similar listings, daily views, market position and technical summary."""
    return ok(await property_report(db, property_id), "Property report generated successfully", request)
