"""Pydantic schemas for market and per-property analytics."""
from datetime import date
from typing import Dict, List, Optional

from app.schemas.base_schema import CamelModel
from app.schemas.property_schema import PropertyRead


class TypePriceStat(CamelModel):
    type: str
    avg_price: float
    count: int


class MonthlyTrend(CamelModel):
    month: str          # YYYY-MM
    avg_price: float
    count: int


class DistrictStat(CamelModel):
    district: str
    count: int
    avg_price: float


class TypeCount(CamelModel):
    type: str
    count: int


class MarketAnalytics(CamelModel):
    avg_prices_by_type: List[TypePriceStat] = []
    price_trends: List[MonthlyTrend] = []
    popular_areas: List[DistrictStat] = []
    type_distribution: List[TypeCount] = []


class InvestmentAnalysis(CamelModel):
    estimated_monthly_rent: int
    annual_rent: int
    rental_yield: float
    price_vs_market: float
    investment_score: int
    recommendations: List[str]


class DailyViews(CamelModel):
    day: date
    views: int


class MarketPosition(CamelModel):
    total_in_area: int
    percentile: int
    position: str       # budget, mid-range, premium


class InvestmentMetrics(CamelModel):
    price_per_sqm: int
    avg_price_per_sqm: Optional[int] = None
    price_vs_similar: Optional[int] = None
    price_per_sqm_vs_similar: Optional[int] = None


class TechnicalAnalysis(CamelModel):
    building_age: Optional[int] = None
    condition: str
    features: Dict[str, bool]
    amenities_count: int
    floor_info: Optional[str] = None


class PropertyReport(CamelModel):
    property: PropertyRead
    similar_properties: List[PropertyRead]
    view_stats: List[DailyViews]
    market_position: MarketPosition
    investment_metrics: InvestmentMetrics
    technical_analysis: TechnicalAnalysis
