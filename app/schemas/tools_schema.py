"""Pydantic schemas for the mortgage and comparison tools."""
from typing import List, Optional

from pydantic import Field

from app.schemas.base_schema import CamelModel


class MortgageRequest(CamelModel):
    property_price: float = Field(..., ge=1_000_000, description="Property price in currency units")
    down_payment_percent: float = Field(..., ge=0, le=100)
    interest_rate: float = Field(..., ge=0, le=50, description="Annual interest rate, percent")
    loan_term_years: int = Field(..., ge=1, le=30)


class PaymentScheduleEntry(CamelModel):
    month: int
    monthly_payment: int
    principal_payment: int
    interest_payment: int
    remaining_balance: int


class MortgageSummary(CamelModel):
    loan_term_years: int
    interest_rate: float
    down_payment_percent: float
    monthly_income: int = Field(..., description="Recommended minimum monthly income")


class MortgageResult(CamelModel):
    property_price: float
    down_payment: int
    loan_amount: int
    monthly_payment: int
    total_payment: int
    total_interest: int
    payment_schedule: List[PaymentScheduleEntry]
    summary: MortgageSummary


class ComparisonProperty(CamelModel):
    id: str
    title: str
    price: float = Field(..., ge=0)
    area: float = Field(..., gt=0)
    bedrooms: int = 0
    bathrooms: int = 0
    parking_spaces: int = 0
    year_built: Optional[int] = None
    has_elevator: bool = False
    has_balcony: bool = False
    has_storage: bool = False
    amenities: List[str] = []
    city: str = ""
    district: str = ""
    agent_name: Optional[str] = None


class ComparisonRequest(CamelModel):
    properties: List[ComparisonProperty] = Field(..., min_length=2, max_length=3)


class ComparisonRow(CamelModel):
    id: str
    title: str
    price: float
    area: float
    bedrooms: int
    bathrooms: int
    price_per_sqm: int
    year_built: Optional[int] = None
    has_elevator: bool
    has_parking: bool
    has_balcony: bool
    has_storage: bool
    amenities_count: int
    location: str
    agent: Optional[str] = None


class ValueRange(CamelModel):
    min: float
    max: float
    avg: int


class ComparisonMetrics(CamelModel):
    price_range: ValueRange
    area_range: ValueRange
    price_per_sqm_range: ValueRange
    avg_year_built: Optional[int] = None


class ComparisonResult(CamelModel):
    properties: List[ComparisonRow]
    metrics: ComparisonMetrics
    recommendations: List[str]
