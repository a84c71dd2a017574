"""Mortgage amortization and side-by-side property comparison.

Pure arithmetic; no database access.

Mortgage payment uses the standard amortization formula:
    M = P * r(1+r)^n / ((1+r)^n - 1)
with r the monthly rate and n the number of monthly payments. A zero rate
degenerates to P / n.
"""
import math
from typing import List, Sequence

from app.config import settings
from app.schemas.tools_schema import (
    ComparisonMetrics,
    ComparisonProperty,
    ComparisonRequest,
    ComparisonResult,
    ComparisonRow,
    MortgageRequest,
    MortgageResult,
    MortgageSummary,
    PaymentScheduleEntry,
    ValueRange,
)

SCHEDULE_MONTHS = 12


def round_half_up(value: float) -> int:
    """Round half up, matching how amounts are shown to users."""
    return int(math.floor(value + 0.5))


def monthly_payment(principal: float, annual_rate_percent: float, months: int) -> float:
    """Fixed monthly payment that amortizes ``principal`` over ``months``."""
    if months <= 0:
        raise ValueError("months must be positive")
    rate = annual_rate_percent / 100 / 12
    if rate == 0:
        return principal / months
    growth = (1 + rate) ** months
    return principal * (rate * growth) / (growth - 1)


def calculate_mortgage(request: MortgageRequest) -> MortgageResult:
    down_payment = request.property_price * (request.down_payment_percent / 100)
    loan_amount = request.property_price - down_payment
    rate = request.interest_rate / 100 / 12
    months = request.loan_term_years * 12

    payment = monthly_payment(loan_amount, request.interest_rate, months)
    total_payment = payment * months

    schedule: List[PaymentScheduleEntry] = []
    balance = loan_amount
    for month in range(1, min(SCHEDULE_MONTHS, months) + 1):
        interest = balance * rate
        principal = payment - interest
        balance -= principal
        schedule.append(
            PaymentScheduleEntry(
                month=month,
                monthly_payment=round_half_up(payment),
                principal_payment=round_half_up(principal),
                interest_payment=round_half_up(interest),
                remaining_balance=round_half_up(balance),
            )
        )

    return MortgageResult(
        property_price=request.property_price,
        down_payment=round_half_up(down_payment),
        loan_amount=round_half_up(loan_amount),
        monthly_payment=round_half_up(payment),
        total_payment=round_half_up(total_payment),
        total_interest=round_half_up(total_payment - loan_amount),
        payment_schedule=schedule,
        summary=MortgageSummary(
            loan_term_years=request.loan_term_years,
            interest_rate=request.interest_rate,
            down_payment_percent=request.down_payment_percent,
            monthly_income=round_half_up(payment * settings.income_multiplier),
        ),
    )


def _value_range(values: Sequence[float]) -> ValueRange:
    return ValueRange(min=min(values), max=max(values), avg=round_half_up(sum(values) / len(values)))


def _metrics(properties: Sequence[ComparisonProperty]) -> ComparisonMetrics:
    per_sqm = [p.price / p.area for p in properties]
    years = [p.year_built for p in properties if p.year_built]
    return ComparisonMetrics(
        price_range=_value_range([p.price for p in properties]),
        area_range=_value_range([p.area for p in properties]),
        price_per_sqm_range=ValueRange(
            min=round_half_up(min(per_sqm)),
            max=round_half_up(max(per_sqm)),
            avg=round_half_up(sum(per_sqm) / len(per_sqm)),
        ),
        avg_year_built=round_half_up(sum(years) / len(years)) if years else None,
    )


def _recommendations(properties: Sequence[ComparisonProperty]) -> List[str]:
    # min/max return the first of equal candidates, so ties go to the earlier property.
    best_value = min(properties, key=lambda p: p.price / p.area)
    recommendations = [f"Best value: {best_value.title}"]

    dated = [p for p in properties if p.year_built]
    if dated:
        newest = max(dated, key=lambda p: p.year_built)
        recommendations.append(f"Newest building: {newest.title} ({newest.year_built})")

    largest = max(properties, key=lambda p: p.area)
    recommendations.append(f"Largest area: {largest.title} ({largest.area:g} m²)")

    richest = max(properties, key=lambda p: len(p.amenities))
    recommendations.append(f"Most amenities: {richest.title} ({len(richest.amenities)} amenities)")
    return recommendations


def compare_properties(request: ComparisonRequest) -> ComparisonResult:
    rows = [
        ComparisonRow(
            id=p.id,
            title=p.title,
            price=p.price,
            area=p.area,
            bedrooms=p.bedrooms,
            bathrooms=p.bathrooms,
            price_per_sqm=round_half_up(p.price / p.area),
            year_built=p.year_built,
            has_elevator=p.has_elevator,
            has_parking=p.parking_spaces > 0,
            has_balcony=p.has_balcony,
            has_storage=p.has_storage,
            amenities_count=len(p.amenities),
            location=f"{p.city}, {p.district}",
            agent=p.agent_name,
        )
        for p in request.properties
    ]
    return ComparisonResult(
        properties=rows,
        metrics=_metrics(request.properties),
        recommendations=_recommendations(request.properties),
    )
