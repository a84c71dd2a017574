"""Analytics service — market aggregates, investment scoring and property reports.

Aggregations that are portable SQL (AVG, COUNT, GROUP BY) run in the database.
Calendar bucketing (months, days) happens in Python so the same code runs on
PostgreSQL and SQLite.
"""
import uuid
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import NotFoundError
from app.core.logging import get_logger
from app.models.property_model import Property, PropertyStatus
from app.models.property_view_model import PropertyView
from app.schemas.analytics_schema import (
    DailyViews,
    DistrictStat,
    InvestmentAnalysis,
    InvestmentMetrics,
    MarketAnalytics,
    MarketPosition,
    MonthlyTrend,
    PropertyReport,
    TechnicalAnalysis,
    TypeCount,
    TypePriceStat,
)
from app.schemas.property_schema import PropertyRead
from app.services.tools_service import round_half_up

logger = get_logger(__name__)

TREND_MONTHS = 6
VIEW_STATS_DAYS = 30
POPULAR_AREAS_LIMIT = 10
REPORT_SIMILAR_LIMIT = 5
REPORT_SIMILAR_TOLERANCE = 0.2
RECENT_BUILD_YEAR = 2015


def months_ago(moment: datetime, months: int) -> datetime:
    """Shift ``moment`` back by whole calendar months (day clamped to 28)."""
    index = moment.year * 12 + (moment.month - 1) - months
    return moment.replace(year=index // 12, month=index % 12 + 1, day=min(moment.day, 28))


async def get_property_or_404(db: AsyncSession, property_id: uuid.UUID) -> Property:
    prop = (await db.execute(select(Property).where(Property.id == property_id))).scalar_one_or_none()
    if not prop:
        raise NotFoundError(f"Property {property_id} not found")
    return prop


# ---------------------------------------------------------------------------
# Market analytics
# ---------------------------------------------------------------------------

async def market_analytics(
    db: AsyncSession,
    city: Optional[str] = None,
    district: Optional[str] = None,
) -> MarketAnalytics:
    """Aggregate active listings, optionally narrowed to one city/district."""
    conditions = [Property.status == PropertyStatus.ACTIVE.value]
    if city:
        conditions.append(Property.city == city)
    if district:
        conditions.append(Property.district == district)
    where_clause = and_(*conditions)

    by_type = (await db.execute(
        select(Property.property_type, func.avg(Property.price), func.count(Property.id))
        .where(where_clause)
        .group_by(Property.property_type)
        .order_by(Property.property_type)
    )).all()

    since = months_ago(datetime.now(timezone.utc), TREND_MONTHS)
    recent = (await db.execute(
        select(Property.created_at, Property.price)
        .where(where_clause, Property.created_at >= since)
    )).all()
    buckets: dict = defaultdict(list)
    for created_at, price in recent:
        buckets[created_at.strftime("%Y-%m")].append(price)

    popular = (await db.execute(
        select(Property.district, func.count(Property.id).label("count"), func.avg(Property.price))
        .where(where_clause)
        .group_by(Property.district)
        .order_by(func.count(Property.id).desc(), Property.district)
        .limit(POPULAR_AREAS_LIMIT)
    )).all()

    return MarketAnalytics(
        avg_prices_by_type=[
            TypePriceStat(type=t, avg_price=float(avg or 0), count=count) for t, avg, count in by_type
        ],
        price_trends=[
            MonthlyTrend(month=month, avg_price=sum(prices) / len(prices), count=len(prices))
            for month, prices in sorted(buckets.items())
        ],
        popular_areas=[
            DistrictStat(district=d, count=count, avg_price=float(avg or 0)) for d, count, avg in popular
        ],
        type_distribution=[TypeCount(type=t, count=count) for t, _, count in by_type],
    )


# ---------------------------------------------------------------------------
# Investment analysis
# ---------------------------------------------------------------------------

def investment_recommendations(score: int, rental_yield: float, price_vs_market: float) -> List[str]:
    recommendations = []

    if score >= 80:
        recommendations.append("Excellent investment - high return potential")
    elif score >= 60:
        recommendations.append("Sound investment - balanced risk")
    else:
        recommendations.append("Risky investment - needs closer review")

    if rental_yield > 6:
        recommendations.append("High rental yield - suited to monthly income")
    elif rental_yield < 4:
        recommendations.append("Low rental yield - better suited to price growth")

    if price_vs_market < -15:
        recommendations.append("Priced below market - good buying opportunity")
    elif price_vs_market > 15:
        recommendations.append("Priced above market - price may drop")

    return recommendations


def investment_score(prop: Property, rental_yield: float, price_vs_market: float) -> int:
    """Score 0-100 starting from 50 and adjusted by price, yield and features."""
    score = 50

    if price_vs_market < -10:
        score += 20
    elif price_vs_market > 10:
        score -= 10

    if rental_yield > 6:
        score += 15
    elif rental_yield < 4:
        score -= 10

    if prop.has_elevator:
        score += 5
    if (prop.parking_spaces or 0) > 0:
        score += 5
    if prop.year_built and prop.year_built > RECENT_BUILD_YEAR:
        score += 10

    return min(100, max(0, score))


async def investment_analysis(db: AsyncSession, property_id: uuid.UUID) -> InvestmentAnalysis:
    prop = await get_property_or_404(db, property_id)

    monthly_rent = prop.price * settings.estimated_rental_return / 12
    annual_rent = monthly_rent * 12
    rental_yield = (annual_rent / prop.price) * 100 if prop.price else 0.0

    area_avg = (await db.execute(
        select(func.avg(Property.price)).where(
            Property.city == prop.city,
            Property.district == prop.district,
            Property.property_type == prop.property_type,
        )
    )).scalar_one_or_none()
    area_avg = float(area_avg or 0)
    price_vs_market = ((prop.price - area_avg) / area_avg) * 100 if area_avg else 0.0

    score = investment_score(prop, rental_yield, price_vs_market)
    logger.info("Investment analysis computed", extra={"property_id": str(prop.id), "total": score})

    return InvestmentAnalysis(
        estimated_monthly_rent=round_half_up(monthly_rent),
        annual_rent=round_half_up(annual_rent),
        rental_yield=round(rental_yield, 2),
        price_vs_market=round(price_vs_market, 2),
        investment_score=score,
        recommendations=investment_recommendations(score, rental_yield, price_vs_market),
    )


# ---------------------------------------------------------------------------
# Property report
# ---------------------------------------------------------------------------

async def similar_properties(
    db: AsyncSession,
    prop: Property,
    tolerance: float,
    limit: int,
    active_only: bool = False,
) -> List[Property]:
    """Same type and city, price within ``tolerance``, closest price first."""
    stmt = select(Property).where(
        Property.id != prop.id,
        Property.property_type == prop.property_type,
        Property.city == prop.city,
        Property.price.between(prop.price * (1 - tolerance), prop.price * (1 + tolerance)),
    )
    if active_only:
        stmt = stmt.where(Property.status == PropertyStatus.ACTIVE.value)
    stmt = stmt.order_by(func.abs(Property.price - prop.price), Property.id).limit(limit)
    return list((await db.execute(stmt)).scalars().all())


async def market_position(db: AsyncSession, prop: Property) -> MarketPosition:
    same_area = and_(
        Property.city == prop.city,
        Property.district == prop.district,
        Property.property_type == prop.property_type,
    )
    total = (await db.execute(select(func.count(Property.id)).where(same_area))).scalar_one()
    cheaper = (await db.execute(
        select(func.count(Property.id)).where(same_area, Property.price < prop.price)
    )).scalar_one()

    percentile = round_half_up(cheaper / total * 100) if total else 0
    if percentile < 25:
        position = "budget"
    elif percentile < 75:
        position = "mid-range"
    else:
        position = "premium"
    return MarketPosition(total_in_area=total, percentile=percentile, position=position)


def investment_metrics(prop: Property, similar: List[Property]) -> InvestmentMetrics:
    price_per_sqm = prop.price / prop.area
    if not similar:
        return InvestmentMetrics(price_per_sqm=round_half_up(price_per_sqm))

    avg_price = sum(p.price for p in similar) / len(similar)
    avg_per_sqm = sum(p.price / p.area for p in similar) / len(similar)
    return InvestmentMetrics(
        price_per_sqm=round_half_up(price_per_sqm),
        avg_price_per_sqm=round_half_up(avg_per_sqm),
        price_vs_similar=round_half_up((prop.price - avg_price) / avg_price * 100) if avg_price else None,
        price_per_sqm_vs_similar=(
            round_half_up((price_per_sqm - avg_per_sqm) / avg_per_sqm * 100) if avg_per_sqm else None
        ),
    )


def technical_analysis(prop: Property, today: Optional[date] = None) -> TechnicalAnalysis:
    today = today or date.today()
    age = today.year - prop.year_built if prop.year_built else None

    if age is None:
        condition = "unknown"
    elif age < 5:
        condition = "new"
    elif age < 15:
        condition = "good"
    else:
        condition = "older"

    floor_info = None
    if prop.floor_number is not None and prop.total_floors:
        floor_info = f"{prop.floor_number}/{prop.total_floors}"

    return TechnicalAnalysis(
        building_age=age,
        condition=condition,
        features={
            "hasElevator": bool(prop.has_elevator),
            "hasParking": (prop.parking_spaces or 0) > 0,
            "hasBalcony": bool(prop.has_balcony),
            "hasStorage": bool(prop.has_storage),
        },
        amenities_count=len(prop.amenities),
        floor_info=floor_info,
    )


async def view_stats(db: AsyncSession, property_id: uuid.UUID, days: int = VIEW_STATS_DAYS) -> List[DailyViews]:
    since = datetime.now(timezone.utc) - timedelta(days=days)
    stamps = (await db.execute(
        select(PropertyView.created_at).where(
            PropertyView.property_id == property_id,
            PropertyView.created_at >= since,
        )
    )).scalars().all()

    per_day: dict = defaultdict(int)
    for stamp in stamps:
        per_day[stamp.date()] += 1
    return [DailyViews(day=day, views=count) for day, count in sorted(per_day.items())]


async def property_report(db: AsyncSession, property_id: uuid.UUID) -> PropertyReport:
    prop = await get_property_or_404(db, property_id)
    similar = await similar_properties(db, prop, REPORT_SIMILAR_TOLERANCE, REPORT_SIMILAR_LIMIT)

    return PropertyReport(
        property=PropertyRead.model_validate(prop),
        similar_properties=[PropertyRead.model_validate(p) for p in similar],
        view_stats=await view_stats(db, prop.id),
        market_position=await market_position(db, prop),
        investment_metrics=investment_metrics(prop, similar),
        technical_analysis=technical_analysis(prop),
    )
