"""
Report Schemas

Pydantic models for every report the engine produces. Field names are
snake_case in Python and camelCase on the wire, which is what the admin
dashboard charts consume.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ReportModel(BaseModel):
    """Base for report payloads"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# SALES
# =============================================================================

class PeriodChanges(ReportModel):
    """Percent change against the previous window; None when it had nothing"""
    revenue: Optional[float]
    orders: Optional[float]
    avg_order_value: Optional[float]


class OverviewStats(ReportModel):
    """Headline sales figures for a period"""
    period: str
    start_date: date
    end_date: date
    total_revenue: float
    total_orders: int
    avg_order_value: float
    total_customers: int
    active_customers: int
    changes: PeriodChanges


class DailyTimelinePoint(ReportModel):
    date: date
    revenue: float
    order_count: int


class BestSeller(ReportModel):
    product_id: int
    name: str
    brand: str
    category: str
    units_sold: int
    revenue: float


class BrandRevenue(ReportModel):
    brand: str
    revenue: float
    units_sold: int
    orders: int
    percentage: float


class CategoryRevenue(ReportModel):
    category: str
    revenue: float
    units_sold: int
    orders: int
    percentage: float


class StatusCount(ReportModel):
    status: str
    count: int
    percentage: float


class SignupPoint(ReportModel):
    date: date
    count: int


class CustomerStats(ReportModel):
    """
    Customer acquisition and retention for a period.

    retention_rate is the share (percent) of the previous window's active
    customers who ordered again in this window; None without a previous
    window to compare with.
    """
    period: str
    total_customers: int
    new_customers: int
    active_customers: int
    returning_customers: int
    repeat_customers: int
    retention_rate: Optional[float]
    growth: List[SignupPoint]


# =============================================================================
# FORECAST
# =============================================================================

class HistoricalPoint(ReportModel):
    date: date
    value: float


class ForecastPoint(ReportModel):
    date: date
    predicted: float
    confidence_lower: float
    confidence_upper: float


class ForecastModel(ReportModel):
    """Fitted trend line and weekday factors"""
    slope: float
    intercept: float
    residual_std: float
    seasonal_factors: Dict[str, float]


class ForecastResult(ReportModel):
    """
    Demand forecast.

    status is "ok" or "insufficient_data". With insufficient data the
    historical series is still returned but forecast and model are None.
    """
    status: str
    metric: str
    period: str
    historical: List[HistoricalPoint]
    forecast: Optional[List[ForecastPoint]] = None
    model: Optional[ForecastModel] = None
    message: Optional[str] = None


class MonthlyValue(ReportModel):
    month: str  # YYYY-MM
    value: float
    orders: int


class SeasonalTrends(ReportModel):
    has_seasonality: bool
    peak_months: List[str]
    low_months: List[str]
    avg_value: float
    seasonality_strength: float
    monthly_data: List[MonthlyValue]


# =============================================================================
# CUSTOMERS
# =============================================================================

class CustomerSegmentRecord(ReportModel):
    user_id: int
    name: Optional[str]
    email: Optional[str]
    recency_days: int
    frequency: int
    monetary: float
    recency_score: int
    frequency_score: int
    monetary_score: int
    segment: str
    churn_risk_score: float


class CustomerSegmentsReport(ReportModel):
    segments: List[CustomerSegmentRecord]
    summary: Dict[str, int]


class ChurnRiskCustomer(ReportModel):
    user_id: int
    name: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    segment: str
    churn_risk_score: float
    last_purchase_date: date
    days_since_last_purchase: int
    lifetime_value: float
    total_orders: int
    recommended_action: str


# =============================================================================
# PRODUCTS
# =============================================================================

class InventoryRecommendation(ReportModel):
    product_id: int
    name: str
    brand: str
    current_stock: int
    units_sold: int
    avg_daily_sales: float
    safety_stock: float
    reorder_point: float
    optimal_stock: float
    days_of_cover: Optional[float]
    suggested_order_quantity: int
    action: str


class ProductInsight(ReportModel):
    product_id: int
    name: str
    brand: str
    category: str
    current_revenue: float
    previous_revenue: float
    growth_rate: float
    is_new: bool
    profit_margin: float
    margin_basis: str  # "cost" or "price_rank"
    quadrant: str
    recommendation: str


# =============================================================================
# DASHBOARD
# =============================================================================

class DashboardSection(ReportModel):
    """One dashboard section: a result or an error marker"""
    status: str
    data: Optional[Any] = None
    error: Optional[str] = None


class DashboardReport(ReportModel):
    period: str
    overview: DashboardSection
    sales_timeline: DashboardSection
    best_sellers: DashboardSection
    revenue_by_brand: DashboardSection
    revenue_by_category: DashboardSection
    order_status_distribution: DashboardSection
    customer_stats: DashboardSection
    forecast: DashboardSection
    seasonal_trends: DashboardSection
    customer_segments: DashboardSection
    churn_risk: DashboardSection
    inventory: DashboardSection
    product_insights: DashboardSection
