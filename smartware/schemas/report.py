# schemas/report.py

from datetime import date
from decimal import Decimal
from typing import List

from pydantic import BaseModel

from smartware.core.reports import AlertType
from smartware.schemas.product import ProductResponse


class StockChartPoint(BaseModel):
    name: str
    stock: int
    value: Decimal | None


class DashboardResponse(BaseModel):
    total_products: int
    total_quantity: int
    total_inventory_value: Decimal | None
    low_stock_count: int
    chart: List[StockChartPoint]


class CategoryStock(BaseModel):
    name: str
    value: int


class ReportSummaryResponse(BaseModel):
    as_of: date
    horizon_days: int
    categories: List[CategoryStock]
    expired: List[ProductResponse]
    expiring_soon: List[ProductResponse]
    recent: List[ProductResponse]


class ValuationResponse(BaseModel):
    total_cost_value: Decimal
    total_inventory_value: Decimal
    potential_profit: Decimal


class AlertResponse(BaseModel):
    type: AlertType
    product_id: str
    message: str

    class Config:
        from_attributes = True
