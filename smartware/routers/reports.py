# =========================================================
# REPORTS ROUTER
#
# Dashboard and report views over the current ledger snapshot.
# Money figures are admin-only: staff get the dashboard without
# the inventory value and cannot open the valuation report.
# =========================================================

from datetime import date

from fastapi import APIRouter, Depends, Query

from smartware.core import reports
from smartware.core.auth import Role, get_admin_role, get_current_role, get_ledger
from smartware.core.config import settings
from smartware.core.ledger import Ledger
from smartware.schemas.product import to_response
from smartware.schemas.report import (
    AlertResponse,
    DashboardResponse,
    ReportSummaryResponse,
    ValuationResponse,
)

router = APIRouter(prefix="/reports", tags=["Reports"])

CHART_SIZE = 5
CHART_NAME_LENGTH = 10
RECENT_SIZE = 4


def _chart_name(name: str) -> str:
    if len(name) > CHART_NAME_LENGTH:
        return name[:CHART_NAME_LENGTH] + "..."
    return name


# =========================================================
# DASHBOARD
# =========================================================
@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    ledger: Ledger = Depends(get_ledger),
    role: Role = Depends(get_current_role),
):
    products = ledger.snapshot()
    is_admin = role == Role.ADMIN
    newest = list(reversed(products))[:CHART_SIZE]

    return {
        "total_products": len(products),
        "total_quantity": sum(p.quantity for p in products),
        "total_inventory_value": reports.total_inventory_value(products) if is_admin else None,
        "low_stock_count": reports.low_stock_count(products),
        "chart": [
            {
                "name": _chart_name(p.name),
                "stock": p.quantity,
                "value": p.price * p.quantity if is_admin else None,
            }
            for p in newest
        ],
    }


# =========================================================
# CATEGORY / EXPIRY SUMMARY
# =========================================================
@router.get("/summary", response_model=ReportSummaryResponse)
def summary(
    as_of: date | None = Query(None),
    horizon_days: int = Query(settings.EXPIRY_HORIZON_DAYS, ge=0, le=3650),
    ledger: Ledger = Depends(get_ledger),
    role: Role = Depends(get_current_role),
):
    products = ledger.snapshot()
    as_of = as_of or date.today()

    return {
        "as_of": as_of,
        "horizon_days": horizon_days,
        "categories": [
            {"name": name, "value": value}
            for name, value in reports.by_category(products).items()
        ],
        "expired": [to_response(p, role) for p in reports.expired(products, as_of)],
        "expiring_soon": [
            to_response(p, role)
            for p in reports.expiring_within(products, as_of, horizon_days)
        ],
        "recent": [to_response(p, role) for p in list(reversed(products))[:RECENT_SIZE]],
    }


@router.get("/alerts", response_model=list[AlertResponse])
def stock_alerts(
    as_of: date | None = Query(None),
    ledger: Ledger = Depends(get_ledger),
):
    return reports.alerts(
        ledger.snapshot(),
        as_of or date.today(),
        settings.EXPIRY_HORIZON_DAYS,
    )


# =========================================================
# VALUATION (ADMIN)
# =========================================================
@router.get("/valuation", response_model=ValuationResponse)
def valuation(
    ledger: Ledger = Depends(get_ledger),
    role: Role = Depends(get_admin_role),
):
    return {
        "total_cost_value": ledger.total_cost_value(),
        "total_inventory_value": ledger.total_inventory_value(),
        "potential_profit": ledger.potential_profit(),
    }
