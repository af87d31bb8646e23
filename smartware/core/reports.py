# =========================================================
# STOCK REPORT CALCULATIONS
#
# Pure functions over a snapshot of products. Nothing here is
# cached: every dashboard/report request recomputes from the
# current ledger snapshot.
# =========================================================

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterable, Sequence

from smartware.models.product import Product


class AlertType(str, Enum):
    LOW_STOCK = "LOW_STOCK"
    OVER_STOCK = "OVER_STOCK"
    EXPIRING_SOON = "EXPIRING_SOON"
    EXPIRED = "EXPIRED"


class StockStatus(str, Enum):
    ALL = "all"
    LOW = "low"
    EXPIRED = "expired"
    EXPIRING = "expiring"


@dataclass(frozen=True)
class StockAlert:
    type: AlertType
    product_id: str
    message: str


# =========================================================
# VALUATION
# =========================================================
def total_inventory_value(products: Iterable[Product]) -> Decimal:
    return sum((p.price * p.quantity for p in products), Decimal("0"))


def total_cost_value(products: Iterable[Product]) -> Decimal:
    return sum((p.cost * p.quantity for p in products), Decimal("0"))


def potential_profit(products: Iterable[Product]) -> Decimal:
    return sum(((p.price - p.cost) * p.quantity for p in products), Decimal("0"))


# =========================================================
# STOCK LEVELS
# =========================================================
def is_low_stock(product: Product) -> bool:
    return product.quantity < product.min_stock


def low_stock_count(products: Iterable[Product]) -> int:
    return sum(1 for p in products if is_low_stock(p))


def by_category(products: Iterable[Product]) -> dict[str, int]:
    totals: dict[str, int] = {}
    for p in products:
        totals[p.category] = totals.get(p.category, 0) + p.quantity
    return totals


# =========================================================
# EXPIRY
# =========================================================
def is_expired(product: Product, as_of: date) -> bool:
    return product.expiry_date is not None and product.expiry_date < as_of


def is_expiring_within(product: Product, as_of: date, horizon_days: int) -> bool:
    if product.expiry_date is None:
        return False
    return as_of <= product.expiry_date <= as_of + timedelta(days=horizon_days)


def expired(products: Iterable[Product], as_of: date) -> list[Product]:
    return [p for p in products if is_expired(p, as_of)]


def expiring_within(products: Iterable[Product], as_of: date, horizon_days: int) -> list[Product]:
    return [p for p in products if is_expiring_within(p, as_of, horizon_days)]


def alerts(products: Iterable[Product], as_of: date, horizon_days: int) -> list[StockAlert]:
    results = []

    for p in products:
        if is_low_stock(p):
            results.append(StockAlert(
                AlertType.LOW_STOCK,
                p.id,
                f"{p.name}: {p.quantity} left, minimum is {p.min_stock}",
            ))
        elif p.quantity > p.max_stock:
            results.append(StockAlert(
                AlertType.OVER_STOCK,
                p.id,
                f"{p.name}: {p.quantity} on hand, maximum is {p.max_stock}",
            ))

        if is_expired(p, as_of):
            results.append(StockAlert(
                AlertType.EXPIRED,
                p.id,
                f"{p.name}: expired on {p.expiry_date.isoformat()}",
            ))
        elif is_expiring_within(p, as_of, horizon_days):
            results.append(StockAlert(
                AlertType.EXPIRING_SOON,
                p.id,
                f"{p.name}: expires on {p.expiry_date.isoformat()}",
            ))

    return results


# =========================================================
# INVENTORY LIST FILTERING
# =========================================================
def matches_status(product: Product, status: StockStatus, as_of: date, horizon_days: int) -> bool:
    if status == StockStatus.LOW:
        return is_low_stock(product)
    if status == StockStatus.EXPIRED:
        return is_expired(product, as_of)
    if status == StockStatus.EXPIRING:
        return is_expired(product, as_of) or is_expiring_within(product, as_of, horizon_days)
    return True


def search(
    products: Sequence[Product],
    term: str | None,
    status: StockStatus,
    as_of: date,
    horizon_days: int,
) -> list[Product]:
    needle = (term or "").strip().lower()

    return [
        p for p in products
        if (not needle or needle in p.name.lower() or needle in p.sku.lower())
        and matches_status(p, status, as_of, horizon_days)
    ]


def status_counts(products: Sequence[Product], as_of: date, horizon_days: int) -> dict[str, int]:
    return {
        status.value: sum(1 for p in products if matches_status(p, status, as_of, horizon_days))
        for status in StockStatus
    }
