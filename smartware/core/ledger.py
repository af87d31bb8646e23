# =========================================================
# STOCK LEDGER
#
# Single owner of the product collection. Every change goes
# through upsert_record / apply_adjustment, either directly or
# inside a batch(). A batch works on a staging copy and publishes
# the new tuple in one swap, so readers never see half a batch.
#
# Matching: SKU first, then id. Within one batch, later updates
# match against records inserted earlier in the same batch.
# =========================================================

import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Sequence

from smartware.core import reports
from smartware.models.product import (
    DEFAULT_CATEGORY,
    Location,
    Product,
    ProductCandidate,
)

logger = logging.getLogger("smartware")

ChangeListener = Callable[[Sequence[Product]], None]


class LedgerError(Exception):
    pass


class ProductNotFoundError(LedgerError):
    def __init__(self, ref: str):
        super().__init__(f"Product not found: {ref}")
        self.ref = ref


def new_product_id() -> str:
    return uuid.uuid4().hex


def new_sku() -> str:
    return f"SKU-{uuid.uuid4().hex[:8].upper()}"


def find_index(products: Sequence[Product], sku: str | None = None, product_id: str | None = None) -> int:
    if sku:
        for index, product in enumerate(products):
            if product.sku == sku:
                return index
    if product_id:
        for index, product in enumerate(products):
            if product.id == product_id:
                return index
    return -1


def merge(existing: Product, candidate: ProductCandidate) -> Product:
    changes = {
        field: value
        for field, value in candidate
        if value is not None and field not in {"id", "sku", "location", "quantity"}
    }

    if candidate.sku:
        changes["sku"] = candidate.sku

    if candidate.location is not None:
        location_changes = candidate.location.model_dump(exclude_none=True)
        changes["location"] = existing.location.model_copy(update=location_changes)

    quantity = candidate.quantity if candidate.quantity is not None else existing.quantity
    changes["quantity"] = max(0, quantity)

    return existing.model_copy(update=changes)


def create(candidate: ProductCandidate, min_stock: int = 5, max_stock: int = 100) -> Product:
    location = Location()
    if candidate.location is not None:
        location = location.model_copy(update=candidate.location.model_dump(exclude_none=True))

    return Product(
        id=candidate.id or new_product_id(),
        sku=candidate.sku or new_sku(),
        name=candidate.name or "",
        category=candidate.category or DEFAULT_CATEGORY,
        price=candidate.price if candidate.price is not None else Decimal("0"),
        cost=candidate.cost if candidate.cost is not None else Decimal("0"),
        quantity=max(0, candidate.quantity or 0),
        min_stock=candidate.min_stock if candidate.min_stock is not None else min_stock,
        max_stock=candidate.max_stock if candidate.max_stock is not None else max_stock,
        lot=candidate.lot,
        expiry_date=candidate.expiry_date,
        location=location,
        last_supplier=candidate.last_supplier,
    )


class LedgerBatch:
    """Staging view handed out by ``Ledger.batch()``."""

    def __init__(self, products: Iterable[Product], min_stock: int, max_stock: int):
        self.products = list(products)
        self._min_stock = min_stock
        self._max_stock = max_stock
        self.changed = False

    def index_of(self, ref: str) -> int:
        return find_index(self.products, sku=ref, product_id=ref)

    def find(self, ref: str) -> Product | None:
        index = self.index_of(ref)
        return self.products[index] if index > -1 else None

    def apply_adjustment(self, ref: str, delta: int) -> Product:
        index = self.index_of(ref)
        if index == -1:
            raise ProductNotFoundError(ref)

        return self.apply_adjustment_at(index, delta)

    def apply_adjustment_at(self, index: int, delta: int) -> Product:
        existing = self.products[index]
        updated = existing.model_copy(update={"quantity": max(0, existing.quantity + delta)})
        self.products[index] = updated
        self.changed = True
        return updated

    def upsert_record(self, candidate: ProductCandidate) -> Product:
        index = find_index(self.products, sku=candidate.sku, product_id=candidate.id)

        if index > -1:
            return self.merge_at(index, candidate)

        record = create(candidate, self._min_stock, self._max_stock)
        self.products.append(record)
        self.changed = True
        return record

    def merge_at(self, index: int, candidate: ProductCandidate) -> Product:
        record = merge(self.products[index], candidate)
        self.products[index] = record
        self.changed = True
        return record


class Ledger:
    def __init__(
        self,
        products: Iterable[Product] = (),
        on_change: ChangeListener | None = None,
        min_stock: int = 5,
        max_stock: int = 100,
    ):
        self._products: tuple[Product, ...] = tuple(products)
        self._on_change = on_change
        self._min_stock = min_stock
        self._max_stock = max_stock
        self._lock = threading.Lock()

    def snapshot(self) -> tuple[Product, ...]:
        return self._products

    def __len__(self):
        return len(self._products)

    def find(self, ref: str) -> Product | None:
        products = self._products
        index = find_index(products, sku=ref, product_id=ref)
        return products[index] if index > -1 else None

    @contextmanager
    def batch(self):
        with self._lock:
            staging = LedgerBatch(self._products, self._min_stock, self._max_stock)
            yield staging

            if not staging.changed:
                return

            self._products = tuple(staging.products)

            # persisted in publication order
            if self._on_change is not None:
                try:
                    self._on_change(self._products)
                except Exception as e:
                    logger.error(f"Ledger change listener failed: {e}")

        logger.info(f"Ledger updated: {len(self._products)} products")

    # =========================================================
    # WRITE OPERATIONS
    # =========================================================
    def apply_adjustment(self, ref: str, delta: int) -> Product:
        with self.batch() as txn:
            return txn.apply_adjustment(ref, delta)

    def upsert_record(self, candidate: ProductCandidate) -> Product:
        with self.batch() as txn:
            return txn.upsert_record(candidate)

    def upsert(self, updates: ProductCandidate | Sequence[ProductCandidate]) -> list[Product]:
        if isinstance(updates, ProductCandidate):
            updates = [updates]

        with self.batch() as txn:
            return [txn.upsert_record(candidate) for candidate in updates]

    # =========================================================
    # DERIVED READS
    # =========================================================
    def total_inventory_value(self) -> Decimal:
        return reports.total_inventory_value(self._products)

    def total_cost_value(self) -> Decimal:
        return reports.total_cost_value(self._products)

    def potential_profit(self) -> Decimal:
        return reports.potential_profit(self._products)

    def low_stock_count(self) -> int:
        return reports.low_stock_count(self._products)

    def expired(self, as_of: date) -> list[Product]:
        return reports.expired(self._products, as_of)

    def expiring_within(self, as_of: date, horizon_days: int) -> list[Product]:
        return reports.expiring_within(self._products, as_of, horizon_days)

    def by_category(self) -> dict[str, int]:
        return reports.by_category(self._products)
