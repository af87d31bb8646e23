# =========================================================
# STOCK TRANSACTIONS
#
# Inbound / outbound entries (typed in by hand or read from a
# document) and location transfers, expressed as ledger
# adjustments and upserts.
# =========================================================

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Sequence

from smartware.core.ledger import Ledger, ProductNotFoundError
from smartware.models.product import LocationPatch, Product, ProductCandidate


class TxType(str, Enum):
    IN = "IN"
    OUT = "OUT"
    TRANSFER = "TRANSFER"


@dataclass
class StockEntry:
    name: str
    quantity: int
    sku: str | None = None
    category: str | None = None
    price: Decimal | None = None
    cost: Decimal | None = None
    lot: str | None = None
    expiry_date: date | None = None


def signed_quantity(quantity: int, tx_type: TxType) -> int:
    if tx_type == TxType.OUT:
        return -quantity
    return quantity


def post_entries(
    ledger: Ledger,
    entries: Sequence[StockEntry],
    tx_type: TxType,
    default_category: str,
) -> list[Product]:
    if tx_type == TxType.TRANSFER:
        raise ValueError("Transfers move stock between locations, use transfer()")

    results = []

    with ledger.batch() as txn:
        for entry in entries:
            delta = signed_quantity(entry.quantity, tx_type)
            index = txn.index_of(entry.sku) if entry.sku else -1

            # Matched record is updated in place
            if index > -1:
                if entry.lot or entry.expiry_date:
                    txn.merge_at(index, ProductCandidate(
                        lot=entry.lot,
                        expiry_date=entry.expiry_date,
                    ))
                results.append(txn.apply_adjustment_at(index, delta))
                continue

            results.append(txn.upsert_record(ProductCandidate(
                sku=entry.sku,
                name=entry.name,
                category=entry.category or default_category,
                price=entry.price or Decimal("0"),
                cost=entry.cost or Decimal("0"),
                quantity=max(0, delta),
                lot=entry.lot,
                expiry_date=entry.expiry_date,
            )))

    return results


def transfer(ledger: Ledger, ref: str, location: LocationPatch) -> Product:
    with ledger.batch() as txn:
        index = txn.index_of(ref)
        if index == -1:
            raise ProductNotFoundError(ref)

        return txn.merge_at(index, ProductCandidate(location=location))
