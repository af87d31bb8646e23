from decimal import Decimal

import pytest

from smartware.core.ledger import Ledger, ProductNotFoundError
from smartware.models.product import (
    DEFAULT_BOX,
    DEFAULT_SHELF,
    DEFAULT_TIER,
    DEFAULT_WAREHOUSE,
    LocationPatch,
    Product,
    ProductCandidate,
)


def test_adjustment_adds_to_quantity(ledger):
    product = ledger.apply_adjustment("MILK-1", 7)

    assert product.quantity == 10
    assert ledger.find("MILK-1").quantity == 10


def test_adjustment_clamps_at_zero(ledger):
    product = ledger.apply_adjustment("MILK-1", -10)

    assert product.quantity == 0


def test_adjustment_leaves_other_fields(ledger):
    before = ledger.find("RICE-5")
    after = ledger.apply_adjustment("RICE-5", -5)

    assert after.model_dump(exclude={"quantity"}) == before.model_dump(exclude={"quantity"})


def test_adjustment_finds_by_id(ledger):
    product = ledger.apply_adjustment("p-yogurt", 3)

    assert product.sku == "YOG-4"
    assert product.quantity == 15


def test_adjustment_unknown_product(ledger):
    with pytest.raises(ProductNotFoundError):
        ledger.apply_adjustment("NOPE", 1)


def test_upsert_merges_into_existing_record(ledger):
    product = ledger.upsert_record(ProductCandidate(sku="MILK-1", quantity=20, lot="L02"))

    assert product.id == "p-milk"
    assert product.quantity == 20
    assert product.lot == "L02"
    assert product.name == "Sữa tươi Vinamilk 1L"
    assert product.price == Decimal("32000")
    assert len(ledger) == 3


def test_upsert_clamps_negative_quantity(ledger):
    product = ledger.upsert_record(ProductCandidate(sku="MILK-1", quantity=-4))

    assert product.quantity == 0


def test_upsert_without_quantity_keeps_existing(ledger):
    product = ledger.upsert_record(ProductCandidate(id="p-rice", name="Gạo ST25 túi 5kg"))

    assert product.quantity == 40
    assert product.name == "Gạo ST25 túi 5kg"


def test_upsert_merges_location_per_field(ledger):
    product = ledger.upsert_record(
        ProductCandidate(sku="RICE-5", location=LocationPatch(box="Hộp 09"))
    )

    assert product.location.warehouse == "Kho A"
    assert product.location.shelf == "Kệ 02"
    assert product.location.box == "Hộp 09"


def test_upsert_never_changes_id(ledger):
    product = ledger.upsert_record(ProductCandidate(sku="MILK-1", id="other", quantity=1))

    assert product.id == "p-milk"


def test_sku_match_takes_precedence_over_id():
    ledger = Ledger([
        Product(id="1", sku="A", name="first"),
        Product(id="2", sku="B", name="second"),
    ])

    ledger.upsert_record(ProductCandidate(sku="A", id="2", quantity=9))

    first, second = ledger.snapshot()
    assert first.quantity == 9
    assert second.quantity == 0
    assert len(ledger) == 2


def test_sku_match_with_unknown_id_updates_existing():
    ledger = Ledger([Product(id="1", sku="A", name="first")])

    ledger.upsert_record(ProductCandidate(sku="A", id="2", quantity=4))

    assert len(ledger) == 1
    assert ledger.snapshot()[0].id == "1"
    assert ledger.snapshot()[0].quantity == 4


def test_only_first_match_is_updated():
    ledger = Ledger([
        Product(id="1", sku="DUP", name="first"),
        Product(id="2", sku="DUP", name="second"),
    ])

    ledger.upsert_record(ProductCandidate(sku="DUP", quantity=5))

    first, second = ledger.snapshot()
    assert first.quantity == 5
    assert second.quantity == 0


def test_new_record_defaults():
    ledger = Ledger()

    product = ledger.upsert_record(ProductCandidate(name="X", quantity=5))

    assert product.id
    assert product.sku.startswith("SKU-")
    assert product.quantity == 5
    assert product.location.warehouse == DEFAULT_WAREHOUSE
    assert product.location.shelf == DEFAULT_SHELF
    assert product.location.tier == DEFAULT_TIER
    assert product.location.box == DEFAULT_BOX
    assert product.min_stock == 5
    assert product.max_stock == 100


def test_new_records_get_distinct_ids():
    ledger = Ledger()

    a = ledger.upsert_record(ProductCandidate(name="A", quantity=1))
    b = ledger.upsert_record(ProductCandidate(name="B", quantity=1))

    assert a.id != b.id
    assert a.sku != b.sku


def test_new_record_uses_ledger_stock_thresholds():
    ledger = Ledger(min_stock=2, max_stock=20)

    product = ledger.upsert_record(ProductCandidate(name="X", quantity=1))

    assert product.min_stock == 2
    assert product.max_stock == 20


def test_new_records_are_appended(ledger):
    ledger.upsert_record(ProductCandidate(sku="NEW-1", name="New", quantity=1))

    assert ledger.snapshot()[-1].sku == "NEW-1"


def test_upsert_is_idempotent(ledger):
    candidate = ProductCandidate(sku="SALT-1", name="Muối", quantity=8, category="Gia vị")

    ledger.upsert_record(candidate)
    once = ledger.snapshot()
    ledger.upsert_record(candidate)

    assert ledger.snapshot() == once


def test_batch_matches_against_evolving_state():
    ledger = Ledger()

    ledger.upsert([
        ProductCandidate(sku="N", name="New", quantity=2),
        ProductCandidate(sku="N", quantity=6),
    ])

    assert len(ledger) == 1
    assert ledger.snapshot()[0].quantity == 6


def test_batch_is_published_once(stock):
    published = []
    ledger = Ledger(stock, on_change=published.append)

    ledger.upsert([
        ProductCandidate(sku="MILK-1", quantity=1),
        ProductCandidate(sku="RICE-5", quantity=2),
        ProductCandidate(sku="TEA-1", name="Trà", quantity=3),
    ])

    assert len(published) == 1
    assert len(published[0]) == 4


def test_failed_batch_publishes_nothing(ledger):
    before = ledger.snapshot()

    with pytest.raises(ProductNotFoundError):
        with ledger.batch() as txn:
            txn.apply_adjustment("MILK-1", 50)
            txn.apply_adjustment("NOPE", 1)

    assert ledger.snapshot() is before


def test_readers_do_not_see_staged_changes(ledger):
    with ledger.batch() as txn:
        txn.apply_adjustment("MILK-1", 50)
        assert ledger.find("MILK-1").quantity == 3

    assert ledger.find("MILK-1").quantity == 53


def test_empty_batch_does_not_notify(stock):
    published = []
    ledger = Ledger(stock, on_change=published.append)

    with ledger.batch():
        pass

    assert published == []


def test_listener_failure_keeps_published_state(stock, caplog):
    def broken_store(products):
        raise RuntimeError("disk full")

    ledger = Ledger(stock, on_change=broken_store)

    product = ledger.apply_adjustment("MILK-1", 2)

    assert product.quantity == 5
    assert ledger.find("MILK-1").quantity == 5
    assert "disk full" in caplog.text


def test_adjustment_at_position_ignores_sku_lookalikes():
    ledger = Ledger([
        Product(id="X1", sku="S1", name="first", quantity=10),
        Product(id="b", sku="X1", name="second", quantity=10),
    ])

    with ledger.batch() as txn:
        index = txn.index_of("S1")
        txn.apply_adjustment_at(index, 5)

    first, second = ledger.snapshot()
    assert first.quantity == 15
    assert second.quantity == 10


def test_quantity_never_negative_after_mixed_updates(ledger):
    ledger.apply_adjustment("MILK-1", -100)
    ledger.upsert_record(ProductCandidate(sku="RICE-5", quantity=-1))
    ledger.upsert_record(ProductCandidate(name="Z", quantity=-7))

    assert all(p.quantity >= 0 for p in ledger.snapshot())


def test_total_inventory_value():
    ledger = Ledger([
        Product(id="1", sku="A", name="a", price=Decimal("10"), quantity=2),
        Product(id="2", sku="B", name="b", price=Decimal("5"), quantity=3),
    ])

    assert ledger.total_inventory_value() == 35
