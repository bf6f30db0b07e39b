"""Tests for the in-memory record store."""
import pytest

from invoice_manager.record_store import Customer, Invoice, Product, RecordStore
from invoice_manager.record_store.records import record_type


@pytest.fixture
def store() -> RecordStore:
    store = RecordStore()
    store.add_invoices([Invoice(id="i1", customer_name="A", total_amount=10)])
    store.add_products([Product(id="p1", name="Widget", unit_price=5, quantity=2)])
    store.add_customers([Customer(id="c1", customer_name="A", total_amount=10)])
    return store


def test_default_merge_mode_replaces_whole_collection(store) -> None:
    store.add_products([Product(id="p2", name="Gadget")])

    assert [p.id for p in store.products] == ["p2"]
    assert [i.id for i in store.invoices] == ["i1"]


def test_append_mode_extends_collection() -> None:
    store = RecordStore(merge_mode="append")
    store.add_products([Product(id="p1", name="Widget")])
    store.add_products([Product(id="p2", name="Gadget")])

    assert [p.id for p in store.products] == ["p1", "p2"]


def test_invalid_merge_mode() -> None:
    with pytest.raises(ValueError):
        RecordStore(merge_mode="merge")


def test_update_replaces_matching_record(store) -> None:
    assert store.update_customer(Customer(id="c1", customer_name="A", total_amount=99))
    assert store.get("customers", "c1").total_amount == 99


def test_update_with_unknown_id_is_ignored(store) -> None:
    before = store.snapshot()

    assert store.update_product(Product(id="missing", name="Ghost")) is False
    assert store.snapshot() == before


def test_clear_touches_one_collection_only(store) -> None:
    store.clear_invoices()

    assert store.invoices == []
    assert len(store.products) == 1
    assert len(store.customers) == 1


def test_returned_records_are_copies(store) -> None:
    store.products[0].name = "Tampered"
    assert store.products[0].name == "Widget"


def test_rejects_records_of_another_kind(store) -> None:
    with pytest.raises(TypeError):
        store.add_products([Customer(id="c9")])


def test_unknown_kind() -> None:
    with pytest.raises(KeyError):
        record_type("suppliers")


def test_listeners_hear_each_changed_collection(store) -> None:
    changes = []
    unsubscribe = store.subscribe(changes.append)

    store.add_invoices([])
    store.update_product(Product(id="p1", name="Widget Pro"))
    store.update_product(Product(id="missing"))
    unsubscribe()
    store.clear_customers()

    assert changes == ["invoices", "products"]


def test_snapshot_uses_json_keys(store) -> None:
    snapshot = store.snapshot()

    assert snapshot["products"][0] == {
        "id": "p1", "name": "Widget", "quantity": 2, "unitPrice": 5,
        "tax": None, "priceWithTax": None, "discount": None,
    }
    assert len(store) == 3
