import json
import random

import pytest

from cart import CART_KEY, CartStore
from storage import MemoryStorage


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return CartStore(storage)


def test_add_creates_line_and_persists(store, storage):
    assert store.add("  Bee Plush ", "18") is True

    line = store.get("Bee Plush")
    assert line.qty == 1
    assert line.price == 18.0
    assert json.loads(storage.get_item(CART_KEY)) == {
        "Bee Plush": {"name": "Bee Plush", "price": 18.0, "qty": 1}
    }


@pytest.mark.parametrize("name,price", [
    ("", 10),
    ("   ", 10),
    (None, 10),
    ("Frog", "abc"),
    ("Frog", float("nan")),
    ("Frog", float("inf")),
    ("Frog", None),
    ("Frog", -5),
    ("Frog", "-0.5"),
])
def test_add_rejects_silently(store, storage, name, price):
    assert store.add(name, price) is False
    assert len(store) == 0
    assert storage.get_item(CART_KEY) is None


def test_second_add_keeps_first_price(store):
    store.add("Frog", 12)
    store.add("Frog", 99)

    line = store.get("Frog")
    assert line.qty == 2
    assert line.price == 12
    assert store.total == 24


def test_decrement_to_zero_removes_line(store, storage):
    store.add("Frog", 12)
    store.decrement("Frog")

    assert "Frog" not in store
    assert json.loads(storage.get_item(CART_KEY)) == {}


def test_increment_and_decrement_unknown_name_is_noop(store, storage):
    store.increment("Ghost")
    store.decrement("Ghost")
    assert len(store) == 0
    assert storage.get_item(CART_KEY) is None


def test_random_sequences_keep_totals_consistent(storage):
    rng = random.Random(7)
    store = CartStore(storage)
    catalog = {"Bee": 18, "Frog": 12.5, "Octopus": 25, "Mushroom": 9}

    for _ in range(300):
        name = rng.choice(list(catalog))
        op = rng.choice(["add", "inc", "dec"])
        if op == "add":
            store.add(name, catalog[name])
        elif op == "inc":
            store.increment(name)
        else:
            store.decrement(name)

        lines = store.lines()
        assert all(line.qty >= 1 for line in lines)
        assert store.count == sum(line.qty for line in lines)
        assert store.total == pytest.approx(sum(catalog[line.name] * line.qty for line in lines))


def test_reload_from_storage(storage):
    first = CartStore(storage)
    first.add("Bee", 18)
    first.add("Bee", 18)
    first.add("Frog", 12)

    second = CartStore(storage)
    assert second.count == 3
    assert second.total == 48
    assert second.to_dict() == first.to_dict()


def test_corrupt_storage_loads_empty():
    store = CartStore(MemoryStorage({CART_KEY: "{not json"}))
    assert len(store) == 0
    assert store.count == 0


def test_stored_lines_with_no_quantity_are_dropped():
    raw = json.dumps({
        "Bee": {"name": "Bee", "price": 18, "qty": 2},
        "Frog": {"name": "Frog", "price": 12, "qty": 0},
        "Moth": {"name": "Moth", "price": "x", "qty": 1},
    })
    store = CartStore(MemoryStorage({CART_KEY: raw}))
    assert [line.name for line in store.lines()] == ["Bee"]


def test_clear_removes_storage_key(store, storage):
    store.add("Bee", 18)
    store.clear()
    assert len(store) == 0
    assert storage.get_item(CART_KEY) is None


@pytest.mark.parametrize("raw", [
    '{"Bee": {"name": "Bee", "price": 18, "qty": Infinity}}',
    '{"Bee": {"name": "Bee", "price": 18, "qty": NaN}}',
    '{"Bee": {"name": "Bee", "price": 1e999, "qty": 1}}',
    '{"Bee": {"name": "Bee", "price": -3, "qty": 1}}',
])
def test_non_finite_or_negative_stored_values_are_dropped(raw):
    store = CartStore(MemoryStorage({CART_KEY: raw}))
    assert len(store) == 0


def test_zero_price_is_allowed(store):
    assert store.add("Sample Swatch", 0) is True
    assert store.total == 0


def test_stored_line_is_keyed_by_storage_key():
    raw = json.dumps({"Bee": {"name": "Bumble Bee", "price": 18, "qty": 1}})
    store = CartStore(MemoryStorage({CART_KEY: raw}))

    line = store.lines()[0]
    assert line.name == "Bee"
    store.increment(line.name)
    assert store.get("Bee").qty == 2
