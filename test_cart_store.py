"""
test_cart_store.py: Tests for the in-memory item store.
Run: pytest test_cart_store.py -v
"""
from decimal import Decimal

from shopcart.cart.errors import Reason
from shopcart.cart.hashing import variant_hash
from shopcart.cart.store import ItemStore


GOLD = {'color': 'gold', 'price': '349.00'}
RED  = {'color': 'red', 'price': '329.00'}


# ── 1. add / clamp ──────────────────────────────────────────────────────────

def test_add_then_add_again_clamps_to_item_max_quantity():
    store = ItemStore(cart_max_item=0, item_max_quantity=5)

    assert store.add(100, 3, GOLD)
    assert store.total_item_count == 1
    assert store.get_item(100).quantity == 3

    assert store.add(100, 4, GOLD)
    assert store.total_item_count == 1
    assert store.get_item(100).quantity == 5
    assert store.attribute_sum('price') == Decimal('1745.00')


def test_add_unlimited_quantity_sums():
    store = ItemStore()
    store.add('100', 2, GOLD)
    store.add(100, 7, {'price': '349.00', 'color': 'gold'})
    assert store.get_item('100').quantity == 9


def test_first_add_is_clamped_too():
    store = ItemStore(item_max_quantity=2)
    store.add(100, 10)
    assert store.get_item(100).quantity == 2


def test_different_attributes_make_separate_variants():
    store = ItemStore()
    store.add(100, 1, GOLD)
    store.add(100, 2, RED)
    assert len(store) == 1
    assert store.total_item_count == 2
    assert store.total_quantity == 3
    assert [v.attributes['color'] for v in store.items()['100']] == ['gold', 'red']


# ── 2. cart_max_item ────────────────────────────────────────────────────────

def test_cart_max_item_rejects_new_item_ids():
    store = ItemStore(cart_max_item=1)

    assert store.add(100, 1, {})
    result = store.add(101, 1, {})

    assert not result
    assert result.reason is Reason.LIMIT_EXCEEDED
    assert list(store.items()) == ['100']


def test_cart_max_item_still_allows_existing_item_variants():
    store = ItemStore(cart_max_item=1)
    store.add(100, 1, GOLD)
    assert store.add(100, 1, RED)
    assert store.add(100, 1, GOLD)
    assert store.total_item_count == 2


# ── 3. update ───────────────────────────────────────────────────────────────

def test_update_sets_quantity_and_clamps():
    store = ItemStore(item_max_quantity=5)
    store.add(100, 1, GOLD)

    assert store.update(100, 4, GOLD)
    assert store.get_item(100).quantity == 4

    assert store.update(100, 50, GOLD)
    assert store.get_item(100).quantity == 5


def test_update_to_zero_is_remove():
    a, b = ItemStore(), ItemStore()
    for store in (a, b):
        store.add(100, 1, GOLD)
        store.add(100, 1, RED)

    assert a.update(100, 0, GOLD)
    assert b.remove(100, GOLD)
    assert a == b
    assert not a.is_item_exists(100, GOLD)


def test_update_missing_variant_is_not_found():
    store = ItemStore()
    store.add(100, 1, GOLD)

    result = store.update(100, 2, RED)
    assert result.reason is Reason.NOT_FOUND
    assert store.update(999, 2).reason is Reason.NOT_FOUND
    assert store.get_item(100).quantity == 1


# ── 4. remove / clear ───────────────────────────────────────────────────────

def test_remove_without_attributes_removes_every_variant():
    store = ItemStore()
    store.add(100, 1, GOLD)
    store.add(100, 1, RED)
    store.add(101, 1)
    before = store.total_item_count

    assert store.remove(100)
    assert store.total_item_count == before - 2
    assert store.get_item(100) is None


def test_removing_last_variant_drops_the_item_key():
    store = ItemStore()
    store.add(100, 1, GOLD)
    store.remove(100, GOLD)
    assert '100' not in store.items()
    assert store.is_empty


def test_remove_unknown_is_not_found():
    store = ItemStore()
    store.add(100, 1, GOLD)
    assert store.remove(101).reason is Reason.NOT_FOUND
    assert store.remove(100, RED).reason is Reason.NOT_FOUND
    assert store.is_item_exists(100, GOLD)


def test_clear_always_succeeds():
    store = ItemStore()
    assert store.clear()
    store.add(100, 1)
    assert store.clear()
    assert store.is_empty
    assert store.total_quantity == 0


# ── 5. queries ──────────────────────────────────────────────────────────────

def test_get_item_by_hash_or_first():
    store = ItemStore()
    store.add(100, 1, GOLD)
    store.add(100, 2, RED)

    assert store.get_item(100).attributes['color'] == 'gold'
    assert store.get_item(100, variant_hash(RED)).quantity == 2
    assert store.get_item(100, 'no-such-hash') is None
    assert store.get_item(555) is None


def test_attribute_sum_ignores_missing_and_non_numeric_values():
    store = ItemStore()
    store.add(100, 2, {'price': '10.50'})
    store.add(101, 3, {'color': 'blue'})
    store.add(102, 1, {'price': 'call us'})
    assert store.attribute_sum('price') == Decimal('21.00')
    assert store.attribute_sum('weight') == Decimal('0')


def test_restore_rejects_duplicate_variants():
    from shopcart.cart.models import ItemVariant
    store = ItemStore()
    assert store.restore(ItemVariant(item_id=100, quantity=1, attributes=GOLD))
    assert not store.restore(ItemVariant(item_id=100, quantity=4, attributes=GOLD))
    assert store.get_item(100).quantity == 1
