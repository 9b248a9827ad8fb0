"""
shopcart/cart/store.py
----------------------
In-memory cart contents.

Structure:
{
    "<item_id>": [ItemVariant, ItemVariant, ...],   ← insertion order kept
    ...
}

Rules enforced here:
  - variant hashes are unique within one item id
  - at most `cart_max_item` distinct item ids (0 = unlimited)
  - variant quantity is clamped to `item_max_quantity` (0 = no clamp)
  - an item id whose variant list empties is removed

The store never persists anything itself; CartEngine does that after
every successful mutation.
"""
from __future__ import annotations
from decimal import Decimal, InvalidOperation

from shopcart.cart.errors import CartResult, Reason
from shopcart.cart.hashing import normalize_attributes, variant_hash
from shopcart.cart.models import ItemVariant


class ItemStore:

    def __init__(self, cart_max_item: int = 0, item_max_quantity: int = 0):
        self.cart_max_item     = cart_max_item
        self.item_max_quantity = item_max_quantity
        self._items: dict[str, list[ItemVariant]] = {}

    # ── Internals ─────────────────────────────────────────────────

    def _clamp(self, quantity: int) -> int:
        if self.item_max_quantity and quantity > self.item_max_quantity:
            return self.item_max_quantity
        return quantity

    def _find(self, item_id: str, hash_: str) -> ItemVariant | None:
        for variant in self._items.get(item_id, []):
            if variant.hash == hash_:
                return variant
        return None

    # ── Write ─────────────────────────────────────────────────────

    def add(self, item_id, quantity: int = 1, attributes=None) -> CartResult:
        """
        Add `quantity` units of the (item_id, attributes) variant.
        An existing variant is incremented; the new total is clamped once.
        """
        key        = str(item_id)
        attributes = normalize_attributes(attributes)
        hash_      = variant_hash(attributes)

        if (self.cart_max_item
                and key not in self._items
                and len(self._items) >= self.cart_max_item):
            return CartResult.failure(
                Reason.LIMIT_EXCEEDED,
                f'Cart is limited to {self.cart_max_item} item(s); cannot add item {key}.',
            )

        existing = self._find(key, hash_)
        if existing is not None:
            existing.quantity = self._clamp(existing.quantity + quantity)
        else:
            self._items.setdefault(key, []).append(ItemVariant(
                item_id=key,
                quantity=self._clamp(quantity),
                attributes=attributes,
                hash=hash_,
            ))
        return CartResult.success()

    def update(self, item_id, quantity: int, attributes=None) -> CartResult:
        """Set (not increment) a variant's quantity. 0 removes the variant."""
        if quantity == 0:
            return self.remove(item_id, attributes)

        key      = str(item_id)
        existing = self._find(key, variant_hash(attributes))
        if existing is None:
            return CartResult.failure(
                Reason.NOT_FOUND, f'Item {key} with the given attributes is not in the cart.'
            )

        existing.quantity = self._clamp(quantity)
        return CartResult.success()

    def remove(self, item_id, attributes=None) -> CartResult:
        """
        Remove one variant, or every variant of `item_id` when no
        (non-empty) attributes are given.
        """
        key = str(item_id)
        if key not in self._items:
            return CartResult.failure(Reason.NOT_FOUND, f'Item {key} is not in the cart.')

        attributes = normalize_attributes(attributes)
        if not attributes:
            del self._items[key]
            return CartResult.success()

        hash_    = variant_hash(attributes)
        variants = self._items[key]
        for index, variant in enumerate(variants):
            if variant.hash == hash_:
                del variants[index]
                if not variants:
                    del self._items[key]
                return CartResult.success()

        return CartResult.failure(
            Reason.NOT_FOUND, f'Item {key} with the given attributes is not in the cart.'
        )

    def clear(self) -> CartResult:
        self._items = {}
        return CartResult.success()

    def restore(self, variant: ItemVariant) -> bool:
        """
        Insert an already-built variant without limit checks (used when
        decoding persisted state). Returns False for a duplicate hash.
        """
        if self._find(variant.item_id, variant.hash) is not None:
            return False
        self._items.setdefault(variant.item_id, []).append(variant)
        return True

    # ── Read ──────────────────────────────────────────────────────

    def items(self) -> dict[str, list[ItemVariant]]:
        """Shallow snapshot of the mapping; variant lists are copied."""
        return {key: list(variants) for key, variants in self._items.items()}

    def variants(self):
        for variants in self._items.values():
            yield from variants

    def is_item_exists(self, item_id, attributes=None) -> bool:
        return self._find(str(item_id), variant_hash(attributes)) is not None

    def get_item(self, item_id, hash_: str | None = None) -> ItemVariant | None:
        """Variant by hash, or the first variant of `item_id` when no hash."""
        variants = self._items.get(str(item_id))
        if not variants:
            return None
        if hash_:
            return self._find(str(item_id), hash_)
        return variants[0]

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def total_item_count(self) -> int:
        """Number of variant records (not distinct item ids)."""
        return sum(len(variants) for variants in self._items.values())

    @property
    def total_quantity(self) -> int:
        return sum(variant.quantity for variant in self.variants())

    def attribute_sum(self, key: str = 'price') -> Decimal:
        """
        Sum of quantity × attribute value across all variants.
        Variants without the attribute, or with a non-numeric value,
        contribute zero.
        """
        total = Decimal('0')
        for variant in self.variants():
            raw = variant.attributes.get(key)
            if raw is None:
                continue
            try:
                value = Decimal(raw)
            except InvalidOperation:
                continue
            if not value.is_finite():
                continue
            total += value * variant.quantity
        return total

    # ── Dunder ────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ItemStore):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f'<ItemStore items={len(self._items)} variants={self.total_item_count}>'
