"""
shopcart/cart/engine.py
-----------------------
Public cart operations for one cart identity.

Usage:
    engine = CartEngine(SessionAdapter(), CartConfiguration(item_max_quantity=5),
                        cart_id=cart_identity('shop.example'))
    result = engine.add(100, 3, {'color': 'gold', 'price': '349.00'})
    if not result:
        flash(result.message, 'warning')

Every successful mutation is written back through the adapter before the
call returns. Business failures come back as a CartResult; a broken
adapter raises PersistenceError.

Concurrent requests on the same cart identity are not isolated: the last
write wins.
"""
from __future__ import annotations
import hashlib
import logging
from decimal import Decimal

from shopcart.cart.adapters import PersistenceAdapter
from shopcart.cart.codecs import PersistenceCodec, get_codec
from shopcart.cart.errors import CartResult, PersistenceError, Reason
from shopcart.cart.models import CartConfiguration, ItemVariant, parse_uint
from shopcart.cart.store import ItemStore

logger = logging.getLogger(__name__)


DEFAULT_CART_SEED = 'SimpleCart'


def cart_identity(seed: str | None = None) -> str:
    """Key under which one cart is persisted, e.g. '5f2b..._cart'."""
    seed = seed or DEFAULT_CART_SEED
    return hashlib.md5(seed.encode('utf-8')).hexdigest() + '_cart'


class CartEngine:

    def __init__(self, adapter: PersistenceAdapter,
                 config: CartConfiguration | None = None,
                 cart_id: str | None = None,
                 codec: PersistenceCodec | None = None):
        self.adapter = adapter
        self.config  = config or CartConfiguration()
        self.cart_id = cart_id or cart_identity()
        self.codec   = codec or get_codec(self.config.codec)
        self._errors: list[str] = []
        self.store   = ItemStore()
        self.reload()

    # ── Persistence ───────────────────────────────────────────────

    def _slot(self, suffix: str) -> str:
        return self.cart_id + suffix

    def reload(self) -> None:
        """Replace in-memory state with what the adapter holds."""
        self._persisted = {
            suffix: self.adapter.read_raw(self._slot(suffix))
            for suffix in self.codec.slots
        }
        self.store = self._decode(self._persisted)

    def _decode(self, payloads: dict) -> ItemStore:
        return self.codec.decode(
            payloads,
            cart_max_item=self.config.cart_max_item,
            item_max_quantity=self.config.item_max_quantity,
        )

    def _write(self) -> None:
        encoded = self.codec.encode(self.store)
        for suffix, payload in encoded.items():
            self.adapter.write_raw(self._slot(suffix), payload)
        self._persisted = encoded

    def _rollback(self) -> None:
        """
        Return memory and every slot to the last state that was fully
        written. Slots are rewritten best-effort; the caller re-raises.
        """
        self.store = self._decode(self._persisted)
        for suffix, payload in self._persisted.items():
            try:
                if payload is None:
                    self.adapter.delete_raw(self._slot(suffix))
                else:
                    self.adapter.write_raw(self._slot(suffix), payload)
            except PersistenceError as e:
                logger.error('Cart %s: could not restore slot %r: %s', self.cart_id, suffix, e)

    def _finish(self, result: CartResult, action: str) -> CartResult:
        if result:
            try:
                self._write()
            except PersistenceError:
                logger.error('Cart %s %s not persisted; rolling back', self.cart_id, action)
                self._rollback()
                raise
        else:
            self._record(result)
            logger.info('Cart %s %s rejected: %s', self.cart_id, action, result.message)
        return result

    def _record(self, result: CartResult) -> None:
        self._errors.append(result.message)

    def _coerce_quantity(self, value, action: str, allow_zero: bool) -> int:
        quantity = parse_uint(value)
        if quantity is None or (quantity == 0 and not allow_zero):
            self._record(CartResult.failure(
                Reason.VALIDATION_ERROR,
                f'{action}: quantity {value!r} is not a valid integer; using 1.',
            ))
            logger.warning('Cart %s %s: coerced quantity %r to 1', self.cart_id, action, value)
            return 1
        return quantity

    # ── Mutations ─────────────────────────────────────────────────

    def add(self, item_id, quantity=1, attributes=None) -> CartResult:
        quantity = self._coerce_quantity(quantity, 'add', allow_zero=False)
        return self._finish(self.store.add(item_id, quantity, attributes), 'add')

    def update(self, item_id, quantity=1, attributes=None) -> CartResult:
        quantity = self._coerce_quantity(quantity, 'update', allow_zero=True)
        return self._finish(self.store.update(item_id, quantity, attributes), 'update')

    def remove(self, item_id, attributes=None) -> CartResult:
        return self._finish(self.store.remove(item_id, attributes), 'remove')

    def clear(self) -> CartResult:
        """Empty the cart but keep an (empty) persisted slot."""
        return self._finish(self.store.clear(), 'clear')

    def destroy(self) -> CartResult:
        """Empty the cart and delete every persisted slot."""
        for suffix in self.codec.slots:
            self.adapter.delete_raw(self._slot(suffix))
        self._persisted = {suffix: None for suffix in self.codec.slots}
        return self.store.clear()

    # ── Limits ────────────────────────────────────────────────────

    def set_item_limit(self, limit) -> CartResult:
        """Maximum distinct items in the cart (0 = unlimited)."""
        value = parse_uint(limit)
        if value is None:
            result = CartResult.failure(
                Reason.VALIDATION_ERROR, f'Item limit {limit!r} must be a non-negative integer.'
            )
            self._record(result)
            return result
        self.config.cart_max_item = self.store.cart_max_item = value
        return CartResult.success()

    def set_quantity_limit(self, limit) -> CartResult:
        """Maximum quantity of one variant (0 = unlimited)."""
        value = parse_uint(limit)
        if value is None:
            result = CartResult.failure(
                Reason.VALIDATION_ERROR, f'Quantity limit {limit!r} must be a non-negative integer.'
            )
            self._record(result)
            return result
        self.config.item_max_quantity = self.store.item_max_quantity = value
        return CartResult.success()

    # ── Views ─────────────────────────────────────────────────────

    def get_items(self) -> dict[str, list[ItemVariant]]:
        return self.store.items()

    def is_empty(self) -> bool:
        return self.store.is_empty

    def get_total_item(self) -> int:
        return self.store.total_item_count

    def get_total_quantity(self) -> int:
        return self.store.total_quantity

    def get_attribute_total(self, attribute: str = 'price') -> Decimal:
        return self.store.attribute_sum(attribute)

    def is_item_exists(self, item_id, attributes=None) -> bool:
        return self.store.is_item_exists(item_id, attributes)

    def get_item(self, item_id, hash_: str | None = None) -> ItemVariant | None:
        return self.store.get_item(item_id, hash_)

    def get_attribute(self, item_id, key: str, hash_: str | None = None) -> str | None:
        """Attribute value of a variant (first variant when no hash), or None."""
        variant = self.store.get_item(item_id, hash_)
        if variant is None:
            return None
        return variant.attributes.get(key)

    @property
    def errors(self) -> list[str]:
        """Failure messages recorded by this engine, oldest first."""
        return list(self._errors)

    @property
    def last_error(self) -> str | None:
        return self._errors[-1] if self._errors else None
