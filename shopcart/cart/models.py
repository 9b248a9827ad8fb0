"""
shopcart/cart/models.py
-----------------------
Plain data holders for the cart engine.

ItemVariant is one purchasable configuration of an item. The attribute
values are kept as strings so they survive any persistence format, and
are converted to Decimal only when totals are computed.
"""
from __future__ import annotations
import re
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum

from shopcart.cart.hashing import normalize_attributes, variant_hash


_UINT_RE = re.compile(r'^\d+$')

DEFAULT_COOKIE_MAX_AGE = timedelta(days=7)


def parse_uint(value, default=None):
    """
    Return `value` as a non-negative int, or `default` when it is not one.
    Accepts ints and digit-only strings. Booleans are rejected.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if value >= 0 else default
    if isinstance(value, str) and _UINT_RE.match(value.strip()):
        return int(value.strip())
    return default


class PersistenceMode(str, Enum):
    SESSION = 'session'
    COOKIE  = 'cookie'


class CodecFormat(str, Enum):
    JSON      = 'json'
    DELIMITED = 'delimited'


@dataclass
class ItemVariant:
    """One (item id, attribute set) entry with its quantity."""
    item_id:    str
    quantity:   int
    attributes: dict = field(default_factory=dict)
    hash:       str = ''

    def __post_init__(self):
        self.item_id    = str(self.item_id)
        self.attributes = normalize_attributes(self.attributes)
        if not self.hash:
            self.hash = variant_hash(self.attributes)

    def to_dict(self) -> dict:
        return {
            'id':         self.item_id,
            'quantity':   self.quantity,
            'hash':       self.hash,
            'attributes': dict(self.attributes),
        }


@dataclass
class CartConfiguration:
    """
    Limits and persistence choices for one cart.

    cart_max_item:     max distinct item ids (0 = unlimited)
    item_max_quantity: max quantity per variant (0 = unlimited)
    """
    cart_max_item:     int = 0
    item_max_quantity: int = 0
    persistence_mode:  PersistenceMode = PersistenceMode.SESSION
    codec:             CodecFormat = CodecFormat.JSON
    cookie_max_age:    timedelta = DEFAULT_COOKIE_MAX_AGE
    cookie_path:       str = '/'

    def __post_init__(self):
        # Non-conforming limits fall back to "unlimited".
        self.cart_max_item     = parse_uint(self.cart_max_item, 0)
        self.item_max_quantity = parse_uint(self.item_max_quantity, 0)
        self.persistence_mode  = PersistenceMode(self.persistence_mode)
        self.codec             = CodecFormat(self.codec)
        if not isinstance(self.cookie_max_age, timedelta):
            self.cookie_max_age = timedelta(seconds=int(self.cookie_max_age))

    @classmethod
    def from_mapping(cls, mapping) -> CartConfiguration:
        """Build from a Flask config (or any dict) using the CART_* keys."""
        return cls(
            cart_max_item     = mapping.get('CART_MAX_ITEM', 0),
            item_max_quantity = mapping.get('ITEM_MAX_QUANTITY', 0),
            persistence_mode  = mapping.get('CART_PERSISTENCE', PersistenceMode.SESSION.value),
            codec             = mapping.get('CART_CODEC', CodecFormat.JSON.value),
            cookie_max_age    = mapping.get('CART_COOKIE_MAX_AGE', DEFAULT_COOKIE_MAX_AGE),
            cookie_path       = mapping.get('CART_COOKIE_PATH', '/'),
        )
