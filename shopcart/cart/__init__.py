"""Variant-aware cart state: hashing, store, codecs, adapters and engine."""
from shopcart.cart.adapters import (
    CookieAdapter, MemoryAdapter, PersistenceAdapter, SessionAdapter,
)
from shopcart.cart.codecs import DelimitedCodec, JsonCodec, PersistenceCodec, get_codec
from shopcart.cart.engine import CartEngine, cart_identity
from shopcart.cart.errors import CartError, CartResult, PersistenceError, Reason
from shopcart.cart.hashing import NO_VARIANT_HASH, normalize_attributes, variant_hash
from shopcart.cart.models import CartConfiguration, CodecFormat, ItemVariant, PersistenceMode
from shopcart.cart.store import ItemStore

__all__ = [
    'CartConfiguration',
    'CartEngine',
    'CartError',
    'CartResult',
    'CodecFormat',
    'CookieAdapter',
    'DelimitedCodec',
    'ItemStore',
    'ItemVariant',
    'JsonCodec',
    'MemoryAdapter',
    'NO_VARIANT_HASH',
    'PersistenceAdapter',
    'PersistenceCodec',
    'PersistenceError',
    'PersistenceMode',
    'Reason',
    'SessionAdapter',
    'cart_identity',
    'get_codec',
    'normalize_attributes',
    'variant_hash',
]
