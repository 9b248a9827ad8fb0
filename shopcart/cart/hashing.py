"""
shopcart/cart/hashing.py
------------------------
Variant identity for cart items.

A variant is an item id plus a set of attributes (color, size, price...).
Two attribute sets with the same key/value pairs must always land on the
same variant, no matter how the caller built the mapping, so the set is
normalised and serialised with sorted keys before it is digested.
"""
import hashlib
import json


def normalize_attributes(attributes) -> dict:
    """
    Return a clean ``{str: str}`` copy of `attributes`.

    Falsy values (None, '', False, 0) are dropped: an unselected form
    field must not create a distinct variant. Remaining values are
    stringified so that 349 and '349' are the same attribute.
    """
    if not attributes:
        return {}

    return {
        str(key): str(value)
        for key, value in dict(attributes).items()
        if value
    }


def canonical_attributes(attributes) -> str:
    """Compact JSON for the normalised set, keys sorted."""
    return json.dumps(
        normalize_attributes(attributes),
        sort_keys=True,
        separators=(',', ':'),
        ensure_ascii=False,
    )


def variant_hash(attributes=None) -> str:
    """32-char md5 hex digest identifying the attribute set."""
    return hashlib.md5(canonical_attributes(attributes).encode('utf-8')).hexdigest()


NO_VARIANT_HASH = variant_hash({})
