"""
shopcart/cart/codecs.py
-----------------------
Turn an ItemStore into strings for a persisted slot, and back.

Two wire formats exist in deployed carts, so both are supported behind
one interface. A codec names the slots it needs (a suffix appended to
the cart id) and encodes into / decodes from a {suffix: payload} dict.

JSON (slot ""):
    {"100": [{"id": "100", "quantity": 3, "hash": "...",
              "attributes": {"color": "gold"}}], ...}

Delimited (slots "" and "_attributes"):
    items:       100,3;100,1;101,2
    attributes:  100,color,gold;100,color,red,1
A repeated item id is the next variant of that item. An attribute
segment may carry a trailing variant index; it defaults to 0.

Decoding never fails on bad data: a malformed record is logged and
dropped, the rest of the cart survives.
"""
from __future__ import annotations
import json
import logging
from abc import ABC, abstractmethod
from urllib.parse import quote, unquote

from shopcart.cart.models import CodecFormat, ItemVariant, parse_uint
from shopcart.cart.store import ItemStore

logger = logging.getLogger(__name__)


class PersistenceCodec(ABC):
    """Encode/decode contract shared by every wire format."""

    name:  str = ''
    slots: tuple[str, ...] = ('',)

    @abstractmethod
    def encode(self, store: ItemStore) -> dict[str, str]:
        """Return {slot_suffix: payload} for every slot."""

    @abstractmethod
    def decode(self, payloads: dict, cart_max_item: int = 0,
               item_max_quantity: int = 0) -> ItemStore:
        """Build a store from {slot_suffix: payload or None}."""

    def _skip(self, what: str, detail) -> None:
        logger.warning('Skipping malformed %s record (%s codec): %r', what, self.name, detail)


# ── JSON ──────────────────────────────────────────────────────────

class JsonCodec(PersistenceCodec):

    name  = CodecFormat.JSON.value
    slots = ('',)

    def encode(self, store: ItemStore) -> dict[str, str]:
        data = {
            item_id: [variant.to_dict() for variant in variants]
            for item_id, variants in store.items().items()
            if variants
        }
        return {'': json.dumps(data, separators=(',', ':'), ensure_ascii=False)}

    def decode(self, payloads: dict, cart_max_item: int = 0,
               item_max_quantity: int = 0) -> ItemStore:
        store = ItemStore(cart_max_item, item_max_quantity)
        raw   = payloads.get('')
        if not raw:
            return store

        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            self._skip('document', e)
            return store

        if not isinstance(data, dict):
            self._skip('document', type(data).__name__)
            return store

        for item_id, records in data.items():
            if not isinstance(records, list):
                self._skip('item', item_id)
                continue
            for record in records:
                variant = self._variant_from_record(item_id, record)
                if variant is None:
                    self._skip('variant', record)
                elif not store.restore(variant):
                    self._skip('duplicate variant', record)
        return store

    @staticmethod
    def _variant_from_record(item_id: str, record) -> ItemVariant | None:
        if not isinstance(record, dict):
            return None
        quantity = parse_uint(record.get('quantity'))
        if not quantity:
            return None
        attributes = record.get('attributes') or {}
        if not isinstance(attributes, dict):
            return None
        # The stored hash is ignored; it is always recomputed.
        return ItemVariant(item_id=item_id, quantity=quantity, attributes=attributes)


# ── Delimited ─────────────────────────────────────────────────────

_SAFE = ''.join(chr(c) for c in range(0x20, 0x7f) if chr(c) not in '%,;')


def _escape(value) -> str:
    return quote(str(value), safe=_SAFE)


def _unescape(value: str) -> str:
    return unquote(value)


class DelimitedCodec(PersistenceCodec):

    name           = CodecFormat.DELIMITED.value
    ATTRIBUTE_SLOT = '_attributes'
    slots          = ('', ATTRIBUTE_SLOT)

    def encode(self, store: ItemStore) -> dict[str, str]:
        item_segments      = []
        attribute_segments = []

        for item_id, variants in store.items().items():
            key = _escape(item_id)
            for index, variant in enumerate(variants):
                item_segments.append(f'{key},{variant.quantity}')
                for attr, value in variant.attributes.items():
                    segment = f'{key},{_escape(attr)},{_escape(value)}'
                    if index:
                        segment += f',{index}'
                    attribute_segments.append(segment)

        return {
            '':                  ';'.join(item_segments),
            self.ATTRIBUTE_SLOT: ';'.join(attribute_segments),
        }

    def decode(self, payloads: dict, cart_max_item: int = 0,
               item_max_quantity: int = 0) -> ItemStore:
        store = ItemStore(cart_max_item, item_max_quantity)

        # item_id -> [quantity, ...] in segment order
        quantities: dict[str, list[int]] = {}
        for segment in (payloads.get('') or '').split(';'):
            if not segment:
                continue
            parts = segment.split(',')
            if len(parts) != 2 or not parts[0]:
                self._skip('item', segment)
                continue
            quantity = parse_uint(parts[1])
            if not quantity:
                self._skip('item', segment)
                continue
            quantities.setdefault(_unescape(parts[0]), []).append(quantity)

        # (item_id, variant index) -> {key: value}
        attributes: dict[tuple[str, int], dict] = {}
        for segment in (payloads.get(self.ATTRIBUTE_SLOT) or '').split(';'):
            if not segment:
                continue
            parts = segment.split(',')
            if len(parts) < 3 or not parts[0] or not parts[1]:
                self._skip('attribute', segment)
                continue
            item_id = _unescape(parts[0])
            if len(parts) == 4 and parts[3].isdigit():
                index, value = int(parts[3]), parts[2]
            else:
                # Legacy writers did not escape values; extra commas belong to the value.
                index, value = 0, ','.join(parts[2:])
            if index >= len(quantities.get(item_id, [])):
                self._skip('attribute', segment)
                continue
            attributes.setdefault((item_id, index), {})[_unescape(parts[1])] = _unescape(value)

        for item_id, item_quantities in quantities.items():
            for index, quantity in enumerate(item_quantities):
                variant = ItemVariant(
                    item_id=item_id,
                    quantity=quantity,
                    attributes=attributes.get((item_id, index), {}),
                )
                if not store.restore(variant):
                    self._skip('duplicate variant', f'{item_id}#{index}')
        return store


# ── Factory ───────────────────────────────────────────────────────

CODECS = {
    CodecFormat.JSON:      JsonCodec,
    CodecFormat.DELIMITED: DelimitedCodec,
}


def get_codec(name) -> PersistenceCodec:
    """Return a codec instance for 'json' / 'delimited' (or a CodecFormat)."""
    return CODECS[CodecFormat(name)]()
