"""
test_cart_codecs.py: Tests for the persisted cart formats.
Run: pytest test_cart_codecs.py -v
"""
import json
import logging
from decimal import Decimal

import pytest

from shopcart.cart.codecs import DelimitedCodec, JsonCodec, get_codec
from shopcart.cart.hashing import variant_hash
from shopcart.cart.store import ItemStore


@pytest.fixture
def store():
    s = ItemStore()
    s.add(100, 3, {'color': 'gold', 'price': '349.00'})
    s.add(100, 1, {'color': 'red', 'price': '329.00'})
    s.add(101, 2)
    s.add('sku-7', 1, {'note': 'gift; wrap, please', 'size': '100%'})
    return s


# ── 1. Round trips ──────────────────────────────────────────────────────────

@pytest.mark.parametrize('codec', [JsonCodec(), DelimitedCodec()], ids=['json', 'delimited'])
def test_round_trip(codec, store):
    decoded = codec.decode(codec.encode(store))
    assert decoded == store
    assert list(decoded.items()) == ['100', '101', 'sku-7']


@pytest.mark.parametrize('codec', [JsonCodec(), DelimitedCodec()], ids=['json', 'delimited'])
def test_empty_store_round_trip(codec):
    assert codec.decode(codec.encode(ItemStore())).is_empty


def test_encoding_omits_removed_items(store):
    store.remove(101)
    store.remove(100, {'color': 'gold', 'price': '349.00'})
    store.remove(100, {'color': 'red', 'price': '329.00'})

    data = json.loads(JsonCodec().encode(store)[''])
    assert list(data) == ['sku-7']
    assert '100,' not in DelimitedCodec().encode(store)['']


# ── 2. Delimited format ─────────────────────────────────────────────────────

def test_delimited_skips_malformed_segment(caplog):
    with caplog.at_level(logging.WARNING, logger='shopcart.cart.codecs'):
        decoded = DelimitedCodec().decode({'': '100,2;bad-segment;101,1'})

    assert decoded.total_item_count == 2
    assert decoded.get_item(100).quantity == 2
    assert decoded.get_item(101).quantity == 1
    assert 'bad-segment' in caplog.text


def test_delimited_skips_empty_and_non_numeric_segments():
    decoded = DelimitedCodec().decode({'': ';;100,x;101,0;,4;102,3;'})
    assert list(decoded.items()) == ['102']


def test_delimited_reads_legacy_payload():
    decoded = DelimitedCodec().decode({
        '':            '8001,2;8012,1',
        '_attributes': '8001,price,699.00;8012,price,599.00;8012,broken',
    })
    assert decoded.get_item(8001).attributes == {'price': '699.00'}
    assert decoded.attribute_sum('price') == Decimal('1997.00')


def test_delimited_attribute_for_unknown_variant_is_dropped():
    decoded = DelimitedCodec().decode({
        '':            '100,1',
        '_attributes': '100,color,gold;100,color,red,1;999,color,blue',
    })
    assert decoded.total_item_count == 1
    assert decoded.get_item(100).attributes == {'color': 'gold'}


def test_delimited_layout():
    s = ItemStore()
    s.add(100, 2, {'color': 'gold'})
    s.add(100, 1, {'color': 'red'})
    encoded = DelimitedCodec().encode(s)
    assert encoded[''] == '100,2;100,1'
    assert encoded['_attributes'] == '100,color,gold;100,color,red,1'


# ── 3. JSON format ──────────────────────────────────────────────────────────

@pytest.mark.parametrize('raw', [None, '', 'not json', '[]', '"cart"'])
def test_json_missing_or_corrupt_slot_is_empty(raw):
    assert JsonCodec().decode({'': raw}).is_empty


def test_json_skips_bad_records_and_recomputes_hash():
    raw = json.dumps({
        '100': [
            {'id': '100', 'quantity': 2, 'hash': 'stale', 'attributes': {'color': 'gold'}},
            {'id': '100', 'quantity': 0, 'attributes': {'color': 'red'}},
            'garbage',
        ],
        '101': 'not-a-list',
        '102': [{'quantity': '4', 'attributes': None}],
    })
    decoded = JsonCodec().decode({'': raw})

    assert decoded.total_item_count == 2
    assert decoded.get_item(100).hash == variant_hash({'color': 'gold'})
    assert decoded.get_item(102).quantity == 4


def test_decoded_store_carries_limits():
    decoded = JsonCodec().decode({'': '{}'}, cart_max_item=1, item_max_quantity=3)
    decoded.add(100, 9)
    assert decoded.get_item(100).quantity == 3
    assert not decoded.add(101, 1)


def test_get_codec():
    assert isinstance(get_codec('json'), JsonCodec)
    assert isinstance(get_codec('delimited'), DelimitedCodec)
    with pytest.raises(ValueError):
        get_codec('xml')


def test_delimited_legacy_value_with_commas_is_kept():
    decoded = DelimitedCodec().decode({
        '':            '100,1',
        '_attributes': '100,name,Red, large;100,price,10',
    })
    assert decoded.get_item(100).attributes == {'name': 'Red, large', 'price': '10'}
