"""
CryptoPulse — Tests for dashboard item filtering, ordering and lookup
"""
from cryptopulse.engines.item_view import (
    ItemSort, SignalFilter, filter_and_sort_items, find_item,
)
from cryptopulse.tests.factories import make_item


def _items():
    return [
        make_item(2, signal="SELL", confidence=40),
        make_item(5, signal="BUY", confidence=70),
        make_item(1, signal="BUY", confidence=90),
        make_item(3, signal="HOLD", confidence=70),
    ]


class TestFilterAndSort:
    def test_default_is_all_newest_first(self):
        result = filter_and_sort_items(_items())
        assert [i.id for i in result] == ["item-5", "item-3", "item-2", "item-1"]

    def test_oldest_first(self):
        result = filter_and_sort_items(_items(), sort=ItemSort.DATE_ASC)
        assert [i.id for i in result] == ["item-1", "item-2", "item-3", "item-5"]

    def test_confidence_desc_keeps_tie_order(self):
        result = filter_and_sort_items(_items(), sort=ItemSort.CONFIDENCE_DESC)
        assert [i.id for i in result] == ["item-1", "item-5", "item-3", "item-2"]

    def test_signal_filter(self):
        result = filter_and_sort_items(_items(), signal=SignalFilter.BUY)
        assert [i.id for i in result] == ["item-5", "item-1"]
        assert filter_and_sort_items(_items(), signal="NEUTRAL") == []

    def test_input_not_mutated(self):
        items = _items()
        filter_and_sort_items(items, sort=ItemSort.DATE_ASC)
        assert [i.id for i in items] == ["item-2", "item-5", "item-1", "item-3"]


class TestFindItem:
    def test_found(self):
        assert find_item(_items(), "item-3").signal.value == "HOLD"

    def test_missing(self):
        assert find_item(_items(), "nope") is None
        assert find_item([], "item-1") is None
