"""
CryptoPulse — Tests for the notification watermark
"""
from datetime import timedelta

from cryptopulse.engines.watermark import WatermarkState, advance, plan_notifications
from cryptopulse.tests.factories import BASE_TIME, make_item


class TestPlanNotifications:
    def test_first_batch_primes_without_sending(self):
        t1, t2, t3 = make_item(1), make_item(2), make_item(3)
        state = WatermarkState(watermark=BASE_TIME - timedelta(days=1))
        to_send, state = plan_notifications(state, [t2, t3, t1])
        assert to_send == []
        assert state.primed
        assert state.watermark == t3.timestamp

    def test_empty_first_batch_keeps_start_time(self):
        state = WatermarkState(watermark=BASE_TIME)
        to_send, state = plan_notifications(state, [])
        assert to_send == []
        assert state.primed
        assert state.watermark == BASE_TIME

    def test_second_batch_only_newer_items(self):
        t2, t3, t4 = make_item(2), make_item(3), make_item(4)
        state = WatermarkState(watermark=t3.timestamp, primed=True)
        to_send, state = plan_notifications(state, [t4, t2])
        assert to_send == [t4]
        assert state.watermark == t4.timestamp

    def test_equal_timestamp_is_not_new(self):
        t3 = make_item(3)
        state = WatermarkState(watermark=t3.timestamp, primed=True)
        to_send, _ = plan_notifications(state, [make_item(3, id="other")])
        assert to_send == []

    def test_sorted_oldest_first(self):
        items = [make_item(9), make_item(5), make_item(7)]
        state = WatermarkState(watermark=BASE_TIME, primed=True)
        to_send, state = plan_notifications(state, items)
        assert [i.id for i in to_send] == ["item-5", "item-7", "item-9"]
        assert state.watermark == make_item(9).timestamp

    def test_nothing_new_keeps_watermark(self):
        state = WatermarkState(watermark=make_item(10).timestamp, primed=True)
        to_send, new_state = plan_notifications(state, [make_item(1), make_item(2)])
        assert to_send == []
        assert new_state == state


class TestAdvance:
    def test_moves_forward_only(self):
        state = WatermarkState(watermark=make_item(5).timestamp, primed=True)
        assert advance(state, make_item(6)).watermark == make_item(6).timestamp
        assert advance(state, make_item(4)) == state
