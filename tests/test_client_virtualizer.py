# File: /tests/test_client_virtualizer.py | Version: 1.0 | Title: Row virtualizer windows + fetch trigger
from gridbase.client.virtualizer import RowVirtualizer


def test_only_visible_plus_overscan_is_mounted():
    v = RowVirtualizer(1000)
    items = v.get_virtual_items(0, 330)
    assert [i.index for i in items] == list(range(0, 20))
    assert items[0].start == 0 and items[0].size == 33

    items = v.get_virtual_items(3300, 330)
    assert [i.index for i in items] == list(range(90, 120))
    assert items[10].start == 3300


def test_total_size_reserves_space_for_every_row():
    v = RowVirtualizer(1000)
    assert v.total_size == 33000
    v.set_count(10)
    assert v.total_size == 330
    assert RowVirtualizer(0).get_virtual_items(0, 500) == []


def test_measured_heights_refine_offsets():
    v = RowVirtualizer(100, overscan=0)
    v.measure(0, 50)
    v.measure(2, 20)
    assert v.offset_of(1) == 50
    assert v.offset_of(3) == 50 + 33 + 20
    assert v.total_size == 100 * 33 + 17 - 13
    assert [i.index for i in v.get_virtual_items(60, 10)] == [1]


def test_measurement_can_be_disabled():
    v = RowVirtualizer(100, measure_rows=False)
    v.measure(0, 80)
    assert v.size_of(0) == 33
    assert v.total_size == 3300


def test_scroll_past_end_clamps_to_last_rows():
    v = RowVirtualizer(50, overscan=2)
    items = v.get_virtual_items(10_000, 100)
    assert items[-1].index == 49
    assert items[0].index == 47


def test_should_fetch_more_near_bottom():
    v = RowVirtualizer(1000)
    assert v.should_fetch_more(0, 330) is False
    assert v.should_fetch_more(31_700, 330) is True
    assert RowVirtualizer(10).should_fetch_more(0, 600) is True
