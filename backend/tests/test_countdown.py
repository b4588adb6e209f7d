from datetime import datetime

from services.countdown import countdown_remaining, parse_end_date
from services.page_renderer import carousel_index


def test_end_date_without_offset_is_shop_time():
    assert parse_end_date('2025-03-30T18:00:00') == datetime(2025, 3, 30, 12, 0, 0)


def test_end_date_with_offset():
    assert parse_end_date('2025-03-30T18:00:00Z') == datetime(2025, 3, 30, 18, 0, 0)
    assert parse_end_date('2025-03-30T18:00:00+06:00') == datetime(2025, 3, 30, 12, 0, 0)


def test_invalid_end_date():
    assert parse_end_date('') is None
    assert parse_end_date('next friday') is None
    assert parse_end_date(None) is None


def test_remaining_time_breakdown():
    now = datetime(2025, 3, 28, 10, 0, 0)
    end = datetime(2025, 3, 30, 13, 30, 15)

    assert countdown_remaining(end, now) == {
        'days': 2, 'hours': 3, 'minutes': 30, 'seconds': 15, 'expired': False,
    }


def test_remaining_time_never_negative():
    now = datetime(2025, 4, 1)

    state = countdown_remaining(datetime(2025, 3, 30), now)

    assert state == {'days': 0, 'hours': 0, 'minutes': 0, 'seconds': 0, 'expired': True}
    assert countdown_remaining(now, now)['expired'] is True


def test_carousel_index_wraps():
    assert carousel_index(0, -1, 3) == 2
    assert carousel_index(2, 1, 3) == 0
    assert carousel_index(1, 1, 3) == 2
    assert carousel_index(5, 1, 0) == 0
