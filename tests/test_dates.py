from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from app.utils.dates import format_local, local_day_bounds, to_storage

KOLKATA = ZoneInfo("Asia/Kolkata")


def test_local_day_bounds_kolkata():
    # 2025-03-05 12:00 IST
    now = datetime(2025, 3, 5, 6, 30)

    start, end = local_day_bounds(now, KOLKATA)

    assert start == datetime(2025, 3, 4, 18, 30)
    assert end == datetime(2025, 3, 5, 18, 29, 59, 999000)
    assert start.tzinfo is None and end.tzinfo is None


def test_local_day_bounds_uses_local_not_utc_day():
    # 2025-03-05 20:00 UTC is already 2025-03-06 01:30 in Kolkata
    start, end = local_day_bounds(datetime(2025, 3, 5, 20, 0), KOLKATA)

    assert start == datetime(2025, 3, 5, 18, 30)
    assert end == datetime(2025, 3, 6, 18, 29, 59, 999000)


def test_local_day_bounds_accepts_aware_datetimes():
    aware = datetime(2025, 3, 5, 6, 30, tzinfo=timezone.utc)
    assert local_day_bounds(aware, KOLKATA) == local_day_bounds(datetime(2025, 3, 5, 6, 30), KOLKATA)


def test_local_day_bounds_dst_day_is_23_hours():
    new_york = ZoneInfo("America/New_York")
    # 2025-03-09: clocks jump from 02:00 EST to 03:00 EDT
    start, end = local_day_bounds(datetime(2025, 3, 9, 17, 0), new_york)

    assert start == datetime(2025, 3, 9, 5, 0)
    assert end == datetime(2025, 3, 10, 3, 59, 59, 999000)


def test_format_local_renders_in_given_zone():
    assert format_local(datetime(2025, 3, 5, 15, 45), KOLKATA) == "05 Mar 2025, 09:15 PM"


def test_to_storage_strips_tz_after_conversion():
    value = datetime(2025, 3, 5, 12, 0, tzinfo=KOLKATA)
    assert to_storage(value) == datetime(2025, 3, 5, 6, 30)
