from datetime import datetime, timedelta, timezone

import pytest

from ratings_client.pages.owner import time_ago

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "delta,expected",
    [
        (timedelta(seconds=20), "less than a minute ago"),
        (timedelta(minutes=1), "1 minute ago"),
        (timedelta(minutes=5), "5 minutes ago"),
        (timedelta(minutes=60), "about 1 hour ago"),
        (timedelta(hours=3), "about 3 hours ago"),
        (timedelta(hours=23, minutes=40), "about 24 hours ago"),
        (timedelta(hours=30), "1 day ago"),
        (timedelta(days=3), "3 days ago"),
        (timedelta(days=29, hours=13), "30 days ago"),
        (timedelta(days=40), "about 1 month ago"),
        (timedelta(days=100), "3 months ago"),
        (timedelta(days=400), "about 1 year ago"),
        (timedelta(days=600), "over 1 year ago"),
        (timedelta(days=700), "almost 2 years ago"),
    ],
)
def test_time_ago_buckets(delta, expected):
    assert time_ago(NOW - delta, NOW) == expected


def test_naive_timestamps_are_utc():
    assert time_ago((NOW - timedelta(days=3)).replace(tzinfo=None), NOW) == "3 days ago"


def test_future_timestamps_clamp_to_now():
    assert time_ago(NOW + timedelta(minutes=5), NOW) == "less than a minute ago"
