import logging
from datetime import date

import pytest

from gitconsistent.utils import dates

pytestmark = pytest.mark.unit


def test_today_in_known_zone():
    assert isinstance(dates.today("America/New_York"), date)


def test_unknown_zone_warns_and_uses_local_date(caplog):
    with caplog.at_level(logging.WARNING, logger="gitconsistent.utils.dates"):
        result = dates.today("Mars/Olympus_Mons")
    assert result == date.today()
    assert "Unknown timezone 'Mars/Olympus_Mons'" in caplog.text


def test_weekday_helpers():
    wednesday = date(2024, 5, 15)
    assert dates.weekday_index(wednesday) == 3
    assert dates.end_of_week(wednesday) == date(2024, 5, 18)
    assert dates.narrow_weekday(wednesday) == "W"
    assert not dates.is_date_str("2024-5-15")
