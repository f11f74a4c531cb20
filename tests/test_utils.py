# tests/test_utils.py
import datetime as dt

import pytest

from ukpolice.utils import months_back, to_ym, ym_to_date


def test_to_ym():
    assert to_ym("2017-01") == "2017-01"
    assert to_ym(" 2017-12 ") == "2017-12"
    assert to_ym(dt.date(2024, 5, 31)) == "2024-05"
    assert to_ym(dt.datetime(2024, 5, 1, 12, 30)) == "2024-05"


@pytest.mark.parametrize("bad", ["2017-00", "2017-1", "201701", "May 2017"])
def test_to_ym_rejects(bad):
    with pytest.raises(ValueError):
        to_ym(bad)


def test_ym_to_date():
    assert ym_to_date("2024-02") == dt.date(2024, 2, 1)


def test_months_back_crosses_year_boundary():
    assert months_back("2017-02", 4) == ["2017-02", "2017-01", "2016-12", "2016-11"]
    assert months_back("2017-02", 0) == []
