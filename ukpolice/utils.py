# ukpolice/utils.py
import re
from datetime import date, timedelta
from typing import List, Union

_YM = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def to_ym(value: Union[str, date]) -> str:
    """'YYYY-MM' passthrough, or format a date as 'YYYY-MM'."""
    if isinstance(value, date):
        return value.strftime("%Y-%m")
    value = value.strip()
    if not _YM.match(value):
        raise ValueError(f"expected a YYYY-MM month, got {value!r}")
    return value


def ym_to_date(ym: str) -> date:
    y, m = to_ym(ym).split("-")
    return date(int(y), int(m), 1)


def months_back(end_ym: str, count: int) -> List[str]:
    """`count` months ending at end_ym, newest first."""
    current = ym_to_date(end_ym)
    out = []
    for _ in range(max(0, count)):
        out.append(current.strftime("%Y-%m"))
        current = (current - timedelta(days=1)).replace(day=1)
    return out
