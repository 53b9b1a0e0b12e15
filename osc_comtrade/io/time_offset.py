import datetime as dt
import re
from typing import Optional

from osc_comtrade.core.errors import InvalidNumericError, InvalidTokenError

# "x" - смещение не применяется
NOT_APPLICABLE = "x"

re_hours = re.compile(r"^[+-]?[0-9]+$")
re_hours_minutes = re.compile(r"^([+-]?[0-9]+)h([0-9]+)$", re.IGNORECASE)


def parse_time_offset(token: str, line_number: Optional[int] = None) -> Optional[dt.timezone]:
    """
    Разбирает смещение времени относительно UTC (time_code, local_code).

    Формат:
      - "x"      - не применяется, возвращается None;
      - "-4"     - 4 часа западнее UTC;
      - "+10h30" - 10 часов 30 минут восточнее UTC;
      - "-7h15"  - 7 часов 15 минут западнее UTC.

    Минуты прибавляются только при положительном количестве часов, иначе
    вычитаются, поэтому "0h30" даёт -30 минут.
    """
    value = token.strip()
    if value.lower() == NOT_APPLICABLE:
        return None

    if re_hours.match(value):
        seconds = int(value) * 3600
    else:
        m = re_hours_minutes.match(value)
        if m is None:
            raise InvalidTokenError(f"недопустимое смещение времени: '{token}'",
                                    line_number=line_number)
        hours = int(m.group(1))
        minutes = int(m.group(2))
        if hours > 0:
            seconds = hours * 3600 + minutes * 60
        else:
            seconds = hours * 3600 - minutes * 60

    try:
        return dt.timezone(dt.timedelta(seconds=seconds))
    except ValueError:
        raise InvalidNumericError(f"смещение времени вне допустимого диапазона: '{token}'",
                                  line_number=line_number) from None
