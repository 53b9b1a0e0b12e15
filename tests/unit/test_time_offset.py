"""Unit-тесты разбора смещения времени относительно UTC (time_code, local_code)."""

import datetime as dt

import pytest

from osc_comtrade.core.errors import InvalidNumericError, InvalidTokenError
from osc_comtrade.io.time_offset import parse_time_offset


def _offset_seconds(token):
    return parse_time_offset(token).utcoffset(None).total_seconds()


class TestParseTimeOffset:

    @pytest.mark.unit
    @pytest.mark.parametrize("token", ["x", "X", " x "])
    def test_not_applicable(self, token):
        assert parse_time_offset(token) is None

    @pytest.mark.unit
    @pytest.mark.parametrize("token, seconds", [
        ("0", 0),
        ("-4", -4 * 3600),
        ("+3", 3 * 3600),
        ("10", 10 * 3600),
    ])
    def test_hours_only(self, token, seconds):
        assert _offset_seconds(token) == seconds

    @pytest.mark.unit
    @pytest.mark.parametrize("token, seconds", [
        ("+10h30", 10 * 3600 + 30 * 60),
        ("5H45", 5 * 3600 + 45 * 60),
        ("-7h15", -7 * 3600 - 15 * 60),
        # минуты вычитаются при неположительных часах
        ("0h30", -30 * 60),
    ])
    def test_hours_and_minutes(self, token, seconds):
        assert _offset_seconds(token) == seconds

    @pytest.mark.unit
    def test_returns_timezone(self):
        assert parse_time_offset("+3") == dt.timezone(dt.timedelta(hours=3))

    @pytest.mark.unit
    @pytest.mark.parametrize("token", ["", "3.5", "h30", "+3h", "3:30", "UTC"])
    def test_invalid_grammar(self, token):
        with pytest.raises(InvalidTokenError) as excinfo:
            parse_time_offset(token, line_number=14)
        assert excinfo.value.line_number == 14

    @pytest.mark.unit
    def test_out_of_range(self):
        with pytest.raises(InvalidNumericError):
            parse_time_offset("25")
