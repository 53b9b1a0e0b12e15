# -*- coding: utf-8 -*-
# MIT License
# Создано на основе библиотеки "comtrade 0.1.2" (Copyright (c) 2018 David Rodrigues Parrini),
# https://pypi.org/project/comtrade/

"""
Разбор файла конфигурации COMTRADE (CFG).

Файл читается строго по порядку строк схемы стандарта, набор строк зависит
от ревизии (1991, 1999, 2013). Количество полей каждой строки проверяется,
ошибки содержат номер строки (с 1).
"""

import datetime as dt
import re
from typing import List, Optional, Sequence, Tuple

from osc_comtrade.core.channels import AnalogChannel, SamplingRate, StatusChannel
from osc_comtrade.core.config import ParserConfig
from osc_comtrade.core.constants import (
    DATA_FORMATS, LEAP_SECOND_CODES, REVISION_YEARS, SCALING_MODES, SEPARATOR,
    TIME_BASE_MICROSEC, TIME_BASE_NANOSEC, TIME_QUALITY_CODES, FormatRevision,
    lookup_token)
from osc_comtrade.core.errors import (
    InvalidNumericError, InvalidTokenError, MalformedLineError, SemanticError,
    UnexpectedEndError, warn)
from osc_comtrade.core.record import RecordBuilder
from osc_comtrade.io.time_offset import parse_time_offset

ANALOG_FIELDS = 13
STATUS_FIELDS = 5

# регулярное выражение для временной метки
re_date = re.compile(r"^([0-9]{1,2})/([0-9]{1,2})/([0-9]{2,4})$")
re_time = re.compile(r"^([0-9]{1,2}):([0-9]{2}):([0-9]{2})(\.([0-9]{1,12}))?$")

# Предупреждение о дате и времени с наносекундным разрешением
WARNING_DATETIME_NANO = "Неподдерживаемые объекты datetime с наносекундным " \
                        "разрешением. Используются усеченные значения."
# Дата и время с годом 0, месяцем 0 и/или днем 0.
WARNING_MINDATE = "Отсутствуют значения даты. Используются минимальные значения: {}."


def _read_sep_values(line: str) -> Tuple[str, ...]:
    return tuple(cell.strip() for cell in line.split(SEPARATOR))


def parse_int(value: str, what: str, line_number: int,
              channel: Optional[int] = None) -> int:
    """Разбирает целое число. Разделители разрядов "_" не допускаются."""
    try:
        if "_" in value:
            raise ValueError(value)
        return int(value)
    except ValueError:
        raise InvalidNumericError(f"недопустимое целое значение {what}: '{value}'",
                                  line_number=line_number, channel=channel) from None


def parse_float(value: str, what: str, line_number: int,
                channel: Optional[int] = None) -> float:
    try:
        if "_" in value:
            raise ValueError(value)
        return float(value)
    except ValueError:
        raise InvalidNumericError(f"недопустимое вещественное значение {what}: '{value}'",
                                  line_number=line_number, channel=channel) from None


def _prevent_null(value: str, what: str, line_number: int, channel: int) -> float:
    """Пустое поле смещения или сдвига считается нулём."""
    if len(value) == 0:
        return 0.0
    return parse_float(value, what, line_number, channel)


def fill_with_zeros_to_the_right(number_str: str, width: int) -> str:
    return number_str.ljust(width, "0")


class _LineCursor:
    """Последовательное чтение строк CFG с учётом номера строки."""

    def __init__(self, text: str):
        self._lines = text.splitlines()
        self.line_number = 0

    @property
    def exhausted(self) -> bool:
        return self.line_number >= len(self._lines)

    def next_line(self) -> str:
        if self.exhausted:
            raise UnexpectedEndError(self.line_number + 1)
        self.line_number += 1
        return self._lines[self.line_number - 1]

    def next_fields(self, expected: Sequence[int], channel: Optional[int] = None) -> Tuple[str, ...]:
        values = _read_sep_values(self.next_line())
        if len(values) not in expected:
            expected_str = " или ".join(str(count) for count in expected)
            raise MalformedLineError(self.line_number, expected_str, len(values),
                                     channel=channel)
        return values


class CfgParser:
    """Разбирает текст CFG и заполняет контекст RecordBuilder."""

    def __init__(self, config: Optional[ParserConfig] = None):
        self._config = config or ParserConfig()

    @property
    def ignore_warnings(self) -> bool:
        return self._config.ignore_warnings

    def parse(self, text: str, builder: Optional[RecordBuilder] = None) -> RecordBuilder:
        builder = builder if builder is not None else RecordBuilder()
        cfg = _LineCursor(text)

        self._read_station(cfg, builder)
        self._read_channel_counts(cfg, builder)
        builder.analog_channels = [self._read_analog_channel(cfg, i + 1)
                                   for i in range(builder.num_analog_channels)]
        builder.status_channels = [self._read_status_channel(cfg, i + 1)
                                   for i in range(builder.num_status_channels)]

        # Строка частоты сети
        (frequency,) = cfg.next_fields((1,))
        builder.line_frequency = parse_float(frequency, "частоты сети", cfg.line_number)

        builder.sampling_rates = self._read_sampling_rates(cfg)

        # Время первой точки данных и время срабатывания
        builder.start_time, start_base = self._read_timestamp(cfg, builder.revision,
                                                               "времени начала записи")
        builder.trigger_time, trigger_base = self._read_timestamp(cfg, builder.revision,
                                                                  "времени срабатывания")
        builder.time_base = min(start_base, trigger_base)

        # Тип файла DAT
        (ft,) = cfg.next_fields((1,))
        builder.data_format = lookup_token(DATA_FORMATS, ft, "формата файла данных",
                                           line_number=cfg.line_number)

        # Формат 1991 года на этом заканчивается
        if builder.revision is FormatRevision.REVISION_1991:
            return builder

        builder.timestamp_multiplication_factor = self._read_time_multiplier(cfg)

        # Формат 1999 года на этом заканчивается
        if builder.revision is FormatRevision.REVISION_1999:
            return builder

        # time_code, local_code
        time_code, local_code = cfg.next_fields((2,))
        builder.time_offset = parse_time_offset(time_code, cfg.line_number)
        builder.local_offset = parse_time_offset(local_code, cfg.line_number)

        # tmq_code, leapsec
        tmq_code, leap_second = cfg.next_fields((2,))
        builder.time_quality = lookup_token(TIME_QUALITY_CODES, tmq_code,
                                            "кода качества времени",
                                            line_number=cfg.line_number)
        builder.leap_second_status = lookup_token(LEAP_SECOND_CODES, leap_second,
                                                  "признака секунды координации",
                                                  line_number=cfg.line_number)
        return builder

    def _read_station(self, cfg: _LineCursor, builder: RecordBuilder) -> None:
        # только ревизия 1999 года и выше имеет год ревизии стандарта
        values = cfg.next_fields((2, 3))
        builder.station_name = values[0]
        builder.recording_device_id = values[1]
        if len(values) == 3:
            builder.revision = lookup_token(REVISION_YEARS, values[2],
                                            "года ревизии COMTRADE",
                                            line_number=cfg.line_number)
        else:
            builder.revision = FormatRevision.REVISION_1991

    def _read_channel_counts(self, cfg: _LineCursor, builder: RecordBuilder) -> None:
        totchn, achn, schn = cfg.next_fields((3,))
        line_number = cfg.line_number
        builder.num_total_channels = parse_int(totchn, "общего количества каналов",
                                               line_number)
        builder.num_analog_channels = self._count_with_suffix(achn, "A", line_number)
        builder.num_status_channels = self._count_with_suffix(schn, "D", line_number)
        if builder.num_analog_channels + builder.num_status_channels \
                != builder.num_total_channels:
            raise SemanticError(
                f"общее количество каналов {builder.num_total_channels} не равно сумме "
                f"{builder.num_analog_channels}A + {builder.num_status_channels}D",
                line_number=line_number)

    @staticmethod
    def _count_with_suffix(token: str, suffix: str, line_number: int) -> int:
        if not token or token[-1].upper() != suffix:
            raise InvalidTokenError(
                f"ожидалось количество каналов с суффиксом '{suffix}': '{token}'",
                line_number=line_number)
        count = parse_int(token[:-1].strip(), f"количества каналов '{suffix}'", line_number)
        if count < 0:
            raise SemanticError(f"отрицательное количество каналов: '{token}'",
                                line_number=line_number)
        return count

    def _read_analog_channel(self, cfg: _LineCursor, position: int) -> AnalogChannel:
        values = cfg.next_fields((ANALOG_FIELDS,), channel=position)
        n, name, ph, ccbm, uu, a, b, skew, cmin, cmax, primary, secondary, pors = values
        line_number = cfg.line_number

        index = parse_int(n, "номера аналогового канала", line_number, position)
        if index != position:
            raise SemanticError(f"номер аналогового канала {index} не совпадает с "
                                f"порядком объявления", line_number, position)
        return AnalogChannel(
            index=index,
            name=name,
            phase=ph,
            circuit_component_being_monitored=ccbm,
            units=uu,
            multiplier=parse_float(a, "множителя", line_number, position),
            offset_adder=_prevent_null(b, "смещения", line_number, position),
            skew=_prevent_null(skew, "сдвига времени", line_number, position),
            min_value=parse_float(cmin, "минимального значения", line_number, position),
            max_value=parse_float(cmax, "максимального значения", line_number, position),
            primary_factor=parse_float(primary, "первичного коэффициента",
                                       line_number, position),
            secondary_factor=parse_float(secondary, "вторичного коэффициента",
                                         line_number, position),
            scaling_mode=lookup_token(SCALING_MODES, pors, "признака P/S",
                                      line_number=line_number, channel=position),
        )

    def _read_status_channel(self, cfg: _LineCursor, position: int) -> StatusChannel:
        n, name, ph, ccbm, y = cfg.next_fields((STATUS_FIELDS,), channel=position)
        line_number = cfg.line_number

        index = parse_int(n, "номера дискретного канала", line_number, position)
        if index != position:
            raise SemanticError(f"номер дискретного канала {index} не совпадает с "
                                f"порядком объявления", line_number, position)
        normal_value = parse_int(y, "нормального состояния", line_number, position)
        if normal_value not in (0, 1):
            raise SemanticError(f"нормальное состояние дискретного канала должно быть "
                                f"0 или 1, получено '{y}'", line_number, position)
        return StatusChannel(
            index=index,
            name=name,
            phase=ph,
            circuit_component_being_monitored=ccbm,
            normal_status_value=normal_value,
        )

    def _read_sampling_rates(self, cfg: _LineCursor) -> List[SamplingRate]:
        # количество различных частот дискретизации
        (nrates_str,) = cfg.next_fields((1,))
        nrates = parse_int(nrates_str, "количества частот дискретизации", cfg.line_number)
        if nrates < 0:
            raise SemanticError(f"отрицательное количество частот дискретизации: {nrates}",
                                line_number=cfg.line_number)

        sampling_rates = []
        for _ in range(nrates):
            samp, endsamp = cfg.next_fields((2,))
            rate = SamplingRate(
                rate_hz=parse_float(samp, "частоты дискретизации", cfg.line_number),
                end_sample_number=parse_int(endsamp, "номера последней выборки",
                                            cfg.line_number))
            if rate.rate_hz <= 0:
                raise SemanticError(f"частота дискретизации должна быть положительной, "
                                    f"получено '{samp}'", line_number=cfg.line_number)
            if sampling_rates and rate.end_sample_number < sampling_rates[-1].end_sample_number:
                raise SemanticError("номера последних выборок в таблице частот "
                                    "дискретизации должны возрастать",
                                    line_number=cfg.line_number)
            sampling_rates.append(rate)

        # при nrates = 0 следует строка "0,endsamp", её значения не используются
        if nrates == 0:
            cfg.next_line()
        return sampling_rates

    def _read_timestamp(self, cfg: _LineCursor, revision: FormatRevision,
                        what: str) -> Tuple[dt.datetime, float]:
        """
        Читает строку "дата,время" и возвращает метку времени и временную базу,
        которая определяется числом знаков дробной части секунд.
        """
        date_str, time_str = cfg.next_fields((2,))
        line_number = cfg.line_number

        m = re_date.match(date_str)
        if m is None:
            raise InvalidNumericError(f"недопустимая дата {what}: '{date_str}'",
                                      line_number=line_number)
        # Формат 1991 года использует формат мм/дд/гггг, современные - дд/мм/гггг
        if revision is FormatRevision.REVISION_1991:
            month, day, year = (int(g) for g in m.groups())
        else:
            day, month, year = (int(g) for g in m.groups())

        t = re_time.match(time_str)
        if t is None:
            raise InvalidNumericError(f"недопустимое время {what}: '{time_str}'",
                                      line_number=line_number)
        hour, minute, second = int(t.group(1)), int(t.group(2)), int(t.group(3))
        fracsec_str = t.group(5) or ""
        in_nanoseconds = len(fracsec_str) > 6
        if in_nanoseconds:
            # datetime не поддерживает наносекунды, значение усекается
            nanosecond = int(fill_with_zeros_to_the_right(fracsec_str, 9)[:9])
            microsecond = nanosecond // 1000
            if nanosecond % 1000:
                warn(WARNING_DATETIME_NANO, self.ignore_warnings)
        else:
            microsecond = int(fill_with_zeros_to_the_right(fracsec_str, 6))

        using_min_data = False
        if year <= 0:
            year = dt.MINYEAR
            using_min_data = True
        if month <= 0:
            month = 1
            using_min_data = True
        if day <= 0:
            day = 1
            using_min_data = True

        try:
            timestamp = dt.datetime(year, month, day, hour, minute, second, microsecond)
        except ValueError as ex:
            raise InvalidNumericError(f"недопустимая метка {what}: "
                                      f"'{date_str},{time_str}' ({ex})",
                                      line_number=line_number) from None
        if using_min_data:
            warn(WARNING_MINDATE.format(timestamp), self.ignore_warnings)

        time_base = TIME_BASE_NANOSEC if in_nanoseconds else TIME_BASE_MICROSEC
        return timestamp, time_base

    def _read_time_multiplier(self, cfg: _LineCursor) -> float:
        # Множитель временной метки; при отсутствии строки равен 1
        if cfg.exhausted:
            return 1.0
        line = cfg.next_line()
        values = _read_sep_values(line)
        if len(values) != 1:
            raise MalformedLineError(cfg.line_number, 1, len(values))
        if len(values[0]) == 0:
            return 1.0
        return parse_float(values[0], "множителя временной метки", cfg.line_number)
