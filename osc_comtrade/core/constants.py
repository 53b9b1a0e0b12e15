from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, TypeVar

from osc_comtrade.core.errors import InvalidTokenError

# общий символ-разделитель полей данных файлов CFG и ASCII DAT
SEPARATOR = ","

# отсутствующая временная метка в двоичных файлах DAT
TIMESTAMP_MISSING = 0xFFFFFFFF

# единицы временной базы
TIME_BASE_MICROSEC = 1E-6
TIME_BASE_NANOSEC = 1E-9

# количество дискретных каналов в одном 16-битном слове двоичного DAT
STATUS_GROUP_BITS = 16


class FileType(Enum):
    """Тип раздела (файла) записи COMTRADE."""
    CFG = "CFG"
    DAT = "DAT"
    HDR = "HDR"
    INF = "INF"


class FormatRevision(Enum):
    """Ревизия стандарта COMTRADE. Определяет набор строк в файле CFG."""
    REVISION_1991 = "1991"
    REVISION_1999 = "1999"
    REVISION_2013 = "2013"


class DataFormat(Enum):
    """Формат файла DAT."""
    ASCII = "ASCII"
    BINARY16 = "BINARY"
    BINARY32 = "BINARY32"
    FLOAT32 = "FLOAT32"

    @property
    def is_binary(self) -> bool:
        return self is not DataFormat.ASCII


class AnalogScalingMode(Enum):
    """В каких величинах записаны значения аналогового канала."""
    PRIMARY = "P"
    SECONDARY = "S"


class ClockState(Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    FAILURE = "failure"


@dataclass(frozen=True)
class TimeQuality:
    """
    Качество синхронизации часов регистратора (ревизия 2013).

    Для состояния UNLOCKED precision_exponent - показатель степени 10,
    с точностью до которой можно доверять времени (от -9 до 1). Например,
    -5 означает точность 10 мкс.
    """
    state: ClockState
    precision_exponent: Optional[int] = None


class LeapSecondStatus(Enum):
    NO_CAPABILITY = "3"
    SUBTRACTED = "2"
    ADDED = "1"
    NOT_PRESENT = "0"


CLOCK_LOCKED = TimeQuality(ClockState.LOCKED)
CLOCK_FAILURE = TimeQuality(ClockState.FAILURE)


def clock_unlocked(precision_exponent: int) -> TimeQuality:
    return TimeQuality(ClockState.UNLOCKED, precision_exponent)


# Словари кодов. Ключи приведены к нижнему регистру там, где регистр не важен.
FILE_TYPES: Dict[str, FileType] = {
    "cfg": FileType.CFG,
    "dat": FileType.DAT,
    "hdr": FileType.HDR,
    "inf": FileType.INF,
}

REVISION_YEARS: Dict[str, FormatRevision] = {
    "1991": FormatRevision.REVISION_1991,
    "1999": FormatRevision.REVISION_1999,
    "2013": FormatRevision.REVISION_2013,
}

DATA_FORMATS: Dict[str, DataFormat] = {
    "ascii": DataFormat.ASCII,
    "binary": DataFormat.BINARY16,
    "binary32": DataFormat.BINARY32,
    "float32": DataFormat.FLOAT32,
}

SCALING_MODES: Dict[str, AnalogScalingMode] = {
    "p": AnalogScalingMode.PRIMARY,
    "s": AnalogScalingMode.SECONDARY,
}

# tmq_code: шестнадцатеричная цифра, "a" = 10^0, "1" = 10^-9
TIME_QUALITY_CODES: Dict[str, TimeQuality] = {
    "f": CLOCK_FAILURE,
    "b": clock_unlocked(1),
    "a": clock_unlocked(0),
    "9": clock_unlocked(-1),
    "8": clock_unlocked(-2),
    "7": clock_unlocked(-3),
    "6": clock_unlocked(-4),
    "5": clock_unlocked(-5),
    "4": clock_unlocked(-6),
    "3": clock_unlocked(-7),
    "2": clock_unlocked(-8),
    "1": clock_unlocked(-9),
    "0": CLOCK_LOCKED,
}

LEAP_SECOND_CODES: Dict[str, LeapSecondStatus] = {
    "3": LeapSecondStatus.NO_CAPABILITY,
    "2": LeapSecondStatus.SUBTRACTED,
    "1": LeapSecondStatus.ADDED,
    "0": LeapSecondStatus.NOT_PRESENT,
}

T = TypeVar("T")


def lookup_token(table: Dict[str, T], token: str, what: str,
                 line_number: Optional[int] = None,
                 channel: Optional[int] = None) -> T:
    """
    Ищет код в словаре. Пробелы по краям отбрасываются, регистр
    игнорируется.
    """
    key = token.strip().lower()
    try:
        return table[key]
    except KeyError:
        allowed = ", ".join(f"'{k}'" for k in table)
        raise InvalidTokenError(
            f"недопустимое значение {what}: '{token}'; ожидалось одно из: {allowed}",
            line_number=line_number, channel=channel) from None
