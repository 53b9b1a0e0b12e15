"""
osc_comtrade - разбор записей COMTRADE (IEEE C37.111, ревизии 1991, 1999, 2013).

Основные точки входа:
    load(path)                    - загрузка .cfg (+ .dat/.hdr/.inf) или .cff с диска;
    ComtradeParser(...).parse()   - разбор открытых потоков или str/bytes.
"""

from .core import (
    AnalogChannel,
    AnalogScalingMode,
    ClockState,
    Comtrade,
    ComtradeError,
    ComtradeWarning,
    DataFormat,
    FormatRevision,
    IncompleteRecordError,
    InvalidNumericError,
    InvalidTokenError,
    LeapSecondStatus,
    MalformedLineError,
    MissingInputError,
    ParserConfig,
    SamplingRate,
    SemanticError,
    StatusChannel,
    StructuralError,
    TimeQuality,
    UnexpectedEndError,
)
from .io import ComtradeParser, load, parse

__version__ = "0.1.0"
