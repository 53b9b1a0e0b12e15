from dataclasses import dataclass
from typing import Tuple


@dataclass
class ParserConfig:
    """Настройки разбора записи COMTRADE."""
    # не выдавать ComtradeWarning
    ignore_warnings: bool = False
    # кодировки текстовых файлов, перебираются по порядку
    encodings: Tuple[str, ...] = ("utf-8", "cp1251")
    # номер выборки вне таблицы частот дискретизации - ошибка;
    # иначе используется 1 Гц с предупреждением
    strict_sample_rates: bool = True
    # число строк ASCII DAT отличается от заявленного в CFG - ошибка;
    # иначе только предупреждение
    strict_sample_count: bool = False
