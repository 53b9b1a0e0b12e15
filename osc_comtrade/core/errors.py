import warnings
from typing import Optional


class ComtradeWarning(UserWarning):
    """Некритичное замечание при разборе записи COMTRADE."""


def warn(message: str, ignore_warnings: bool = False) -> None:
    """Выдаёт ComtradeWarning, если предупреждения не отключены."""
    if not ignore_warnings:
        warnings.warn(ComtradeWarning(message), stacklevel=3)


class ComtradeError(Exception):
    """
    Базовое исключение разбора COMTRADE.

    Каждое исключение по возможности несёт номер строки исходного файла
    (с 1) и/или номер канала (с 1), чтобы ошибку можно было найти без
    повторного разбора.
    """

    def __init__(self, message: str, line_number: Optional[int] = None,
                 channel: Optional[int] = None):
        self.message = message
        self.line_number = line_number
        self.channel = channel
        super().__init__(self._compose())

    def _compose(self) -> str:
        context = []
        if self.line_number is not None:
            context.append(f"строка {self.line_number}")
        if self.channel is not None:
            context.append(f"канал {self.channel}")
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class MissingInputError(ComtradeError):
    """Не передан обязательный файл (CFF или пара CFG + DAT)."""


class MalformedLineError(ComtradeError):
    """Количество полей в строке не совпадает с ожидаемым."""

    def __init__(self, line_number: int, expected, actual: int,
                 channel: Optional[int] = None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"неожиданное количество полей: ожидалось {expected}, получено {actual}",
            line_number=line_number, channel=channel)


class InvalidTokenError(ComtradeError):
    """Неизвестный код: ревизия, формат данных, режим масштаба и т.п."""


class InvalidNumericError(ComtradeError):
    """Не удалось разобрать целое или вещественное число."""


class StructuralError(ComtradeError):
    """Нарушена структура потока: содержимое до заголовка CFF, усечённые данные."""


class UnexpectedEndError(StructuralError):
    """Файл конфигурации закончился раньше, чем ожидалось по схеме."""

    def __init__(self, line_number: int):
        super().__init__(
            f"неожиданный конец файла конфигурации: ожидалась строка {line_number}",
            line_number=line_number)


class IncompleteRecordError(StructuralError):
    """Запись не может быть собрана: не все обязательные поля заполнены."""


class SemanticError(ComtradeError):
    """Значение разобрано, но не имеет смысла (например, дискрет не 0/1)."""
