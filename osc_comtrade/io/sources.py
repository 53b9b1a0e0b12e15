"""
Абстрактные источники данных для разбора.

Движок разбора не работает с файловой системой: он получает уже открытые
потоки (io.BytesIO, io.StringIO, открытые файлы) либо готовые str/bytes
и целиком читает их в память до начала разбора.
"""

from typing import AnyStr, Protocol, Sequence, Union

from osc_comtrade.core.errors import StructuralError


class ReadableSource(Protocol):
    """Поток с построчным и полным чтением."""

    def read(self, size: int = -1) -> AnyStr:
        ...

    def readline(self, size: int = -1) -> AnyStr:
        ...


SourceLike = Union[str, bytes, bytearray, memoryview, ReadableSource]

UTF8_BOM = "\ufeff"


def read_bytes(source: SourceLike) -> bytes:
    """Читает источник целиком как байты. Текст кодируется в UTF-8."""
    content = source.read() if hasattr(source, "read") else source
    if isinstance(content, str):
        return content.encode("utf-8")
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content)
    raise TypeError(f"неподдерживаемый тип источника данных: {type(source).__name__}")


def read_text(source: SourceLike, encodings: Sequence[str]) -> str:
    """Читает источник целиком как текст, перебирая кодировки для байтов."""
    content = source.read() if hasattr(source, "read") else source
    if isinstance(content, str):
        return content.lstrip(UTF8_BOM)
    if isinstance(content, (bytes, bytearray, memoryview)):
        return decode_text(bytes(content), encodings)
    raise TypeError(f"неподдерживаемый тип источника данных: {type(source).__name__}")


def decode_text(raw: bytes, encodings: Sequence[str]) -> str:
    for encoding in encodings:
        try:
            return raw.decode(encoding).lstrip(UTF8_BOM)
        except (UnicodeDecodeError, LookupError):
            continue
    raise StructuralError("не удалось декодировать текст ни в одной из кодировок: "
                          + ", ".join(encodings))
