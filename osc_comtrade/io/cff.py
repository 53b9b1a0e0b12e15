"""
Разделение файла CFF (Combined File Format, ревизия 2013) на разделы
CFG, INF, HDR и DAT.

Каждый раздел начинается строкой-заголовком вида
    --- file type: DAT BINARY: 1234 ---
Для раздела DAT указываются формат и (для двоичных форматов) размер в
байтах. Двоичный раздел DAT берётся как есть, без построчного разбора.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

from osc_comtrade.core.config import ParserConfig
from osc_comtrade.core.constants import (
    DATA_FORMATS, FILE_TYPES, DataFormat, FileType, lookup_token)
from osc_comtrade.core.errors import MissingInputError, StructuralError, warn
from osc_comtrade.io.sources import SourceLike, decode_text, read_bytes

# Заголовки CFF
CFF_HEADER_RE = re.compile(
    rb"^---\s*file\s+type\s*:\s*(?P<file_type>[a-z]+)"
    rb"(?:\s+(?P<data_format>[a-z0-9]+))?"
    rb"\s*(?::\s*(?P<data_size>[0-9]+))?\s*---$",
    re.IGNORECASE)


@dataclass(frozen=True)
class CffHeader:
    file_type: FileType
    data_format: Optional[DataFormat] = None
    data_size: Optional[int] = None


@dataclass(frozen=True)
class CffSections:
    """Содержимое разделов CFF. dat - текст для ASCII, иначе байты."""
    cfg: str
    dat: Union[str, bytes]
    hdr: Optional[str] = None
    inf: Optional[str] = None
    data_format: Optional[DataFormat] = None
    data_size: Optional[int] = None


def match_cff_header(line: Union[bytes, str],
                     line_number: Optional[int] = None) -> Optional[CffHeader]:
    """Возвращает разобранный заголовок раздела или None, если строка - не заголовок."""
    if isinstance(line, str):
        line = line.encode("utf-8")
    m = CFF_HEADER_RE.match(line.strip())
    if m is None:
        return None

    file_type = lookup_token(FILE_TYPES, m.group("file_type").decode("ascii"),
                             "типа раздела CFF", line_number=line_number)
    data_format = None
    if m.group("data_format") is not None:
        data_format = lookup_token(DATA_FORMATS, m.group("data_format").decode("ascii"),
                                   "формата данных раздела DAT", line_number=line_number)
    data_size = None
    if m.group("data_size") is not None:
        data_size = int(m.group("data_size"))
    return CffHeader(file_type, data_format, data_size)


def _strip_line_end(chunk: bytes) -> bytes:
    if chunk.endswith(b"\r\n"):
        return chunk[:-2]
    if chunk.endswith(b"\n"):
        return chunk[:-1]
    return chunk


def demultiplex(source: SourceLike, config: Optional[ParserConfig] = None) -> CffSections:
    """Читает поток CFF целиком и раскладывает строки по разделам."""
    config = config or ParserConfig()
    return CffDemultiplexer(config).split(read_bytes(source))


class CffDemultiplexer:
    """Построчный разборщик CFF, отслеживающий текущий раздел."""

    def __init__(self, config: Optional[ParserConfig] = None):
        self._config = config or ParserConfig()

    def split(self, content: bytes) -> CffSections:
        if content.startswith(b"\xef\xbb\xbf"):
            content = content[3:]

        text_lines: Dict[FileType, List[bytes]] = {
            FileType.CFG: [], FileType.HDR: [], FileType.INF: [], FileType.DAT: []}
        dat_chunks: List[bytes] = []
        seen = set()
        current: Optional[FileType] = None
        data_format: Optional[DataFormat] = None
        data_size: Optional[int] = None
        # двоичный блок заданного размера уже прочитан
        dat_complete = False

        line_number = 0
        pos = 0
        total = len(content)
        while pos < total:
            end = content.find(b"\n", pos)
            next_pos = total if end < 0 else end + 1
            raw_line = content[pos:next_pos]
            line_number += 1

            header = match_cff_header(raw_line, line_number)
            if header is not None:
                if current is FileType.DAT and not dat_complete and dat_chunks:
                    # перевод строки перед заголовком не относится к данным
                    dat_chunks[-1] = _strip_line_end(dat_chunks[-1])
                current = header.file_type
                seen.add(current)
                pos = next_pos
                if current is FileType.DAT:
                    data_format = header.data_format
                    data_size = header.data_size
                    dat_complete = False
                    if data_format is not None and data_format.is_binary \
                            and data_size is not None:
                        block = content[pos:pos + data_size]
                        if len(block) < data_size:
                            raise StructuralError(
                                f"раздел DAT усечён: заявлено {data_size} байт, "
                                f"доступно {len(block)}", line_number=line_number)
                        dat_chunks.append(block)
                        line_number += block.count(b"\n")
                        pos += data_size
                        dat_complete = True
                continue

            if current is None:
                if raw_line.strip():
                    raise StructuralError("содержимое CFF до первого заголовка раздела",
                                          line_number=line_number)
            elif current is FileType.DAT and dat_complete:
                if raw_line.strip():
                    raise StructuralError(
                        "данные после двоичного блока DAT заявленного размера",
                        line_number=line_number)
            elif current is FileType.DAT and data_format is not DataFormat.ASCII:
                # формат неизвестен или двоичный без размера: байты как есть
                dat_chunks.append(raw_line)
            else:
                text_lines[current].append(raw_line.rstrip(b"\r\n"))
            pos = next_pos

        if FileType.CFG not in seen:
            raise MissingInputError("в файле CFF отсутствует раздел CFG")
        if FileType.DAT not in seen:
            raise MissingInputError("в файле CFF отсутствует раздел DAT")

        encodings = self._config.encodings
        if data_format is DataFormat.ASCII:
            dat: Union[str, bytes] = self._join(text_lines[FileType.DAT], encodings)
        else:
            dat = b"".join(dat_chunks)
            if data_size is not None and len(dat) != data_size:
                warn(f"размер раздела DAT {len(dat)} байт не совпадает с заявленным "
                     f"{data_size}", self._config.ignore_warnings)

        return CffSections(
            cfg=self._join(text_lines[FileType.CFG], encodings),
            dat=dat,
            hdr=self._join(text_lines[FileType.HDR], encodings) or None,
            inf=self._join(text_lines[FileType.INF], encodings) or None,
            data_format=data_format,
            data_size=data_size,
        )

    @staticmethod
    def _join(lines: List[bytes], encodings: Sequence[str]) -> str:
        return decode_text(b"\n".join(lines), encodings)
