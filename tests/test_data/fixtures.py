"""
Factory-функции для создания тестовых записей COMTRADE.

Содержимое CFG, DAT и CFF синтезируется в памяти (numpy/struct), чтобы
тесты не зависели от реальных файлов осциллограмм.
"""

import struct
from typing import List, Optional, Sequence, Tuple

import numpy as np

# Строки аналоговых каналов: n,ch_id,ph,ccbm,uu,a,b,skew,min,max,primary,secondary,PS
DEFAULT_ANALOG_ROWS = (
    "1,IA,A,Линия 1,A,0.5,1.0,0,-32768,32767,1000,1,S",
    "2,UA,A,Линия 1,kV,2.0,0,0,-32768,32767,110,0.1,P",
)
# Строки дискретных каналов: n,ch_id,ph,ccbm,y
DEFAULT_STATUS_ROWS = (
    "1,Пуск,,Линия 1,0",
    "2,Откл,,Линия 1,1",
)


def create_cfg_text(
    revision: Optional[str] = "2013",
    analog_rows: Sequence[str] = DEFAULT_ANALOG_ROWS,
    status_rows: Sequence[str] = DEFAULT_STATUS_ROWS,
    sampling_rates: Sequence[Tuple[float, int]] = ((1200, 4),),
    start: str = "01/02/2024,10:00:00.000000",
    trigger: str = "01/02/2024,10:00:00.002500",
    data_format: str = "ASCII",
    time_multiplier: Optional[str] = "1",
    time_codes: str = "+3h00,+3",
    tmq_leap: str = "0,0",
    counts_line: Optional[str] = None,
) -> str:
    """
    Создаёт текст CFG. Набор хвостовых строк зависит от ревизии:
    None - ревизия 1991 (без года в первой строке).
    """
    lines = ["Подстанция 1,REC-01" + (f",{revision}" if revision else "")]
    if counts_line is None:
        counts_line = f"{len(analog_rows) + len(status_rows)},{len(analog_rows)}A,{len(status_rows)}D"
    lines.append(counts_line)
    lines.extend(analog_rows)
    lines.extend(status_rows)
    lines.append("50")
    lines.append(str(len(sampling_rates)))
    if sampling_rates:
        lines.extend(f"{rate:g},{end}" for rate, end in sampling_rates)
    else:
        lines.append("0,0")
    lines.append(start)
    lines.append(trigger)
    lines.append(data_format)
    if revision in ("1999", "2013") and time_multiplier is not None:
        lines.append(time_multiplier)
    if revision == "2013":
        lines.append(time_codes)
        lines.append(tmq_leap)
    return "\n".join(lines) + "\n"


def create_ascii_dat(rows: Sequence[Sequence]) -> str:
    """Создаёт текст ASCII DAT: строки n,ts,аналоговые...,дискретные..."""
    return "".join(",".join("" if v is None else str(v) for v in row) + "\n" for row in rows)


# Строки данных по умолчанию для DEFAULT_ANALOG_ROWS/DEFAULT_STATUS_ROWS
DEFAULT_DAT_ROWS = (
    (1, 0, 10, -5, 0, 1),
    (2, 833, 20, -4, 1, 1),
    (3, 1667, -30, 3, 1, 0),
    (4, 2500, 40, 2, 0, 0),
)


def pack_status_groups(status_row: Sequence[int]) -> List[int]:
    """Упаковывает значения дискретов в 16-битные слова (младший бит - первый канал)."""
    groups = []
    for start in range(0, len(status_row), 16):
        word = 0
        for bit, value in enumerate(status_row[start:start + 16]):
            word |= (int(value) & 1) << bit
        groups.append(word)
    return groups


def create_binary_dat(rows: Sequence[Sequence], analog_count: int,
                      analog_format: str = "h") -> bytes:
    """
    Создаёт двоичный DAT. analog_format - код struct для аналоговых
    значений: "h" (BINARY), "i" (BINARY32), "f" (FLOAT32).
    Временная метка None записывается как 0xFFFFFFFF.
    """
    chunks = []
    for row in rows:
        n, ts = row[0], row[1]
        analog = row[2:2 + analog_count]
        status = row[2 + analog_count:]
        groups = pack_status_groups(status)
        fmt = "<II" + analog_format * analog_count + "H" * len(groups)
        chunks.append(struct.pack(fmt, n, 0xFFFFFFFF if ts is None else ts,
                                  *analog, *groups))
    return b"".join(chunks)


def create_cff_bytes(cfg_text: str, dat: bytes, data_format: str = "ASCII",
                     hdr_text: Optional[str] = None, inf_text: Optional[str] = None,
                     with_size: bool = True) -> bytes:
    """Собирает объединённый файл CFF из разделов."""
    parts = [b"--- file type: CFG ---\n", cfg_text.encode("utf-8")]
    if inf_text is not None:
        parts += [b"--- file type: INF ---\n", inf_text.encode("utf-8") + b"\n"]
    if hdr_text is not None:
        parts += [b"--- file type: HDR ---\n", hdr_text.encode("utf-8") + b"\n"]
    if data_format.upper() == "ASCII":
        parts += [b"--- file type: DAT ASCII ---\n", dat]
    elif with_size:
        parts += [f"--- file type: DAT {data_format}: {len(dat)} ---\n".encode("ascii"), dat]
    else:
        parts += [f"--- file type: DAT {data_format} ---\n".encode("ascii"), dat]
    return b"".join(parts)


def expected_analog(rows: Sequence[Sequence], channel: int, a: float, b: float) -> np.ndarray:
    """Ожидаемые значения канала (номер с 0) после масштабирования raw * a + b."""
    return np.array([row[2 + channel] for row in rows], dtype=np.float64) * a + b
