# -*- coding: utf-8 -*-
# MIT License
# Создано на основе библиотеки "comtrade 0.1.2" (Copyright (c) 2018 David Rodrigues Parrini),
# https://pypi.org/project/comtrade/

import math
from typing import Dict, List, Optional, Tuple, Type, Union

import numpy as np

from osc_comtrade.core.config import ParserConfig
from osc_comtrade.core.constants import (
    SEPARATOR, STATUS_GROUP_BITS, TIMESTAMP_MISSING, DataFormat)
from osc_comtrade.core.errors import (
    InvalidNumericError, MalformedLineError, SemanticError, StructuralError, warn)
from osc_comtrade.core.record import RecordBuilder
from osc_comtrade.core.scaling import scale_channels
from osc_comtrade.core.timing import TimestampReconstructor
from osc_comtrade.io.cfg_parser import parse_float, parse_int
from osc_comtrade.io.sources import decode_text


def unpack_status_groups(groups: np.ndarray, status_count: int) -> np.ndarray:
    """
    Распаковывает 16-битные слова дискретных каналов в значения 0/1.

    groups - матрица (выборки x слова). Биты читаются от младшего к старшему,
    слова склеиваются подряд, лишние биты последнего слова отбрасываются.
    """
    groups = np.ascontiguousarray(groups, dtype="<u2")
    if groups.ndim == 1:
        groups = groups.reshape(1, -1)
    as_bytes = groups.view(np.uint8).reshape(groups.shape[0], groups.shape[1] * 2)
    bits = np.unpackbits(as_bytes, axis=1, bitorder="little")
    return np.ascontiguousarray(bits[:, :status_count])


class DatReader:
    """Абстрактный класс DatReader. Используется для разбора содержимого DAT-файла."""

    def __init__(self, builder: RecordBuilder, config: Optional[ParserConfig] = None):
        """Конструктор класса DatReader. Описание каналов берётся из разобранного CFG."""
        self._cfg = builder
        self._config = config or ParserConfig()
        self.sample_numbers = np.empty(0, dtype=np.int64)
        self.timestamps: Tuple[Optional[int], ...] = ()
        self.time = np.empty(0, dtype=np.float64)
        self.analog: List[np.ndarray] = []
        self.status: List[np.ndarray] = []

    @property
    def total_samples(self) -> int:
        """Возвращает общее количество выборок (на канал)."""
        return len(self.sample_numbers)

    @property
    def analog_count(self) -> int:
        return self._cfg.num_analog_channels

    @property
    def status_count(self) -> int:
        return self._cfg.num_status_channels

    def read(self, contents: Union[str, bytes]) -> "DatReader":
        """Разбирает содержимое DAT (текст или байты) и возвращает себя."""
        self.parse(contents)
        return self

    def store(self, builder: RecordBuilder) -> None:
        """Переносит разобранные значения в контекст записи."""
        builder.sample_numbers = self.sample_numbers
        builder.timestamps = self.timestamps
        builder.elapsed_times = self.time
        builder.analog_data = self.analog
        builder.status_data = self.status

    def _reconstructor(self) -> TimestampReconstructor:
        return TimestampReconstructor(
            self._cfg.sampling_rates,
            self._cfg.time_base,
            self._cfg.timestamp_multiplication_factor,
            strict=self._config.strict_sample_rates,
            ignore_warnings=self._config.ignore_warnings)

    def _finish(self, sample_numbers: np.ndarray, timestamps: Tuple[Optional[int], ...],
                raw_analog: np.ndarray, status: np.ndarray,
                line_numbers: Optional[List[int]] = None) -> None:
        """Масштабирует аналоговые значения и вычисляет время выборок."""
        self.sample_numbers = sample_numbers
        self.timestamps = timestamps
        self.time = self._reconstructor().elapsed_times(sample_numbers, timestamps,
                                                        line_numbers)
        self.analog = scale_channels(raw_analog, self._cfg.analog_channels)
        self.status = [np.ascontiguousarray(status[:, i]) for i in range(status.shape[1])]

    def parse(self, contents):
        """Виртуальный метод, разбирает содержимое DAT-файла."""
        raise NotImplementedError


class AsciiDatReader(DatReader):
    """Подкласс DatReader для формата ASCII."""

    def parse(self, contents):
        """Разбирает содержимое файла ASCII."""
        if isinstance(contents, (bytes, bytearray, memoryview)):
            contents = decode_text(bytes(contents), self._config.encodings)

        analog_count = self.analog_count
        status_count = self.status_count
        # номер выборки и временная метка
        expected = analog_count + status_count + 2

        rows = []
        for line_number, line in enumerate(contents.splitlines(), start=1):
            if not line.strip():
                continue
            values = line.split(SEPARATOR)
            if len(values) != expected:
                raise MalformedLineError(line_number, expected, len(values))
            rows.append((line_number, values))

        self._check_row_count(len(rows))

        count = len(rows)
        sample_numbers = np.empty(count, dtype=np.int64)
        raw_analog = np.empty((count, analog_count), dtype=np.float64)
        status = np.empty((count, status_count), dtype=np.uint8)
        timestamps = []
        line_numbers = []
        for irow, (line_number, values) in enumerate(rows):
            line_numbers.append(line_number)
            sample_numbers[irow] = self._parse_int(values[0], "номер выборки", line_number)

            ts_str = values[1].strip()
            timestamps.append(self._parse_int(ts_str, "временная метка", line_number)
                              if ts_str else None)

            for ichannel in range(analog_count):
                raw = values[ichannel + 2].strip()
                raw_analog[irow, ichannel] = parse_float(
                    raw, "аналогового канала", line_number, ichannel + 1)

            for ichannel in range(status_count):
                raw = values[ichannel + analog_count + 2].strip()
                if raw not in ("0", "1"):
                    raise SemanticError(
                        f"значение дискретного канала должно быть 0 или 1, получено '{raw}'",
                        line_number=line_number, channel=ichannel + 1)
                status[irow, ichannel] = int(raw)

        self._finish(sample_numbers, tuple(timestamps), raw_analog, status, line_numbers)

    def _check_row_count(self, count: int) -> None:
        declared = self._cfg.total_samples
        if self._cfg.timestamp_critical or count == declared:
            return
        message = f"в файле DAT {count} выборок, в CFG заявлено {declared}"
        if self._config.strict_sample_count:
            raise StructuralError(message)
        warn(message, self._config.ignore_warnings)

    @staticmethod
    def _parse_int(value: str, what: str, line_number: int) -> int:
        result = parse_int(value.strip(), what, line_number)
        if result < 0:
            raise InvalidNumericError(f"отрицательное значение ({what}): '{value.strip()}'",
                                      line_number=line_number)
        return result


class BinaryDatReader(DatReader):
    """Подкласс DatReader для 16-битного двоичного формата."""
    ANALOG_DTYPE = "<i2"

    def record_dtype(self) -> np.dtype:
        """Структура одной записи: номер, метка, аналоговые значения, слова дискретов."""
        fields = [("sample_number", "<u4"), ("timestamp", "<u4")]
        if self.analog_count > 0:
            fields.append(("analog", self.ANALOG_DTYPE, (self.analog_count,)))
        if self.status_groups > 0:
            fields.append(("status", "<u2", (self.status_groups,)))
        return np.dtype(fields)

    @property
    def status_groups(self) -> int:
        return math.ceil(self.status_count / STATUS_GROUP_BITS)

    def parse(self, contents):
        """Разбирает содержимое двоичного файла DAT."""
        if isinstance(contents, str):
            raise StructuralError("двоичный файл данных передан как текст")
        contents = bytes(contents)

        dtype = self.record_dtype()
        bytes_per_row = dtype.itemsize
        count = self._record_count(len(contents), bytes_per_row)
        records = np.frombuffer(contents, dtype=dtype, count=count)

        sample_numbers = records["sample_number"].astype(np.int64)
        timestamps = tuple(None if ts == TIMESTAMP_MISSING else ts
                           for ts in records["timestamp"].tolist())
        if self.analog_count > 0:
            raw_analog = records["analog"].astype(np.float64)
        else:
            raw_analog = np.empty((count, 0), dtype=np.float64)
        if self.status_groups > 0:
            status = unpack_status_groups(records["status"], self.status_count)
        else:
            status = np.empty((count, 0), dtype=np.uint8)

        self._finish(sample_numbers, timestamps, raw_analog, status)

    def _record_count(self, size: int, bytes_per_row: int) -> int:
        """
        Количество записей задаётся таблицей частот CFG. Без неё (метки
        обязательны) берётся столько целых записей, сколько помещается в файл.
        """
        if self._cfg.timestamp_critical:
            count, remainder = divmod(size, bytes_per_row)
            if remainder:
                warn(f"в конце файла DAT {remainder} лишних байт", self._config.ignore_warnings)
            return count

        count = self._cfg.total_samples
        needed = count * bytes_per_row
        if size < needed:
            raise StructuralError(
                f"двоичный файл данных усечён: ожидалось {needed} байт "
                f"({count} записей по {bytes_per_row}), получено {size}")
        if size > needed:
            warn(f"в конце файла DAT {size - needed} лишних байт", self._config.ignore_warnings)
        return count


class Binary32DatReader(BinaryDatReader):
    """Подкласс DatReader для 32-битного двоичного формата."""
    ANALOG_DTYPE = "<i4"


class Float32DatReader(BinaryDatReader):
    """Подкласс DatReader для двоичного формата с плавающей запятой одинарной точности."""
    ANALOG_DTYPE = "<f4"


DAT_READERS: Dict[DataFormat, Type[DatReader]] = {
    DataFormat.ASCII: AsciiDatReader,
    DataFormat.BINARY16: BinaryDatReader,
    DataFormat.BINARY32: Binary32DatReader,
    DataFormat.FLOAT32: Float32DatReader,
}


def get_dat_reader(builder: RecordBuilder, config: Optional[ParserConfig] = None) -> DatReader:
    """Возвращает читатель DAT для формата, указанного в CFG."""
    return DAT_READERS[builder.data_format](builder, config)
