import datetime as dt
from dataclasses import dataclass, field, fields
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from osc_comtrade.core.channels import (
    AnalogChannel, SamplingRate, StatusChannel, readonly_array)
from osc_comtrade.core.constants import (
    TIME_BASE_MICROSEC, DataFormat, FormatRevision, LeapSecondStatus, TimeQuality)
from osc_comtrade.core.errors import IncompleteRecordError, SemanticError


@dataclass(frozen=True)
class Comtrade:
    """
    Неизменяемая запись COMTRADE: описание из CFG и значения из DAT.

    Массивы выборок (sample_numbers, elapsed_times, data каналов) доступны
    только для чтения и не участвуют в сравнении записей через ==.
    """
    station_name: str
    recording_device_id: str
    revision: FormatRevision
    num_total_channels: int
    num_analog_channels: int
    num_status_channels: int
    line_frequency: float
    sampling_rates: Tuple[SamplingRate, ...]
    start_time: dt.datetime
    trigger_time: dt.datetime
    data_format: DataFormat
    analog_channels: Tuple[AnalogChannel, ...]
    status_channels: Tuple[StatusChannel, ...]
    timestamp_multiplication_factor: float = 1.0
    time_base: float = TIME_BASE_MICROSEC
    # ревизия 2013
    time_offset: Optional[dt.timezone] = None
    local_offset: Optional[dt.timezone] = None
    time_quality: Optional[TimeQuality] = None
    leap_second_status: Optional[LeapSecondStatus] = None
    # значения по выборкам
    sample_numbers: np.ndarray = field(
        default_factory=lambda: readonly_array([], np.int64), compare=False, repr=False)
    timestamps: Tuple[Optional[int], ...] = field(default=(), compare=False, repr=False)
    elapsed_times: np.ndarray = field(
        default_factory=lambda: readonly_array([], np.float64), compare=False, repr=False)
    # файлы HDR и INF не разбираются
    header_text: Optional[str] = field(default=None, repr=False)
    info_text: Optional[str] = field(default=None, repr=False)

    @property
    def total_samples(self) -> int:
        """Возвращает общее количество выборок (на канал)."""
        return len(self.sample_numbers)

    @property
    def timestamp_critical(self) -> bool:
        """Возвращает, должен ли файл DAT содержать временные метки."""
        return len(self.sampling_rates) == 0

    @property
    def trigger_offset(self) -> float:
        """Возвращает время срабатывания относительно начала записи, в секундах."""
        return (self.trigger_time - self.start_time).total_seconds()

    def analog_channel(self, name: str) -> AnalogChannel:
        for channel in self.analog_channels:
            if channel.name == name:
                return channel
        raise KeyError(name)

    def status_channel(self, name: str) -> StatusChannel:
        for channel in self.status_channels:
            if channel.name == name:
                return channel
        raise KeyError(name)

    def cfg_summary(self) -> str:
        """Возвращает строку с краткой информацией об атрибутах CFG."""
        header_line = "Каналы (всего,А,Д): {}A + {}D = {}"
        sample_line = "Частота дискретизации {} Гц до выборки #{}"
        interval_line = "От {} до {} с множителем времени = {}"
        format_line = "{} формат"

        lines = [header_line.format(self.num_analog_channels, self.num_status_channels,
                                    self.num_total_channels),
                 "Частота сети: {} Гц".format(self.line_frequency)]
        if self.timestamp_critical:
            lines.append("Частота дискретизации не задана, используются временные метки")
        for rate in self.sampling_rates:
            lines.append(sample_line.format(rate.rate_hz, rate.end_sample_number))
        lines.append(interval_line.format(self.start_time, self.trigger_time,
                                          self.timestamp_multiplication_factor))
        lines.append(format_line.format(self.data_format.value))
        return "\n".join(lines)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Преобразует загруженные данные осциллограммы в pandas DataFrame.

        Возвращает:
            pandas.DataFrame: DataFrame с временной колонкой и колонками для каждого
                              аналогового и дискретного канала.
        """
        if self.total_samples == 0:
            return pd.DataFrame()

        data = {'Time': np.array(self.elapsed_times)}
        for i, channel in enumerate(self.analog_channels):
            # дубликаты имён получают суффикс
            name = channel.name if channel.name not in data else f"{channel.name}_{i}"
            data[name] = np.array(channel.data)
        for i, channel in enumerate(self.status_channels):
            name = channel.name if channel.name not in data else f"{channel.name}_status_{i}"
            data[name] = np.array(channel.data)
        return pd.DataFrame(data)


@dataclass
class RecordBuilder:
    """
    Изменяемый контекст разбора. Поля заполняются по мере чтения CFG и DAT,
    затем build() проверяет полноту и собирает неизменяемую запись Comtrade.
    """
    station_name: Optional[str] = None
    recording_device_id: Optional[str] = None
    revision: Optional[FormatRevision] = None
    num_total_channels: Optional[int] = None
    num_analog_channels: Optional[int] = None
    num_status_channels: Optional[int] = None
    analog_channels: Optional[List[AnalogChannel]] = None
    status_channels: Optional[List[StatusChannel]] = None
    line_frequency: Optional[float] = None
    sampling_rates: Optional[List[SamplingRate]] = None
    start_time: Optional[dt.datetime] = None
    trigger_time: Optional[dt.datetime] = None
    time_base: float = TIME_BASE_MICROSEC
    data_format: Optional[DataFormat] = None
    timestamp_multiplication_factor: float = 1.0
    time_offset: Optional[dt.timezone] = None
    local_offset: Optional[dt.timezone] = None
    time_quality: Optional[TimeQuality] = None
    leap_second_status: Optional[LeapSecondStatus] = None
    sample_numbers: Optional[np.ndarray] = None
    timestamps: Optional[Tuple[Optional[int], ...]] = None
    elapsed_times: Optional[np.ndarray] = None
    analog_data: Optional[List[np.ndarray]] = None
    status_data: Optional[List[np.ndarray]] = None
    header_text: Optional[str] = None
    info_text: Optional[str] = None

    # поля, которые могут отсутствовать в готовой записи
    OPTIONAL_FIELDS = ("time_offset", "local_offset", "time_quality",
                       "leap_second_status", "header_text", "info_text")

    @property
    def total_samples(self) -> int:
        """Количество выборок по таблице частот: наибольший end_sample_number."""
        if not self.sampling_rates:
            return 0
        return max(rate.end_sample_number for rate in self.sampling_rates)

    @property
    def timestamp_critical(self) -> bool:
        return not self.sampling_rates

    def build(self) -> Comtrade:
        missing = [f.name for f in fields(self)
                   if f.name not in self.OPTIONAL_FIELDS and getattr(self, f.name) is None]
        if missing:
            raise IncompleteRecordError(
                "запись COMTRADE не может быть собрана, не заполнены поля: "
                + ", ".join(missing))

        self._check_counts()
        sample_count = len(self.sample_numbers)
        for channel, data in zip(self.analog_channels, self.analog_data):
            self._check_length(channel.index, len(data), sample_count)
        for channel, data in zip(self.status_channels, self.status_data):
            self._check_length(channel.index, len(data), sample_count)
        self._check_length(None, len(self.elapsed_times), sample_count)
        self._check_length(None, len(self.timestamps), sample_count)

        return Comtrade(
            station_name=self.station_name,
            recording_device_id=self.recording_device_id,
            revision=self.revision,
            num_total_channels=self.num_total_channels,
            num_analog_channels=self.num_analog_channels,
            num_status_channels=self.num_status_channels,
            line_frequency=self.line_frequency,
            sampling_rates=tuple(self.sampling_rates),
            start_time=self.start_time,
            trigger_time=self.trigger_time,
            data_format=self.data_format,
            analog_channels=tuple(channel.with_data(data) for channel, data
                                  in zip(self.analog_channels, self.analog_data)),
            status_channels=tuple(channel.with_data(data) for channel, data
                                  in zip(self.status_channels, self.status_data)),
            timestamp_multiplication_factor=self.timestamp_multiplication_factor,
            time_base=self.time_base,
            time_offset=self.time_offset,
            local_offset=self.local_offset,
            time_quality=self.time_quality,
            leap_second_status=self.leap_second_status,
            sample_numbers=readonly_array(self.sample_numbers, np.int64),
            timestamps=tuple(self.timestamps),
            elapsed_times=readonly_array(self.elapsed_times, np.float64),
            header_text=self.header_text,
            info_text=self.info_text,
        )

    def _check_counts(self) -> None:
        if len(self.analog_channels) != self.num_analog_channels:
            raise SemanticError(f"описано {len(self.analog_channels)} аналоговых каналов "
                                f"вместо {self.num_analog_channels}")
        if len(self.status_channels) != self.num_status_channels:
            raise SemanticError(f"описано {len(self.status_channels)} дискретных каналов "
                                f"вместо {self.num_status_channels}")
        if self.num_analog_channels + self.num_status_channels != self.num_total_channels:
            raise SemanticError(
                f"общее количество каналов {self.num_total_channels} не равно сумме "
                f"{self.num_analog_channels}A + {self.num_status_channels}D")
        if len(self.analog_data) != self.num_analog_channels or \
                len(self.status_data) != self.num_status_channels:
            raise SemanticError("количество массивов значений не совпадает с количеством каналов")

    @staticmethod
    def _check_length(channel: Optional[int], actual: int, expected: int) -> None:
        if actual != expected:
            raise SemanticError(
                f"длина массива значений {actual} не равна количеству выборок {expected}",
                channel=channel)
