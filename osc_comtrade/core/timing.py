from typing import Optional, Sequence

import numpy as np

from osc_comtrade.core.channels import SamplingRate
from osc_comtrade.core.errors import SemanticError, warn

# частота, используемая для выборок вне таблицы при нестрогом режиме
FALLBACK_SAMPLE_RATE = 1.0


class TimestampReconstructor:
    """
    Вычисляет время каждой выборки относительно начала записи, в секундах.

    Если в CFG задана хотя бы одна частота дискретизации, время считается
    по номеру выборки: (n - 1) / частота. Если таблица частот пуста,
    временная метка из DAT обязательна и время равно
    метка * временная база * множитель.
    """

    def __init__(self, sampling_rates: Sequence[SamplingRate], time_base: float,
                 time_multiplier: float = 1.0, strict: bool = True,
                 ignore_warnings: bool = False):
        self._sampling_rates = list(sampling_rates)
        self._ends = np.array([r.end_sample_number for r in self._sampling_rates],
                              dtype=np.int64)
        self._rates = np.array([r.rate_hz for r in self._sampling_rates],
                               dtype=np.float64)
        self.time_base = time_base
        self.time_multiplier = time_multiplier
        self.strict = strict
        self.ignore_warnings = ignore_warnings

    @property
    def timestamp_critical(self) -> bool:
        """Временные метки DAT обязательны (нет фиксированной частоты)."""
        return len(self._sampling_rates) == 0

    def sample_rate(self, sample_number: int, line_number: Optional[int] = None) -> float:
        """Частота дискретизации для выборки n (номер с 1)."""
        return float(self.sample_rates([sample_number], _as_lines(line_number))[0])

    def sample_rates(self, sample_numbers,
                     line_numbers: Optional[Sequence[int]] = None) -> np.ndarray:
        """Частоты дискретизации для массива номеров выборок."""
        sample_numbers = np.asarray(sample_numbers, dtype=np.int64)
        # первая запись таблицы с end_sample_number >= n
        positions = np.searchsorted(self._ends, sample_numbers, side="left")
        uncovered = positions >= len(self._ends)
        rates = np.empty(len(sample_numbers), dtype=np.float64)
        rates[~uncovered] = self._rates[positions[~uncovered]]
        if uncovered.any():
            first = int(np.argmax(uncovered))
            self._uncovered(int(sample_numbers[first]), _line_at(line_numbers, first))
            rates[uncovered] = FALLBACK_SAMPLE_RATE
        return rates

    def elapsed_time(self, sample_number: int, timestamp: Optional[int],
                     line_number: Optional[int] = None) -> float:
        return float(self.elapsed_times([sample_number], [timestamp],
                                        _as_lines(line_number))[0])

    def elapsed_times(self, sample_numbers, timestamps: Sequence[Optional[int]],
                      line_numbers: Optional[Sequence[int]] = None) -> np.ndarray:
        """Время всех выборок записи."""
        sample_numbers = np.asarray(sample_numbers, dtype=np.int64)
        if len(sample_numbers) == 0:
            return np.empty(0, dtype=np.float64)

        if not self.timestamp_critical:
            return (sample_numbers - 1) / self.sample_rates(sample_numbers, line_numbers)

        missing = [i for i, ts in enumerate(timestamps) if ts is None]
        if missing:
            first = missing[0]
            raise SemanticError(
                f"отсутствует временная метка выборки {int(sample_numbers[first])}, "
                "а частота дискретизации не задана",
                line_number=_line_at(line_numbers, first))
        values = np.array(timestamps, dtype=np.float64)
        return values * self.time_base * self.time_multiplier

    def _uncovered(self, sample_number: int, line_number: Optional[int]) -> None:
        message = (f"номер выборки {sample_number} не покрыт таблицей частот "
                   f"дискретизации")
        if self.strict:
            raise SemanticError(message, line_number=line_number)
        warn(f"{message}; используется {FALLBACK_SAMPLE_RATE} Гц", self.ignore_warnings)


def _as_lines(line_number: Optional[int]) -> Optional[Sequence[int]]:
    return None if line_number is None else [line_number]


def _line_at(line_numbers: Optional[Sequence[int]], position: int) -> Optional[int]:
    if line_numbers is None:
        return None
    return line_numbers[position]
