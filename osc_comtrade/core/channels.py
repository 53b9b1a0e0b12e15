import dataclasses
from dataclasses import dataclass, field

import numpy as np

from osc_comtrade.core.constants import AnalogScalingMode
from osc_comtrade.core.errors import SemanticError


def readonly_array(values, dtype) -> np.ndarray:
    """Копирует значения в новый массив numpy и запрещает запись в него."""
    array = np.array(values, dtype=dtype, copy=True)
    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class SamplingRate:
    """Частота дискретизации и номер последней выборки (не индекс), к которой она относится."""
    rate_hz: float
    end_sample_number: int


@dataclass(frozen=True)
class AnalogChannel:
    """Хранит данные описания аналогового канала и его значения в физических единицах."""
    index: int
    name: str
    phase: str
    circuit_component_being_monitored: str
    units: str
    multiplier: float
    offset_adder: float
    # смещение по времени относительно выборки, мкс
    skew: float
    min_value: float
    max_value: float
    primary_factor: float
    secondary_factor: float
    scaling_mode: AnalogScalingMode
    data: np.ndarray = field(default_factory=lambda: readonly_array([], np.float64),
                             compare=False, repr=False)

    def with_data(self, data) -> "AnalogChannel":
        """Возвращает копию описания канала с заданными значениями."""
        return dataclasses.replace(self, data=readonly_array(data, np.float64))

    def to_primary(self) -> np.ndarray:
        """Возвращает значения канала в первичных величинах."""
        if self.scaling_mode is AnalogScalingMode.PRIMARY:
            return self.data.copy()
        return self.data * self._ratio(self.primary_factor, self.secondary_factor)

    def to_secondary(self) -> np.ndarray:
        """Возвращает значения канала во вторичных величинах."""
        if self.scaling_mode is AnalogScalingMode.SECONDARY:
            return self.data.copy()
        return self.data * self._ratio(self.secondary_factor, self.primary_factor)

    def _ratio(self, numerator: float, denominator: float) -> float:
        if denominator == 0:
            raise SemanticError("нулевой коэффициент трансформации, пересчёт "
                                "первичных/вторичных величин невозможен",
                                channel=self.index)
        return numerator / denominator

    def __str__(self):
        fields = [str(self.index), self.name, self.phase,
                  self.circuit_component_being_monitored, self.units,
                  str(self.multiplier), str(self.offset_adder), str(self.skew),
                  str(self.min_value), str(self.max_value),
                  str(self.primary_factor), str(self.secondary_factor),
                  self.scaling_mode.value]
        return ','.join(fields)


@dataclass(frozen=True)
class StatusChannel:
    """Хранит данные описания дискретного канала и его значения (0 или 1)."""
    index: int
    name: str
    phase: str
    circuit_component_being_monitored: str
    normal_status_value: int
    data: np.ndarray = field(default_factory=lambda: readonly_array([], np.uint8),
                             compare=False, repr=False)

    def with_data(self, data) -> "StatusChannel":
        return dataclasses.replace(self, data=readonly_array(data, np.uint8))

    def __str__(self):
        fields = [str(self.index), self.name, self.phase,
                  self.circuit_component_being_monitored,
                  str(self.normal_status_value)]
        return ','.join(fields)
