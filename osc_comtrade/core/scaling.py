from typing import List, Sequence

import numpy as np

from osc_comtrade.core.channels import AnalogChannel


def scale_analog(raw, multiplier: float, offset_adder: float) -> np.ndarray:
    """Переводит отсчёты канала в физические единицы: raw * a + b."""
    return np.asarray(raw, dtype=np.float64) * multiplier + offset_adder


def scale_channels(raw: np.ndarray, channels: Sequence[AnalogChannel]) -> List[np.ndarray]:
    """
    Масштабирует матрицу отсчётов (выборки x каналы) по описаниям каналов.

    Преобразование одинаково для ASCII и двоичных форматов и не зависит
    от признака первичных/вторичных величин. Возвращает список массивов,
    по одному на канал, в порядке объявления.
    """
    raw = np.asarray(raw, dtype=np.float64)
    if raw.ndim != 2 or raw.shape[1] != len(channels):
        raise ValueError(f"ожидалась матрица (N, {len(channels)}), получено {raw.shape}")
    # вспомогательные векторы (усиления и смещения каналов)
    a = np.array([channel.multiplier for channel in channels], dtype=np.float64)
    b = np.array([channel.offset_adder for channel in channels], dtype=np.float64)
    scaled = raw * a + b
    return [np.ascontiguousarray(scaled[:, i]) for i in range(len(channels))]
