"""
Unit-тесты вычисления времени выборок и масштабирования аналоговых значений.
"""

import numpy as np
import pytest

from osc_comtrade.core.channels import AnalogChannel, SamplingRate
from osc_comtrade.core.constants import TIME_BASE_MICROSEC, TIME_BASE_NANOSEC, AnalogScalingMode
from osc_comtrade.core.errors import ComtradeWarning, SemanticError
from osc_comtrade.core.scaling import scale_analog, scale_channels
from osc_comtrade.core.timing import FALLBACK_SAMPLE_RATE, TimestampReconstructor


def make_channel(index=1, multiplier=1.0, offset_adder=0.0):
    return AnalogChannel(
        index=index, name=f"U{index}", phase="", circuit_component_being_monitored="",
        units="V", multiplier=multiplier, offset_adder=offset_adder, skew=0.0,
        min_value=-1.0, max_value=1.0, primary_factor=1.0, secondary_factor=1.0,
        scaling_mode=AnalogScalingMode.PRIMARY)


class TestTimestampReconstructor:
    """Время выборок по таблице частот и по временным меткам."""

    @pytest.mark.unit
    def test_single_rate(self):
        timing = TimestampReconstructor([SamplingRate(1200.0, 100)], TIME_BASE_MICROSEC)
        assert timing.elapsed_time(40, None) == pytest.approx(0.0325)
        assert timing.elapsed_time(1, 999) == 0.0

    @pytest.mark.unit
    def test_vectorised_matches_scalar(self):
        rates = [SamplingRate(4800.0, 10), SamplingRate(1200.0, 20)]
        timing = TimestampReconstructor(rates, TIME_BASE_MICROSEC)
        numbers = np.arange(1, 21)
        times = timing.elapsed_times(numbers, [None] * 20)
        expected = [timing.elapsed_time(int(n), None) for n in numbers]
        np.testing.assert_allclose(times, expected)
        assert timing.sample_rate(10) == 4800.0
        assert timing.sample_rate(11) == 1200.0

    @pytest.mark.unit
    def test_uncovered_sample_strict(self):
        timing = TimestampReconstructor([SamplingRate(1200.0, 10)], TIME_BASE_MICROSEC)
        with pytest.raises(SemanticError) as excinfo:
            timing.elapsed_times([9, 10, 11], [None] * 3, line_numbers=[5, 6, 7])
        assert excinfo.value.line_number == 7

    @pytest.mark.unit
    def test_uncovered_sample_fallback(self):
        timing = TimestampReconstructor([SamplingRate(1200.0, 10)], TIME_BASE_MICROSEC,
                                        strict=False)
        with pytest.warns(ComtradeWarning):
            assert timing.sample_rate(11) == FALLBACK_SAMPLE_RATE

    @pytest.mark.unit
    def test_timestamp_critical(self):
        timing = TimestampReconstructor([], TIME_BASE_NANOSEC, time_multiplier=10.0)
        assert timing.timestamp_critical
        np.testing.assert_allclose(timing.elapsed_times([1, 2], [0, 500]), [0.0, 5e-6])

    @pytest.mark.unit
    def test_timestamp_critical_missing(self):
        timing = TimestampReconstructor([], TIME_BASE_MICROSEC)
        with pytest.raises(SemanticError):
            timing.elapsed_time(3, None, line_number=3)
        with pytest.raises(SemanticError):
            timing.elapsed_times([1, 2], [0, None])

    @pytest.mark.unit
    def test_scalar_and_array_agree_on_errors(self):
        """Одиночный и векторный вызовы дают одинаковые значения и ошибки."""
        timing = TimestampReconstructor([SamplingRate(4800.0, 10), SamplingRate(1200.0, 20)],
                                        TIME_BASE_MICROSEC)
        np.testing.assert_array_equal(timing.sample_rates([1, 10, 11, 20]),
                                      [4800.0, 4800.0, 1200.0, 1200.0])
        with pytest.raises(SemanticError) as scalar:
            timing.sample_rate(21, line_number=8)
        with pytest.raises(SemanticError) as array:
            timing.sample_rates([20, 21], line_numbers=[7, 8])
        assert scalar.value.line_number == array.value.line_number == 8

        critical = TimestampReconstructor([], TIME_BASE_NANOSEC, time_multiplier=10.0)
        assert critical.elapsed_time(2, 500) == critical.elapsed_times([2], [500])[0]
        with pytest.raises(SemanticError) as excinfo:
            critical.elapsed_time(3, None, line_number=3)
        assert excinfo.value.line_number == 3

    @pytest.mark.unit
    def test_empty(self):
        timing = TimestampReconstructor([SamplingRate(1200.0, 10)], TIME_BASE_MICROSEC)
        assert len(timing.elapsed_times([], [])) == 0


class TestScaling:
    """Масштабирование value = raw * a + b."""

    @pytest.mark.unit
    def test_scale_analog_exact(self):
        raw = np.array([-32768, -1, 0, 1, 32767])
        np.testing.assert_array_equal(scale_analog(raw, 0.25, -3.0), raw * 0.25 - 3.0)

    @pytest.mark.unit
    def test_scale_channels(self):
        channels = [make_channel(1, 2.0, 1.0), make_channel(2, 0.5, 0.0)]
        raw = np.array([[1, 4], [2, 8], [3, -2]])
        first, second = scale_channels(raw, channels)
        assert first.tolist() == [3.0, 5.0, 7.0]
        assert second.tolist() == [2.0, 4.0, -1.0]

    @pytest.mark.unit
    def test_scale_channels_shape_mismatch(self):
        with pytest.raises(ValueError):
            scale_channels(np.zeros((3, 2)), [make_channel()])

    @pytest.mark.unit
    def test_no_channels(self):
        assert scale_channels(np.empty((5, 0)), []) == []
