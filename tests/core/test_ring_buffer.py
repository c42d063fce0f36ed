"""
Tests for the bounded ring buffer behind the running climate windows.
"""
import numpy as np
import pytest

from phenoforce.core.exceptions import BufferContractError
from phenoforce.core.state import RingBuffer


class TestRingBuffer:
    """Test suite for RingBuffer"""

    @pytest.fixture
    def buffer(self):
        return RingBuffer(5)

    def test_invalid_capacity(self):
        with pytest.raises(BufferContractError):
            RingBuffer(0)

    def test_partial_fill(self, buffer):
        buffer.add(1.0)
        buffer.add(2.0)
        assert len(buffer) == 2
        assert not buffer.full
        assert buffer.mean() == pytest.approx(1.5)
        assert buffer.sum() == pytest.approx(3.0)
        np.testing.assert_array_equal(buffer.to_array(), [1.0, 2.0])

    def test_wraps_around_and_drops_oldest(self, buffer):
        for value in range(1, 8):
            buffer.add(float(value))

        assert buffer.full
        np.testing.assert_array_equal(buffer.to_array(), [3.0, 4.0, 5.0, 6.0, 7.0])
        assert buffer[0] == 3.0
        assert buffer.lastadd == 7.0
        assert buffer.mean() == pytest.approx(5.0)

    def test_trailing_window(self, buffer):
        for value in range(1, 8):
            buffer.push(float(value))

        assert buffer.periodic_sum(2) == pytest.approx(13.0)
        assert buffer.periodic_mean(3) == pytest.approx(6.0)

    def test_window_larger_than_contents_uses_available_values(self, buffer):
        buffer.add(4.0)
        buffer.add(6.0)
        assert buffer.periodic_mean(4) == pytest.approx(5.0)

    @pytest.mark.parametrize("n", [0, -1, 6])
    def test_window_outside_capacity(self, buffer, n):
        buffer.add(1.0)
        with pytest.raises(BufferContractError):
            buffer.periodic_sum(n)

    def test_empty_buffer_statistics(self, buffer):
        with pytest.raises(BufferContractError):
            buffer.mean()
        with pytest.raises(BufferContractError):
            buffer.lastadd
