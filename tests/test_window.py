"""Test transfer window arithmetic"""

import math

import pytest
from pullchunk.transfer.window import TransferWindow


class TestTransferWindow:
    """Window creation and advancement"""

    def test_initial_window_is_first_chunk(self):
        window = TransferWindow.create("a", total_length=100, chunk_size=30)
        assert window.bounds == (0, 30)
        assert not window.is_terminal

    def test_initial_window_shorter_than_chunk(self):
        window = TransferWindow.create("a", total_length=10, chunk_size=30)
        assert window.bounds == (0, 10)

    def test_zero_length_is_terminal(self):
        window = TransferWindow.create("a", total_length=0, chunk_size=30)
        assert window.bounds == (0, 0)
        assert window.is_terminal
        assert window.total_chunks == 0

    @pytest.mark.parametrize("length,chunk", [(1, 1), (99, 10), (100, 10), (101, 10), (5, 1000)])
    def test_visits_ceil_length_over_chunk_windows(self, length, chunk):
        """Number of non-terminal windows equals ceil(L / C)"""
        window = TransferWindow.create("a", total_length=length, chunk_size=chunk)
        visited = 0

        while not window.is_terminal:
            left, right = window.bounds
            assert 0 <= left <= right <= length
            assert right - left <= chunk
            visited += 1
            window.advance()

        assert visited == math.ceil(length / chunk)
        assert window.bounds == (length, length)
        assert window.chunks_acknowledged == window.total_chunks
        assert window.remaining_chunks == 0

    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            TransferWindow.create("a", total_length=10, chunk_size=0)
        with pytest.raises(ValueError):
            TransferWindow.create("a", total_length=-1, chunk_size=10)

    def test_copy_is_detached(self):
        window = TransferWindow.create("a", total_length=100, chunk_size=30)
        copy = window.copy()
        window.advance()

        assert copy.bounds == (0, 30)
        assert window.bounds == (30, 60)

    def test_to_dict(self):
        window = TransferWindow.create("a", total_length=100, chunk_size=30)
        data = window.to_dict()

        assert data == {
            'source_id': 'a',
            'left': 0,
            'right': 30,
            'total_length': 100,
            'chunks_acknowledged': 0,
            'total_chunks': 4
        }
