import pytest

from modules.inputs_selection import ErrorRatioTable, PositionStatus
from utils.exceptions import SearchStateError


class TestErrorRatioTable:

    def test_reset(self):
        table = ErrorRatioTable(4)
        assert len(table) == 4
        assert table.errors.tolist() == [0.0] * 4
        assert table.status == [PositionStatus.PENDING] * 4
        assert table.candidate_positions() == [0, 1, 2, 3]

    def test_best_first_minimum_wins(self):
        table = ErrorRatioTable(4)
        for position, error in enumerate([0.5, 0.2, 0.2, 0.9]):
            table.record(position, error)
        assert table.best() == (1, 0.2)

    def test_excluded_positions_are_skipped(self):
        table = ErrorRatioTable(3)
        table.exclude(1)
        assert table.candidate_positions() == [0, 2]
        assert table.is_excluded(1)
        with pytest.raises(SearchStateError):
            table.record(1, 0.1)

    def test_large_error_is_not_exclusion(self):
        table = ErrorRatioTable(2)
        table.record(0, 1e20)
        table.record(1, 1e21)
        assert table.best() == (0, 1e20)
        assert not table.is_excluded(0)

    def test_begin_round_clears_scores_keeps_exclusions(self):
        table = ErrorRatioTable(3)
        table.record(0, 0.1)
        table.record(1, 0.2)
        table.exclude(2)
        table.begin_round()
        assert table.status == [PositionStatus.PENDING, PositionStatus.PENDING, PositionStatus.EXCLUDED]
        with pytest.raises(SearchStateError):
            table.best()

    def test_only_current_round_scores_compete(self):
        table = ErrorRatioTable(3)
        table.record(0, 0.1)
        table.begin_round()
        table.record(1, 0.5)
        assert table.best() == (1, 0.5)

    def test_reset_clears_exclusions(self):
        table = ErrorRatioTable(2)
        table.exclude(0)
        table.reset(2)
        assert table.candidate_positions() == [0, 1]
