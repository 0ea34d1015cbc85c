import numpy as np
from enum import Enum
from typing import List, Tuple

from utils.exceptions import SearchStateError


class PositionStatus(str, Enum):
    PENDING = "pending"      # not scored yet in the current round
    SCORED = "scored"        # holds an error measured in the current round
    EXCLUDED = "excluded"    # never reconsidered until reset()


class ErrorRatioTable:
    """
    Selection error obtained when each input position is hypothetically
    removed.

    Each position carries an explicit status instead of a numeric sentinel,
    so a legitimately huge error can never be confused with an excluded
    position. Only positions scored in the current round take part in the
    minimum search.
    """

    def __init__(self, size: int = 0):
        self.reset(size)

    def reset(self, size: int) -> None:
        """Start of a run: every entry back to 0 and PENDING."""
        self.errors = np.zeros(size, dtype=float)
        self.status: List[PositionStatus] = [PositionStatus.PENDING] * size

    def __len__(self) -> int:
        return len(self.status)

    def begin_round(self) -> None:
        """Scores from the previous round are stale; excluded positions stay excluded."""
        self.status = [PositionStatus.EXCLUDED if st == PositionStatus.EXCLUDED else PositionStatus.PENDING
                       for st in self.status]

    def is_excluded(self, position: int) -> bool:
        return self.status[position] == PositionStatus.EXCLUDED

    def candidate_positions(self) -> List[int]:
        """Positions that may be scored this round, in ascending order."""
        return [i for i, st in enumerate(self.status) if st != PositionStatus.EXCLUDED]

    def record(self, position: int, error: float) -> None:
        if self.is_excluded(position):
            raise SearchStateError(f"Position {position} is excluded and cannot be scored.")
        self.errors[position] = float(error)
        self.status[position] = PositionStatus.SCORED

    def exclude(self, position: int) -> None:
        self.status[position] = PositionStatus.EXCLUDED

    def best(self) -> Tuple[int, float]:
        """
        Position with the minimum scored error; the first occurrence wins ties.

        Raises:
            SearchStateError: Nothing was scored this round.
        """
        scored = [i for i, st in enumerate(self.status) if st == PositionStatus.SCORED]
        if not scored:
            raise SearchStateError("Error ratio table has no scored positions.")
        values = self.errors[scored]
        k = int(np.argmin(values))
        return scored[k], float(values[k])
