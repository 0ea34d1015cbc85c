import numpy as np
import pandas as pd
from typing import Any, Dict, Iterable, List, Mapping


class HistoryRecorder:
    """
    Append-only per-iteration logs, one list per stream.

    Each stream is gated by its own reservation flag so callers can opt out of
    expensive streams (e.g. full parameter vectors). Appending to a stream
    that was not reserved is a silent no-op.
    """

    def __init__(self, reservations: Mapping[str, bool]):
        self._reserved: Dict[str, bool] = dict(reservations)
        self._streams: Dict[str, List[Any]] = {name: [] for name in self._reserved}

    @property
    def streams(self) -> List[str]:
        return list(self._streams)

    def is_reserved(self, stream: str) -> bool:
        return self._reserved.get(stream, False)

    def append(self, stream: str, row: Any) -> bool:
        """
        Append a row to a stream if it is reserved.

        Returns:
            True if the row was stored.
        """
        if stream not in self._reserved:
            raise KeyError(f"Unknown history stream: {stream}")
        if not self._reserved[stream]:
            return False
        if isinstance(row, np.ndarray):
            row = row.copy()
        elif isinstance(row, tuple):
            row = tuple(v.copy() if isinstance(v, np.ndarray) else v for v in row)
        self._streams[stream].append(row)
        return True

    def get(self, stream: str) -> List[Any]:
        return list(self._streams.get(stream, []))

    def __len__(self) -> int:
        return max((len(rows) for rows in self._streams.values()), default=0)

    def to_dict(self) -> Dict[str, List[Any]]:
        return {name: list(rows) for name, rows in self._streams.items() if self._reserved[name]}

    def to_frame(self, columns: Mapping[str, Iterable[str]] = None) -> pd.DataFrame:
        """
        Joins the reserved streams into a per-iteration DataFrame.

        Args:
            columns: Optional column names per stream when rows are tuples,
                e.g. {'performance': ['order', 'training_error']}.
        """
        columns = columns or {}
        frames = []
        for name, rows in self._streams.items():
            if not self._reserved[name] or not rows:
                continue
            stream_columns = list(columns.get(name, []))
            if stream_columns and isinstance(rows[0], tuple):
                frame = pd.DataFrame([list(r) for r in rows], columns=stream_columns)
            else:
                frame = pd.DataFrame({name: rows})
            frames.append(frame)

        if not frames:
            return pd.DataFrame()

        merged = pd.concat(frames, axis=1)
        # Streams often repeat the configuration column (e.g. 'order')
        merged = merged.loc[:, ~merged.columns.duplicated()]
        merged.insert(0, 'iteration', range(len(merged)))
        return merged
