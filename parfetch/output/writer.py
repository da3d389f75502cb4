import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Sequence, Union

import pandas as pd

from parfetch.schemas import JoinedRow

logger = logging.getLogger(__name__)

# Column order is read positionally by the PAR backtester; never reorder.
BACKTESTER_COLUMNS = (
    "season",
    "from_league",
    "dest_league",
    "player",
    "team",
    "minutes",
    "goals",
    "assists",
    "shots",
    "shots_on_target",
    "xg",
    "npxg",
    "xag",
)

STANDINGS_COLUMNS = ("season", "team_id", "points", "rank", "goal_diff")


def format_cell(value: Any) -> str:
    """None -> '', 90.0 -> '90', 0.85 -> '0.85'"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    return str(value)


def backtester_record(row: JoinedRow) -> Dict[str, Any]:
    return row.model_dump(include=set(BACKTESTER_COLUMNS))


class CsvSink:
    """
    One output CSV for a whole run: the header is written when the sink is
    opened (replacing any previous file), then each season's rows are appended.
    """

    def __init__(self, path: Union[str, Path], columns: Sequence[str]):
        self.path = Path(path)
        self.columns = list(columns)
        self.rows_written = 0
        self.path.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame(columns=self.columns).to_csv(self.path, index=False)

    def write(self, records: Iterable[Dict[str, Any]]) -> int:
        """Append records (dicts keyed by column). Returns how many rows were written."""
        data = [[format_cell(rec.get(c)) for c in self.columns] for rec in records]
        if not data:
            return 0
        df = pd.DataFrame(data, columns=self.columns)
        df.to_csv(self.path, mode="a", header=False, index=False)
        self.rows_written += len(data)
        logger.debug("appended %d rows to %s", len(data), self.path)
        return len(data)
