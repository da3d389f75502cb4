import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Sequence, Union

from parfetch.core.errors import ParFetchError, RateLimited
from parfetch.fbref.utils import season_label
from parfetch.output.writer import CsvSink
from parfetch.schemas import RunSummary, SeasonResult

logger = logging.getLogger(__name__)

# Runs never overlap, whoever starts them (CLI or API), so requests stay sequential
_RUN_LOCK = threading.Lock()


@dataclass
class SeasonCursor:
    """Tracks which URL a season is working on, so failures can name it."""
    year: int
    label: str
    url: Optional[str] = None


SeasonFn = Callable[[SeasonCursor], Iterable[Dict[str, object]]]


def run_seasons(
    kind: str,
    years: Sequence[int],
    path: Union[str, Path],
    columns: Sequence[str],
    season_fn: SeasonFn,
) -> RunSummary:
    """
    Process seasons one after another, writing each season before the next starts.

    The output file is opened (and replaced) only once the run holds the lock,
    so a second run on the same path waits instead of truncating this one.
    A ParFetchError fails only its season; RateLimited stops the run so no
    further requests reach the remote. Anything else (output I/O, bugs)
    propagates.
    """
    with _RUN_LOCK:
        sink = CsvSink(path, columns)
        summary = RunSummary(kind=kind, output_path=str(sink.path))
        for year in years:
            cursor = SeasonCursor(year=year, label=season_label(year))
            try:
                records = list(season_fn(cursor))
            except RateLimited as e:
                logger.error("Season %s: %s; stopping run", cursor.label, e)
                summary.seasons.append(_failure(cursor, e))
                summary.aborted = True
                break
            except ParFetchError as e:
                logger.error("Season %s: failed at %s: %s", cursor.label, cursor.url or "-", e)
                summary.seasons.append(_failure(cursor, e))
                continue

            wrote = sink.write(records)
            summary.seasons.append(SeasonResult(season=cursor.label, ok=True, rows=wrote))
            logger.info("Season %s: wrote %d %s rows", cursor.label, wrote, kind)
        summary.total_rows = sink.rows_written

    failed = len(summary.failed)
    logger.info(
        "Done. Wrote %d total rows to %s (%d season(s) failed%s)",
        summary.total_rows, sink.path, failed, ", run aborted" if summary.aborted else "",
    )
    return summary


def _failure(cursor: SeasonCursor, err: Exception) -> SeasonResult:
    url = getattr(err, "url", None) or cursor.url
    return SeasonResult(season=cursor.label, ok=False, url=url, error=f"{type(err).__name__}: {err}")
