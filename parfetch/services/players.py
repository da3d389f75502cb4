from typing import Dict, Iterator, Optional

from parfetch.core.config import Settings, settings as default_settings
from parfetch.fbref.extract import extract_table
from parfetch.fbref.join import join_standard_shooting
from parfetch.fbref.parse import SHOOTING_CANDIDATES, STANDARD_COLUMNS, parse_player_table, parse_with_fallback
from parfetch.fbref.urls import shooting_url, standard_url
from parfetch.fbref.utils import parse_seasons
from parfetch.fetch.base import BaseFetcher, check_response
from parfetch.fetch.requests_fetcher import RequestsFetcher
from parfetch.output.writer import BACKTESTER_COLUMNS, backtester_record
from parfetch.schemas import RunSummary
from parfetch.services.runner import SeasonCursor, run_seasons


def build_fbref_fetcher(settings: Settings) -> RequestsFetcher:
    return RequestsFetcher(
        requests_per_second=settings.FBREF_RPS,
        burst=settings.FBREF_BURST,
        timeout=settings.FBREF_TIMEOUT,
        max_body_bytes=settings.FBREF_MAX_BODY,
        user_agent=settings.USER_AGENT,
    )


def _fetch_page(fetcher: BaseFetcher, cursor: SeasonCursor, url: str) -> bytes:
    cursor.url = url
    return check_response(fetcher.get(url)).body


def player_season_records(fetcher: BaseFetcher, cursor: SeasonCursor, settings: Settings) -> Iterator[Dict[str, object]]:
    """Fetch, extract, parse and join one season; yields backtester records in standard-table order."""
    std_page = _fetch_page(fetcher, cursor, standard_url(cursor.year, settings))
    sho_page = _fetch_page(fetcher, cursor, shooting_url(cursor.year, settings))

    cursor.url = standard_url(cursor.year, settings)
    std_table = extract_table(std_page, "stats_standard")
    std_rows = parse_player_table(std_table, STANDARD_COLUMNS.columns, season=cursor.label)

    cursor.url = shooting_url(cursor.year, settings)
    sho_table = extract_table(sho_page, "stats_shooting")
    sho_rows = parse_with_fallback(sho_table, SHOOTING_CANDIDATES, season=cursor.label)

    cursor.url = None
    joined = join_standard_shooting(cursor.label, std_rows, sho_rows, settings.DEST_LEAGUE, settings.FROM_LEAGUE)
    for row in joined:
        yield backtester_record(row)


def run_player_metrics(settings: Settings = default_settings, fetcher: Optional[BaseFetcher] = None) -> RunSummary:
    """
    Fetch FBref standard + shooting tables for every configured season and
    write the joined player metrics CSV.
    """
    settings.validate()
    years = parse_seasons(settings.SEASONS)

    owned = fetcher is None
    fetcher = fetcher or build_fbref_fetcher(settings)
    try:
        return run_seasons(
            "players", years, settings.PLAYERS_OUT, BACKTESTER_COLUMNS,
            lambda cursor: player_season_records(fetcher, cursor, settings),
        )
    finally:
        if owned:
            fetcher.close()
