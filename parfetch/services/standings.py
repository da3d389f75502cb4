from typing import Dict, Iterator, Optional

from parfetch.core.config import Settings, settings as default_settings
from parfetch.fbref.utils import parse_seasons
from parfetch.fetch.base import BaseFetcher
from parfetch.fetch.standings_client import (
    StandingsClient,
    build_standings_fetcher,
    pick_total_table,
    standings_records,
)
from parfetch.output.writer import STANDINGS_COLUMNS
from parfetch.schemas import RunSummary
from parfetch.services.runner import SeasonCursor, run_seasons


def standings_season_records(client: StandingsClient, cursor: SeasonCursor) -> Iterator[Dict[str, object]]:
    cursor.url = client.standings_url(cursor.year)
    response = client.fetch_standings(cursor.year)
    table = pick_total_table(response.standings)
    return standings_records(cursor.label, table)


def run_standings(settings: Settings = default_settings, fetcher: Optional[BaseFetcher] = None) -> RunSummary:
    """Fetch final league tables from football-data.org and write the team outcomes CSV."""
    settings.validate()
    years = parse_seasons(settings.SEASONS)

    owned = fetcher is None
    fetcher = fetcher or build_standings_fetcher(settings)
    try:
        client = StandingsClient(
            fetcher,
            api_base=settings.FOOTBALL_DATA_API_BASE,
            api_key=settings.FOOTBALL_DATA_API_KEY,
            competition=settings.FOOTBALL_DATA_COMPETITION,
        )
        return run_seasons(
            "standings", years, settings.STANDINGS_OUT, STANDINGS_COLUMNS,
            lambda cursor: standings_season_records(client, cursor),
        )
    finally:
        if owned:
            fetcher.close()
