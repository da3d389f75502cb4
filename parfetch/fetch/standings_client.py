"""
football-data.org standings: request, decode and TOTAL-table selection.
"""

import logging
from typing import Dict, Iterator, List, Optional

from pydantic import ValidationError

from parfetch.core.config import Settings
from parfetch.core.errors import ConfigError, ExtractionError
from parfetch.fetch.base import BaseFetcher, FetchRequest, check_response
from parfetch.fetch.httpx_fetcher import HttpxFetcher
from parfetch.schemas import Standing, StandingsResponse

logger = logging.getLogger(__name__)


def build_standings_fetcher(settings: Settings) -> HttpxFetcher:
    return HttpxFetcher(
        requests_per_second=settings.STANDINGS_RPS,
        burst=settings.STANDINGS_BURST,
        timeout=settings.STANDINGS_TIMEOUT,
        max_body_bytes=settings.STANDINGS_MAX_BODY,
        user_agent=settings.USER_AGENT,
    )


class StandingsClient:
    def __init__(self, fetcher: BaseFetcher, api_base: str, api_key: Optional[str], competition: str = "PL"):
        if not api_key:
            raise ConfigError("missing API key: set --api-key or FOOTBALL_DATA_API_KEY")
        self.fetcher = fetcher
        self.api_base = api_base.rstrip("/")
        self.api_key = api_key
        self.competition = competition

    def standings_url(self, year: int) -> str:
        return f"{self.api_base}/competitions/{self.competition}/standings?season={year}"

    def request_for(self, year: int) -> FetchRequest:
        return FetchRequest(url=self.standings_url(year), headers={"X-Auth-Token": self.api_key})

    def fetch_standings(self, year: int) -> StandingsResponse:
        result = check_response(self.fetcher.fetch(self.request_for(year)))
        return decode_standings(result.body, url=result.url)


def decode_standings(body: bytes, url: str = "") -> StandingsResponse:
    try:
        return StandingsResponse.model_validate_json(body)
    except ValidationError as e:
        preview = body[:200].decode("utf-8", errors="replace")
        raise ExtractionError(f"unreadable standings payload from {url}: {e.error_count()} error(s); body={preview!r}") from e


def pick_total_table(standings: List[Standing]) -> Standing:
    """The authoritative table is the one typed TOTAL (HOME/AWAY splits are ignored)."""
    for standing in standings:
        if standing.type.strip().upper() == "TOTAL":
            return standing
    raise ExtractionError("no TOTAL table in standings")


def standings_records(season: str, standing: Standing) -> Iterator[Dict[str, object]]:
    for row in standing.table:
        yield {
            "season": season,
            "team_id": str(row.team.id),
            "points": row.points,
            "rank": row.position,
            "goal_diff": row.goal_difference,
        }
