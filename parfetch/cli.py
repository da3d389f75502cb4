import argparse
import logging
import sys
from typing import List, Optional

from parfetch.core.config import Settings
from parfetch.core.errors import ConfigError
from parfetch.core.log import init_logger
from parfetch.schemas import RunSummary
from parfetch.services.players import run_player_metrics
from parfetch.services.standings import run_standings

EXIT_OK = 0
EXIT_SEASON_FAILURES = 1
EXIT_CONFIG = 2

logger = logging.getLogger(__name__)

# flag dest -> Settings attribute, per command
_COMMON = {"seasons": "SEASONS", "ua": "USER_AGENT", "log_level": "LOG_LEVEL"}
_PLAYERS = {
    "out": "PLAYERS_OUT", "rps": "FBREF_RPS", "burst": "FBREF_BURST", "timeout": "FBREF_TIMEOUT",
    "max_body": "FBREF_MAX_BODY", "dest_league": "DEST_LEAGUE", "from_league": "FROM_LEAGUE",
}
_STANDINGS = {
    "out": "STANDINGS_OUT", "rps": "STANDINGS_RPS", "burst": "STANDINGS_BURST", "timeout": "STANDINGS_TIMEOUT",
    "max_body": "STANDINGS_MAX_BODY", "api_base": "FOOTBALL_DATA_API_BASE", "api_key": "FOOTBALL_DATA_API_KEY",
    "competition": "FOOTBALL_DATA_COMPETITION",
}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="parfetch", description="Fetch football stats into backtester CSVs")
    sub = ap.add_subparsers(dest="command", required=True)

    def add_fetch_flags(p: argparse.ArgumentParser) -> None:
        p.add_argument("--seasons", help="Comma-separated season START years (YYYY)")
        p.add_argument("--out", help="Output CSV path")
        p.add_argument("--rps", type=float, help="Requests per second (be polite)")
        p.add_argument("--burst", type=int, help="Burst tokens")
        p.add_argument("--timeout", type=float, help="HTTP timeout in seconds")
        p.add_argument("--max-body", type=int, help="Max response body bytes")
        p.add_argument("--ua", help="HTTP User-Agent")
        p.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")

    players = sub.add_parser("players", help="FBref standard + shooting player metrics")
    add_fetch_flags(players)
    players.add_argument("--dest-league", help="Destination league id (output)")
    players.add_argument("--from-league", help="From league id (output)")

    standings = sub.add_parser("standings", help="football-data.org final standings")
    add_fetch_flags(standings)
    standings.add_argument("--api-base", help="football-data.org base URL")
    standings.add_argument("--api-key", help="API key (or set FOOTBALL_DATA_API_KEY)")
    standings.add_argument("--competition", help="Competition code (PL for Premier League)")
    return ap


def settings_from_args(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    s = base or Settings()
    mapping = dict(_COMMON)
    mapping.update(_PLAYERS if args.command == "players" else _STANDINGS)
    for dest, attr in mapping.items():
        value = getattr(args, dest, None)
        if value is not None:
            setattr(s, attr, value)
    return s


def exit_code_for(summary: RunSummary) -> int:
    if summary.aborted or summary.failed:
        return EXIT_SEASON_FAILURES
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    s = settings_from_args(args)

    runner = run_player_metrics if args.command == "players" else run_standings
    try:
        init_logger(s.LOG_LEVEL)
        summary = runner(s)
    except ConfigError as e:
        logger.error("configuration error: %s", e)
        return EXIT_CONFIG
    except OSError as e:
        logger.error("cannot write output: %s", e)
        return EXIT_CONFIG

    for season in summary.failed:
        logger.error("Season %s failed (%s): %s", season.season, season.url or "-", season.error)
    return exit_code_for(summary)


if __name__ == "__main__":
    sys.exit(main())
