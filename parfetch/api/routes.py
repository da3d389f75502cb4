import copy
import threading

from fastapi import APIRouter, HTTPException, status

from parfetch.core.config import settings
from parfetch.core.errors import ConfigError
from parfetch.fetch.standings_client import build_standings_fetcher
from parfetch.schemas import RunRequest, RunSummary
from parfetch.services import players as players_service
from parfetch.services import standings as standings_service

router = APIRouter()

# One fetcher per upstream for the whole service process, so back-to-back
# runs draw from the same rate bucket
_fetchers = {}
_fetchers_lock = threading.Lock()

def _shared_fetcher(kind: str, factory):
    with _fetchers_lock:
        if kind not in _fetchers:
            _fetchers[kind] = factory(settings)
        return _fetchers[kind]

def close_shared_fetchers() -> None:
    """Close the service-wide fetchers (called on shutdown)."""
    with _fetchers_lock:
        for fetcher in _fetchers.values():
            fetcher.close()
        _fetchers.clear()

def _settings_for(request: RunRequest):
    s = copy.copy(settings)
    if request.seasons is not None:
        s.SEASONS = request.seasons
    return s

def _run(runner, request: RunRequest, out_attr: str, fetcher) -> RunSummary:
    s = _settings_for(request)
    if request.out is not None:
        setattr(s, out_attr, request.out)
    try:
        return runner(s, fetcher=fetcher)
    except ConfigError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except OSError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to write output: {e}"
        )

@router.post("/runs/players", response_model=RunSummary)
def run_players(request: RunRequest):
    """
    Fetch FBref player metrics for the requested seasons.

    Seasons run sequentially; failed seasons are reported in the summary
    instead of failing the request.
    """
    return _run(
        players_service.run_player_metrics, request, "PLAYERS_OUT",
        _shared_fetcher("players", players_service.build_fbref_fetcher),
    )

@router.post("/runs/standings", response_model=RunSummary)
def run_standings(request: RunRequest):
    """Fetch football-data.org standings for the requested seasons."""
    return _run(
        standings_service.run_standings, request, "STANDINGS_OUT",
        _shared_fetcher("standings", build_standings_fetcher),
    )

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "parfetch"}
