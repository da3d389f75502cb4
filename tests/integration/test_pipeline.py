import copy
import json
import threading
import time

import pandas as pd
import pytest

from parfetch.core.errors import ConfigError
from parfetch.fbref.urls import shooting_url, standard_url
from parfetch.fetch.base import BaseFetcher, FetchResult
from parfetch.services.players import run_player_metrics
from parfetch.services.standings import run_standings
from conftest import STANDARD_HEADER, render_page, render_table


class StubFetcher(BaseFetcher):
    """Serves canned responses by URL and records the request order."""

    def __init__(self, pages):
        super().__init__(1000.0, 10, 1.0, 10 << 20, "par-test/1.0")
        self.pages = pages
        self.requested = []
        self.closed = False

    def _send(self, request, headers):
        self.requested.append(request.url)
        status, body = self.pages.get(request.url, (404, b"not found"))
        if isinstance(body, str):
            body = body.encode("utf-8")
        return FetchResult(url=request.url, status_code=status, body=body, error=None, fetched_at="2024-01-01T00:00:00Z")

    def close(self):
        self.closed = True


class HookedFetcher(StubFetcher):
    """StubFetcher that logs (name, url) to a shared list and calls `on_request(n)` before answering."""

    def __init__(self, pages, log, name, on_request=None):
        super().__init__(pages)
        self.log = log
        self.name = name
        self.on_request = on_request

    def _send(self, request, headers):
        self.log.append((self.name, request.url))
        if self.on_request is not None:
            self.on_request(len(self.requested))
        return super()._send(request, headers)


class TestPlayerMetricsRun:
    """Integration tests for the FBref season loop"""

    def test_single_season_end_to_end(self, test_settings, standard_page, shooting_page):
        """Test season 2020: two standard players, one shooting row, both written"""
        fetcher = StubFetcher({
            standard_url(2020, test_settings): (200, standard_page),
            shooting_url(2020, test_settings): (200, shooting_page),
        })

        summary = run_player_metrics(test_settings, fetcher=fetcher)

        assert summary.total_rows == 2
        assert summary.failed == []
        assert fetcher.requested == [standard_url(2020, test_settings), shooting_url(2020, test_settings)]
        assert not fetcher.closed  # caller-owned fetchers are left open

        df = pd.read_csv(test_settings.PLAYERS_OUT)
        assert df["player"].tolist() == ["Player A", "Player B"]
        assert df["season"].tolist() == ["2020/21", "2020/21"]
        assert df.loc[0, "xg"] == 0.8
        assert pd.isna(df.loc[1, "xg"])
        assert df["minutes"].tolist() == [90, 45]

    def test_failed_season_is_skipped_and_reported(self, test_settings, standard_page, shooting_page):
        """Test that one bad season does not stop the next one"""
        test_settings.SEASONS = "2020,2021"
        fetcher = StubFetcher({
            standard_url(2020, test_settings): (500, "boom"),
            standard_url(2021, test_settings): (200, standard_page),
            shooting_url(2021, test_settings): (200, shooting_page),
        })

        summary = run_player_metrics(test_settings, fetcher=fetcher)

        assert [s.ok for s in summary.seasons] == [False, True]
        failed = summary.failed[0]
        assert failed.season == "2020/21"
        assert failed.url == standard_url(2020, test_settings)
        assert "BadStatus" in failed.error
        # the 2020 shooting page is never requested once the standard page failed
        assert shooting_url(2020, test_settings) not in fetcher.requested
        assert summary.total_rows == 2

    def test_missing_table_names_url(self, test_settings, standard_page):
        fetcher = StubFetcher({
            standard_url(2020, test_settings): (200, standard_page),
            shooting_url(2020, test_settings): (200, standard_page),
        })
        summary = run_player_metrics(test_settings, fetcher=fetcher)
        failed = summary.failed[0]
        assert "ExtractionError" in failed.error
        assert failed.url == shooting_url(2020, test_settings)

    def test_schema_drift_uses_fallback(self, test_settings, standard_page):
        """Test an older season whose shooting table says xA instead of xAG"""
        old_header = [
            ("ranker", "Rk"), ("player", "Player"), ("team", "Squad"), ("shots", "Sh"),
            ("shots_on_target", "SoT"), ("xg", "xG"), ("npxg", "npxG"), ("xa", "xA"),
        ]
        shooting = render_table("stats_shooting", old_header, [["1", "Player B", "Chelsea", "1", "0", "0.2", "0.2", "0.4"]])
        fetcher = StubFetcher({
            standard_url(2020, test_settings): (200, standard_page),
            shooting_url(2020, test_settings): (200, render_page(shooting, commented=(0,))),
        })

        summary = run_player_metrics(test_settings, fetcher=fetcher)

        assert summary.failed == []
        df = pd.read_csv(test_settings.PLAYERS_OUT)
        assert df.loc[1, "xag"] == 0.4
        assert pd.isna(df.loc[0, "xag"])

    def test_rate_limited_aborts_run(self, test_settings):
        test_settings.SEASONS = "2020,2021"
        fetcher = StubFetcher({standard_url(2020, test_settings): (429, "slow down")})

        summary = run_player_metrics(test_settings, fetcher=fetcher)

        assert summary.aborted
        assert [s.season for s in summary.seasons] == ["2020/21"]
        assert fetcher.requested == [standard_url(2020, test_settings)]

    def test_bad_config_is_fatal(self, test_settings):
        test_settings.FBREF_RPS = 0
        with pytest.raises(ConfigError):
            run_player_metrics(test_settings, fetcher=StubFetcher({}))

    def test_header_written_even_when_all_seasons_fail(self, test_settings):
        summary = run_player_metrics(test_settings, fetcher=StubFetcher({}))
        assert summary.total_rows == 0
        with open(test_settings.PLAYERS_OUT) as f:
            assert f.read().startswith("season,from_league,dest_league,player,team")

    def test_concurrent_runs_on_same_output_do_not_interleave(self, test_settings, standard_page, shooting_page):
        """Test that a second run on the same path waits for the first instead of truncating it"""
        out = test_settings.PLAYERS_OUT
        pages = {}
        for year in (2020, 2021):
            pages[standard_url(year, test_settings)] = (200, standard_page)
            pages[shooting_url(year, test_settings)] = (200, shooting_page)

        log = []
        snapshots = {}
        a_started = threading.Event()
        b_started = threading.Event()

        def run_a_hook(n):
            if n == 0:
                a_started.set()
                b_started.wait(5)
                time.sleep(0.2)  # let run B reach the run lock
            if n == 2:
                with open(out) as f:
                    snapshots["before_2021"] = f.read().splitlines()

        settings_a = test_settings
        settings_a.SEASONS = "2020,2021"
        settings_b = copy.copy(test_settings)
        settings_b.SEASONS = "2020"
        fetcher_a = HookedFetcher(pages, log, "a", run_a_hook)
        fetcher_b = HookedFetcher(pages, log, "b")

        results = {}
        thread_a = threading.Thread(target=lambda: results.update(a=run_player_metrics(settings_a, fetcher=fetcher_a)))
        thread_b = threading.Thread(target=lambda: results.update(b=run_player_metrics(settings_b, fetcher=fetcher_b)))
        thread_a.start()
        assert a_started.wait(5)
        thread_b.start()
        b_started.set()
        thread_a.join(10)
        thread_b.join(10)

        assert results["a"].total_rows == 4
        assert results["b"].total_rows == 2
        # run A's 2020 rows were still there when it moved on to 2021
        assert len(snapshots["before_2021"]) == 3
        assert [name for name, _ in log] == ["a"] * 4 + ["b"] * 2

        df = pd.read_csv(out)
        assert df["season"].tolist() == ["2020/21", "2020/21"]
        assert df["player"].tolist() == ["Player A", "Player B"]


STANDINGS = {
    "season": 2020,
    "standings": [
        {"type": "HOME", "table": [{"team": {"id": 1, "name": "A"}, "position": 2, "points": 1, "goalDifference": 0}]},
        {"type": "TOTAL", "table": [
            {"team": {"id": 65, "name": "Manchester City FC", "tla": "MCI"}, "position": 1, "points": 86, "goalDifference": 51},
            {"team": {"id": 66, "name": "Manchester United FC", "tla": "MUN"}, "position": 2, "points": 74, "goalDifference": 29},
        ]},
    ],
}


class TestStandingsRun:
    """Integration tests for the standings season loop"""

    def url(self, settings, year):
        return f"{settings.FOOTBALL_DATA_API_BASE}/competitions/{settings.FOOTBALL_DATA_COMPETITION}/standings?season={year}"

    def test_writes_total_table(self, test_settings):
        fetcher = StubFetcher({self.url(test_settings, 2020): (200, json.dumps(STANDINGS))})

        summary = run_standings(test_settings, fetcher=fetcher)

        assert summary.total_rows == 2
        with open(test_settings.STANDINGS_OUT) as f:
            assert f.read().splitlines() == [
                "season,team_id,points,rank,goal_diff",
                "2020/21,65,86,1,51",
                "2020/21,66,74,2,29",
            ]

    def test_missing_total_fails_season(self, test_settings):
        payload = {"season": 2020, "standings": [{"type": "HOME", "table": []}]}
        fetcher = StubFetcher({self.url(test_settings, 2020): (200, json.dumps(payload))})
        summary = run_standings(test_settings, fetcher=fetcher)
        assert "no TOTAL table" in summary.failed[0].error

    def test_missing_api_key_is_fatal(self, test_settings):
        test_settings.FOOTBALL_DATA_API_KEY = None
        with pytest.raises(ConfigError):
            run_standings(test_settings, fetcher=StubFetcher({}))
