import os
from typing import Optional

from parfetch.core.errors import ConfigError

class Settings:
    # Seasons (start years) and outputs
    SEASONS: str = os.getenv("SEASONS", "2020,2021,2022,2023,2024")
    PLAYERS_OUT: str = os.getenv("PLAYERS_OUT", "data/player_metrics_fbref.csv")
    STANDINGS_OUT: str = os.getenv("STANDINGS_OUT", "data/team_outcomes.csv")

    # FBref scraping (be polite)
    FBREF_BASE_URL: str = os.getenv("FBREF_BASE_URL", "https://fbref.com/en/comps")
    FBREF_COMP_ID: int = int(os.getenv("FBREF_COMP_ID", "9"))
    FBREF_COMP_SLUG: str = os.getenv("FBREF_COMP_SLUG", "Premier-League")
    FBREF_RPS: float = float(os.getenv("FBREF_RPS", "0.8"))
    FBREF_BURST: int = int(os.getenv("FBREF_BURST", "1"))
    FBREF_TIMEOUT: float = float(os.getenv("FBREF_TIMEOUT", "20"))
    FBREF_MAX_BODY: int = int(os.getenv("FBREF_MAX_BODY", str(2 << 20)))
    USER_AGENT: str = os.getenv("USER_AGENT", "par-fetcher/1.0 (+contact: you@example.com)")
    DEST_LEAGUE: str = os.getenv("DEST_LEAGUE", "EPL")
    FROM_LEAGUE: str = os.getenv("FROM_LEAGUE", "EPL")

    # football-data.org standings
    FOOTBALL_DATA_API_BASE: str = os.getenv("FOOTBALL_DATA_API_BASE", "https://api.football-data.org/v4")
    FOOTBALL_DATA_API_KEY: Optional[str] = os.getenv("FOOTBALL_DATA_API_KEY")
    FOOTBALL_DATA_COMPETITION: str = os.getenv("FOOTBALL_DATA_COMPETITION", "PL")
    STANDINGS_RPS: float = float(os.getenv("STANDINGS_RPS", "3.0"))
    STANDINGS_BURST: int = int(os.getenv("STANDINGS_BURST", "3"))
    STANDINGS_TIMEOUT: float = float(os.getenv("STANDINGS_TIMEOUT", "15"))
    STANDINGS_MAX_BODY: int = int(os.getenv("STANDINGS_MAX_BODY", str(1 << 20)))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def validate(self) -> None:
        """Bounds-check the limiter and fetch settings; raise ConfigError on the first problem."""
        checks = [
            (self.FBREF_RPS > 0, f"FBREF_RPS must be > 0, got {self.FBREF_RPS}"),
            (self.FBREF_BURST >= 1, f"FBREF_BURST must be >= 1, got {self.FBREF_BURST}"),
            (self.FBREF_TIMEOUT > 0, f"FBREF_TIMEOUT must be > 0, got {self.FBREF_TIMEOUT}"),
            (self.FBREF_MAX_BODY > 0, f"FBREF_MAX_BODY must be > 0, got {self.FBREF_MAX_BODY}"),
            (self.STANDINGS_RPS > 0, f"STANDINGS_RPS must be > 0, got {self.STANDINGS_RPS}"),
            (self.STANDINGS_BURST >= 1, f"STANDINGS_BURST must be >= 1, got {self.STANDINGS_BURST}"),
            (self.STANDINGS_TIMEOUT > 0, f"STANDINGS_TIMEOUT must be > 0, got {self.STANDINGS_TIMEOUT}"),
            (self.STANDINGS_MAX_BODY > 0, f"STANDINGS_MAX_BODY must be > 0, got {self.STANDINGS_MAX_BODY}"),
            (bool(self.USER_AGENT.strip()), "USER_AGENT must not be empty"),
            (bool(self.SEASONS.strip()), "no seasons provided"),
        ]
        for ok, message in checks:
            if not ok:
                raise ConfigError(message)

settings = Settings()
