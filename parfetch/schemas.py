from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Union

class ParsedValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: str
    number: Optional[float] = Field(None, description="Numeric value; None for text columns")

class PlayerRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    player: str
    team: str
    season: str = ""
    values: Dict[str, ParsedValue] = Field(description="Required column name -> parsed cell")

    def number(self, column: str) -> Optional[float]:
        value = self.values.get(column)
        return value.number if value is not None else None

class JoinedRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    season: str
    from_league: str
    dest_league: str
    player: str
    team: str
    minutes: float
    goals: float
    assists: float
    shots: Optional[float] = Field(None, description="None when the player has no shooting row")
    shots_on_target: Optional[float] = None
    xg: Optional[float] = None
    npxg: Optional[float] = None
    xag: Optional[float] = None

# football-data.org standings payload

class Team(BaseModel):
    id: int
    name: str = ""
    tla: Optional[str] = None

class StandingRow(BaseModel):
    team: Team
    position: int
    points: int
    goal_difference: int = Field(alias="goalDifference")

class Standing(BaseModel):
    type: str
    table: List[StandingRow] = Field(default_factory=list)

class Competition(BaseModel):
    code: Optional[str] = None

class StandingsResponse(BaseModel):
    season: Optional[Union[int, Dict[str, Any]]] = Field(None, description="int in older payloads, an object in v4; the requested season is authoritative")
    standings: List[Standing] = Field(default_factory=list)
    competition: Competition = Field(default_factory=Competition)

# Run reporting

class SeasonResult(BaseModel):
    season: str
    ok: bool
    rows: int = 0
    url: Optional[str] = Field(None, description="URL involved in the failure, if any")
    error: Optional[str] = None

class RunSummary(BaseModel):
    kind: str = Field(description="'players' or 'standings'")
    output_path: str
    seasons: List[SeasonResult] = Field(default_factory=list)
    total_rows: int = 0
    aborted: bool = Field(default=False, description="Run stopped early because the remote throttled us")

    @property
    def failed(self) -> List[SeasonResult]:
        return [s for s in self.seasons if not s.ok]

class RunRequest(BaseModel):
    seasons: Optional[str] = Field(None, description="Comma-separated season start years")
    out: Optional[str] = Field(None, description="Output CSV path")
