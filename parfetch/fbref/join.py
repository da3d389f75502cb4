from typing import Dict, List, Sequence

from parfetch.core.errors import JoinAmbiguity
from parfetch.fbref.utils import identity_key
from parfetch.schemas import JoinedRow, PlayerRow


def _index(rows: Sequence[PlayerRow], table: str) -> Dict[tuple, PlayerRow]:
    index: Dict[tuple, PlayerRow] = {}
    for row in rows:
        key = identity_key(row.player, row.team)
        if key in index:
            raise JoinAmbiguity(f"duplicate player {row.player!r} ({row.team!r}) in {table} table")
        index[key] = row
    return index


def join_standard_shooting(
    season: str,
    standard_rows: Sequence[PlayerRow],
    shooting_rows: Sequence[PlayerRow],
    dest_league: str,
    from_league: str,
) -> List[JoinedRow]:
    """
    Merge standard and shooting rows on (player, team).

    Output follows the standard table's order, one row per standard player.
    Players missing from the shooting table keep their row with shooting
    metrics set to None. Shooting-only players are dropped.
    """
    _index(standard_rows, "standard")
    shooting = _index(shooting_rows, "shooting")

    out: List[JoinedRow] = []
    for std in standard_rows:
        sho = shooting.get(identity_key(std.player, std.team))
        metrics = {}
        if sho is not None:
            metrics = {
                "shots": sho.number("sh"),
                "shots_on_target": sho.number("sot"),
                "xg": sho.number("xg"),
                "npxg": sho.number("npxg"),
                "xag": sho.number("xag"),
            }
        out.append(JoinedRow(
            season=season,
            from_league=from_league,
            dest_league=dest_league,
            player=std.player,
            team=std.team,
            minutes=std.number("min"),
            goals=std.number("gls"),
            assists=std.number("ast"),
            **metrics,
        ))
    return out
