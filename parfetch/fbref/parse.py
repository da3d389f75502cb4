import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from bs4 import Tag

from parfetch.core.errors import SchemaMismatch
from parfetch.fbref.extract import TableFragment
from parfetch.fbref.utils import normalize_label, parse_number
from parfetch.schemas import ParsedValue, PlayerRow

logger = logging.getLogger(__name__)

# Columns kept as raw text; every other required column must be numeric
TEXT_COLUMNS = {"player", "squad", "team", "nation", "pos", "comp", "age", "born"}
TEAM_COLUMNS = ("squad", "team")
SKIP_ROW_CLASSES = {"thead", "over_header", "spacer"}


@dataclass(frozen=True)
class ColumnSet:
    """One candidate header layout: the columns to require and how to rename them afterwards."""
    name: str
    columns: Tuple[str, ...]
    aliases: Dict[str, str] = field(default_factory=dict)


STANDARD_COLUMNS = ColumnSet("standard", ("player", "squad", "min", "gls", "ast"))
SHOOTING_COLUMNS = ColumnSet("shooting", ("player", "squad", "sh", "sot", "xg", "npxg", "xag"))
# Older seasons label expected assists "xA" instead of "xAG"
SHOOTING_COLUMNS_FALLBACK = ColumnSet(
    "shooting (xA)", ("player", "squad", "sh", "sot", "xg", "npxg", "xa"), aliases={"xa": "xag"}
)
SHOOTING_CANDIDATES = (SHOOTING_COLUMNS, SHOOTING_COLUMNS_FALLBACK)


def _cells(row: Tag) -> List[Tag]:
    """Row cells with colspans expanded, so index i always means logical column i."""
    out: List[Tag] = []
    for cell in row.find_all(["th", "td"], recursive=False):
        try:
            span = max(1, int(cell.get("colspan", 1)))
        except (TypeError, ValueError):
            span = 1
        out.extend([cell] * span)
    return out


def _classes(row: Tag) -> set:
    return set(row.get("class") or [])


def _header_row(table: Tag) -> Optional[Tag]:
    thead = table.find("thead")
    rows = thead.find_all("tr") if thead else table.find_all("tr")
    candidates = [
        r for r in rows
        if "over_header" not in _classes(r) and r.find("th") is not None
    ]
    if not candidates:
        return None
    # FBref puts column groups in an "over_header" row first; the last row holds the labels
    return candidates[-1] if thead else candidates[0]


def _header_keys(cell: Tag) -> List[str]:
    keys = [normalize_label(cell.get_text(" ", strip=True))]
    stat = cell.get("data-stat")
    if stat:
        keys.append(normalize_label(stat))
    return [k for k in keys if k]


def _locate_columns(header: Tag, required: Sequence[str]) -> Tuple[Dict[str, int], List[str]]:
    positions: Dict[str, int] = {}
    header_cells = _cells(header)
    for col in required:
        for idx, cell in enumerate(header_cells):
            if col in _header_keys(cell):
                positions[col] = idx
                break
    missing = [c for c in required if c not in positions]
    return positions, missing


def _data_rows(table: Tag, header: Tag) -> List[Tag]:
    tbody = table.find("tbody")
    if tbody is not None:
        return tbody.find_all("tr", recursive=False)
    rows = []
    for r in table.find_all("tr"):
        if r is header or r.find_parent(["thead", "tfoot"]) is not None:
            continue
        rows.append(r)
    return rows


def _is_total_label(label: str) -> bool:
    return normalize_label(label).endswith("total")


def parse_player_table(fragment: TableFragment, required_columns: Sequence[str], season: str = "") -> List[PlayerRow]:
    """
    Parse one row per player from a stats table.

    Every required column must be present in the header (matched against the
    visible label or the cell's data-stat, both normalized), otherwise
    SchemaMismatch is raised. Header repeats, totals and rows with empty or
    non-numeric required values are skipped, so every returned row carries a
    non-empty value for each required column.
    """
    required = [normalize_label(c) for c in required_columns]
    if "player" not in required:
        raise ValueError("required columns must include 'player'")

    table = fragment.element
    header = _header_row(table)
    if header is None:
        raise SchemaMismatch(f"table {fragment.table_id!r} has no header row", missing=required)

    positions, missing = _locate_columns(header, required)
    if missing:
        raise SchemaMismatch(
            f"table {fragment.table_id!r} is missing column(s): {', '.join(missing)}",
            missing=missing,
        )

    team_col = next((c for c in TEAM_COLUMNS if c in positions), None)
    rows: List[PlayerRow] = []
    skipped = 0
    for tr in _data_rows(table, header):
        if _classes(tr) & SKIP_ROW_CLASSES:
            skipped += 1
            continue
        cells = _cells(tr)
        values = _row_values(cells, positions)
        if values is None:
            skipped += 1
            continue
        player = values["player"].raw
        if _is_total_label(player):
            skipped += 1
            continue
        rows.append(PlayerRow(
            player=player,
            team=values[team_col].raw if team_col else "",
            season=season,
            values=values,
        ))

    if skipped:
        logger.debug("table %r: kept %d player rows, skipped %d", fragment.table_id, len(rows), skipped)
    return rows


def _row_values(cells: List[Tag], positions: Dict[str, int]) -> Optional[Dict[str, ParsedValue]]:
    values: Dict[str, ParsedValue] = {}
    for col, idx in positions.items():
        if idx >= len(cells):
            return None
        raw = cells[idx].get_text(" ", strip=True)
        if not raw:
            return None
        if col in TEXT_COLUMNS:
            values[col] = ParsedValue(raw=raw)
            continue
        number = parse_number(raw)
        if number is None:
            return None
        values[col] = ParsedValue(raw=raw, number=number)
    return values


def parse_with_fallback(fragment: TableFragment, candidates: Sequence[ColumnSet], season: str = "") -> List[PlayerRow]:
    """
    Try each candidate column set in order; the first that parses wins.
    Rows are re-keyed through the winning set's aliases. When every candidate
    fails, a single SchemaMismatch listing all attempts is raised.
    """
    failures = []
    missing: List[str] = []
    for candidate in candidates:
        try:
            rows = parse_player_table(fragment, candidate.columns, season=season)
        except SchemaMismatch as e:
            failures.append(f"{candidate.name}: {e}")
            missing.extend(m for m in e.missing if m not in missing)
            continue
        if candidate.aliases:
            logger.info("table %r parsed with fallback columns %r", fragment.table_id, candidate.name)
            rows = [_rekey(r, candidate.aliases) for r in rows]
        return rows
    raise SchemaMismatch(
        f"table {fragment.table_id!r} matched none of {len(failures)} column sets; " + "; ".join(failures),
        missing=missing,
    )


def _rekey(row: PlayerRow, aliases: Dict[str, str]) -> PlayerRow:
    values = {aliases.get(k, k): v for k, v in row.values.items()}
    return row.model_copy(update={"values": values})
