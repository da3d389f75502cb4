import re
import unicodedata
from typing import List, Optional

from parfetch.core.errors import ConfigError

_WS = re.compile(r"\s+")
_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")


def normalize_label(label: str) -> str:
    """Lower-case, strip and collapse inner whitespace: ' Playing  Time ' -> 'playing time'."""
    return _WS.sub(" ", str(label or "")).strip().lower()


def identity_key(player: str, team: str) -> tuple:
    """
    Join key for one player on one team.
    Accents are folded so 'Martin Ødegaard' and 'Martin Odegaard' match.
    """
    return (_fold(player), _fold(team))


def _fold(s: str) -> str:
    s = unicodedata.normalize("NFKD", str(s or ""))
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    # NFKD leaves a few Nordic letters intact
    s = s.replace("ø", "o").replace("Ø", "O").replace("đ", "d").replace("Đ", "D").replace("ł", "l").replace("Ł", "L")
    return normalize_label(s)


def parse_number(text: str) -> Optional[float]:
    """
    Parse a stats cell into a float.
    Examples: '1,234' -> 1234.0, '0.8' -> 0.8, '' -> None, 'Squad Total' -> None
    """
    if text is None:
        return None
    cleaned = str(text).strip().replace(",", "")
    if not cleaned or not _NUMBER.match(cleaned):
        return None
    return float(cleaned)


def season_label(year: int) -> str:
    """2020 -> '2020/21'"""
    return f"{year}/{(year + 1) % 100:02d}"


def season_slug(year: int) -> str:
    """2020 -> '2020-2021', the form FBref uses in its URLs"""
    return f"{year}-{year + 1}"


def parse_seasons(raw: str) -> List[int]:
    """Split a comma-separated list of season start years, e.g. '2020, 2021' -> [2020, 2021]."""
    years = []
    for part in str(raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        if not re.fullmatch(r"\d{4}", part):
            raise ConfigError(f"bad season year {part!r}")
        years.append(int(part))
    if not years:
        raise ConfigError("no seasons provided")
    return years
