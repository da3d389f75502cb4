from parfetch.core.config import Settings, settings as default_settings
from parfetch.fbref.utils import season_slug


def _competition_url(year: int, stat_type: str, settings: Settings) -> str:
    base = settings.FBREF_BASE_URL.rstrip("/")
    slug = season_slug(year)
    return f"{base}/{settings.FBREF_COMP_ID}/{slug}/{stat_type}/{slug}-{settings.FBREF_COMP_SLUG}-Stats"


def standard_url(year: int, settings: Settings = default_settings) -> str:
    return _competition_url(year, "stats", settings)


def shooting_url(year: int, settings: Settings = default_settings) -> str:
    return _competition_url(year, "shooting", settings)
