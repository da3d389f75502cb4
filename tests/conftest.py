import pytest

from parfetch.core.config import Settings

STANDARD_HEADER = [
    ("ranker", "Rk"), ("player", "Player"), ("nationality", "Nation"), ("position", "Pos"),
    ("team", "Squad"), ("minutes", "Min"), ("goals", "Gls"), ("assists", "Ast"),
]
SHOOTING_HEADER = [
    ("ranker", "Rk"), ("player", "Player"), ("team", "Squad"), ("shots", "Sh"),
    ("shots_on_target", "SoT"), ("xg", "xG"), ("npxg", "npxG"), ("xg_assist", "xAG"),
]


def render_table(table_id, header, rows, footer=None, over_header=True):
    """
    Render an FBref-style stats table: an optional 'over_header' group row,
    the label row, body rows whose first cell is a <th>, and an optional tfoot.
    """
    head = []
    if over_header:
        head.append('<tr class="over_header"><th colspan="4"></th><th colspan="%d">Performance</th></tr>' % (len(header) - 4))
    head.append("<tr>" + "".join(
        f'<th aria-label="{label}" data-stat="{stat}" scope="col">{label}</th>' for stat, label in header
    ) + "</tr>")

    def render_row(cells, cls=""):
        cls_attr = f' class="{cls}"' if cls else ""
        first, rest = cells[0], cells[1:]
        stats = [stat for stat, _ in header]
        tds = "".join(f'<td data-stat="{stat}">{value}</td>' for stat, value in zip(stats[1:], rest))
        return f'<tr{cls_attr}><th data-stat="{stats[0]}" scope="row">{first}</th>{tds}</tr>'

    body = []
    for row in rows:
        if row == "thead":
            body.append("<tr class=\"thead\">" + "".join(f"<th>{label}</th>" for _, label in header) + "</tr>")
        else:
            body.append(render_row(row))
    foot = f"<tfoot>{render_row(footer)}</tfoot>" if footer else ""
    return (
        f'<table class="stats_table" id="{table_id}">'
        f'<thead>{"".join(head)}</thead><tbody>{"".join(body)}</tbody>{foot}</table>'
    )


def render_page(*tables, commented=()):
    """Wrap tables in a page; tables whose index is in `commented` are hidden in HTML comments."""
    parts = []
    for i, table in enumerate(tables):
        wrapped = f"<!--\n{table}\n-->" if i in commented else table
        parts.append(f'<div class="table_container" id="div_{i}">{wrapped}</div>')
    return f"<html><head><title>Stats</title></head><body>{''.join(parts)}</body></html>"


@pytest.fixture
def standard_rows():
    return [
        ["1", "Player A", "eng ENG", "FW", "Arsenal", "90", "1", "0"],
        ["2", "Player B", "fra FRA", "MF", "Chelsea", "45", "0", "1"],
    ]


@pytest.fixture
def shooting_rows():
    return [["1", "Player A", "Arsenal", "3", "2", "0.8", "0.8", "0.1"]]


@pytest.fixture
def standard_table(standard_rows):
    return render_table("stats_standard", STANDARD_HEADER, standard_rows)


@pytest.fixture
def shooting_table(shooting_rows):
    return render_table("stats_shooting", SHOOTING_HEADER, shooting_rows)


@pytest.fixture
def standard_page(standard_table):
    return render_page(standard_table)


@pytest.fixture
def shooting_page(shooting_table, standard_table):
    # the shooting page carries the standard table visibly and hides the shooting table
    return render_page(standard_table, shooting_table, commented=(1,))


@pytest.fixture
def test_settings(tmp_path):
    s = Settings()
    s.SEASONS = "2020"
    s.PLAYERS_OUT = str(tmp_path / "out" / "players.csv")
    s.STANDINGS_OUT = str(tmp_path / "out" / "standings.csv")
    s.FOOTBALL_DATA_API_KEY = "test-key"
    s.FBREF_RPS = 1000.0
    s.FBREF_BURST = 10
    s.STANDINGS_RPS = 1000.0
    s.STANDINGS_BURST = 10
    return s
