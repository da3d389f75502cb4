"""
Table extraction for FBref-style stats pages.

FBref ships most secondary tables inside HTML comments so that naive scrapers
only see the first one. We reveal those comments before searching, which makes
a commented table indistinguishable from a plain one.
"""

import logging
from dataclasses import dataclass
from typing import Union

from bs4 import BeautifulSoup, Comment, Tag

from parfetch.core.errors import ExtractionError

logger = logging.getLogger(__name__)


@dataclass
class TableFragment:
    table_id: str
    element: Tag

    def __str__(self) -> str:
        return str(self.element)


def reveal_commented_tables(soup: BeautifulSoup) -> BeautifulSoup:
    """
    Replace every comment that contains table markup with the parsed markup itself.
    Mutates and returns `soup`.
    """
    comments = soup.find_all(string=lambda s: isinstance(s, Comment) and "<table" in s)
    for comment in comments:
        revealed = BeautifulSoup(str(comment), "html.parser")
        # Move the parsed nodes out before the comment is dropped
        for node in list(revealed.contents):
            comment.insert_before(node.extract())
        comment.extract()
    return soup


def extract_table(html: Union[str, bytes], table_id: str) -> TableFragment:
    """
    Locate `<table id=table_id>` in an HTML document, including tables hidden in comments.
    The first match in document order wins when the id is (incorrectly) repeated.
    """
    if isinstance(html, bytes):
        html = html.decode("utf-8", errors="replace")

    soup = reveal_commented_tables(BeautifulSoup(html, "html.parser"))
    matches = soup.find_all("table", id=table_id)
    if not matches:
        raise ExtractionError(f"table {table_id!r} not found")
    if len(matches) > 1:
        logger.debug("found %d tables with id %r, using the first", len(matches), table_id)
    return TableFragment(table_id=table_id, element=matches[0])
