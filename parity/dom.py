# parity/dom.py
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from bs4 import BeautifulSoup, Tag


class PageSnapshot:
    """
    Read-only view of a rendered page.

    Built from serialized HTML so the extraction code never touches a live
    browser object; any driver that can produce HTML can feed it.
    """

    def __init__(self, soup: BeautifulSoup):
        self._soup = soup

    @classmethod
    def from_html(cls, html: str) -> "PageSnapshot":
        return cls(BeautifulSoup(html or "", "lxml"))

    @property
    def root(self) -> BeautifulSoup:
        return self._soup

    def tables(self) -> List[Tag]:
        return self._soup.find_all("table")

    def select(self, css: str) -> List[Tag]:
        return self._soup.select(css)

    def count(self, css: str) -> int:
        return len(self._soup.select(css))

    def find_all(self, name, **kwargs) -> List[Tag]:
        return self._soup.find_all(name, **kwargs)

    def contains_text(self, text: str) -> bool:
        return text in self._soup.get_text()

    def elements(self) -> Iterable[Tag]:
        """Every element under <body> in document order."""
        body = self._soup.body or self._soup
        return body.find_all(True)


def text_of(node: Optional[Tag]) -> str:
    """Concatenated text content, like the DOM's textContent."""
    if node is None:
        return ""
    return node.get_text()


def rows(table: Tag) -> List[Tag]:
    return table.find_all("tr")


def cells(row: Tag, names: Sequence[str] = ("th", "td")) -> List[Tag]:
    return row.find_all(list(names))


def closest(node: Tag, name: str) -> Optional[Tag]:
    """Nearest ancestor-or-self with the given tag name."""
    if node.name == name:
        return node
    return node.find_parent(name)


def input_value(cell: Tag) -> Optional[str]:
    """Current value of the first input in the cell, if it has a non-empty one."""
    field = cell.find("input")
    if field is None:
        return None
    value = field.get("value")
    return value or None


def next_element_sibling(node: Tag) -> Optional[Tag]:
    return node.find_next_sibling()
