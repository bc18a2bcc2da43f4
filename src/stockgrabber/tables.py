"""Locate and parse HTML tables embedded in JSON payloads."""

from typing import Any, Optional

from bs4 import BeautifulSoup

from .models import ParsedTable

HTML_MARKERS = ("<table", "<tr", "<td")


def locate_embedded_html(node: Any) -> Optional[str]:
    """Depth-first search for the first string that looks like an HTML table.

    Dict values are visited in insertion order, sequences in index order.
    When several strings match, which one wins depends on that order only.

    Args:
        node: Decoded JSON document (dict, list, str, number, bool or None)

    Returns:
        The first matching string, or None if there is none
    """
    if isinstance(node, str):
        if any(marker in node for marker in HTML_MARKERS):
            return node
        return None

    if isinstance(node, dict):
        children = node.values()
    elif isinstance(node, (list, tuple)):
        children = node
    else:
        return None

    for child in children:
        found = locate_embedded_html(child)
        if found:
            return found
    return None


def _cell_texts(row) -> list[str]:
    return [cell.get_text().strip() for cell in row.find_all(["td", "th"])]


def parse_html_table(html_text: str) -> list[ParsedTable]:
    """Parse every ``<table>`` in an HTML document into headers and rows.

    The header row is ``thead tr`` if present, else the first ``tr``.
    Body rows come from ``tbody tr``; without a tbody, every ``tr`` is used
    except the header row. Rows without any non-empty cell are dropped, and
    tables with neither headers nor rows are omitted. Cell text is not
    interpreted.

    Args:
        html_text: HTML document or fragment

    Returns:
        List of ParsedTable, in document order
    """
    if not html_text:
        return []

    soup = BeautifulSoup(html_text, "html.parser")
    tables = []

    for table in soup.find_all("table"):
        header_row = table.select_one("thead tr") or table.find("tr")
        headers = _cell_texts(header_row) if header_row else []

        body_rows = table.select("tbody tr")
        if not body_rows:
            body_rows = table.find_all("tr")
            if headers:
                body_rows = body_rows[1:]

        rows = []
        for row in body_rows:
            cells = _cell_texts(row)
            if any(cells):
                rows.append(tuple(cells))

        if headers or rows:
            tables.append(ParsedTable(headers=tuple(headers), rows=tuple(rows)))

    return tables
