"""
Parsing and serialization of proxied HTML documents.

Every stage works on the same html5lib tree so that what the sanitizer
inspects is exactly what the rewriter edits and what the browser parses.
"""

from bs4 import BeautifulSoup
from bs4.element import NavigableString

# The HTML parser drops one newline right after these start tags
LEADING_NEWLINE_ELEMENTS = ["pre", "textarea", "listing"]


def parse_document(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html5lib")


def _keep_leading_newlines(soup: BeautifulSoup) -> None:
    for tag in soup.find_all(LEADING_NEWLINE_ELEMENTS):
        first = tag.contents[0] if tag.contents else None
        if type(first) is NavigableString and first.startswith("\n"):
            first.replace_with("\n" + first)


def serialize_document(soup: BeautifulSoup) -> str:
    """Serialize ``soup`` so that parsing the result gives the same tree."""
    _keep_leading_newlines(soup)
    return str(soup)
