"""Chat-log markup parsing.

Converts saved game-log HTML into LogRecords: text nodes become text
parts, <img> tags become Icons (alt text preferred, src as fallback) and
the bold name span becomes the record's player.
"""

import logging
import re
from typing import Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from ..core.resources import icon_kind
from .models import Icon, LogRecord, Part

logger = logging.getLogger(__name__)

_BOLD_STYLE = re.compile(r"font-weight\s*:\s*(600|700|bold)")


def _icon_token(img: Tag) -> str:
    alt = (img.get("alt") or "").strip()
    src = (img.get("src") or "").strip()
    for candidate in (alt, src):
        if candidate and icon_kind(candidate) is not None:
            return candidate
    return alt or src


def _player_name(element: Tag) -> Optional[str]:
    """Text of the first bold span, which the game uses for player names."""
    for span in element.find_all("span"):
        if _BOLD_STYLE.search(span.get("style", "")):
            name = span.get_text(strip=True)
            if name:
                return name
    return None


def record_from_element(element: Tag) -> LogRecord:
    """Build a LogRecord from one log-entry element."""
    parts: list[Part] = []
    for node in element.descendants:
        if isinstance(node, Comment):
            continue
        if isinstance(node, NavigableString):
            text = str(node)
            if parts and isinstance(parts[-1], str):
                parts[-1] += text
            else:
                parts.append(text)
        elif isinstance(node, Tag) and node.name == "img":
            parts.append(Icon(_icon_token(node)))
    return LogRecord(tuple(parts), _player_name(element))


def record_from_html(fragment: str) -> LogRecord:
    """Build a LogRecord from the markup of a single log entry."""
    soup = BeautifulSoup(fragment, "html.parser")
    return record_from_element(soup)


def records_from_chat_log(html: str, entry_class: Optional[str] = None) -> list[LogRecord]:
    """Split a saved chat log into records, in document order.

    With entry_class, every element carrying that class is an entry.
    Otherwise each top-level element of the document is one entry.
    """
    soup = BeautifulSoup(html, "html.parser")
    if entry_class:
        entries = soup.find_all(class_=entry_class)
    else:
        entries = [child for child in soup.children if isinstance(child, Tag)]
    records = [record_from_element(entry) for entry in entries]
    logger.debug("Parsed %d log entries from markup", len(records))
    return records
