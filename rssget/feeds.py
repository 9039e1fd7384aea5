"""Feed retrieval and item normalization."""

from __future__ import annotations

import logging
import re
import xml.sax
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, List, Optional

import feedparser
import requests
from bs4 import BeautifulSoup

from .models import DisplayItem, FeedSource, ItemDisplayConfig

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class FetchError(Exception):
    """A single feed could not be retrieved or understood."""

    template = "Could not fetch rss '{label}': [{message}]"

    def __init__(self, source: FeedSource, message: str) -> None:
        super().__init__(message)
        self.source = source
        self.message = message

    def describe(self) -> str:
        return self.template.format(label=self.source.label, message=self.message)


class FeedNetworkError(FetchError):
    template = "Could not reach rss '{label}': [{message}]"


class FeedParseError(FetchError):
    template = "Could not parse rss response from '{label}': [{message}]"


def parse_pub_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 2822 timestamp, returning None when it cannot be read."""
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError, OverflowError):
        logger.debug("Ignoring unparsable publication date %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _strip_html(raw_value: str) -> str:
    """Return text content extracted from HTML fragments."""
    soup = BeautifulSoup(raw_value, "html.parser")
    text = soup.get_text(separator=" ", strip=True)
    text = re.sub(r"\s+([.,;:!?])", r"\1", text)
    text = re.sub(r"\s{2,}", " ", text)
    return text.strip()


def _enclosure_url(entry: Any) -> Optional[str]:
    enclosures = getattr(entry, "enclosures", None)
    if not enclosures:
        return None
    first = enclosures[0]
    try:
        return first.get("href") or first.get("url")
    except AttributeError:
        return getattr(first, "href", None)


def normalize_entry(
    entry: Any, channel_title: str, config: ItemDisplayConfig
) -> DisplayItem:
    """Convert a parsed feed entry into a DisplayItem."""
    description = getattr(entry, "summary", None)
    if description:
        description = _strip_html(description)

    return DisplayItem(
        channel_title=channel_title,
        config=config,
        title=getattr(entry, "title", None),
        link=getattr(entry, "link", None),
        description=description,
        author=getattr(entry, "author", None),
        pub_date=parse_pub_date(getattr(entry, "published", None)),
        enclosure_url=_enclosure_url(entry),
    )


def fetch_feed_items(
    source: FeedSource, timeout: float = DEFAULT_TIMEOUT
) -> List[DisplayItem]:
    """Fetch a single feed and return its normalized, capped items."""
    logger.info("Fetching feed '%s' (%s)", source.label, source.url)
    try:
        response = requests.get(source.url, timeout=timeout)
        response.raise_for_status()
        content = response.content
    except requests.RequestException as exc:
        logger.info("Failed to fetch feed '%s' (%s): %s", source.label, source.url, exc)
        raise FeedNetworkError(source, str(exc)) from exc

    parsed = feedparser.parse(content)
    entries = list(getattr(parsed, "entries", None) or [])
    bozo_exception = getattr(parsed, "bozo_exception", None)
    # Encoding overrides are tolerated; a document that is not well-formed is not.
    malformed = getattr(parsed, "bozo", False) and isinstance(
        bozo_exception, xml.sax.SAXException
    )
    if malformed or (
        not entries
        and (getattr(parsed, "bozo", False) or not getattr(parsed, "version", None))
    ):
        reason = bozo_exception or "unrecognized feed format"
        logger.info("Failed to parse feed '%s': %s", source.url, reason)
        raise FeedParseError(source, str(reason))

    feed_meta = getattr(parsed, "feed", None)
    channel_title = getattr(feed_meta, "title", None) or ""
    config = source.display_config or ItemDisplayConfig()

    items = [normalize_entry(entry, channel_title, config) for entry in entries]
    if source.max_items is not None:
        items = items[: source.max_items]

    logger.info(
        "Collected %d of %d entries from feed '%s'", len(items), len(entries), source.url
    )
    return items
