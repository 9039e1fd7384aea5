"""Configuration loading for rssget."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional, Sequence
from xml.etree import ElementTree as ET

from .models import FeedSource, ItemDisplayConfig, Order

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = Path("rssget") / "config.xml"

_DISPLAY_ATTRIBUTES = {
    "hideTitle": "hide_title",
    "hideLink": "hide_link",
    "hideDescription": "hide_description",
    "hideAuthor": "hide_author",
    "hidePubDate": "hide_pub_date",
    "showEnclosure": "show_enclosure",
}


class ConfigurationError(ValueError):
    """The configuration cannot be used for a run."""


@dataclass
class LoggingConfig:
    level: str = "WARNING"
    file: Optional[str] = None


@dataclass
class AppConfig:
    sources: List[FeedSource] = field(default_factory=list)
    display_by: Order = Order.DATE
    concurrency: int = 10
    timeout: float = 10.0
    progress: bool = True
    width: int = 80
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def override_with(
        self, urls: Sequence[str], display_by: Optional[Order] = None
    ) -> "AppConfig":
        """Return a copy with command-line values taking precedence."""
        sources = [FeedSource(url=url) for url in urls] if urls else self.sources
        return replace(
            self,
            sources=sources,
            display_by=display_by if display_by is not None else self.display_by,
        )


def validate_sources(sources: Sequence[FeedSource]) -> None:
    if not sources:
        raise ConfigurationError("No channels configured.")


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() == "true"


def _parse_display_config(outline: ET.Element) -> Optional[ItemDisplayConfig]:
    toggles = {
        name: _parse_bool(outline.attrib[attr])
        for attr, name in _DISPLAY_ATTRIBUTES.items()
        if attr in outline.attrib
    }
    if not toggles:
        return None
    return ItemDisplayConfig(**toggles)


def _parse_max_items(outline: ET.Element, feed_url: str) -> Optional[int]:
    raw = outline.attrib.get("maxItems")
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(
            f"Invalid maxItems '{raw}' for feed {feed_url}"
        ) from None
    if value <= 0:
        raise ConfigurationError(f"maxItems must be positive for feed {feed_url}")
    return value


def parse_feeds_config(path: str) -> List[FeedSource]:
    """Parse the OPML feed list and return feed sources."""
    logger.info("Loading feed configuration from %s", path)
    tree = ET.parse(path)
    root = tree.getroot()
    body = root.find("body")
    sources: List[FeedSource] = []

    def walk(outline: ET.Element) -> None:
        feed_url = outline.attrib.get("xmlUrl")
        if outline.attrib.get("type") == "rss" and feed_url:
            sources.append(
                FeedSource(
                    url=feed_url,
                    alias=outline.attrib.get("title") or outline.attrib.get("text"),
                    max_items=_parse_max_items(outline, feed_url),
                    display_config=_parse_display_config(outline),
                )
            )
            logger.debug("Registered feed '%s'", feed_url)
            return

        for child in outline.findall("outline"):
            walk(child)

    if body is None:
        raise ValueError(f"{path} is missing the <body> section.")

    for outline in body.findall("outline"):
        walk(outline)

    logger.info("Loaded %d feed endpoints from configuration", len(sources))
    return sources


def _resolve_path(base_path: Path, target_path: str) -> str:
    """Resolve a path relative to the base config file if it's not absolute."""
    target = Path(target_path).expanduser()
    if target.is_absolute():
        return str(target)
    return str((base_path.parent / target).resolve())


def parse_app_config(path: str) -> AppConfig:
    """Parse the main application configuration XML."""
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading application configuration from %s", config_path)
    tree = ET.parse(config_path)
    root = tree.getroot()

    sources: List[FeedSource] = []
    feeds_node = root.find("feeds")
    if feeds_node is not None and feeds_node.text and feeds_node.text.strip():
        sources = parse_feeds_config(_resolve_path(config_path, feeds_node.text.strip()))

    display_by = Order.parse(root.findtext("display-by", Order.DATE.value))

    try:
        concurrency = int(root.findtext("concurrency", "10"))
        timeout = float(root.findtext("timeout", "10"))
        width = int(root.findtext("width", "80"))
    except ValueError as exc:
        raise ConfigurationError(f"Invalid numeric value in {path}: {exc}") from exc

    progress = _parse_bool(root.findtext("progress"), default=True)

    log_node = root.find("logging")
    logging_config = LoggingConfig()
    if log_node is not None:
        logging_config.level = log_node.findtext("level", "WARNING")
        log_file = log_node.findtext("file")
        if log_file:
            logging_config.file = _resolve_path(config_path, log_file)

    return AppConfig(
        sources=sources,
        display_by=display_by,
        concurrency=concurrency,
        timeout=timeout,
        progress=progress,
        width=width,
        logging=logging_config,
    )


def default_config_path() -> Path:
    """Return ~/.config/rssget/config.xml; raises RuntimeError without a home directory."""
    return Path.home() / ".config" / DEFAULT_CONFIG_NAME


def load_app_config(path: Optional[str]) -> AppConfig:
    """Load the given config file, or the default one when it exists."""
    if path:
        return parse_app_config(path)
    default_path = default_config_path()
    if default_path.exists():
        return parse_app_config(str(default_path))
    logger.debug("No config file at %s; using command-line values only", default_path)
    return AppConfig()
