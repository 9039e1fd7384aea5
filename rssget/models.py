"""Shared data models for rssget."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


class Order(str, enum.Enum):
    """Global ordering applied to the merged items."""

    DATE = "date"
    CHANNEL = "channel"

    @classmethod
    def parse(cls, value: str) -> "Order":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unrecognized order '{value}'. [date | channel]"
            ) from None


@dataclass(frozen=True)
class ItemDisplayConfig:
    """Toggles for displaying item fields."""

    hide_title: bool = False
    hide_link: bool = False
    hide_description: bool = False
    hide_author: bool = False
    hide_pub_date: bool = False
    show_enclosure: bool = False


@dataclass(frozen=True)
class FeedSource:
    """Configuration for a single RSS feed."""

    url: str
    alias: Optional[str] = None
    max_items: Optional[int] = None
    display_config: Optional[ItemDisplayConfig] = None

    def __post_init__(self) -> None:
        if not self.url or not self.url.strip():
            raise ValueError("Feed url must not be empty.")
        if self.max_items is not None and self.max_items <= 0:
            raise ValueError(
                f"max_items must be positive for feed {self.url}, got {self.max_items}"
            )

    @property
    def label(self) -> str:
        return self.alias or self.url[:20]


@dataclass(frozen=True)
class DisplayItem:
    """Normalized feed item ready for display."""

    channel_title: str
    config: ItemDisplayConfig
    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    pub_date: Optional[datetime] = None
    enclosure_url: Optional[str] = None


@dataclass
class RunResult:
    """Returned data after executing a run."""

    items: List[DisplayItem] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    output_text: str = ""
