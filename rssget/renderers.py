"""Ordering and terminal rendering of display items."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Callable, Iterable, List, Optional, Tuple

from jinja2 import TemplateError

from .models import DisplayItem, Order
from .templating import build_environment

logger = logging.getLogger(__name__)

MAX_WIDTH = 80

SortKey = Callable[[DisplayItem], tuple]


@dataclass(frozen=True)
class RenderOptions:
    """Formatting options shared by every rendered item."""

    width: int = MAX_WIDTH
    indent: str = "     "
    timezone: Optional[tzinfo] = None
    timestamp_format: str = "%Y-%m-%d %H:%M:%S"


def _date_key(item: DisplayItem) -> Tuple[bool, Optional[datetime]]:
    # Undated items compare as (False, None) and never reach the datetime slot.
    return (item.pub_date is not None, item.pub_date)


def _channel_key(item: DisplayItem) -> tuple:
    return (item.channel_title.casefold(), _date_key(item))


_SORT_KEYS = {
    Order.DATE: _date_key,
    Order.CHANNEL: _channel_key,
}


def sort_key_for(order: Order) -> SortKey:
    """Return the key function used to order items for ``order``."""
    return _SORT_KEYS[Order(order)]


def sort_items(items: Iterable[DisplayItem], order: Order) -> List[DisplayItem]:
    """Stable sort of the merged items."""
    return sorted(items, key=sort_key_for(order))


class ItemRenderer:
    """Render DisplayItems to terminal text blocks."""

    template_name = "item.txt.j2"

    def __init__(self, options: Optional[RenderOptions] = None) -> None:
        self.options = options or RenderOptions()
        self._template = build_environment(self.options).get_template(
            self.template_name
        )

    def render(self, item: DisplayItem) -> str:
        return self._template.render(item=item, config=item.config)


def render_items(
    items: Iterable[DisplayItem], renderer: ItemRenderer
) -> Tuple[List[str], List[str]]:
    """Render every item, collecting per-item failures instead of raising."""
    blocks: List[str] = []
    errors: List[str] = []
    for item in items:
        try:
            blocks.append(renderer.render(item))
        except (TemplateError, ValueError, OverflowError) as exc:
            logger.warning("Could not format item from '%s': %s", item.channel_title, exc)
            errors.append(f"Could not format RSS item: {exc}")
    return blocks, errors
