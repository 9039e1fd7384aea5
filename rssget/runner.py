"""High-level orchestration for the rssget application."""

from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from tqdm import tqdm

from .config import ConfigurationError, validate_sources
from .feeds import DEFAULT_TIMEOUT, FetchError, fetch_feed_items
from .models import DisplayItem, FeedSource, Order, RunResult
from .renderers import ItemRenderer, RenderOptions, render_items, sort_items

logger = logging.getLogger(__name__)

FeedOutcome = Tuple[List[DisplayItem], Optional[str]]


@dataclass
class RunConfig:
    """Runtime options for executing the application."""

    sources: List[FeedSource]
    order: Order = Order.DATE
    concurrency: int = 10
    timeout: float = DEFAULT_TIMEOUT
    progress: bool = False
    render_options: RenderOptions = field(default_factory=RenderOptions)


def _fetch_outcome(source: FeedSource, timeout: float) -> FeedOutcome:
    try:
        return fetch_feed_items(source, timeout=timeout), None
    except FetchError as exc:
        return [], exc.describe()
    except Exception as exc:  # noqa: BLE001 - one feed must not abort the run
        logger.exception("Failed to process feed %s", source.url)
        return [], f"Could not process rss '{source.label}': [{exc}]"


def aggregate(
    sources: Sequence[FeedSource],
    concurrency: int = 10,
    timeout: float = DEFAULT_TIMEOUT,
    progress: bool = False,
) -> RunResult:
    """Fetch every source concurrently and merge the surviving items."""
    result = RunResult()
    if not sources:
        return result

    workers = max(1, min(concurrency, len(sources)))
    logger.info("Fetching %d feeds with %d workers", len(sources), workers)

    with tqdm(
        total=len(sources),
        desc="Fetching RSS",
        unit="feed",
        disable=not progress,
        leave=False,
    ) as bar, concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_source = {
            executor.submit(_fetch_outcome, source, timeout): source
            for source in sources
        }
        for future in concurrent.futures.as_completed(future_to_source):
            source = future_to_source[future]
            items, error = future.result()
            bar.set_postfix_str(source.label)
            bar.update(1)
            if error is not None:
                result.errors.append(error)
                continue
            result.items.extend(items)

    logger.info(
        "Collected %d items from %d feeds (%d failed)",
        len(result.items),
        len(sources),
        len(result.errors),
    )
    return result


def execute(config: RunConfig) -> RunResult:
    """Run the application logic and return the result payload."""
    validate_sources(config.sources)
    if config.concurrency <= 0:
        raise ConfigurationError("concurrency must be positive.")
    if config.timeout <= 0:
        raise ConfigurationError("timeout must be positive.")

    result = aggregate(
        config.sources,
        concurrency=config.concurrency,
        timeout=config.timeout,
        progress=config.progress,
    )
    if not result.items:
        logger.info("No items retrieved from %d feeds", len(config.sources))
        return result

    result.items = sort_items(result.items, config.order)

    renderer = ItemRenderer(config.render_options)
    blocks, render_errors = render_items(result.items, renderer)
    result.errors.extend(render_errors)
    result.output_text = "\n".join(blocks)
    return result
