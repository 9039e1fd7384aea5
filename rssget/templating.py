"""Jinja2 environment for rssget templates."""

from __future__ import annotations

import textwrap
from datetime import datetime
from importlib import resources
from typing import TYPE_CHECKING

from jinja2 import Environment, FileSystemLoader, StrictUndefined

if TYPE_CHECKING:
    from .renderers import RenderOptions


def _make_wrap(options: "RenderOptions"):
    def _wrap(value: str) -> str:
        """Word-wrap text to the configured width with an indented body."""
        return textwrap.fill(
            value,
            width=options.width,
            initial_indent=options.indent,
            subsequent_indent=options.indent,
        )

    return _wrap


def _make_localtime(options: "RenderOptions"):
    def _localtime(value: datetime) -> str:
        # astimezone(None) converts to the system local zone.
        return value.astimezone(options.timezone).strftime(options.timestamp_format)

    return _localtime


def build_environment(options: "RenderOptions") -> Environment:
    """Return a Jinja environment configured for package templates."""
    template_dir = resources.files(__package__) / "templates"
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )
    env.filters["wrap"] = _make_wrap(options)
    env.filters["localtime"] = _make_localtime(options)
    return env
