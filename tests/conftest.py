import types
from typing import Dict, Iterable, Optional, Union

import pytest
import requests

from rssget import feeds


def rss_document(channel_title: str, items: Iterable[Dict[str, str]]) -> bytes:
    """Build a minimal RSS 2.0 document from item field dictionaries."""
    parts = []
    for item in items:
        fields = []
        for name in ("title", "link", "description", "author", "pubDate"):
            if name in item:
                fields.append(f"<{name}>{item[name]}</{name}>")
        if "enclosure" in item:
            fields.append(
                f'<enclosure url="{item["enclosure"]}" length="1" type="audio/mpeg" />'
            )
        parts.append("<item>" + "".join(fields) + "</item>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel>'
        f"<title>{channel_title}</title>"
        "<link>https://example.com/</link>"
        "<description>Test channel</description>"
        + "".join(parts)
        + "</channel></rss>"
    ).encode("utf-8")


def _response(content: bytes, status_error: Optional[Exception] = None):
    def raise_for_status():
        if status_error is not None:
            raise status_error

    return types.SimpleNamespace(content=content, raise_for_status=raise_for_status)


@pytest.fixture
def fake_http(monkeypatch):
    """Route requests.get calls made by the fetcher to canned bodies or errors."""
    routes: Dict[str, Union[bytes, Exception]] = {}
    calls = []

    def fake_get(url, timeout=None):
        calls.append((url, timeout))
        outcome = routes.get(url)
        if outcome is None:
            raise requests.ConnectionError(f"no route to {url}")
        if isinstance(outcome, requests.HTTPError):
            return _response(b"", status_error=outcome)
        if isinstance(outcome, Exception):
            raise outcome
        return _response(outcome)

    monkeypatch.setattr(feeds.requests, "get", fake_get)
    fake_get.routes = routes
    fake_get.calls = calls
    return fake_get
