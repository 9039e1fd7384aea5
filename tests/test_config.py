import textwrap

import pytest

from rssget import config as config_module
from rssget.config import (
    AppConfig,
    ConfigurationError,
    load_app_config,
    parse_app_config,
    parse_feeds_config,
    validate_sources,
)
from rssget.models import FeedSource, ItemDisplayConfig, Order


def _write(path, body):
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


def test_parse_feeds_config_walks_nested_outlines(tmp_path):
    opml = _write(
        tmp_path / "feeds.xml",
        """\
        <opml version="2.0">
          <body>
            <outline text="Tech">
              <outline text="Engineering">
                <outline type="rss" text="Eng Blog" xmlUrl="https://example.com/eng.xml" maxItems="3" />
              </outline>
              <outline type="rss" title="Podcast" xmlUrl="https://example.com/pod.xml"
                       showEnclosure="true" hideAuthor="TRUE" hideLink="false" />
            </outline>
            <outline type="rss" xmlUrl="https://example.com/plain.xml" />
          </body>
        </opml>
        """,
    )

    sources = parse_feeds_config(str(opml))

    assert sources == [
        FeedSource(url="https://example.com/eng.xml", alias="Eng Blog", max_items=3),
        FeedSource(
            url="https://example.com/pod.xml",
            alias="Podcast",
            display_config=ItemDisplayConfig(show_enclosure=True, hide_author=True),
        ),
        FeedSource(url="https://example.com/plain.xml"),
    ]


def test_parse_feeds_config_missing_body_raises(tmp_path):
    opml = _write(tmp_path / "feeds.xml", "<opml version='2.0'></opml>")

    with pytest.raises(ValueError):
        parse_feeds_config(str(opml))


@pytest.mark.parametrize("value", ["zero", "0", "-1"])
def test_parse_feeds_config_rejects_bad_max_items(tmp_path, value):
    opml = _write(
        tmp_path / "feeds.xml",
        f"""\
        <opml version="2.0"><body>
          <outline type="rss" xmlUrl="https://example.com/a.xml" maxItems="{value}" />
        </body></opml>
        """,
    )

    with pytest.raises(ConfigurationError):
        parse_feeds_config(str(opml))


def test_parse_app_config(tmp_path):
    _write(
        tmp_path / "feeds.xml",
        """\
        <opml version="2.0"><body>
          <outline type="rss" text="A" xmlUrl="https://example.com/a.xml" />
        </body></opml>
        """,
    )
    config_file = _write(
        tmp_path / "config.xml",
        """\
        <config>
            <feeds>feeds.xml</feeds>
            <display-by>channel</display-by>
            <concurrency>4</concurrency>
            <timeout>2.5</timeout>
            <progress>false</progress>
            <width>100</width>
            <logging>
                <level>DEBUG</level>
                <file>logs/rssget.log</file>
            </logging>
        </config>
        """,
    )

    config = parse_app_config(str(config_file))

    assert config.sources == [FeedSource(url="https://example.com/a.xml", alias="A")]
    assert config.display_by is Order.CHANNEL
    assert config.concurrency == 4
    assert config.timeout == 2.5
    assert config.progress is False
    assert config.width == 100
    assert config.logging.level == "DEBUG"
    assert config.logging.file == str((tmp_path / "logs" / "rssget.log").resolve())


def test_parse_app_config_defaults(tmp_path):
    config_file = _write(tmp_path / "config.xml", "<config />")

    config = parse_app_config(str(config_file))

    assert config == AppConfig()


def test_parse_app_config_rejects_unknown_order(tmp_path):
    config_file = _write(
        tmp_path / "config.xml", "<config><display-by>title</display-by></config>"
    )

    with pytest.raises(ValueError):
        parse_app_config(str(config_file))


def test_parse_app_config_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_app_config(str(tmp_path / "missing.xml"))


def test_load_app_config_without_default_file(monkeypatch, tmp_path):
    monkeypatch.setattr(config_module, "default_config_path", lambda: tmp_path / "missing.xml")

    assert load_app_config(None) == AppConfig()


def test_load_app_config_reads_default_file(monkeypatch, tmp_path):
    default = _write(tmp_path / "config.xml", "<config><timeout>3</timeout></config>")
    monkeypatch.setattr(config_module, "default_config_path", lambda: default)

    assert load_app_config(None).timeout == 3.0


def test_override_with_replaces_sources_and_order():
    base = AppConfig(
        sources=[FeedSource(url="https://example.com/a.xml", max_items=2)],
        display_by=Order.DATE,
        concurrency=3,
    )

    merged = base.override_with(["https://cli.example.com/rss"], Order.CHANNEL)

    assert merged.sources == [FeedSource(url="https://cli.example.com/rss")]
    assert merged.display_by is Order.CHANNEL
    assert merged.concurrency == 3
    assert base.display_by is Order.DATE


def test_override_with_keeps_config_values_when_cli_is_empty():
    base = AppConfig(sources=[FeedSource(url="https://example.com/a.xml")])

    merged = base.override_with([], None)

    assert merged.sources == base.sources
    assert merged.display_by is Order.DATE


def test_validate_sources_rejects_empty_list():
    with pytest.raises(ConfigurationError, match="No channels configured"):
        validate_sources([])


def test_default_config_path_is_under_home(monkeypatch, tmp_path):
    monkeypatch.setattr(config_module.Path, "home", classmethod(lambda cls: tmp_path))

    assert config_module.default_config_path() == tmp_path / ".config" / "rssget" / "config.xml"


def test_load_app_config_propagates_missing_home(monkeypatch):
    def no_home(cls):
        raise RuntimeError("Could not determine home directory.")

    monkeypatch.setattr(config_module.Path, "home", classmethod(no_home))

    with pytest.raises(RuntimeError):
        load_app_config(None)
