"""Shared pytest fixtures for YTViewer tests."""

import pytest

from config import Config, WebConfig, NocoDBConfig


@pytest.fixture
def sample_config():
    """Minimal Config with safe defaults for testing."""
    return Config(
        web=WebConfig(host="127.0.0.1", port=9999, password="letmein", session_secret="test-secret"),
        nocodb=NocoDBConfig(
            url="https://nocodb.test",
            token="tok",
            project_id="p1",
            table_id="t1",
            table_name="youtubeTranscripts",
        ),
    )


@pytest.fixture
def config_yaml(tmp_path):
    """Write a minimal config.yaml and return its path."""
    cfg = tmp_path / "config.yaml"
    cfg.write_text("""\
web:
  host: 0.0.0.0
  port: 8080
  password: "hunter2"
nocodb:
  url: "https://db.example.com/"
  token: "abc"
  table_id: "m123"
  cache_ttl: 60
""")
    return cfg


@pytest.fixture
def videos():
    """A small catalog covering scalar, linked-record and string-array facets."""
    return [
        {
            "Id": 1,
            "VideoID": "aaaaaaaaaaa",
            "Title": "Bitcoin outlook",
            "Channel": "Foo",
            "VideoGenre": "finance",
            "TickerSymbol": "BTC",
            "Persons": [{"Title": "Alice"}, "Carol"],
            "Companies": [{"name": "Acme"}],
            "Hashtags": ["#btc", "#crypto"],
            "Sentiment": 1,
            "CreatedAt": "2024-03-01T10:00:00Z",
        },
        {
            "Id": 2,
            "VideoID": "bbbbbbbbbbb",
            "Title": "Ethereum deep dive",
            "Channel": "Bar",
            "VideoGenre": "finance",
            "TickerSymbol": "ETH",
            "Persons": [{"Title": "Bob"}],
            "Hashtags": ["#eth"],
            "Sentiment": -0.5,
            "CreatedAt": "2024-05-01T10:00:00Z",
        },
        {
            "Id": 3,
            "VideoID": "ccccccccccc",
            "Title": "Gardening basics",
            "Channel": "Foo",
            "VideoGenre": "Podcast",
            "Speaker": "Dana",
            "CreatedAt": "2023-12-01T10:00:00Z",
        },
    ]
