import json
import os
import pytest
from unittest.mock import patch


BASE_ENV = {
    "YOUTUBE_API_KEY": "test_key",
    "YOUTUBE_CLIENT_ID": "test_client_id",
    "YOUTUBE_CLIENT_SECRET": "test_secret",
    "YOUTUBE_CHANNEL_ID": "UC123456",
}


def test_load_config_returns_all_required_keys():
    """Config loader returns a BotConfig with the required values."""
    with patch.dict(os.environ, BASE_ENV, clear=True):
        from config_loader import load_config
        config = load_config()
        assert config.api_key == "test_key"
        assert config.client_id == "test_client_id"
        assert config.client_secret == "test_secret"
        assert config.channel_id == "UC123456"


def test_load_config_defaults():
    """Config loader provides sensible defaults for optional fields."""
    with patch.dict(os.environ, BASE_ENV, clear=True):
        from config_loader import load_config
        config = load_config()
        assert config.bot_name == "GameBuddy"
        assert config.owner_username == ""
        assert config.port == 3000
        assert config.oauth_tokens is None
        assert config.streaming_hours_start is None
        assert config.daily_quota_limit == 10000
        assert config.max_responses_per_hour == 30
        assert config.min_response_gap == 3.0
        assert config.stream_lookup == "api"
        assert config.channel_url == "https://www.youtube.com/channel/UC123456"
        assert config.keepalive_url == ""
        assert config.debug_mode is False


def test_load_config_missing_required_raises():
    """Config loader raises ValueError naming the missing env vars."""
    with patch.dict(os.environ, {}, clear=True):
        from config_loader import load_config
        with pytest.raises(ValueError, match="YOUTUBE_API_KEY"):
            load_config()


def test_load_config_is_immutable():
    """BotConfig is a frozen snapshot."""
    with patch.dict(os.environ, BASE_ENV, clear=True):
        from config_loader import load_config
        config = load_config()
        with pytest.raises(AttributeError):
            config.bot_name = "Other"


def test_load_config_parses_oauth_tokens():
    """A JSON token set enables sending."""
    tokens = {"access_token": "abc", "refresh_token": "def"}
    env = {**BASE_ENV, "OAUTH_TOKENS": json.dumps(tokens)}
    with patch.dict(os.environ, env, clear=True):
        from config_loader import load_config
        config = load_config()
        assert config.oauth_tokens == tokens


def test_load_config_invalid_oauth_tokens_means_read_only():
    """Unparseable OAUTH_TOKENS is not fatal, the bot just can't send."""
    env = {**BASE_ENV, "OAUTH_TOKENS": "{not json"}
    with patch.dict(os.environ, env, clear=True):
        from config_loader import load_config
        config = load_config()
        assert config.oauth_tokens is None


def test_load_config_streaming_hours():
    env = {**BASE_ENV, "STREAMING_HOURS_START": "18", "STREAMING_HOURS_END": "2"}
    with patch.dict(os.environ, env, clear=True):
        from config_loader import load_config
        config = load_config()
        assert config.streaming_hours_start == 18
        assert config.streaming_hours_end == 2


def test_load_config_rejects_out_of_range_hour():
    env = {**BASE_ENV, "STREAMING_HOURS_START": "25"}
    with patch.dict(os.environ, env, clear=True):
        from config_loader import load_config
        with pytest.raises(ValueError, match="STREAMING_HOURS_START"):
            load_config()


def test_load_config_rejects_non_numeric_value():
    env = {**BASE_ENV, "PORT": "eighty"}
    with patch.dict(os.environ, env, clear=True):
        from config_loader import load_config
        with pytest.raises(ValueError, match="Invalid configuration value"):
            load_config()


def test_load_config_rejects_unknown_stream_lookup():
    env = {**BASE_ENV, "STREAM_LOOKUP": "scrape"}
    with patch.dict(os.environ, env, clear=True):
        from config_loader import load_config
        with pytest.raises(ValueError, match="STREAM_LOOKUP"):
            load_config()


def test_load_config_keepalive_from_railway_domain():
    """Keep-alive URL falls back to the hosting platform's public domain."""
    env = {**BASE_ENV, "RAILWAY_PUBLIC_DOMAIN": "bot.up.railway.app"}
    with patch.dict(os.environ, env, clear=True):
        from config_loader import load_config
        config = load_config()
        assert config.keepalive_url == "https://bot.up.railway.app"


def test_load_config_bool_parsing():
    """Config loader parses boolean strings correctly."""
    env = {**BASE_ENV, "DEBUG_MODE": "true"}
    with patch.dict(os.environ, env, clear=True):
        from config_loader import load_config
        config = load_config()
        assert config.debug_mode is True
