"""Load bot configuration from environment variables."""

import json
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from log_utils import log


REQUIRED = [
    "YOUTUBE_API_KEY",
    "YOUTUBE_CLIENT_ID",
    "YOUTUBE_CLIENT_SECRET",
    "YOUTUBE_CHANNEL_ID",
]

STREAM_LOOKUPS = ("api", "ytdlp")


@dataclass(frozen=True)
class BotConfig:
    """Immutable snapshot of credentials and tunables, loaded once at startup."""

    api_key: str
    client_id: str
    client_secret: str
    channel_id: str
    bot_name: str = "GameBuddy"
    owner_username: str = ""
    port: int = 3000
    oauth_tokens: Optional[dict] = None
    streaming_hours_start: Optional[int] = None
    streaming_hours_end: Optional[int] = None
    stream_check_interval: int = 300
    poll_interval_floor: float = 5.0
    poll_error_delay: float = 10.0
    daily_quota_limit: int = 10000
    max_responses_per_hour: int = 30
    max_responses_per_day: int = 200
    min_response_gap: float = 3.0
    reply_delay_min: float = 1.0
    reply_delay_max: float = 4.0
    stream_lookup: str = "api"
    channel_url: str = ""
    keepalive_url: str = ""
    keepalive_interval: int = 1500
    debug_mode: bool = False


def _parse_bool(value):
    """Parse a string to boolean."""
    return value.lower() in ("true", "1", "yes")


def _parse_hour(name):
    """Parse an optional 0-23 hour bound."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    hour = int(raw)
    if not 0 <= hour <= 23:
        raise ValueError(f"{name} must be between 0 and 23, got {hour}")
    return hour


def _parse_oauth_tokens(raw):
    """Parse the serialized OAuth token set. Invalid JSON means read-only mode."""
    if not raw:
        log("OAUTH_TOKENS not set. Bot will only read chat, not send messages.")
        return None
    try:
        tokens = json.loads(raw)
    except json.JSONDecodeError as e:
        log(f"Failed to parse OAUTH_TOKENS: {e}. Bot will only read chat.")
        return None
    if not isinstance(tokens, dict):
        log("OAUTH_TOKENS must be a JSON object. Bot will only read chat.")
        return None
    log("OAuth tokens loaded from environment")
    return tokens


def _keepalive_url():
    url = os.environ.get("KEEPALIVE_URL", "")
    if url:
        return url
    domain = os.environ.get("RAILWAY_PUBLIC_DOMAIN") or os.environ.get("RENDER_EXTERNAL_URL")
    if not domain:
        return ""
    if domain.startswith("http://") or domain.startswith("https://"):
        return domain
    return f"https://{domain}"


def load_config():
    """
    Load configuration from environment variables.

    Returns:
        BotConfig with all config values

    Raises:
        ValueError if required env vars are missing or a value is malformed
    """
    load_dotenv()

    missing = [key for key in REQUIRED if not os.environ.get(key)]
    if missing:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing)}\n"
            "Copy .env.example to .env and fill in your values."
        )

    stream_lookup = os.environ.get("STREAM_LOOKUP", "api").lower()
    if stream_lookup not in STREAM_LOOKUPS:
        raise ValueError(
            f"STREAM_LOOKUP must be one of {', '.join(STREAM_LOOKUPS)}, got {stream_lookup!r}"
        )

    channel_id = os.environ["YOUTUBE_CHANNEL_ID"]
    channel_url = os.environ.get(
        "YOUTUBE_CHANNEL_URL", f"https://www.youtube.com/channel/{channel_id}"
    )

    try:
        config = BotConfig(
            api_key=os.environ["YOUTUBE_API_KEY"],
            client_id=os.environ["YOUTUBE_CLIENT_ID"],
            client_secret=os.environ["YOUTUBE_CLIENT_SECRET"],
            channel_id=channel_id,
            bot_name=os.environ.get("BOT_NAME", "GameBuddy"),
            owner_username=os.environ.get("OWNER_USERNAME", ""),
            port=int(os.environ.get("PORT", "3000")),
            oauth_tokens=_parse_oauth_tokens(os.environ.get("OAUTH_TOKENS", "")),
            streaming_hours_start=_parse_hour("STREAMING_HOURS_START"),
            streaming_hours_end=_parse_hour("STREAMING_HOURS_END"),
            stream_check_interval=int(os.environ.get("STREAM_CHECK_INTERVAL", "300")),
            poll_interval_floor=float(os.environ.get("POLL_INTERVAL_FLOOR", "5")),
            poll_error_delay=float(os.environ.get("POLL_ERROR_DELAY", "10")),
            daily_quota_limit=int(os.environ.get("DAILY_QUOTA_LIMIT", "10000")),
            max_responses_per_hour=int(os.environ.get("MAX_RESPONSES_PER_HOUR", "30")),
            max_responses_per_day=int(os.environ.get("MAX_RESPONSES_PER_DAY", "200")),
            min_response_gap=float(os.environ.get("MIN_RESPONSE_GAP", "3")),
            reply_delay_min=float(os.environ.get("REPLY_DELAY_MIN", "1")),
            reply_delay_max=float(os.environ.get("REPLY_DELAY_MAX", "4")),
            stream_lookup=stream_lookup,
            channel_url=channel_url,
            keepalive_url=_keepalive_url(),
            keepalive_interval=int(os.environ.get("KEEPALIVE_INTERVAL", "1500")),
            debug_mode=_parse_bool(os.environ.get("DEBUG_MODE", "false")),
        )
    except ValueError as e:
        raise ValueError(f"Invalid configuration value: {e}") from e

    if config.reply_delay_max < config.reply_delay_min:
        raise ValueError("REPLY_DELAY_MAX must not be lower than REPLY_DELAY_MIN")

    return config
