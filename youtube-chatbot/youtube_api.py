"""YouTube Data API v3 client for live stream lookup and live chat."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

import requests
import yt_dlp
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession
from google.oauth2.credentials import Credentials


API_BASE = "https://www.googleapis.com/youtube/v3"
TOKEN_URI = "https://oauth2.googleapis.com/token"

# Error reasons meaning the chat is gone for good, not worth retrying
CHAT_UNAVAILABLE_REASONS = {
    "liveChatEnded",
    "liveChatDisabled",
    "liveChatNotFound",
    "videoNotFound",
}


class YouTubeApiError(Exception):
    """A failed call to the YouTube API. Transient unless subclassed."""

    def __init__(self, message, status=None, reason=None):
        super().__init__(message)
        self.status = status
        self.reason = reason


class ChatUnavailableError(YouTubeApiError):
    """The live chat was disabled, ended or no longer exists."""


@dataclass
class LiveVideo:
    video_id: str
    title: str = ""


@dataclass
class ChatMessage:
    id: str
    author: str
    text: str
    author_channel_id: str = ""
    published_at: str = ""
    is_chat_owner: bool = False

    @classmethod
    def from_item(cls, item):
        snippet = item.get("snippet", {})
        author = item.get("authorDetails", {})
        return cls(
            id=item.get("id", ""),
            author=author.get("displayName", "Unknown"),
            text=snippet.get("displayMessage", ""),
            author_channel_id=author.get("channelId", ""),
            published_at=snippet.get("publishedAt", ""),
            is_chat_owner=bool(author.get("isChatOwner", False)),
        )


@dataclass
class ChatPage:
    messages: List[ChatMessage] = field(default_factory=list)
    next_page_token: Optional[str] = None
    polling_interval_ms: int = 5000


def build_credentials(tokens, client_id, client_secret):
    """Build OAuth credentials from a serialized token set.

    Accepts the token JSON produced by Google's OAuth libraries
    (``access_token``, ``refresh_token``, ``expiry_date`` in ms, ``scope``).
    """
    if not tokens:
        return None

    expiry = None
    expiry_ms = tokens.get("expiry_date")
    if expiry_ms:
        expiry = datetime.fromtimestamp(expiry_ms / 1000, tz=timezone.utc).replace(tzinfo=None)

    scope = tokens.get("scope")
    return Credentials(
        token=tokens.get("access_token"),
        refresh_token=tokens.get("refresh_token"),
        token_uri=TOKEN_URI,
        client_id=client_id,
        client_secret=client_secret,
        scopes=scope.split() if scope else None,
        expiry=expiry,
    )


def _raise_for_error(resp):
    """Translate an error response into YouTubeApiError / ChatUnavailableError."""
    if resp.status_code < 400:
        return

    try:
        payload = resp.json().get("error", {})
    except ValueError:
        payload = {}

    errors = payload.get("errors") or [{}]
    reason = errors[0].get("reason")
    message = payload.get("message") or f"HTTP {resp.status_code}"

    if reason in CHAT_UNAVAILABLE_REASONS or resp.status_code == 404:
        raise ChatUnavailableError(message, status=resp.status_code, reason=reason)
    raise YouTubeApiError(message, status=resp.status_code, reason=reason)


class YouTubeClient:
    """Calls the four YouTube endpoints the bot needs.

    Search and video lookups use the API key. Chat reads use OAuth when
    credentials are available, the API key otherwise. Chat sends require
    OAuth. Every call is charged against ``quota`` first, if one is given.
    """

    def __init__(self, api_key, credentials=None, quota=None, timeout=10):
        self.api_key = api_key
        self.credentials = credentials
        self.quota = quota
        self.timeout = timeout
        self._authed = AuthorizedSession(credentials) if credentials else None

    @property
    def can_send(self):
        return self._authed is not None

    def _request(self, action, method, path, params, body=None, oauth=False):
        if self.quota is not None:
            self.quota.spend(action)

        url = f"{API_BASE}/{path}"
        try:
            if oauth and self._authed is not None:
                resp = self._authed.request(
                    method, url, params=params, json=body, timeout=self.timeout
                )
            else:
                resp = requests.request(
                    method, url, params={**params, "key": self.api_key},
                    json=body, timeout=self.timeout,
                )
        except requests.exceptions.RequestException as e:
            raise YouTubeApiError(f"{action} request failed: {e}") from e
        except GoogleAuthError as e:
            raise YouTubeApiError(f"{action} authorization failed: {e}") from e

        _raise_for_error(resp)
        try:
            return resp.json()
        except ValueError as e:
            raise YouTubeApiError(f"{action} returned an unreadable body: {e}") from e

    def find_live_video(self, channel_id):
        """Return the channel's current live video, or None."""
        data = self._request("search", "GET", "search", {
            "part": "snippet",
            "channelId": channel_id,
            "eventType": "live",
            "type": "video",
            "maxResults": 1,
        })
        items = data.get("items") or []
        if not items:
            return None
        item = items[0]
        video_id = item.get("id", {}).get("videoId")
        if not video_id:
            raise YouTubeApiError("search returned a live item without a videoId")
        return LiveVideo(
            video_id=video_id,
            title=item.get("snippet", {}).get("title", ""),
        )

    def get_live_chat_id(self, video_id):
        """Return the video's active live chat id, or None if chat is disabled."""
        data = self._request("videos.list", "GET", "videos", {
            "part": "liveStreamingDetails",
            "id": video_id,
        })
        items = data.get("items") or []
        if not items:
            return None
        return items[0].get("liveStreamingDetails", {}).get("activeLiveChatId")

    def list_messages(self, live_chat_id, page_token=None):
        """Fetch the next page of chat messages after ``page_token``."""
        params = {
            "liveChatId": live_chat_id,
            "part": "snippet,authorDetails",
        }
        if page_token:
            params["pageToken"] = page_token

        data = self._request(
            "liveChatMessages.list", "GET", "liveChat/messages", params, oauth=True
        )
        messages = []
        for item in data.get("items") or []:
            msg = ChatMessage.from_item(item)
            if msg.text:
                messages.append(msg)

        return ChatPage(
            messages=messages,
            next_page_token=data.get("nextPageToken"),
            polling_interval_ms=data.get("pollingIntervalMillis") or 5000,
        )

    def insert_message(self, live_chat_id, text):
        """Post ``text`` to the live chat. Requires OAuth credentials."""
        if not self.can_send:
            raise YouTubeApiError("Cannot send messages without OAuth credentials")

        return self._request(
            "liveChatMessages.insert", "POST", "liveChat/messages",
            {"part": "snippet"},
            body={
                "snippet": {
                    "liveChatId": live_chat_id,
                    "type": "textMessageEvent",
                    "textMessageDetails": {"messageText": text},
                }
            },
            oauth=True,
        )


def find_live_video_ytdlp(channel_url):
    """Use yt-dlp to find the active live stream without spending API quota."""
    url = channel_url
    if not url.endswith("/live"):
        url = url.rstrip("/") + "/live"

    ydl_opts = {
        "quiet": True,
        "no_warnings": True,
        "skip_download": True,
    }

    try:
        with yt_dlp.YoutubeDL(ydl_opts) as ydl:
            info = ydl.extract_info(url, download=False)
    except yt_dlp.utils.DownloadError as e:
        # yt-dlp reports "not currently live" as a download error
        if "not currently live" in str(e) or "will begin" in str(e):
            return None
        raise YouTubeApiError(f"yt-dlp lookup failed: {e}") from e

    if not info or not info.get("is_live"):
        return None

    return LiveVideo(video_id=info.get("id"), title=info.get("title", ""))
