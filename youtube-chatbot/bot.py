"""YouTube Live Chat Bot - Main coordinator."""

import random
import time
from collections import deque
from datetime import datetime, timezone

import requests

from log_utils import log
from quota import QuotaExceededError, QuotaGovernor
from rate_limiter import ResponseRateLimiter
from responder import ResponseEngine
from session import StreamSession
from youtube_api import (
    ChatUnavailableError,
    YouTubeApiError,
    YouTubeClient,
    build_credentials,
    find_live_video_ytdlp,
)


# Longest single sleep in the main loop, so stop() is noticed quickly
MAX_IDLE_SLEEP = 0.5

# How many of our own sent messages to remember for echo detection
SENT_HISTORY = 100


def within_hours(hour, start, end):
    """Check ``hour`` against a [start, end) window that may wrap midnight."""
    if start is None or end is None or start == end:
        return True
    if start < end:
        return start <= hour < end
    return hour >= start or hour < end


class YouTubeChatBot:
    """Coordinates stream detection, chat polling and replies.

    All scheduling happens on one loop: ``tick`` runs whatever is due
    (stream check, chat poll, delayed replies, keep-alive ping) and
    ``start`` calls it until ``stop``. Clock, sleep, wall time and
    randomness are injectable.
    """

    def __init__(self, config, client=None, quota=None, rng=None,
                 clock=time.time, sleep=time.sleep, now=datetime.now):
        self.config = config
        self.quota = quota or QuotaGovernor(config.daily_quota_limit, now=now)

        if client is None:
            credentials = build_credentials(
                config.oauth_tokens, config.client_id, config.client_secret
            )
            client = YouTubeClient(config.api_key, credentials=credentials, quota=self.quota)
        self.client = client

        self.session = StreamSession()
        self.rate = ResponseRateLimiter(
            max_per_hour=config.max_responses_per_hour,
            max_per_day=config.max_responses_per_day,
            min_gap=config.min_response_gap,
            clock=clock,
        )
        self.rng = rng or random.Random()
        self.responder = ResponseEngine(
            config.bot_name,
            owner_username=config.owner_username,
            owner_channel_id=config.channel_id,
            rng=self.rng,
            status_provider=self.status,
        )

        self._clock = clock
        self._sleep = sleep
        self._now = now
        self.started_at = clock()
        self.running = False
        self.sent_count = 0

        # Our own posts come back through the poll; remember them to skip them
        self._sent_ids = deque(maxlen=SENT_HISTORY)
        self._sent_texts = deque(maxlen=SENT_HISTORY)
        self._sender_channel_id = None

        # (due_time, text) for replies waiting out their human-like delay
        self._pending = []
        self._next_check = 0
        self._next_poll = None
        self._next_keepalive = self.started_at + config.keepalive_interval

    # ── Stream detection ──────────────────────────────────────────

    def within_streaming_hours(self):
        return within_hours(
            self._now().hour,
            self.config.streaming_hours_start,
            self.config.streaming_hours_end,
        )

    def _lookup_live_video(self):
        if self.config.stream_lookup == "ytdlp":
            return find_live_video_ytdlp(self.config.channel_url)
        return self.client.find_live_video(self.config.channel_id)

    def check_stream(self):
        """Look for a live video and adopt it if it is new.

        Returns True while a live video is tracked. Lookup failures count
        as "not streaming" for this tick without tearing anything down.
        """
        try:
            video = self._lookup_live_video()
        except QuotaExceededError:
            return False
        except YouTubeApiError as e:
            log(f"Error checking stream status: {e}")
            return False

        if video is None:
            if self.session.video_id:
                log("Stream ended")
                self.end_session()
            return False

        if video.video_id != self.session.video_id:
            self.session.reset(video.video_id, now=self._clock())
            self._pending.clear()
            self._next_poll = None
            log("New live stream detected!")
            log(f"   Video ID: {video.video_id}")
            log(f"   Title:    {video.title}")
        return True

    def connect_chat(self):
        """Resolve the live chat id of the tracked video. Returns True on success."""
        try:
            chat_id = self.client.get_live_chat_id(self.session.video_id)
        except QuotaExceededError:
            return False
        except YouTubeApiError as e:
            log(f"Error getting live chat ID: {e}")
            return False

        if not chat_id:
            log("Live chat not available for this stream")
            return False

        self.session.live_chat_id = chat_id
        self.session.running = True
        log("Live chat connected!")
        return True

    def end_session(self):
        self.session.clear()
        self._pending.clear()
        self._next_poll = None

    # ── Chat polling ──────────────────────────────────────────────

    def poll_once(self, now=None):
        """Fetch and process one page of chat messages.

        Returns the delay until the next poll, or None if the session was
        torn down because the chat is gone.
        """
        now = self._clock() if now is None else now
        session = self.session

        try:
            page = self.client.list_messages(session.live_chat_id, session.page_token)
        except ChatUnavailableError as e:
            log(f"Stream ended or chat disabled: {e}")
            self.end_session()
            return None
        except QuotaExceededError:
            return self.config.poll_error_delay
        except YouTubeApiError as e:
            log(f"Error polling messages: {e}")
            log(f"Retrying in {self.config.poll_error_delay}s...")
            return self.config.poll_error_delay

        for message in page.messages:
            self.process_message(message, now)

        session.page_token = page.next_page_token
        return max(page.polling_interval_ms / 1000, self.config.poll_interval_floor)

    def process_message(self, message, now=None):
        """Run one message through the response engine and schedule any reply."""
        now = self._clock() if now is None else now
        if self.config.debug_mode:
            log(f"[CHAT] {message.author}: {message.text}")

        if self.responder.is_self(message) or self.is_own_post(message):
            return None

        record = self.session.track(message.author_channel_id or message.author, now)
        if self.config.debug_mode and record.is_first_message:
            log(f"   New chatter: {message.author}")

        refusal = self.rate.check(now)
        if refusal:
            if self.config.debug_mode:
                log(f"[RATE LIMITED] {refusal}: not replying to {message.author}")
            return None

        reply = self.responder.generate(message, record)
        if reply is None:
            return None

        self.rate.record(now)
        delay = self.rng.uniform(self.config.reply_delay_min, self.config.reply_delay_max)
        self._pending.append((now + delay, reply))
        return reply

    # ── Sending ───────────────────────────────────────────────────

    def is_own_post(self, message):
        """Check if ``message`` is one of our replies echoed back by the poll.

        The OAuth account may be the channel owner's, so neither the display
        name nor the channel id alone tells our posts apart.
        """
        if message.id and message.id in self._sent_ids:
            return True
        if message.text not in self._sent_texts:
            return False
        if self._sender_channel_id is None:
            return True
        return message.author_channel_id == self._sender_channel_id

    def _remember_sent(self, sent, text):
        self._sent_texts.append(text)
        if not isinstance(sent, dict):
            return
        if sent.get("id"):
            self._sent_ids.append(sent["id"])
        sender = sent.get("snippet", {}).get("authorChannelId")
        if sender:
            self._sender_channel_id = sender

    @property
    def pending_replies(self):
        return [text for _, text in self._pending]

    def send_due_replies(self, now=None):
        now = self._clock() if now is None else now
        due = [text for when, text in self._pending if when <= now]
        self._pending = [(when, text) for when, text in self._pending if when > now]
        for text in due:
            self.send_message(text)
        return len(due)

    def send_message(self, text):
        """Post a reply to the live chat. Returns True if it was sent."""
        if not self.session.live_chat_id:
            log(f"Dropping reply, no live chat: {text}")
            return False

        if not self.client.can_send:
            log(f"Would send: {text} (but no OAuth tokens configured)")
            return False

        try:
            sent = self.client.insert_message(self.session.live_chat_id, text)
        except QuotaExceededError:
            return False
        except YouTubeApiError as e:
            log(f"Error sending message: {e}")
            return False

        self.sent_count += 1
        self._remember_sent(sent, text)
        log(f"{self.config.bot_name}: {text}")
        return True

    # ── Keep-alive ────────────────────────────────────────────────

    def keepalive_ping(self):
        """Ping our own public URL so free hosting tiers don't idle us."""
        try:
            requests.get(self.config.keepalive_url, timeout=10)
            log("Keep-alive ping")
        except requests.exceptions.RequestException as e:
            log(f"Keep-alive ping failed: {e}")

    # ── Main loop ─────────────────────────────────────────────────

    def tick(self, now=None):
        """Run every action that is due at ``now``."""
        now = self._clock() if now is None else now

        if now >= self._next_check:
            self._next_check = now + self.config.stream_check_interval
            if self.within_streaming_hours():
                streaming = self.check_stream()
                if streaming and not self.session.running:
                    log("Connecting to live chat...")
                    if self.connect_chat():
                        self._next_poll = now
                        log("Bot is now active in chat!")

        if self.session.is_active and self._next_poll is not None and now >= self._next_poll:
            delay = self.poll_once(now)
            self._next_poll = None if delay is None else self._clock() + delay

        self.send_due_replies(now)

        if self.config.keepalive_url and now >= self._next_keepalive:
            self._next_keepalive = now + self.config.keepalive_interval
            self.keepalive_ping()

    def _next_wakeup(self):
        candidates = [self._next_check]
        if self._next_poll is not None:
            candidates.append(self._next_poll)
        candidates.extend(when for when, _ in self._pending)
        if self.config.keepalive_url:
            candidates.append(self._next_keepalive)
        return min(candidates)

    def start(self):
        """Start the bot and block until stop() is called."""
        log("=" * 60)
        log("YouTube Live Chat Bot")
        log(f"   Bot name:  {self.config.bot_name}")
        log(f"   Channel:   {self.config.channel_id}")
        log(f"   Lookup:    {self.config.stream_lookup} every {self.config.stream_check_interval}s")
        log(f"   Rate limit: {self.rate.max_per_hour}/hour, {self.rate.max_per_day}/day, "
            f"{self.rate.min_gap}s gap")
        log(f"   Quota:     {self.quota.daily_limit} units/day")
        if self.config.streaming_hours_start is not None:
            log(f"   Hours:     {self.config.streaming_hours_start}:00-"
                f"{self.config.streaming_hours_end}:00")
        if not self.client.can_send:
            log("   *** READ-ONLY: no OAuth tokens ***")
        if self.config.debug_mode:
            log("   *** DEBUG MODE ENABLED ***")
        log("=" * 60)
        log("Monitoring for live streams...")

        self.running = True
        try:
            while self.running:
                try:
                    self.tick()
                except Exception as e:
                    log(f"Unexpected error in bot loop: {e!r}")
                    log(f"Retrying in {self.config.poll_error_delay}s...")
                    self._sleep(self.config.poll_error_delay)
                    continue
                wait = self._next_wakeup() - self._clock()
                self._sleep(min(max(wait, 0), MAX_IDLE_SLEEP))
        except KeyboardInterrupt:
            log("Stopping bot...")
        finally:
            self.running = False
            log("Bot stopped.")

    def stop(self):
        self.running = False

    # ── Status ────────────────────────────────────────────────────

    def status(self):
        """Snapshot of the bot state for the status endpoint and !status."""
        users = list(self.session.users.values())
        return {
            "status": "running" if self.running else "stopped",
            "botName": self.config.bot_name,
            "isMonitoring": self.session.running,
            "currentStream": self.session.video_id or "none",
            "mode": self.responder.mode,
            "uptime": round(self._clock() - self.started_at, 1),
            "withinStreamingHours": self.within_streaming_hours(),
            "canSend": self.client.can_send,
            "quota": self.quota.snapshot(),
            "rate": self.rate.snapshot(),
            "session": {
                "chatters": len(users),
                "messages": sum(user.message_count for user in users),
                "repliesSent": self.sent_count,
            },
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
